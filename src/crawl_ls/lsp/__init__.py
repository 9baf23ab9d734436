"""
Language Server Protocol (LSP) implementation.

Provides the framed transport, the request dispatcher and the server loop
serving go-to-definition on links.
"""

from src.crawl_ls.lsp.dispatcher import Dispatcher
from src.crawl_ls.lsp.server import LSPServer, create_dispatcher, create_lsp_server
from src.crawl_ls.lsp.transport import MessageTransport

__all__ = [
    'Dispatcher',
    'LSPServer',
    'MessageTransport',
    'create_dispatcher',
    'create_lsp_server',
]
