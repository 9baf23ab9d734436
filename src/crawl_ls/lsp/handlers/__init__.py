"""
Request handlers, one module per served method.
"""

from src.crawl_ls.lsp.handlers.definition import handle_definition
from src.crawl_ls.lsp.handlers.initialize import handle_initialize

__all__ = [
    'handle_definition',
    'handle_initialize',
]
