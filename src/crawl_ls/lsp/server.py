"""
LSP server loop.

Reads framed requests from the transport, hands them to the dispatcher and
writes back whatever the dispatcher returns. Requests are processed one at a
time: each is fully resolved, network fetch included, before the next frame
is read.
"""

import functools
import logging
import sys
import time
from typing import Any, BinaryIO, Dict, Optional

from src.crawl_ls.core.context import LspContext
from src.crawl_ls.lsp.dispatcher import Dispatcher
from src.crawl_ls.lsp.handlers import handle_definition, handle_initialize
from src.crawl_ls.lsp.transport import MessageTransport
from src.crawl_ls.web.resolver import LinkResolver

# Configure logging
logger = logging.getLogger(__name__)

# Pause after a read that produced no frame while the stream is still open
READ_BACKOFF = 0.01  # seconds


class LSPServer:
    """Runs the read/process/write cycle over a message transport."""

    def __init__(self, transport: MessageTransport, dispatcher: Dispatcher):
        """
        Initialize the server.

        Args:
            transport: Framed message transport
            dispatcher: Routes requests to handlers
        """
        self._transport = transport
        self._dispatcher = dispatcher
        self._running = False
        self._processed = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def processed(self) -> int:
        """Number of messages read and dispatched so far."""
        return self._processed

    def process_message(self, message: Dict[str, Any]) -> None:
        """Dispatch one message and write the outbound messages."""
        for outbound in self._dispatcher.dispatch(message):
            try:
                self._transport.write_message(outbound)
            except (TypeError, ValueError) as e:
                # Unserializable result; the client gets nothing rather than a broken frame
                logger.error(f"Failed to encode outbound message {outbound.get('id')}: {e}")
        self._processed += 1

    def serve_forever(self) -> None:
        """
        Process messages until the inbound stream closes or shutdown() is called.

        Framing errors, malformed envelopes and failing handlers never stop
        the loop.
        """
        logger.info(f"Serving methods: {', '.join(self._dispatcher.methods)}")
        self._running = True
        try:
            while self._running:
                message = self._transport.read_message()
                if message is None:
                    if self._transport.closed:
                        logger.info("Client closed the connection")
                        break
                    time.sleep(READ_BACKOFF)
                    continue

                self.process_message(message)
        finally:
            self._running = False
            logger.info(f"Server loop exiting after {self._processed} messages")

    def shutdown(self) -> None:
        """Stop the loop after the message currently being processed."""
        logger.info("Shutting down LSP server")
        self._running = False


def create_dispatcher(context: LspContext, resolver: Optional[LinkResolver] = None) -> Dispatcher:
    """Build the dispatcher serving initialize and textDocument/definition."""
    resolver = resolver or LinkResolver(context)
    return Dispatcher({
        "initialize": handle_initialize,
        "textDocument/definition": functools.partial(handle_definition, resolver=resolver),
    })


def create_lsp_server(
    context: LspContext,
    reader: Optional[BinaryIO] = None,
    writer: Optional[BinaryIO] = None,
    resolver: Optional[LinkResolver] = None,
) -> LSPServer:
    """Create a server on the given streams, defaulting to stdin/stdout."""
    transport = MessageTransport(
        reader if reader is not None else sys.stdin.buffer,
        writer if writer is not None else sys.stdout.buffer,
    )
    return LSPServer(transport, create_dispatcher(context, resolver))
