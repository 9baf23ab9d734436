"""
Request dispatcher.

Validates incoming envelopes, routes them by method to a handler, and turns
the handler output (or failure) into the messages to send back.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping

from src.crawl_ls.core.constants import INTERNAL_ERROR, METHOD_NOT_FOUND
from src.crawl_ls.core.exceptions import InvalidEnvelopeError, InvalidParamsError
from src.crawl_ls.lsp.messages import (
    HandlerOutput,
    is_notification,
    make_error,
    validate_request,
    validate_response,
)

# Configure logging
logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], HandlerOutput]


class Dispatcher:
    """Routes JSON-RPC requests to handlers by method name."""

    def __init__(self, handlers: Mapping[str, Handler]):
        self._handlers = dict(handlers)

    @property
    def methods(self) -> List[str]:
        return sorted(self._handlers)

    def dispatch(self, message: Any) -> List[Dict[str, Any]]:
        """
        Process one inbound message.

        Args:
            message: Decoded JSON payload

        Returns:
            Outbound messages in the order they must be written: an optional
            server-initiated request followed by the response. Empty for
            notifications and dropped messages.
        """
        try:
            request = validate_request(message)
        except InvalidEnvelopeError as e:
            # Without a trustworthy id there is nobody to answer
            logger.warning(f"Dropping malformed message: {e}")
            return []

        method = request["method"]
        request_id = request.get("id")
        handler = self._handlers.get(method)

        if is_notification(request):
            logger.debug(f"Ignoring notification {method}")
            return []

        if handler is None:
            logger.info(f"Method not found: {method} (id={request_id})")
            return [make_error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")]

        logger.info(f"Handling request {request_id}: {method}")
        try:
            output = handler(request)
        except InvalidParamsError as e:
            logger.warning(f"Request {request_id} ({method}) has invalid params: {e}")
            return [make_error(request_id, INTERNAL_ERROR, f"Internal error: {e}")]
        except Exception as e:
            logger.error(f"Error handling request {request_id} ({method}): {e}", exc_info=True)
            return [make_error(request_id, INTERNAL_ERROR, f"Internal error: {e}")]

        return self._outbound(output)

    def _outbound(self, output: HandlerOutput) -> List[Dict[str, Any]]:
        messages = []
        if output.server_request is not None:
            # Fire-and-forget: the client must not answer it
            server_request = {key: value for key, value in output.server_request.items() if key != "id"}
            messages.append(server_request)

        try:
            messages.append(validate_response(output.response))
        except InvalidEnvelopeError as e:
            request_id = output.response.get("id")
            logger.error(f"Handler produced an invalid response for {request_id}: {e}")
            messages.append(make_error(request_id, INTERNAL_ERROR, f"Internal error: {e}"))

        return messages
