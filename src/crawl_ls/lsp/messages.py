"""
JSON-RPC envelope helpers.

Envelopes are plain dictionaries, exactly as they travel on the wire. This
module builds them and checks their shape:
- requests and notifications carry ``method`` (and ``id`` when a reply is expected)
- responses carry ``id`` and exactly one of ``result`` or ``error``
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from src.crawl_ls.core.constants import JSONRPC_VERSION
from src.crawl_ls.core.exceptions import InvalidEnvelopeError

RequestId = Union[int, str]


@dataclass
class HandlerOutput:
    """Result of a request handler.

    Attributes:
        response: Response to the original request
        server_request: Optional server-to-client request without an id, written before the response
    """
    response: Dict[str, Any]
    server_request: Optional[Dict[str, Any]] = None


def make_request(method: str, params: Any = None, request_id: Optional[RequestId] = None) -> Dict[str, Any]:
    """Build a request, or a notification when ``request_id`` is None."""
    message = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if request_id is not None:
        message["id"] = request_id
    if params is not None:
        message["params"] = params
    return message


def make_response(request_id: Optional[RequestId], result: Any) -> Dict[str, Any]:
    # result may legitimately be None; it is still present on the wire as null
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def make_error(request_id: Optional[RequestId], code: int, message: str) -> Dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {"code": code, "message": message},
    }


def is_notification(message: Dict[str, Any]) -> bool:
    return "id" not in message


def validate_request(message: Any) -> Dict[str, Any]:
    """Check that an inbound message can be routed.

    Args:
        message: Decoded JSON payload

    Returns:
        The same message

    Raises:
        InvalidEnvelopeError: If the version, method, id or params are malformed
    """
    if not isinstance(message, dict):
        raise InvalidEnvelopeError(f"Envelope must be an object, got {type(message).__name__}")

    version = message.get("jsonrpc")
    if version != JSONRPC_VERSION:
        raise InvalidEnvelopeError(f"Unsupported protocol version: {version!r}")

    method = message.get("method")
    if not isinstance(method, str) or not method:
        raise InvalidEnvelopeError("Missing method")

    if "id" in message:
        request_id = message["id"]
        if isinstance(request_id, bool) or not isinstance(request_id, (int, str)):
            raise InvalidEnvelopeError(f"Invalid request id: {request_id!r}")

    if "params" in message and not isinstance(message["params"], (dict, list)):
        raise InvalidEnvelopeError("params must be an object or an array")

    return message


def validate_response(message: Dict[str, Any]) -> Dict[str, Any]:
    """Check that an outbound response carries exactly one of result and error."""
    if message.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidEnvelopeError("Response has the wrong protocol version")
    if "id" not in message:
        raise InvalidEnvelopeError("Response has no id")

    has_result = "result" in message
    has_error = "error" in message
    if has_result == has_error:
        raise InvalidEnvelopeError("Response must carry exactly one of result and error")

    if has_error:
        error = message["error"]
        if not isinstance(error, dict) or not isinstance(error.get("code"), int) or not isinstance(error.get("message"), str):
            raise InvalidEnvelopeError("Response error must have an integer code and a message")

    return message
