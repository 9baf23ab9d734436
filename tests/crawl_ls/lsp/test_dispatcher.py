"""
Tests for request validation, routing and error mapping in the dispatcher.
"""

from unittest.mock import MagicMock

import pytest

from src.crawl_ls.core.exceptions import InvalidParamsError
from src.crawl_ls.lsp.dispatcher import Dispatcher
from src.crawl_ls.lsp.handlers import handle_initialize
from src.crawl_ls.lsp.messages import HandlerOutput, make_request, make_response


def request(method, request_id=1, params=None):
    return make_request(method, params if params is not None else {}, request_id)


def test_initialize_is_routed():
    dispatcher = Dispatcher({"initialize": handle_initialize})

    assert dispatcher.dispatch(request("initialize", 1)) == [
        {"jsonrpc": "2.0", "id": 1, "result": {"capabilities": {"definitionProvider": True}}}
    ]


@pytest.mark.parametrize("request_id", [1, 99, "abc"])
def test_unknown_method_with_id_is_method_not_found(request_id):
    dispatcher = Dispatcher({"initialize": handle_initialize})

    messages = dispatcher.dispatch(request("textDocument/hover", request_id))

    assert messages == [
        {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {"code": -32601, "message": "Method not found: textDocument/hover"},
        }
    ]


def test_unknown_notification_is_ignored():
    dispatcher = Dispatcher({"initialize": handle_initialize})
    assert dispatcher.dispatch(make_request("initialized", {})) == []


def test_known_method_as_notification_is_ignored():
    handler = MagicMock()
    dispatcher = Dispatcher({"initialize": handler})

    assert dispatcher.dispatch(make_request("initialize", {})) == []
    handler.assert_not_called()


@pytest.mark.parametrize(
    "message",
    [
        {"jsonrpc": "1.0", "id": 1, "method": "initialize"},
        {"jsonrpc": "2.0", "id": 1},
        {"jsonrpc": "2.0", "id": 1, "result": None},
        "just a string",
    ],
)
def test_malformed_envelopes_are_dropped(message):
    handler = MagicMock()
    dispatcher = Dispatcher({"initialize": handler})

    assert dispatcher.dispatch(message) == []
    handler.assert_not_called()


def test_handler_exception_becomes_internal_error():
    handler = MagicMock(side_effect=FileNotFoundError("/tmp/missing.md"))
    dispatcher = Dispatcher({"textDocument/definition": handler})

    messages = dispatcher.dispatch(request("textDocument/definition", 5))

    assert len(messages) == 1
    assert messages[0]["id"] == 5
    assert messages[0]["error"]["code"] == -32603
    assert "missing.md" in messages[0]["error"]["message"]
    assert "result" not in messages[0]


def test_invalid_params_is_internal_error():
    handler = MagicMock(side_effect=InvalidParamsError("textDocument.uri is required"))
    dispatcher = Dispatcher({"textDocument/definition": handler})

    messages = dispatcher.dispatch(request("textDocument/definition", 6))

    assert messages[0]["error"] == {
        "code": -32603,
        "message": "Internal error: textDocument.uri is required",
    }


def test_server_request_is_written_before_response_without_id():
    server_request = make_request("window/showDocument", {"uri": "https://x.com/a", "external": True})
    server_request["id"] = 42
    handler = MagicMock(return_value=HandlerOutput(response=make_response(7, None), server_request=server_request))
    dispatcher = Dispatcher({"textDocument/definition": handler})

    messages = dispatcher.dispatch(request("textDocument/definition", 7))

    assert messages == [
        {
            "jsonrpc": "2.0",
            "method": "window/showDocument",
            "params": {"uri": "https://x.com/a", "external": True},
        },
        {"jsonrpc": "2.0", "id": 7, "result": None},
    ]


def test_invalid_handler_response_becomes_internal_error():
    broken = {"jsonrpc": "2.0", "id": 8, "result": 1, "error": {"code": 1, "message": "both"}}
    dispatcher = Dispatcher({"initialize": MagicMock(return_value=HandlerOutput(response=broken))})

    messages = dispatcher.dispatch(request("initialize", 8))

    assert messages[0]["error"]["code"] == -32603
    assert "result" not in messages[0]


def test_methods_lists_registered_handlers():
    dispatcher = Dispatcher({"textDocument/definition": MagicMock(), "initialize": MagicMock()})
    assert dispatcher.methods == ["initialize", "textDocument/definition"]
