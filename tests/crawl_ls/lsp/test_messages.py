"""
Tests for JSON-RPC envelope construction and validation.
"""

import pytest

from src.crawl_ls.core.exceptions import InvalidEnvelopeError
from src.crawl_ls.lsp.messages import (
    make_error,
    make_request,
    make_response,
    validate_request,
    validate_response,
)


def test_make_request_without_id_is_a_notification():
    message = make_request("window/showDocument", {"uri": "https://example.com", "external": True})

    assert message == {
        "jsonrpc": "2.0",
        "method": "window/showDocument",
        "params": {"uri": "https://example.com", "external": True},
    }


def test_make_response_keeps_null_result():
    assert make_response(4, None) == {"jsonrpc": "2.0", "id": 4, "result": None}


def test_validate_request_accepts_string_ids():
    message = {"jsonrpc": "2.0", "id": "abc", "method": "initialize", "params": {}}
    assert validate_request(message) is message


@pytest.mark.parametrize(
    "message",
    [
        {"jsonrpc": "1.0", "id": 1, "method": "initialize"},
        {"id": 1, "method": "initialize"},
        {"jsonrpc": "2.0", "id": 1},
        {"jsonrpc": "2.0", "id": 1, "method": ""},
        {"jsonrpc": "2.0", "id": 1, "method": 5},
        {"jsonrpc": "2.0", "id": {"nested": True}, "method": "initialize"},
        {"jsonrpc": "2.0", "id": True, "method": "initialize"},
        {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": "text"},
        ["not", "an", "object"],
    ],
)
def test_validate_request_rejects_malformed_envelopes(message):
    with pytest.raises(InvalidEnvelopeError):
        validate_request(message)


def test_validate_response_requires_exactly_one_of_result_and_error():
    validate_response(make_response(1, None))
    validate_response(make_error(1, -32601, "Method not found: foo"))

    with pytest.raises(InvalidEnvelopeError):
        validate_response({"jsonrpc": "2.0", "id": 1})

    with pytest.raises(InvalidEnvelopeError):
        validate_response({"jsonrpc": "2.0", "id": 1, "result": None, "error": {"code": 1, "message": "x"}})


def test_validate_response_checks_error_shape():
    with pytest.raises(InvalidEnvelopeError):
        validate_response({"jsonrpc": "2.0", "id": 1, "error": {"message": "no code"}})
