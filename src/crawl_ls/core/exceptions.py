"""
Core exceptions module.

This module defines the exceptions raised by the transport, the dispatcher
and the request handlers.
"""


class InvalidEnvelopeError(Exception):
    """
    A JSON-RPC envelope that does not have the required shape.

    Raised for inbound requests that cannot be routed (wrong protocol version,
    missing method) and for outbound responses that carry both or neither of
    ``result`` and ``error``. Such messages are logged and dropped.
    """
    pass


class InvalidParamsError(Exception):
    """
    The request parameters are missing or malformed.

    Like any other handler failure it is reported to the client as an
    internal error; it is only logged without a traceback.
    """
    pass
