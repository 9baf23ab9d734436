r"""
Length-prefixed message transport for JSON-RPC over byte streams.

A frame is an ASCII header block, a blank line, and exactly Content-Length
bytes of UTF-8 JSON:

    Content-Length: 51\r\n
    \r\n
    {"jsonrpc": "2.0", "id": 1, "method": "initialize"}

The underlying stream may deliver partial headers or partial payloads in a
single read, so bytes are buffered across reads and any surplus is kept for
the next frame.
"""

import json
import logging
from typing import Any, BinaryIO, Dict, Optional

# Configure logging
logger = logging.getLogger(__name__)

HEADER_SEPARATOR = b"\r\n\r\n"
READ_CHUNK_SIZE = 4096


def frame_header(length: int) -> bytes:
    return f"Content-Length: {length}\r\n\r\n".encode("ascii")


def encode_payload(message: Dict[str, Any]) -> bytes:
    """Serialize a message into frame payload bytes."""
    return json.dumps(message, ensure_ascii=False).encode("utf-8")


def encode_message(message: Dict[str, Any]) -> bytes:
    """Serialize a message into a complete frame."""
    payload = encode_payload(message)
    return frame_header(len(payload)) + payload


def decode_frame(payload: bytes) -> Optional[Dict[str, Any]]:
    """Decode a frame payload into a message.

    Returns:
        The decoded object, or None if the payload is not a JSON object
    """
    try:
        message = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error(f"Invalid JSON in message content: {e} ({payload[:100]!r}...)")
        return None

    if not isinstance(message, dict):
        logger.error(f"Expected a JSON object, got {type(message).__name__}")
        return None
    return message


def parse_content_length(header: bytes) -> Optional[int]:
    """Find the Content-Length value in a header block."""
    for line in header.decode("ascii", errors="replace").split("\r\n"):
        name, sep, value = line.partition(":")
        if not sep or name.strip().lower() != "content-length":
            continue
        value = value.strip()
        if value.isdigit():
            return int(value)
        logger.error(f"Malformed Content-Length header: {value!r}")
        return None
    return None


class MessageTransport:
    """Reads and writes framed messages on a pair of binary streams."""

    def __init__(self, reader: BinaryIO, writer: BinaryIO):
        """
        Initialize the transport.

        Args:
            reader: Inbound byte stream (stdin in production)
            writer: Outbound byte stream (stdout in production)
        """
        self._reader = reader
        self._writer = writer
        self._buffer = bytearray()
        self._closed = False
        # read1 returns whatever is available instead of waiting for a full chunk
        self._read_chunk = getattr(reader, "read1", reader.read)

    @property
    def closed(self) -> bool:
        """True once the inbound stream has reached end-of-stream."""
        return self._closed

    def _fill(self) -> bool:
        """Read one chunk into the buffer. Returns False at end-of-stream."""
        if self._closed:
            return False
        data = self._read_chunk(READ_CHUNK_SIZE)
        if not data:
            logger.info("Inbound stream closed")
            self._closed = True
            return False
        logger.debug(f"Read {len(data)} bytes")
        self._buffer.extend(data)
        return True

    def read_frame(self) -> Optional[bytes]:
        """Read the payload of the next frame.

        Returns:
            Exactly Content-Length payload bytes, or None if the header block had
            no usable Content-Length or the stream ended before a full frame
        """
        while HEADER_SEPARATOR not in self._buffer:
            if not self._fill():
                if self._buffer:
                    logger.warning(f"Discarding {len(self._buffer)} bytes of incomplete header at end of stream")
                    self._buffer.clear()
                return None

        header, _, _ = bytes(self._buffer).partition(HEADER_SEPARATOR)
        del self._buffer[:len(header) + len(HEADER_SEPARATOR)]

        content_length = parse_content_length(header)
        if content_length is None:
            logger.error(f"No valid Content-Length header found in {header[:200]!r}")
            return None

        while len(self._buffer) < content_length:
            if not self._fill():
                logger.warning(
                    f"Stream ended with {len(self._buffer)} of {content_length} payload bytes"
                )
                self._buffer.clear()
                return None

        payload = bytes(self._buffer[:content_length])
        del self._buffer[:content_length]
        return payload

    def write_frame(self, payload: bytes) -> None:
        """Write one frame and flush it."""
        self._writer.write(frame_header(len(payload)) + payload)
        self._writer.flush()
        logger.debug(f"Wrote frame with {len(payload)} payload bytes")

    def read_message(self) -> Optional[Dict[str, Any]]:
        """Read and decode the next message, or None if no valid message was read."""
        payload = self.read_frame()
        if payload is None:
            return None
        return decode_frame(payload)

    def write_message(self, message: Dict[str, Any]) -> None:
        message_id = message.get("id", "(notification)")
        method = message.get("method", "response")
        logger.debug(f"Sending message {message_id} method={method}")
        self.write_frame(encode_payload(message))
