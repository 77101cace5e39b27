"""Wire format and socket helpers shared by the client and the server.

Every frame is an ``int32`` operation code, an ``int32`` payload size and the
payload itself. A message payload is a NUL-terminated string. A package
payload is a sequence of ``int32`` length-prefixed values.
"""

from __future__ import annotations

import logging
import socket
import struct
from dataclasses import dataclass, field
from enum import IntEnum

DEFAULT_PORT = "4444"

_INT = struct.Struct("<i")
_HEADER = struct.Struct("<ii")

_log = logging.getLogger(__name__)


class OpCode(IntEnum):
    """Operation codes carried at the start of every frame."""

    MESSAGE = 0
    PACKAGE = 1
    CONSOLE = 2


class ProtocolError(ValueError):
    """Raised when received bytes do not form a valid frame."""


class ConnectionClosed(ConnectionError):
    """Raised when the peer closes the connection before a frame is complete."""


def _as_wire_bytes(value: str | bytes) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8") + b"\0"
    return bytes(value)


@dataclass
class Package:
    """A frame being built out of length-prefixed values."""

    op_code: OpCode = OpCode.PACKAGE
    buffer: bytearray = field(default_factory=bytearray)

    def add(self, value: str | bytes) -> None:
        """Append one value; strings are sent NUL-terminated."""
        data = _as_wire_bytes(value)
        self.buffer += _INT.pack(len(data))
        self.buffer += data

    def serialize(self) -> bytes:
        """Return the whole frame: op code, payload size, payload."""
        return _HEADER.pack(int(self.op_code), len(self.buffer)) + bytes(self.buffer)


def encode_message(message: str) -> bytes:
    """Return the frame that carries a single text message."""
    data = _as_wire_bytes(message)
    return _HEADER.pack(int(OpCode.MESSAGE), len(data)) + data


def _text(data: bytes) -> str:
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def decode_values(payload: bytes) -> list[str]:
    """Split a package payload into its values."""
    values: list[str] = []
    offset = 0
    total = len(payload)
    while offset < total:
        if offset + _INT.size > total:
            raise ProtocolError("truncated value length")
        (length,) = _INT.unpack_from(payload, offset)
        offset += _INT.size
        if length < 0 or offset + length > total:
            raise ProtocolError(f"invalid value length {length}")
        values.append(_text(payload[offset:offset + length]))
        offset += length
    return values


def _recv_exact(sock: socket.socket, count: int) -> bytes:
    chunks = bytearray()
    while len(chunks) < count:
        chunk = sock.recv(count - len(chunks))
        if not chunk:
            raise ConnectionClosed("connection closed by peer")
        chunks += chunk
    return bytes(chunks)


def connect(ip: str, port: str | int) -> socket.socket:
    """Open a TCP connection to the server."""
    return socket.create_connection((ip, int(port)))


def send_message(message: str, sock: socket.socket) -> None:
    """Send a text message frame."""
    sock.sendall(encode_message(message))


def send_package(package: Package, sock: socket.socket) -> None:
    """Send a package frame."""
    sock.sendall(package.serialize())


def receive_operation(sock: socket.socket) -> int:
    """Read the next operation code; close the socket if the peer is gone."""
    try:
        data = _recv_exact(sock, _INT.size)
    except ConnectionClosed:
        sock.close()
        raise
    (code,) = _INT.unpack(data)
    return code


def receive_buffer(sock: socket.socket) -> bytes:
    """Read a size-prefixed payload."""
    (size,) = _INT.unpack(_recv_exact(sock, _INT.size))
    if size < 0:
        raise ProtocolError(f"invalid payload size {size}")
    return _recv_exact(sock, size)


def receive_message(sock: socket.socket) -> str:
    """Read the payload of a message frame as text."""
    return _text(receive_buffer(sock))


def receive_package(sock: socket.socket) -> list[str]:
    """Read the payload of a package frame as its list of values."""
    return decode_values(receive_buffer(sock))


def start_server(port: str | int = DEFAULT_PORT) -> socket.socket:
    """Create a listening TCP socket on every local IPv4 address."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        if hasattr(socket, "SO_REUSEPORT"):
            server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
        else:
            server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        server.bind(("", int(port)))
        server.listen(socket.SOMAXCONN)
    except OSError:
        server.close()
        raise
    _log.debug("Listo para escuchar a mi cliente")
    return server


def wait_client(server_sock: socket.socket) -> socket.socket:
    """Accept one client connection."""
    client, _ = server_sock.accept()
    _log.info("Se conecto un cliente!")
    return client