import socket
import struct

import pytest

from tpcero.protocol import (
    ConnectionClosed,
    OpCode,
    Package,
    ProtocolError,
    connect,
    decode_values,
    encode_message,
    receive_buffer,
    receive_message,
    receive_operation,
    receive_package,
    send_message,
    send_package,
    start_server,
    wait_client,
)


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


def test_opcodes_match_wire_values():
    (message_code,) = struct.unpack_from("<i", encode_message("x"))
    (package_code,) = struct.unpack_from("<i", Package().serialize())
    assert message_code == OpCode.MESSAGE == 0
    assert package_code == OpCode.PACKAGE == 1


def test_encode_message_bytes():
    assert encode_message("hola") == b"\x00\x00\x00\x00\x05\x00\x00\x00hola\x00"


def test_empty_package_serializes_to_header_only():
    frame = Package().serialize()
    assert frame == struct.pack("<ii", int(OpCode.PACKAGE), 0)


def test_package_round_trip():
    package = Package()
    for value in ["uno", "dos", "", "tres"]:
        package.add(value)
    frame = package.serialize()
    code, size = struct.unpack_from("<ii", frame)
    assert code == OpCode.PACKAGE
    assert size == len(frame) - 8
    assert decode_values(frame[8:]) == ["uno", "dos", "", "tres"]


def test_package_accepts_raw_bytes():
    package = Package()
    package.add(b"raw")
    assert decode_values(package.serialize()[8:]) == ["raw"]


def test_decode_values_truncated_length():
    with pytest.raises(ProtocolError):
        decode_values(b"\x01\x00")


def test_decode_values_length_past_end():
    with pytest.raises(ProtocolError):
        decode_values(struct.pack("<i", 50) + b"abc")


def test_message_over_socket(pair):
    a, b = pair
    send_message("hola mundo", a)
    assert receive_operation(b) == OpCode.MESSAGE
    assert receive_message(b) == "hola mundo"


def test_package_over_socket(pair):
    a, b = pair
    package = Package()
    package.add("a")
    package.add("bc")
    send_package(package, a)
    assert receive_operation(b) == OpCode.PACKAGE
    assert receive_package(b) == ["a", "bc"]


def test_receive_buffer_returns_raw_payload(pair):
    a, b = pair
    a.sendall(struct.pack("<i", 3) + b"xyz")
    assert receive_buffer(b) == b"xyz"


def test_receive_buffer_negative_size(pair):
    a, b = pair
    a.sendall(struct.pack("<i", -1))
    with pytest.raises(ProtocolError):
        receive_buffer(b)


def test_receive_operation_on_closed_peer(pair):
    a, b = pair
    a.close()
    with pytest.raises(ConnectionClosed):
        receive_operation(b)
    assert b.fileno() == -1


def test_receive_message_truncated(pair):
    a, b = pair
    a.sendall(struct.pack("<i", 10) + b"abc")
    a.shutdown(socket.SHUT_WR)
    with pytest.raises(ConnectionClosed):
        receive_message(b)


def test_server_accepts_client():
    server = start_server(0)
    try:
        port = server.getsockname()[1]
        client = connect("127.0.0.1", port)
        peer = wait_client(server)
        try:
            send_message("ping", client)
            assert receive_operation(peer) == OpCode.MESSAGE
            assert receive_message(peer) == "ping"
        finally:
            client.close()
            peer.close()
    finally:
        server.close()