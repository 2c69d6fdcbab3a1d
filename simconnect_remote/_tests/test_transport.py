# Copyright (C) 2026 Frederik Pasch
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import socket
import struct

import pytest

from simconnect_remote import transport as transport_module
from simconnect_remote.constants import Opcode
from simconnect_remote.errors import (
    ConnectError,
    ConnectionClosedError,
    FramingError,
    SimConnectIOError,
    ValidationError,
)
from simconnect_remote.transport import Transport
from simconnect_remote._tests.fakes import FakeSocket, response_frame


def test_frame_header_and_sequence() -> None:
    sock = FakeSocket()
    transport = Transport(sock, protocol=3)
    assert transport.last_sent_sequence_id == 0

    transport.send(Opcode.CLEAR_DATA_DEFINITION, struct.pack("<i", 9))
    transport.send(Opcode.WEATHER_SET_MODE_GLOBAL)

    first, second = sock.sent
    assert struct.unpack_from("<4I", first) == (20, 3, 0xF000000D, 1)
    assert first[16:] == struct.pack("<i", 9)
    assert struct.unpack_from("<4I", second) == (16, 3, 0xF0000021, 2)
    assert transport.last_sent_sequence_id == 2
    assert transport.packets_sent == 2
    assert transport.bytes_sent == 36


def test_failed_body_sends_nothing() -> None:
    sock = FakeSocket()
    transport = Transport(sock)
    with pytest.raises(ValidationError):
        with transport.frame(Opcode.CLEAR_INPUT_GROUP) as buf:
            buf.put_int32(2**40)
    assert sock.sent == []
    assert transport.last_sent_sequence_id == 0
    transport.send(Opcode.CLEAR_INPUT_GROUP, b"\0\0\0\0")
    assert sock.frames()[0].sequence == 1


FRAME = response_frame(4, struct.pack("<3i", 1, 2, 3))


@pytest.mark.parametrize("chunk_size", [1, 3, 5, 13, len(FRAME)])
def test_receive_reassembles_partial_reads(chunk_size: int) -> None:
    frame = FRAME
    sock = FakeSocket()
    sock.feed(frame, chunk_size=chunk_size)
    sock.feed(response_frame(3), chunk_size=chunk_size)
    transport = Transport(sock)
    assert transport.receive_frame() == frame
    assert transport.receive_frame() == response_frame(3)
    assert transport.packets_received == 2
    assert transport.bytes_received == len(frame) + 12


def test_receive_rejects_frame_larger_than_buffer() -> None:
    sock = FakeSocket([struct.pack("<3I", 100, 4, 2) + bytes(88)])
    transport = Transport(sock, receive_size=64)
    with pytest.raises(FramingError):
        transport.receive_frame()


def test_receive_rejects_frame_shorter_than_header() -> None:
    sock = FakeSocket([struct.pack("<I", 8) + bytes(4)])
    with pytest.raises(FramingError):
        Transport(sock).receive_frame()


def test_peer_close_between_frames() -> None:
    with pytest.raises(ConnectionClosedError):
        Transport(FakeSocket()).receive_frame()


def test_peer_close_mid_frame() -> None:
    frame = response_frame(2, bytes(20))
    with pytest.raises(FramingError):
        Transport(FakeSocket([frame[:10]])).receive_frame()


def test_send_error_is_wrapped() -> None:
    class BrokenSocket(FakeSocket):
        def sendall(self, data) -> None:
            raise BrokenPipeError("gone")

    transport = Transport(BrokenSocket())
    with pytest.raises(SimConnectIOError):
        transport.send(Opcode.CLEAR_INPUT_GROUP, bytes(4))
    assert transport.last_sent_sequence_id == 0


def test_close_is_idempotent_and_final() -> None:
    sock = FakeSocket()
    transport = Transport(sock)
    transport.close()
    transport.close()
    assert sock.closed and sock.shutdown_called
    assert transport.closed
    with pytest.raises(ConnectionClosedError):
        transport.send(Opcode.CLEAR_INPUT_GROUP, bytes(4))
    with pytest.raises(ConnectionClosedError):
        transport.receive_frame()


def test_unsupported_protocol() -> None:
    with pytest.raises(ValidationError):
        Transport(FakeSocket(), protocol=5)


def test_open_wraps_connect_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def refuse(host, port, family, timeout):
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr(transport_module, "_connect", refuse)
    with pytest.raises(ConnectError):
        Transport.open("localhost", 1)


def test_open_applies_no_delay(monkeypatch: pytest.MonkeyPatch) -> None:
    sock = FakeSocket()
    calls = []

    def connect(host, port, family, timeout):
        calls.append((host, port, family, timeout))
        return sock

    monkeypatch.setattr(transport_module, "_connect", connect)
    transport = Transport.open("fs-host", 500, 2, timeout=3.0, no_delay=True, receive_size=1024)
    assert calls == [("fs-host", 500, socket.AF_UNSPEC, 3.0)]
    assert sock.options[(socket.IPPROTO_TCP, socket.TCP_NODELAY)] == 1
    assert transport.receive_capacity == 1024
    assert transport.protocol == 2
