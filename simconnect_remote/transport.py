# Copyright (C) 2026 Frederik Pasch
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# SPDX-License-Identifier: Apache-2.0

"""
Transport — framed, length-prefixed TCP connection to a SimConnect server.

Frames
------
Outbound (client → server), 16-byte header then payload:
  [ size:i32 | protocol:i32 | 0xF0000000 | opcode : i32 | sequence:i32 ]

Inbound (server → client), 12-byte header then payload:
  [ size:i32 | version:i32 | recv id:i32 ]

``size`` always counts the whole frame, header included.  The first frame
sent on a connection (the handshake) carries sequence id 1.

Concurrency
-----------
* One lock serialises "rewind send buffer, encode payload, write header,
  sendall", so frames from different threads never interleave.
* A second lock serialises "read one complete frame".  Callbacks run
  while a frame is being dispatched may still send.
* No timeouts are applied here beyond the socket timeout given to
  ``open()``; nothing is retried.
"""

import contextlib
import logging
import socket
import struct
import threading

from simconnect_remote.buffer import DataBuffer
from simconnect_remote.constants import (
    DEFAULT_PORT,
    RECEIVE_SIZE,
    RECV_HEADER_SIZE,
    SEND_HEADER_SIZE,
    SEND_ID_MASK,
)
from simconnect_remote.errors import (
    ConnectError,
    ConnectionClosedError,
    FramingError,
    SimConnectIOError,
)
from simconnect_remote.version import DEFAULT_PROTOCOL, check_protocol

_LOG = logging.getLogger(__name__)

_SIZE = struct.Struct("<I")


def _connect(host: str, port: int, family: int, timeout: float) -> socket.socket:
    if family == socket.AF_UNSPEC:
        return socket.create_connection((host, port), timeout=timeout)
    last_error = None
    for af, socktype, proto, _, address in socket.getaddrinfo(host, port, family, socket.SOCK_STREAM):
        sock = socket.socket(af, socktype, proto)
        try:
            sock.settimeout(timeout)
            sock.connect(address)
            return sock
        except OSError as exc:
            last_error = exc
            sock.close()
    raise last_error or OSError(f"no address found for {host}")


class Transport:
    """Owns the socket, both scratch buffers, the sequence counter and statistics."""

    def __init__(self, sock, protocol=DEFAULT_PROTOCOL, receive_size: int = RECEIVE_SIZE,
                 send_size: int = RECEIVE_SIZE):
        self.protocol = check_protocol(protocol)
        self._sock = sock
        self._send_buffer = DataBuffer(bytearray(send_size))
        self._receive_buffer = bytearray(receive_size)
        self._receive_view = memoryview(self._receive_buffer)
        self._send_lock = threading.Lock()
        self._receive_lock = threading.Lock()
        self._next_sequence = 1
        self._closed = False
        self.bytes_sent = 0
        self.packets_sent = 0
        self.bytes_received = 0
        self.packets_received = 0

    @classmethod
    def open(cls, host: str = "localhost", port: int = DEFAULT_PORT, protocol=DEFAULT_PROTOCOL, *,
             timeout: float = None, no_delay: bool = False, family: int = socket.AF_UNSPEC,
             receive_size: int = RECEIVE_SIZE) -> "Transport":
        """Resolve ``host`` and connect.  Raises ``ConnectError`` on failure."""
        protocol = check_protocol(protocol)
        try:
            sock = _connect(host, port, family, timeout)
        except OSError as exc:
            raise ConnectError(f"Cannot connect to SimConnect server at {host}:{port}: {exc}") from exc
        if no_delay:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        _LOG.info(f"Connected to SimConnect server at {host}:{port} (protocol {protocol.name})")
        return cls(sock, protocol, receive_size=receive_size)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def receive_capacity(self) -> int:
        return len(self._receive_buffer)

    @property
    def last_sent_sequence_id(self) -> int:
        """Sequence id of the most recently sent frame; 0 before the first one."""
        return self._next_sequence - 1

    def _ensure_open(self):
        if self._closed:
            raise ConnectionClosedError("Connection is closed")

    def close(self):
        """Close the socket.  Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError as exc:
            _LOG.debug(f"shutdown before close failed: {exc}")
        self._sock.close()
        _LOG.info("SimConnect connection closed")

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    @contextlib.contextmanager
    def frame(self, opcode: int):
        """Yield the send buffer positioned after the header, then send the frame.

        If the body raises, nothing is sent and the sequence id is not used.
        """
        with self._send_lock:
            self._ensure_open()
            buf = self._send_buffer
            buf.reset(SEND_HEADER_SIZE)
            yield buf
            size = buf.position
            sequence = self._next_sequence
            buf.put_int32(size, 0)
            buf.put_int32(self.protocol, 4)
            buf.put_int32(SEND_ID_MASK | opcode, 8)
            buf.put_int32(sequence, 12)
            try:
                self._sock.sendall(buf.getvalue())
            except OSError as exc:
                raise SimConnectIOError(f"send of opcode 0x{opcode:02X} failed: {exc}") from exc
            self._next_sequence = sequence + 1
            self.packets_sent += 1
            self.bytes_sent += size
            _LOG.debug(f"sent opcode=0x{opcode:02X} seq={sequence} size={size}")

    def send(self, opcode: int, payload: bytes = b""):
        with self.frame(opcode) as buf:
            buf.put_bytes(payload)

    # ------------------------------------------------------------------
    # Receiving
    # ------------------------------------------------------------------

    def _read_exactly(self, view: memoryview, frame_started: bool):
        got = 0
        while got < len(view):
            try:
                n = self._sock.recv_into(view[got:])
            except OSError as exc:
                raise SimConnectIOError(f"receive failed: {exc}") from exc
            if n == 0:
                if not frame_started and got == 0:
                    raise ConnectionClosedError("Connection closed by SimConnect server")
                raise FramingError(f"Connection closed mid-frame ({got} of {len(view)} bytes read)")
            got += n
            frame_started = True

    def receive_frame(self) -> bytes:
        """Block until one complete response frame is read and return it."""
        with self._receive_lock:
            self._ensure_open()
            view = self._receive_view
            self._read_exactly(view[:4], frame_started=False)
            length = _SIZE.unpack_from(view, 0)[0]
            if length > len(view):
                raise FramingError(
                    f"Frame of {length} bytes exceeds receive buffer of {len(view)} bytes"
                )
            if length < RECV_HEADER_SIZE:
                raise FramingError(f"Frame length {length} is shorter than the response header")
            self._read_exactly(view[4:length], frame_started=True)
            self.packets_received += 1
            self.bytes_received += length
            _LOG.debug(f"received frame size={length}")
            return view[:length].tobytes()
