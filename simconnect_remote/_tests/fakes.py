# Copyright (C) 2026 Frederik Pasch
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# SPDX-License-Identifier: Apache-2.0

"""In-memory socket and frame helpers shared by the tests."""

from __future__ import annotations

import collections
import struct
import threading
from dataclasses import dataclass

from simconnect_remote.client import SimConnect
from simconnect_remote.transport import Transport


@dataclass
class SentFrame:
    size: int
    protocol: int
    opcode: int
    sequence: int
    payload: bytes


class FakeSocket:
    """Stands in for a connected TCP socket.

    Incoming data is served from queued chunks, each ``recv_into`` call
    returning at most one chunk, so partial reads are deterministic.  When
    no chunk is left the peer looks closed (``recv_into`` returns 0).
    """

    def __init__(self, chunks=()):
        self.sent: list[bytes] = []
        self.options: dict = {}
        self.closed = False
        self.shutdown_called = False
        self._incoming = collections.deque(bytes(c) for c in chunks)
        self._lock = threading.Lock()

    def feed(self, data: bytes, chunk_size: int | None = None) -> None:
        with self._lock:
            if chunk_size is None:
                self._incoming.append(bytes(data))
                return
            for start in range(0, len(data), chunk_size):
                self._incoming.append(bytes(data[start:start + chunk_size]))

    def sendall(self, data) -> None:
        self.sent.append(bytes(data))

    def recv_into(self, view) -> int:
        with self._lock:
            if not self._incoming:
                return 0
            chunk = self._incoming.popleft()
            n = min(len(view), len(chunk))
            view[:n] = chunk[:n]
            if n < len(chunk):
                self._incoming.appendleft(chunk[n:])
            return n

    def setsockopt(self, level, option, value) -> None:
        self.options[(level, option)] = value

    def shutdown(self, how) -> None:
        self.shutdown_called = True

    def close(self) -> None:
        self.closed = True

    def frames(self) -> list[SentFrame]:
        out = []
        for data in self.sent:
            size, protocol, opcode, sequence = struct.unpack_from("<4I", data)
            out.append(SentFrame(size, protocol, opcode & 0x0FFFFFFF, sequence, data[16:]))
        return out

    def last_payload(self) -> bytes:
        return self.frames()[-1].payload


def response_frame(recv_id: int, payload: bytes = b"", version: int = 4) -> bytes:
    return struct.pack("<3I", 12 + len(payload), version, recv_id) + payload


def make_session(protocol: int = 4, app_name: str = "test", chunks=()) -> tuple[SimConnect, FakeSocket]:
    sock = FakeSocket(chunks)
    return SimConnect(app_name, Transport(sock, protocol)), sock
