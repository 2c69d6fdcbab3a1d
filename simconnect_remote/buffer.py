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
DataBuffer: a fixed-capacity little-endian byte region with a cursor.

Every accessor takes an optional ``offset``.  With an offset the value is
read or written at that absolute position and the cursor does not move;
without one the value is read/written at the cursor, which then advances.

Strings are Latin-1.  Fixed-width strings are zero padded (and truncated)
on write and cut at the first NUL on read.
"""

import struct

from simconnect_remote.errors import (
    BufferOverflowError,
    BufferUnderflowError,
    ValidationError,
)

_INT32 = struct.Struct("<i")
_UINT32 = struct.Struct("<I")
_INT64 = struct.Struct("<q")
_FLOAT32 = struct.Struct("<f")
_FLOAT64 = struct.Struct("<d")

STRING_ENCODING = "latin-1"


def encode_string(value) -> bytes:
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return str(value).encode(STRING_ENCODING, errors="replace")


def decode_string(raw: bytes) -> str:
    end = raw.find(b"\0")
    if end >= 0:
        raw = raw[:end]
    return raw.decode(STRING_ENCODING)


class DataBuffer:
    """Cursor-based view over a ``bytearray`` (writable) or ``bytes`` (read-only)."""

    def __init__(self, data=None, capacity: int = None):
        if data is None:
            data = bytearray(capacity or 0)
        self._data = data
        self._view = memoryview(data)
        self._writable = not self._view.readonly
        self.position = 0

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return len(self._view)

    @property
    def remaining(self) -> int:
        return self.capacity - self.position

    def reset(self, position: int = 0):
        if not 0 <= position <= self.capacity:
            raise BufferUnderflowError(f"position {position} outside buffer of {self.capacity} bytes")
        self.position = position

    def getvalue(self) -> bytes:
        """Bytes from the start of the buffer up to the cursor."""
        return self._view[:self.position].tobytes()

    def __bytes__(self) -> bytes:
        return self._view.tobytes()

    def __len__(self) -> int:
        return self.capacity

    def _span(self, size: int, offset, writing: bool) -> int:
        start = self.position if offset is None else offset
        if start < 0 or start + size > self.capacity:
            if writing:
                raise BufferOverflowError(
                    f"cannot write {size} bytes at {start}, capacity is {self.capacity}"
                )
            raise BufferUnderflowError(
                f"cannot read {size} bytes at {start}, only {self.capacity} available"
            )
        if writing and not self._writable:
            raise ValidationError("buffer is read-only")
        if offset is None:
            self.position = start + size
        return start

    # ------------------------------------------------------------------
    # Getters
    # ------------------------------------------------------------------

    def _unpack(self, fmt: struct.Struct, offset):
        return fmt.unpack_from(self._view, self._span(fmt.size, offset, False))[0]

    def get_int32(self, offset: int = None) -> int:
        return self._unpack(_INT32, offset)

    def get_uint32(self, offset: int = None) -> int:
        return self._unpack(_UINT32, offset)

    def get_int64(self, offset: int = None) -> int:
        return self._unpack(_INT64, offset)

    def get_float32(self, offset: int = None) -> float:
        return self._unpack(_FLOAT32, offset)

    def get_float64(self, offset: int = None) -> float:
        return self._unpack(_FLOAT64, offset)

    def get_bytes(self, length: int, offset: int = None) -> bytes:
        start = self._span(length, offset, False)
        return self._view[start:start + length].tobytes()

    def get_string(self, length: int, offset: int = None) -> str:
        return decode_string(self.get_bytes(length, offset))

    def get_string_v(self, offset: int = None) -> str:
        """Read a NUL-terminated string; the cursor moves past the terminator."""
        start = self.position if offset is None else offset
        if not 0 <= start <= self.capacity:
            raise BufferUnderflowError(f"cannot read string at {start}")
        raw = self._view[start:].tobytes()
        end = raw.find(b"\0")
        consumed = len(raw) if end < 0 else end + 1
        if offset is None:
            self.position = start + consumed
        return raw[:consumed].rstrip(b"\0").decode(STRING_ENCODING)

    def get_data(self, data_cls, offset: int = None):
        """Read a structured value (anything with ``SIZE`` and ``read``)."""
        if offset is None:
            return data_cls.read(self)
        self._span(data_cls.SIZE, offset, False)
        saved = self.position
        self.reset(offset)
        try:
            return data_cls.read(self)
        finally:
            self.position = saved

    def get_remaining(self) -> bytes:
        return self.get_bytes(self.remaining)

    # ------------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------------

    def _pack(self, fmt: struct.Struct, value, offset):
        fmt.pack_into(self._view, self._span(fmt.size, offset, True), value)

    def put_int32(self, value: int, offset: int = None):
        """Write a 32-bit integer; unsigned values up to 0xFFFFFFFF are accepted."""
        value = int(value)
        if not -0x80000000 <= value <= 0xFFFFFFFF:
            raise ValidationError(f"value {value} does not fit in 32 bits")
        self._pack(_UINT32, value & 0xFFFFFFFF, offset)

    def put_int64(self, value: int, offset: int = None):
        self._pack(_INT64, int(value), offset)

    def put_float32(self, value: float, offset: int = None):
        self._pack(_FLOAT32, float(value), offset)

    def put_float64(self, value: float, offset: int = None):
        self._pack(_FLOAT64, float(value), offset)

    def put_bytes(self, value: bytes, offset: int = None):
        start = self._span(len(value), offset, True)
        self._view[start:start + len(value)] = value

    def put_zeros(self, length: int, offset: int = None):
        self.put_bytes(bytes(length), offset)

    def put_string(self, value, length: int, offset: int = None):
        raw = encode_string(value)[:length]
        self.put_bytes(raw.ljust(length, b"\0"), offset)

    def put_string_v(self, value, offset: int = None):
        self.put_bytes(encode_string(value) + b"\0", offset)

    def put_data(self, value, offset: int = None):
        """Write a structured value (anything with ``SIZE`` and ``write``)."""
        if offset is None:
            value.write(self)
            return
        self._span(value.SIZE, offset, True)
        saved = self.position
        self.reset(offset)
        try:
            value.write(self)
        finally:
            self.position = saved
