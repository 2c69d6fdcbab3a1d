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

import struct

import pytest

from simconnect_remote.buffer import DataBuffer, decode_string, encode_string
from simconnect_remote.data import LatLonAlt
from simconnect_remote.errors import BufferOverflowError, BufferUnderflowError, ValidationError


def test_int32_accepts_unsigned_range() -> None:
    buf = DataBuffer(capacity=8)
    buf.put_int32(4000000000)
    buf.put_int32(-1)
    assert buf.get_uint32(0) == 4000000000
    assert buf.get_int32(0) == 4000000000 - 2**32
    assert buf.getvalue()[4:] == b"\xff\xff\xff\xff"


@pytest.mark.parametrize("value", [2**32, -(2**31) - 1])
def test_int32_rejects_out_of_range(value: int) -> None:
    buf = DataBuffer(capacity=4)
    with pytest.raises(ValidationError):
        buf.put_int32(value)
    assert buf.position == 0


def test_write_past_capacity_overflows_without_moving() -> None:
    buf = DataBuffer(capacity=4)
    with pytest.raises(BufferOverflowError):
        buf.put_int64(1)
    assert buf.position == 0
    with pytest.raises(BufferOverflowError):
        buf.put_data(LatLonAlt(), offset=0)


def test_read_past_end_underflows() -> None:
    buf = DataBuffer(b"\x01\x02")
    with pytest.raises(BufferUnderflowError):
        buf.get_int32()
    with pytest.raises(BufferUnderflowError):
        buf.get_data(LatLonAlt, offset=0)


def test_explicit_offset_leaves_cursor() -> None:
    buf = DataBuffer(capacity=16)
    buf.put_float64(1.5)
    buf.put_int32(7, 12)
    assert buf.position == 8
    assert buf.get_int32(12) == 7
    assert buf.position == 8
    buf.reset()
    assert buf.get_float64() == 1.5
    assert buf.position == 8


def test_fixed_width_strings() -> None:
    buf = DataBuffer(capacity=16)
    buf.put_string("abc", 8)
    buf.put_string("too long here", 4)
    assert buf.getvalue() == b"abc\0\0\0\0\0too "
    buf.reset()
    assert buf.get_string(8) == "abc"
    assert buf.get_string(4) == "too "


def test_variable_strings() -> None:
    buf = DataBuffer(capacity=16)
    buf.put_string_v("abc")
    buf.put_string_v("")
    assert buf.getvalue() == b"abc\0\0"
    buf.reset()
    assert buf.get_string_v() == "abc"
    assert buf.position == 4
    assert buf.get_string_v() == ""
    assert buf.position == 5


def test_string_v_without_terminator_reads_to_end() -> None:
    buf = DataBuffer(b"xyz")
    assert buf.get_string_v() == "xyz"
    assert buf.remaining == 0


def test_strings_are_latin1() -> None:
    assert encode_string("é") == b"\xe9"
    assert encode_string("€") == b"?"
    assert encode_string(None) == b""
    assert decode_string(b"ab\0cd") == "ab"


def test_read_only_buffer_rejects_writes() -> None:
    buf = DataBuffer(struct.pack("<i", 5))
    assert buf.get_int32() == 5
    with pytest.raises(ValidationError):
        buf.put_int32(1, 0)


def test_reset_outside_buffer() -> None:
    buf = DataBuffer(capacity=4)
    with pytest.raises(BufferUnderflowError):
        buf.reset(5)
    buf.reset(4)
    assert buf.remaining == 0
