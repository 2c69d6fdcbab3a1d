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

import math
import struct

import pytest

from simconnect_remote.buffer import DataBuffer
from simconnect_remote.constants import DataType
from simconnect_remote.data import (
    GUID,
    XYZ,
    InitPosition,
    LatLonAlt,
    MarkerState,
    Waypoint,
    degrees_to_radians,
    feet_to_meters,
    meters_to_feet,
    radians_to_degrees,
)


def _written(value) -> bytes:
    buf = DataBuffer(capacity=128)
    value.write(buf)
    assert buf.position == value.SIZE
    return buf.getvalue()


def _read_back(cls, raw: bytes):
    buf = DataBuffer(raw)
    value = cls.read(buf)
    assert buf.position == cls.SIZE
    return value


def test_lat_lon_alt_layout() -> None:
    raw = _written(LatLonAlt(47.5, -122.25, 430.0))
    assert raw == struct.pack("<3d", 47.5, -122.25, 430.0)
    assert _read_back(LatLonAlt, raw) == LatLonAlt(47.5, -122.25, 430.0)


def test_waypoint_pads_flags_to_48_bytes() -> None:
    wp = Waypoint(1.0, 2.0, 3.0, flags=0x14, speed=120.0, throttle=75.0)
    raw = _written(wp)
    assert len(raw) == Waypoint.SIZE == DataType.WAYPOINT.size == 48
    assert struct.unpack_from("<i", raw, 24)[0] == 0x14
    assert raw[28:32] == bytes(4)
    assert struct.unpack_from("<2d", raw, 32) == (120.0, 75.0)
    assert _read_back(Waypoint, raw) == wp


def test_init_position_flags_and_airspeed() -> None:
    pos = InitPosition(10.0, 20.0, 1500.0, 0.0, 0.0, 90.0, on_ground=True, airspeed=-1)
    raw = _written(pos)
    assert struct.unpack_from("<ii", raw, 48) == (1, -1)
    assert _read_back(InitPosition, raw) == pos


def test_marker_state_name_is_truncated() -> None:
    raw = _written(MarkerState("x" * 80, True))
    decoded = _read_back(MarkerState, raw)
    assert decoded.name == "x" * 64
    assert decoded.state is True


def test_set_lat_lon_alt_converts_metres_to_feet() -> None:
    wp = Waypoint()
    wp.set_lat_lon_alt(LatLonAlt(1.0, 2.0, 304.8))
    assert wp.latitude == 1.0
    assert wp.altitude == pytest.approx(1000.0)

    pos = InitPosition()
    pos.set_lat_lon_alt(LatLonAlt(0.0, 0.0, 0.3048))
    assert pos.altitude == pytest.approx(1.0)


def test_unit_helpers() -> None:
    assert meters_to_feet(0.3048) == pytest.approx(1.0)
    assert feet_to_meters(1000.0) == pytest.approx(304.8)
    assert degrees_to_radians(180.0) == pytest.approx(math.pi)
    assert radians_to_degrees(math.pi / 2) == pytest.approx(90.0)


def test_guid_registry_form() -> None:
    text = "{C2FF2D25-0BA1-4C4F-9F3B-BBD8A5E7C0F1}"
    guid = GUID.parse(text)
    # first three groups little-endian, last two in order
    assert bytes(guid)[:4] == bytes.fromhex("252dffc2")
    assert bytes(guid)[4:6] == bytes.fromhex("a10b")
    assert bytes(guid)[8:] == bytes.fromhex("9f3bbbd8a5e7c0f1")
    assert str(guid) == text.lower()
    assert _read_back(GUID, _written(guid)) == guid


@pytest.mark.parametrize("text", ["", "{1234}", "c2ff2d25-0ba1-4c4f-9f3b-bbd8a5e7c0f1-00"])
def test_guid_rejects_malformed_text(text: str) -> None:
    with pytest.raises(ValueError):
        GUID.parse(text)


def test_guid_requires_16_bytes() -> None:
    with pytest.raises(ValueError):
        GUID(b"\x00" * 15)


def test_xyz_from_spherical() -> None:
    p = XYZ.from_spherical(math.pi / 2, 0.0, 10.0)
    assert p.x == pytest.approx(10.0)
    assert p.y == pytest.approx(0.0, abs=1e-9)
    assert p.z == pytest.approx(0.0, abs=1e-9)


def test_xyz_from_lat_lon_alt_adds_altitude_to_radius() -> None:
    p = XYZ.from_lat_lon_alt(LatLonAlt(90.0, 0.0, 5.0), 100.0)
    assert p.dist() == pytest.approx(105.0)
    assert p.x == pytest.approx(105.0)


def test_xyz_geometry() -> None:
    p = XYZ(1.0, 0.0, 0.0)
    assert p.rotate_z(math.pi / 2).y == pytest.approx(1.0)
    assert p.rotate_y(math.pi / 2).z == pytest.approx(-1.0)
    assert XYZ(0.0, 1.0, 0.0).rotate_x(math.pi / 2).z == pytest.approx(1.0)
    moved = p.translate(0.0, 3.0, 4.0)
    assert (moved[0], moved[1], moved[2]) == (1.0, 3.0, 4.0)
    assert moved.dist(p) == pytest.approx(5.0)
    assert p == XYZ(1.0, 0.0, 0.0)
