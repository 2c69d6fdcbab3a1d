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
Fixed-layout structured values used in data definitions and payloads.

Each type exposes ``SIZE`` (bytes on the wire), ``read(buffer)`` as a
class method consuming exactly ``SIZE`` bytes from a ``DataBuffer``, and
``write(buffer)``.  The codec never converts units; use
``meters_to_feet`` and friends at the call site.

  LatLonAlt     3 x f64                                      24 bytes
  XYZ           3 x f64                                      24 bytes
  Waypoint      3 x f64, i32 flags, 4 pad, 2 x f64           48 bytes
  InitPosition  6 x f64, i32 on_ground, i32 airspeed         56 bytes
  MarkerState   64-byte name, i32 state                      68 bytes
  GUID          16 raw bytes                                 16 bytes
"""

import math
import uuid
from dataclasses import dataclass


def meters_to_feet(meters: float) -> float:
    return meters / 0.3048


def feet_to_meters(feet: float) -> float:
    return feet * 0.3048


def degrees_to_radians(degrees: float) -> float:
    return degrees * math.pi / 180.0


def radians_to_degrees(radians: float) -> float:
    return radians * 180.0 / math.pi


@dataclass
class LatLonAlt:
    latitude: float = 0.0    # degrees
    longitude: float = 0.0   # degrees
    altitude: float = 0.0    # feet

    SIZE = 24

    @classmethod
    def read(cls, buf) -> "LatLonAlt":
        return cls(buf.get_float64(), buf.get_float64(), buf.get_float64())

    def write(self, buf):
        buf.put_float64(self.latitude)
        buf.put_float64(self.longitude)
        buf.put_float64(self.altitude)


@dataclass
class XYZ:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    SIZE = 24

    @classmethod
    def read(cls, buf) -> "XYZ":
        return cls(buf.get_float64(), buf.get_float64(), buf.get_float64())

    def write(self, buf):
        buf.put_float64(self.x)
        buf.put_float64(self.y)
        buf.put_float64(self.z)

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y, self.z)[index]

    # ------------------------------------------------------------------
    # Geometry helpers, all returning new values
    # ------------------------------------------------------------------

    @classmethod
    def from_spherical(cls, lat: float, lon: float, radius: float) -> "XYZ":
        """Polar angles in radians, measured from the Z axis."""
        return cls(
            radius * math.sin(lat) * math.cos(lon),
            radius * math.sin(lat) * math.sin(lon),
            radius * math.cos(lat),
        )

    @classmethod
    def from_lat_lon_alt(cls, lla: LatLonAlt, radius: float) -> "XYZ":
        """Position of ``lla`` (degrees) above a sphere of ``radius``."""
        return cls.from_spherical(
            degrees_to_radians(lla.latitude), degrees_to_radians(lla.longitude), radius + lla.altitude
        )

    def dist(self, other: "XYZ" = None) -> float:
        if other is None:
            return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2)

    def translate(self, dx: float, dy: float, dz: float) -> "XYZ":
        return XYZ(self.x + dx, self.y + dy, self.z + dz)

    def rotate_x(self, angle: float) -> "XYZ":
        c, s = math.cos(angle), math.sin(angle)
        return XYZ(self.x, c * self.y - s * self.z, s * self.y + c * self.z)

    def rotate_y(self, angle: float) -> "XYZ":
        c, s = math.cos(angle), math.sin(angle)
        return XYZ(c * self.x + s * self.z, self.y, -s * self.x + c * self.z)

    def rotate_z(self, angle: float) -> "XYZ":
        c, s = math.cos(angle), math.sin(angle)
        return XYZ(c * self.x - s * self.y, s * self.x + c * self.y, self.z)


@dataclass
class Waypoint:
    latitude: float = 0.0
    longitude: float = 0.0
    altitude: float = 0.0    # feet
    flags: int = 0           # WaypointFlag
    speed: float = 0.0       # knots
    throttle: float = 0.0    # percent

    SIZE = 48

    @classmethod
    def read(cls, buf) -> "Waypoint":
        lat, lon, alt = buf.get_float64(), buf.get_float64(), buf.get_float64()
        flags = buf.get_int32()
        buf.get_bytes(4)    # aligns speed to 8 bytes
        return cls(lat, lon, alt, flags, buf.get_float64(), buf.get_float64())

    def write(self, buf):
        buf.put_float64(self.latitude)
        buf.put_float64(self.longitude)
        buf.put_float64(self.altitude)
        buf.put_int32(self.flags)
        buf.put_bytes(bytes(4))
        buf.put_float64(self.speed)
        buf.put_float64(self.throttle)

    def set_lat_lon_alt(self, lla: LatLonAlt):
        """Copy a position whose altitude is in metres."""
        self.latitude = lla.latitude
        self.longitude = lla.longitude
        self.altitude = meters_to_feet(lla.altitude)


@dataclass
class InitPosition:
    latitude: float = 0.0
    longitude: float = 0.0
    altitude: float = 0.0    # feet
    pitch: float = 0.0
    bank: float = 0.0
    heading: float = 0.0
    on_ground: bool = False
    airspeed: int = 0        # knots; -1 cruise, -2 keep

    SIZE = 56

    @classmethod
    def read(cls, buf) -> "InitPosition":
        values = [buf.get_float64() for _ in range(6)]
        on_ground = buf.get_int32() != 0
        return cls(*values, on_ground=on_ground, airspeed=buf.get_int32())

    def write(self, buf):
        for value in (self.latitude, self.longitude, self.altitude,
                      self.pitch, self.bank, self.heading):
            buf.put_float64(value)
        buf.put_int32(1 if self.on_ground else 0)
        buf.put_int32(self.airspeed)

    def set_lat_lon_alt(self, lla: LatLonAlt):
        """Copy a position whose altitude is in metres."""
        self.latitude = lla.latitude
        self.longitude = lla.longitude
        self.altitude = meters_to_feet(lla.altitude)


@dataclass
class MarkerState:
    name: str = ""
    state: bool = False

    SIZE = 68

    @classmethod
    def read(cls, buf) -> "MarkerState":
        return cls(buf.get_string(64), buf.get_int32() != 0)

    def write(self, buf):
        buf.put_string(self.name, 64)
        buf.put_int32(1 if self.state else 0)


@dataclass(frozen=True)
class GUID:
    """A 16-byte GUID stored in the little-endian order used on the wire."""

    data: bytes = bytes(16)

    SIZE = 16

    def __post_init__(self):
        if len(self.data) != 16:
            raise ValueError(f"GUID must be 16 bytes, got {len(self.data)}")
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def parse(cls, text: str) -> "GUID":
        """Parse registry form ``{xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx}``."""
        text = text.strip()
        if text.startswith("{") and text.endswith("}"):
            text = text[1:-1]
        if len(text) != 36 or text.count("-") != 4:
            raise ValueError(f"invalid GUID string: {text!r}")
        return cls(uuid.UUID(text).bytes_le)

    @classmethod
    def read(cls, buf) -> "GUID":
        return cls(buf.get_bytes(16))

    def write(self, buf):
        buf.put_bytes(self.data)

    def __bytes__(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        return "{" + str(uuid.UUID(bytes_le=self.data)) + "}"
