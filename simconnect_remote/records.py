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
Typed records decoded from inbound SimConnect frames.

Every frame starts with a 12-byte header ``[size, version, recv id]``.
``decode()`` reads the id at offset 8 and looks the record class up in a
static table; ids without an entry (including ``NULL``) become a
``RecvUnrecognized`` that keeps the raw payload.  Decoding never fails
because of an unknown id.

Record classes mirror the wire nesting: a field list is built by
``_read_fields`` which first asks the parent class for its fields, so
``RecvEventFilename`` reads the ``RecvEvent`` fields, then its own.

Telemetry rows (``RecvSimObjectData``, ``RecvSimObjectDataByType``,
``RecvClientData``) additionally carry a read cursor over their data
bytes, with the same getters as ``DataBuffer``.  The dispatcher rewinds
the cursor before handing the record to each subscriber.
"""

import dataclasses
from dataclasses import dataclass, field

from simconnect_remote.buffer import DataBuffer
from simconnect_remote.constants import (
    CLOUD_STATE_ARRAY_WIDTH,
    MAX_PATH,
    RECV_HEADER_SIZE,
    RecvID,
    WeatherMode,
)
from simconnect_remote.data import GUID
from simconnect_remote.errors import FramingError


@dataclass
class RecvPacket:
    size: int = 0
    version: int = 0
    raw_id: int = 0

    @classmethod
    def _read_fields(cls, buf: DataBuffer) -> dict:
        return {}

    @classmethod
    def from_buffer(cls, buf: DataBuffer, size: int, version: int, raw_id: int) -> "RecvPacket":
        return cls(size=size, version=version, raw_id=raw_id, **cls._read_fields(buf))

    @property
    def recv_id(self):
        """The ``RecvID`` member, or the raw integer for unknown ids."""
        try:
            return RecvID(self.raw_id)
        except ValueError:
            return self.raw_id

    def to_dict(self) -> dict:
        out = dataclasses.asdict(self)
        out["type"] = type(self).__name__
        return out


@dataclass
class RecvUnrecognized(RecvPacket):
    payload: bytes = b""

    @classmethod
    def _read_fields(cls, buf):
        return {"payload": buf.get_remaining()}


@dataclass
class RecvException(RecvPacket):
    exception: int = 0      # ExceptionCode
    send_id: int = 0        # sequence id of the offending frame
    index: int = 0          # offending parameter, 1-based

    @classmethod
    def _read_fields(cls, buf):
        return {"exception": buf.get_int32(), "send_id": buf.get_int32(), "index": buf.get_int32()}


@dataclass
class RecvOpen(RecvPacket):
    application_name: str = ""
    application_version_major: int = 0
    application_version_minor: int = 0
    application_build_major: int = 0
    application_build_minor: int = 0
    simconnect_version_major: int = 0
    simconnect_version_minor: int = 0
    simconnect_build_major: int = 0
    simconnect_build_minor: int = 0
    reserved1: int = 0
    reserved2: int = 0

    @classmethod
    def _read_fields(cls, buf):
        fields = {"application_name": buf.get_string(256)}
        for name in ("application_version_major", "application_version_minor",
                     "application_build_major", "application_build_minor",
                     "simconnect_version_major", "simconnect_version_minor",
                     "simconnect_build_major", "simconnect_build_minor",
                     "reserved1", "reserved2"):
            fields[name] = buf.get_int32()
        return fields


@dataclass
class RecvQuit(RecvPacket):
    pass


# ----------------------------------------------------------------------
# Events
# ----------------------------------------------------------------------

@dataclass
class RecvEvent(RecvPacket):
    group_id: int = 0
    event_id: int = 0
    data: int = 0

    @classmethod
    def _read_fields(cls, buf):
        fields = super()._read_fields(buf)
        fields.update(group_id=buf.get_int32(), event_id=buf.get_int32(), data=buf.get_int32())
        return fields


@dataclass
class RecvEventAddRemove(RecvEvent):
    object_type: int = 0    # SimObjectType

    @classmethod
    def _read_fields(cls, buf):
        fields = super()._read_fields(buf)
        fields["object_type"] = buf.get_int32()
        return fields


@dataclass
class RecvEventFilename(RecvEvent):
    file_name: str = ""
    flags: int = 0

    @classmethod
    def _read_fields(cls, buf):
        fields = super()._read_fields(buf)
        fields.update(file_name=buf.get_string(MAX_PATH), flags=buf.get_int32())
        return fields


@dataclass
class RecvEventFrame(RecvEvent):
    frame_rate: float = 0.0
    sim_speed: float = 0.0

    @classmethod
    def _read_fields(cls, buf):
        fields = super()._read_fields(buf)
        fields.update(frame_rate=buf.get_float32(), sim_speed=buf.get_float32())
        return fields


@dataclass
class RecvEventWeatherMode(RecvEvent):
    mode: WeatherMode = WeatherMode.THEME

    @classmethod
    def _read_fields(cls, buf):
        fields = super()._read_fields(buf)
        fields["mode"] = WeatherMode.from_value(fields["data"])
        return fields


@dataclass
class RecvCustomAction(RecvEvent):
    guid: GUID = field(default_factory=GUID)
    wait_for_completion: int = 0
    payload: str = ""

    @classmethod
    def _read_fields(cls, buf):
        fields = super()._read_fields(buf)
        fields.update(guid=GUID.read(buf), wait_for_completion=buf.get_int32(),
                      payload=buf.get_string(buf.remaining))
        return fields


@dataclass
class RecvEventMultiplayerServerStarted(RecvEvent):
    pass


@dataclass
class RecvEventMultiplayerClientStarted(RecvEvent):
    pass


@dataclass
class RecvEventMultiplayerSessionEnded(RecvEvent):
    pass


@dataclass
class RecvEventRace(RecvEvent):
    """Fields shared by the race-end and race-lap events."""

    number_racers: int = 0
    mission_guid: GUID = field(default_factory=GUID)
    player_name: str = ""
    session_type: str = ""
    aircraft: str = ""
    player_role: str = ""
    total_time: float = 0.0     # seconds, 0 means did not finish
    penalty_time: float = 0.0
    disqualified: bool = False

    _INDEX_FIELD = None

    @classmethod
    def _read_fields(cls, buf):
        fields = super()._read_fields(buf)
        fields[cls._INDEX_FIELD] = buf.get_int32()
        fields["number_racers"] = buf.get_int32()
        fields["mission_guid"] = GUID.read(buf)
        for name in ("player_name", "session_type", "aircraft", "player_role"):
            fields[name] = buf.get_string(MAX_PATH)
        fields.update(total_time=buf.get_float64(), penalty_time=buf.get_float64(),
                      disqualified=buf.get_int32() == 1)
        return fields


@dataclass
class RecvEventRaceEnd(RecvEventRace):
    racer_number: int = 0

    _INDEX_FIELD = "racer_number"


@dataclass
class RecvEventRaceLap(RecvEventRace):
    lap_index: int = 0

    _INDEX_FIELD = "lap_index"


# ----------------------------------------------------------------------
# Telemetry rows
# ----------------------------------------------------------------------

@dataclass
class RecvSimObjectData(RecvPacket):
    request_id: int = 0
    object_id: int = 0
    define_id: int = 0
    flags: int = 0
    entry_number: int = 0
    out_of: int = 0
    define_count: int = 0
    data: bytes = b""

    def __post_init__(self):
        self._cursor = DataBuffer(self.data)

    @classmethod
    def _read_fields(cls, buf):
        fields = {}
        for name in ("request_id", "object_id", "define_id", "flags",
                     "entry_number", "out_of", "define_count"):
            fields[name] = buf.get_int32()
        fields["data"] = buf.get_remaining()
        return fields

    # cursor over ``data``

    def reset(self):
        self._cursor.reset()

    @property
    def position(self) -> int:
        return self._cursor.position

    @property
    def remaining(self) -> int:
        return self._cursor.remaining

    def get_int32(self, offset: int = None) -> int:
        return self._cursor.get_int32(offset)

    def get_int64(self, offset: int = None) -> int:
        return self._cursor.get_int64(offset)

    def get_float32(self, offset: int = None) -> float:
        return self._cursor.get_float32(offset)

    def get_float64(self, offset: int = None) -> float:
        return self._cursor.get_float64(offset)

    def get_bytes(self, length: int, offset: int = None) -> bytes:
        return self._cursor.get_bytes(length, offset)

    def get_string(self, length: int, offset: int = None) -> str:
        return self._cursor.get_string(length, offset)

    def get_string_v(self, offset: int = None) -> str:
        return self._cursor.get_string_v(offset)

    def get_data(self, data_cls, offset: int = None):
        return self._cursor.get_data(data_cls, offset)


@dataclass
class RecvSimObjectDataByType(RecvSimObjectData):
    pass


@dataclass
class RecvClientData(RecvSimObjectData):
    pass


# ----------------------------------------------------------------------
# Requests answered with a single record
# ----------------------------------------------------------------------

@dataclass
class RecvAssignedObjectID(RecvPacket):
    request_id: int = 0
    object_id: int = 0

    @classmethod
    def _read_fields(cls, buf):
        return {"request_id": buf.get_int32(), "object_id": buf.get_int32()}


@dataclass
class RecvWeatherObservation(RecvPacket):
    request_id: int = 0
    metar: str = ""

    @classmethod
    def _read_fields(cls, buf):
        return {"request_id": buf.get_int32(), "metar": buf.get_string(buf.remaining)}


@dataclass
class RecvCloudState(RecvPacket):
    request_id: int = 0
    array_size: int = 0
    rows: list = field(default_factory=list)   # 64 rows of 64 bytes

    @classmethod
    def _read_fields(cls, buf):
        fields = {"request_id": buf.get_int32(), "array_size": buf.get_int32()}
        rows = []
        for _ in range(CLOUD_STATE_ARRAY_WIDTH):
            if buf.remaining >= CLOUD_STATE_ARRAY_WIDTH:
                rows.append(buf.get_bytes(CLOUD_STATE_ARRAY_WIDTH))
            else:
                rows.append(bytes(CLOUD_STATE_ARRAY_WIDTH))
        fields["rows"] = rows
        return fields


@dataclass
class RecvReservedKey(RecvPacket):
    choice_reserved: str = ""
    reserved_key: str = ""

    @classmethod
    def _read_fields(cls, buf):
        return {"choice_reserved": buf.get_string(50), "reserved_key": buf.get_string(30)}


@dataclass
class RecvSystemState(RecvPacket):
    request_id: int = 0
    data_integer: int = 0
    data_float: float = 0.0
    data_string: str = ""

    @classmethod
    def _read_fields(cls, buf):
        return {
            "request_id": buf.get_int32(),
            "data_integer": buf.get_int32(),
            "data_float": buf.get_float32(),
            "data_string": buf.get_string(MAX_PATH),
        }


# ----------------------------------------------------------------------
# Facility lists
# ----------------------------------------------------------------------

@dataclass
class FacilityAirport:
    icao: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    altitude: float = 0.0

    SIZE = 9 + 3 * 8

    @classmethod
    def _read_fields(cls, buf) -> dict:
        return {"icao": buf.get_string(9), "latitude": buf.get_float64(),
                "longitude": buf.get_float64(), "altitude": buf.get_float64()}

    @classmethod
    def read(cls, buf):
        return cls(**cls._read_fields(buf))


@dataclass
class FacilityWaypoint(FacilityAirport):
    mag_var: float = 0.0

    SIZE = FacilityAirport.SIZE + 4

    @classmethod
    def _read_fields(cls, buf):
        fields = super()._read_fields(buf)
        fields["mag_var"] = buf.get_float32()
        return fields


@dataclass
class FacilityNDB(FacilityWaypoint):
    frequency: int = 0      # Hz

    SIZE = FacilityWaypoint.SIZE + 4

    @classmethod
    def _read_fields(cls, buf):
        fields = super()._read_fields(buf)
        fields["frequency"] = buf.get_int32()
        return fields


@dataclass
class FacilityVOR(FacilityNDB):
    flags: int = 0          # VORFlag
    localizer: float = 0.0
    glide_lat: float = 0.0
    glide_lon: float = 0.0
    glide_alt: float = 0.0
    glide_slope_angle: float = 0.0

    SIZE = FacilityNDB.SIZE + 4 + 4 + 3 * 8 + 4

    @classmethod
    def _read_fields(cls, buf):
        fields = super()._read_fields(buf)
        fields.update(flags=buf.get_int32(), localizer=buf.get_float32(),
                      glide_lat=buf.get_float64(), glide_lon=buf.get_float64(),
                      glide_alt=buf.get_float64(), glide_slope_angle=buf.get_float32())
        return fields


@dataclass
class RecvFacilitiesList(RecvPacket):
    request_id: int = 0
    array_size: int = 0
    entry_number: int = 0
    out_of: int = 0
    entries: list = field(default_factory=list)

    ENTRY = None

    @classmethod
    def _read_fields(cls, buf):
        fields = {"request_id": buf.get_int32(), "array_size": buf.get_int32(),
                  "entry_number": buf.get_int32(), "out_of": buf.get_int32()}
        fields["entries"] = [cls.ENTRY.read(buf) for _ in range(fields["array_size"])]
        return fields


@dataclass
class RecvAirportList(RecvFacilitiesList):
    ENTRY = FacilityAirport


@dataclass
class RecvWaypointList(RecvFacilitiesList):
    ENTRY = FacilityWaypoint


@dataclass
class RecvNDBList(RecvFacilitiesList):
    ENTRY = FacilityNDB


@dataclass
class RecvVORList(RecvFacilitiesList):
    ENTRY = FacilityVOR


# ----------------------------------------------------------------------
# Decoding
# ----------------------------------------------------------------------

_DECODERS = {
    RecvID.EXCEPTION: RecvException,
    RecvID.OPEN: RecvOpen,
    RecvID.QUIT: RecvQuit,
    RecvID.EVENT: RecvEvent,
    RecvID.EVENT_OBJECT_ADDREMOVE: RecvEventAddRemove,
    RecvID.EVENT_FILENAME: RecvEventFilename,
    RecvID.EVENT_FRAME: RecvEventFrame,
    RecvID.SIMOBJECT_DATA: RecvSimObjectData,
    RecvID.SIMOBJECT_DATA_BYTYPE: RecvSimObjectDataByType,
    RecvID.WEATHER_OBSERVATION: RecvWeatherObservation,
    RecvID.CLOUD_STATE: RecvCloudState,
    RecvID.ASSIGNED_OBJECT_ID: RecvAssignedObjectID,
    RecvID.RESERVED_KEY: RecvReservedKey,
    RecvID.CUSTOM_ACTION: RecvCustomAction,
    RecvID.SYSTEM_STATE: RecvSystemState,
    RecvID.CLIENT_DATA: RecvClientData,
    RecvID.EVENT_WEATHER_MODE: RecvEventWeatherMode,
    RecvID.AIRPORT_LIST: RecvAirportList,
    RecvID.VOR_LIST: RecvVORList,
    RecvID.NDB_LIST: RecvNDBList,
    RecvID.WAYPOINT_LIST: RecvWaypointList,
    RecvID.EVENT_MULTIPLAYER_SERVER_STARTED: RecvEventMultiplayerServerStarted,
    RecvID.EVENT_MULTIPLAYER_CLIENT_STARTED: RecvEventMultiplayerClientStarted,
    RecvID.EVENT_MULTIPLAYER_SESSION_ENDED: RecvEventMultiplayerSessionEnded,
    RecvID.EVENT_RACE_END: RecvEventRaceEnd,
    RecvID.EVENT_RACE_LAP: RecvEventRaceLap,
}

TELEMETRY_RECORDS = (RecvSimObjectData,)


def record_type_for(recv_id: int):
    return _DECODERS.get(recv_id, RecvUnrecognized)


def decode(frame: bytes) -> RecvPacket:
    """Decode one complete inbound frame into its record."""
    if len(frame) < RECV_HEADER_SIZE:
        raise FramingError(f"Frame of {len(frame)} bytes is shorter than the response header")
    header = DataBuffer(bytes(frame[:RECV_HEADER_SIZE]))
    size = header.get_uint32()
    if size > len(frame) or size < RECV_HEADER_SIZE:
        raise FramingError(f"Frame header declares {size} bytes, got {len(frame)}")
    version, raw_id = header.get_int32(), header.get_int32()
    buf = DataBuffer(bytes(frame[:size]))
    buf.reset(RECV_HEADER_SIZE)
    return record_type_for(raw_id).from_buffer(buf, size, version, raw_id)
