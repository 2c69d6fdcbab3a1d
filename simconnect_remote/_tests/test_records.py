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

from simconnect_remote import records
from simconnect_remote.constants import ExceptionCode, RecvID, WeatherMode
from simconnect_remote.data import GUID
from simconnect_remote.errors import FramingError
from simconnect_remote._tests.fakes import response_frame


def _s(text: str, width: int) -> bytes:
    return text.encode("latin-1").ljust(width, b"\0")


def test_exception_record() -> None:
    record = records.decode(response_frame(RecvID.EXCEPTION, struct.pack("<3i", 3, 17, 2)))
    assert isinstance(record, records.RecvException)
    assert record.exception == ExceptionCode.UNRECOGNIZED_ID
    assert (record.send_id, record.index) == (17, 2)
    assert record.recv_id is RecvID.EXCEPTION
    assert record.size == 24


def test_open_record() -> None:
    payload = _s("Microsoft Flight Simulator X", 256) + struct.pack("<10i", 10, 0, 61472, 0, 10, 0, 61259, 0, 0, 0)
    record = records.decode(response_frame(RecvID.OPEN, payload))
    assert isinstance(record, records.RecvOpen)
    assert record.application_name == "Microsoft Flight Simulator X"
    assert record.application_build_major == 61472
    assert record.simconnect_build_major == 61259


@pytest.mark.parametrize("raw_id", [0, 99])
def test_unknown_ids_become_unrecognized(raw_id: int) -> None:
    record = records.decode(response_frame(raw_id, b"\x01\x02\x03"))
    assert isinstance(record, records.RecvUnrecognized)
    assert record.payload == b"\x01\x02\x03"
    assert record.raw_id == raw_id


def test_unknown_id_keeps_raw_value() -> None:
    assert records.decode(response_frame(99)).recv_id == 99


def test_event_family() -> None:
    base = struct.pack("<3i", 1, 2, 3)
    quit_record = records.decode(response_frame(RecvID.QUIT))
    assert isinstance(quit_record, records.RecvQuit)

    add_remove = records.decode(response_frame(RecvID.EVENT_OBJECT_ADDREMOVE, base + struct.pack("<i", 2)))
    assert (add_remove.group_id, add_remove.event_id, add_remove.data) == (1, 2, 3)
    assert add_remove.object_type == 2

    filename = records.decode(response_frame(RecvID.EVENT_FILENAME, base + _s("flights\\a.flt", 260) + struct.pack("<i", 0)))
    assert filename.file_name == "flights\\a.flt"

    frame = records.decode(response_frame(RecvID.EVENT_FRAME, base + struct.pack("<2f", 30.0, 1.0)))
    assert (frame.frame_rate, frame.sim_speed) == (30.0, 1.0)


@pytest.mark.parametrize("data, mode", [(2, WeatherMode.CUSTOM), (3, WeatherMode.GLOBAL), (77, WeatherMode.THEME)])
def test_weather_mode_event(data: int, mode: WeatherMode) -> None:
    record = records.decode(response_frame(RecvID.EVENT_WEATHER_MODE, struct.pack("<3i", 0, 4, data)))
    assert record.mode is mode


def test_custom_action() -> None:
    guid = GUID.parse("{c2ff2d25-0ba1-4c4f-9f3b-bbd8a5e7c0f1}")
    payload = struct.pack("<3i", 0, 8, 0) + bytes(guid) + struct.pack("<i", 1) + b"go\0"
    record = records.decode(response_frame(RecvID.CUSTOM_ACTION, payload))
    assert record.guid == guid
    assert record.wait_for_completion == 1
    assert record.payload == "go"


def test_race_lap() -> None:
    payload = (
        struct.pack("<3i", 0, 1, 0)
        + struct.pack("<2i", 4, 6)
        + bytes(16)
        + _s("pilot", 260) + _s("race", 260) + _s("Extra 300", 260) + _s("racer", 260)
        + struct.pack("<2di", 95.5, 2.0, 1)
    )
    record = records.decode(response_frame(RecvID.EVENT_RACE_LAP, payload))
    assert isinstance(record, records.RecvEventRaceLap)
    assert record.lap_index == 4
    assert record.number_racers == 6
    assert record.aircraft == "Extra 300"
    assert record.total_time == 95.5
    assert record.disqualified is True

    end = records.decode(response_frame(RecvID.EVENT_RACE_END, payload))
    assert end.racer_number == 4


def test_sim_object_data_cursor() -> None:
    header = struct.pack("<7i", 1, 0, 5, 0, 1, 1, 2)
    row = struct.pack("<di", 1234.5, 7)
    record = records.decode(response_frame(RecvID.SIMOBJECT_DATA, header + row))
    assert isinstance(record, records.RecvSimObjectData)
    assert (record.request_id, record.define_id, record.define_count) == (1, 5, 2)
    assert record.data == row
    assert record.get_float64() == 1234.5
    assert record.get_int32() == 7
    assert record.remaining == 0
    record.reset()
    assert record.position == 0
    assert record.get_int32(8) == 7

    by_type = records.decode(response_frame(RecvID.SIMOBJECT_DATA_BYTYPE, header + row))
    assert type(by_type) is records.RecvSimObjectDataByType
    client = records.decode(response_frame(RecvID.CLIENT_DATA, header + row))
    assert type(client) is records.RecvClientData


def test_simple_replies() -> None:
    assigned = records.decode(response_frame(RecvID.ASSIGNED_OBJECT_ID, struct.pack("<2i", 3, 1001)))
    assert assigned.object_id == 1001

    metar = records.decode(response_frame(RecvID.WEATHER_OBSERVATION, struct.pack("<i", 9) + b"KSEA 121753Z\0\0"))
    assert metar.metar == "KSEA 121753Z"

    key = records.decode(response_frame(RecvID.RESERVED_KEY, _s("q", 50) + _s("Ctrl+Q", 30)))
    assert key.reserved_key == "Ctrl+Q"

    state = records.decode(response_frame(RecvID.SYSTEM_STATE, struct.pack("<2if", 2, 1, 0.0) + _s("a.air", 260)))
    assert (state.request_id, state.data_integer, state.data_string) == (2, 1, "a.air")


def test_cloud_state_pads_missing_rows() -> None:
    payload = struct.pack("<2i", 1, 2) + bytes([1] * 64) + bytes([2] * 10)
    record = records.decode(response_frame(RecvID.CLOUD_STATE, payload))
    assert len(record.rows) == 64
    assert record.rows[0] == bytes([1] * 64)
    assert record.rows[1] == bytes(64)


def test_facility_lists() -> None:
    airport = _s("KSEA", 9) + struct.pack("<3d", 47.4, -122.3, 432.0)
    payload = struct.pack("<4i", 7, 2, 0, 1) + airport + _s("KBFI", 9) + struct.pack("<3d", 47.5, -122.3, 21.0)
    record = records.decode(response_frame(RecvID.AIRPORT_LIST, payload))
    assert [e.icao for e in record.entries] == ["KSEA", "KBFI"]
    assert record.entries[1].altitude == 21.0

    vor = (
        _s("SEA", 9) + struct.pack("<3d", 47.4, -122.3, 400.0)
        + struct.pack("<f", 19.0)             # magnetic variation
        + struct.pack("<i", 116800000)        # frequency
        + struct.pack("<if", 0x7, 180.0)
        + struct.pack("<3d", 47.41, -122.31, 401.0)
        + struct.pack("<f", 3.0)
    )
    assert len(vor) == records.FacilityVOR.SIZE
    record = records.decode(response_frame(RecvID.VOR_LIST, struct.pack("<4i", 8, 1, 0, 1) + vor))
    entry = record.entries[0]
    assert isinstance(entry, records.FacilityVOR)
    assert entry.frequency == 116800000
    assert entry.flags == 0x7
    assert entry.glide_alt == 401.0
    assert entry.glide_slope_angle == 3.0


def test_to_dict_names_the_record() -> None:
    record = records.decode(response_frame(RecvID.EVENT, struct.pack("<3i", 1, 2, 3)))
    out = record.to_dict()
    assert out["type"] == "RecvEvent"
    assert out["event_id"] == 2
    assert "_cursor" not in records.decode(response_frame(RecvID.SIMOBJECT_DATA, bytes(28))).to_dict()


def test_decode_rejects_bad_headers() -> None:
    with pytest.raises(FramingError):
        records.decode(b"\x00" * 8)
    with pytest.raises(FramingError):
        records.decode(struct.pack("<3I", 40, 4, 2))


def test_record_type_lookup() -> None:
    assert records.record_type_for(RecvID.VOR_LIST) is records.RecvVORList
    assert records.record_type_for(12345) is records.RecvUnrecognized
