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
Wire-level constants and enumerations of the SimConnect protocol.

All enumerations are ``IntEnum`` so that a member can be written to the
wire directly and compared with the integer values found in records.
"""

from enum import IntEnum, IntFlag

OBJECT_ID_USER = 0
UNUSED = -1                  # 0xFFFFFFFF on the wire
MAX_PATH = 260
CLIENTDATAOFFSET_AUTO = -1
CAMERA_IGNORE_FIELD = 3.4028234663852886e38   # largest float32

DATA_SET_FLAG_DEFAULT = 0
DATA_SET_FLAG_TAGGED = 1

CLOUD_STATE_ARRAY_WIDTH = 64
CLOUD_STATE_ARRAY_SIZE = CLOUD_STATE_ARRAY_WIDTH * CLOUD_STATE_ARRAY_WIDTH

DEFAULT_PORT = 8002
RECEIVE_SIZE = 65536

SEND_HEADER_SIZE = 16
RECV_HEADER_SIZE = 12
SEND_ID_MASK = 0xF0000000


class Period(IntEnum):
    NEVER = 0
    ONCE = 1
    VISUAL_FRAME = 2
    SIM_FRAME = 3
    SECOND = 4


class ClientDataPeriod(IntEnum):
    NEVER = 0
    ONCE = 1
    VISUAL_FRAME = 2
    ON_SET = 3
    SECOND = 4


class SimObjectType(IntEnum):
    USER = 0
    ALL = 1
    AIRCRAFT = 2
    HELICOPTER = 3
    BOAT = 4
    GROUND = 5
    INVALID = 6


class DataType(IntEnum):
    """Value types usable in a data definition, with their wire size."""

    INVALID = 0
    INT32 = 1
    INT64 = 2
    FLOAT32 = 3
    FLOAT64 = 4
    STRING8 = 5
    STRING32 = 6
    STRING64 = 7
    STRING128 = 8
    STRING256 = 9
    STRING260 = 10
    STRINGV = 11
    INITPOSITION = 12
    MARKERSTATE = 13
    WAYPOINT = 14
    LATLONALT = 15
    XYZ = 16
    MAX = 17

    @property
    def size(self) -> int:
        """Bytes occupied by one value; -1 for variable length."""
        return _DATA_TYPE_SIZES[self]


_DATA_TYPE_SIZES = {
    DataType.INVALID: 0,
    DataType.INT32: 4,
    DataType.INT64: 8,
    DataType.FLOAT32: 4,
    DataType.FLOAT64: 8,
    DataType.STRING8: 8,
    DataType.STRING32: 32,
    DataType.STRING64: 64,
    DataType.STRING128: 128,
    DataType.STRING256: 256,
    DataType.STRING260: 260,
    DataType.STRINGV: -1,
    DataType.INITPOSITION: 56,
    DataType.MARKERSTATE: 68,
    DataType.WAYPOINT: 48,
    DataType.LATLONALT: 24,
    DataType.XYZ: 24,
    DataType.MAX: 0,
}


class ClientDataType(IntEnum):
    """Typed client-data entries, passed in place of a byte size."""

    INT8 = -1
    INT16 = -2
    INT32 = -3
    INT64 = -4
    FLOAT32 = -5
    FLOAT64 = -6


class NotificationPriority(IntEnum):
    HIGHEST = 1
    HIGHEST_MASKABLE = 10000000
    STANDARD = 1900000000
    DEFAULT = 2000000000
    LOWEST = 4000000000


class TextType(IntEnum):
    SCROLL_BLACK = 0
    SCROLL_WHITE = 1
    SCROLL_RED = 2
    SCROLL_GREEN = 3
    SCROLL_BLUE = 4
    SCROLL_YELLOW = 5
    SCROLL_MAGENTA = 6
    SCROLL_CYAN = 7
    PRINT_BLACK = 0x100
    PRINT_WHITE = 0x101
    PRINT_RED = 0x102
    PRINT_GREEN = 0x103
    PRINT_BLUE = 0x104
    PRINT_YELLOW = 0x105
    PRINT_MAGENTA = 0x106
    PRINT_CYAN = 0x107
    MENU = 0x200


class TextResult(IntEnum):
    MENU_SELECT_1 = 0
    MENU_SELECT_2 = 1
    MENU_SELECT_3 = 2
    MENU_SELECT_4 = 3
    MENU_SELECT_5 = 4
    MENU_SELECT_6 = 5
    MENU_SELECT_7 = 6
    MENU_SELECT_8 = 7
    MENU_SELECT_9 = 8
    MENU_SELECT_10 = 9
    DISPLAYED = 0x10000
    QUEUED = 0x10001
    REMOVED = 0x10002
    REPLACED = 0x10003
    TIMEOUT = 0x10004


class FacilityListType(IntEnum):
    AIRPORT = 0
    WAYPOINT = 1
    NDB = 2
    VOR = 3
    COUNT = 4


class WeatherMode(IntEnum):
    THEME = 0
    RWW = 1
    CUSTOM = 2
    GLOBAL = 3

    @classmethod
    def from_value(cls, value: int) -> "WeatherMode":
        try:
            return cls(value)
        except ValueError:
            return cls.THEME


class ExceptionCode(IntEnum):
    NONE = 0
    ERROR = 1
    SIZE_MISMATCH = 2
    UNRECOGNIZED_ID = 3
    UNOPENED = 4
    VERSION_MISMATCH = 5
    TOO_MANY_GROUPS = 6
    NAME_UNRECOGNIZED = 7
    TOO_MANY_EVENT_NAMES = 8
    EVENT_ID_DUPLICATE = 9
    TOO_MANY_MAPS = 10
    TOO_MANY_OBJECTS = 11
    TOO_MANY_REQUESTS = 12
    WEATHER_INVALID_PORT = 13
    WEATHER_INVALID_METAR = 14
    WEATHER_UNABLE_TO_GET_OBSERVATION = 15
    WEATHER_UNABLE_TO_CREATE_STATION = 16
    WEATHER_UNABLE_TO_REMOVE_STATION = 17
    INVALID_DATA_TYPE = 18
    INVALID_DATA_SIZE = 19
    DATA_ERROR = 20
    INVALID_ARRAY = 21
    CREATE_OBJECT_FAILED = 22
    LOAD_FLIGHTPLAN_FAILED = 23
    OPERATION_INVALID_FOR_OBJECT_TYPE = 24
    ILLEGAL_OPERATION = 25
    ALREADY_SUBSCRIBED = 26
    INVALID_ENUM = 27
    DEFINITION_ERROR = 28
    DUPLICATE_ID = 29
    DATUM_ID = 30
    OUT_OF_BOUNDS = 31
    ALREADY_CREATED = 32
    OBJECT_OUTSIDE_REALITY_BUBBLE = 33
    OBJECT_CONTAINER = 34
    OBJECT_AI = 35
    OBJECT_ATC = 36
    OBJECT_SCHEDULE = 37


class EventFlag(IntFlag):
    DEFAULT = 0
    FAST_REPEAT_TIMER = 0x1
    SLOW_REPEAT_TIMER = 0x2
    GROUPID_IS_PRIORITY = 0x10


class DataRequestFlag(IntFlag):
    DEFAULT = 0
    CHANGED = 0x1
    TAGGED = 0x2


class WaypointFlag(IntFlag):
    NONE = 0
    SPEED_REQUESTED = 0x4
    THROTTLE_REQUESTED = 0x8
    COMPUTE_VERTICAL_SPEED = 0x10
    ALTITUDE_IS_AGL = 0x20
    ON_GROUND = 0x100000
    REVERSE = 0x200000
    WRAP_TO_FIRST = 0x400000


class VORFlag(IntFlag):
    HAS_NAV_SIGNAL = 0x1
    HAS_LOCALIZER = 0x2
    HAS_GLIDE_SLOPE = 0x4
    HAS_DME = 0x8


class RecvID(IntEnum):
    NULL = 0
    EXCEPTION = 1
    OPEN = 2
    QUIT = 3
    EVENT = 4
    EVENT_OBJECT_ADDREMOVE = 5
    EVENT_FILENAME = 6
    EVENT_FRAME = 7
    SIMOBJECT_DATA = 8
    SIMOBJECT_DATA_BYTYPE = 9
    WEATHER_OBSERVATION = 10
    CLOUD_STATE = 11
    ASSIGNED_OBJECT_ID = 12
    RESERVED_KEY = 13
    CUSTOM_ACTION = 14
    SYSTEM_STATE = 15
    CLIENT_DATA = 16
    EVENT_WEATHER_MODE = 17
    AIRPORT_LIST = 18
    VOR_LIST = 19
    NDB_LIST = 20
    WAYPOINT_LIST = 21
    EVENT_MULTIPLAYER_SERVER_STARTED = 22
    EVENT_MULTIPLAYER_CLIENT_STARTED = 23
    EVENT_MULTIPLAYER_SESSION_ENDED = 24
    EVENT_RACE_END = 25
    EVENT_RACE_LAP = 26


class Opcode(IntEnum):
    """Outbound command ids, OR-ed with ``SEND_ID_MASK`` in the frame header."""

    OPEN = 0x01
    MAP_CLIENT_EVENT_TO_SIM_EVENT = 0x04
    TRANSMIT_CLIENT_EVENT = 0x05
    SET_SYSTEM_EVENT_STATE = 0x06
    ADD_CLIENT_EVENT_TO_NOTIFICATION_GROUP = 0x07
    REMOVE_CLIENT_EVENT = 0x08
    SET_NOTIFICATION_GROUP_PRIORITY = 0x09
    CLEAR_NOTIFICATION_GROUP = 0x0A
    REQUEST_NOTIFICATION_GROUP = 0x0B
    ADD_TO_DATA_DEFINITION = 0x0C
    CLEAR_DATA_DEFINITION = 0x0D
    REQUEST_DATA_ON_SIM_OBJECT = 0x0E
    REQUEST_DATA_ON_SIM_OBJECT_TYPE = 0x0F
    SET_DATA_ON_SIM_OBJECT = 0x10
    MAP_INPUT_EVENT_TO_CLIENT_EVENT = 0x11
    SET_INPUT_GROUP_PRIORITY = 0x12
    REMOVE_INPUT_EVENT = 0x13
    CLEAR_INPUT_GROUP = 0x14
    SET_INPUT_GROUP_STATE = 0x15
    REQUEST_RESERVED_KEY = 0x16
    SUBSCRIBE_TO_SYSTEM_EVENT = 0x17
    UNSUBSCRIBE_FROM_SYSTEM_EVENT = 0x18
    WEATHER_REQUEST_INTERPOLATED_OBSERVATION = 0x19
    WEATHER_REQUEST_OBSERVATION_AT_STATION = 0x1A
    WEATHER_REQUEST_OBSERVATION_AT_NEAREST_STATION = 0x1B
    WEATHER_CREATE_STATION = 0x1C
    WEATHER_REMOVE_STATION = 0x1D
    WEATHER_SET_OBSERVATION = 0x1E
    WEATHER_SET_MODE_SERVER = 0x1F
    WEATHER_SET_MODE_THEME = 0x20
    WEATHER_SET_MODE_GLOBAL = 0x21
    WEATHER_SET_MODE_CUSTOM = 0x22
    WEATHER_SET_DYNAMIC_UPDATE_RATE = 0x23
    WEATHER_REQUEST_CLOUD_STATE = 0x24
    WEATHER_CREATE_THERMAL = 0x25
    WEATHER_REMOVE_THERMAL = 0x26
    AI_CREATE_PARKED_ATC_AIRCRAFT = 0x27
    AI_CREATE_ENROUTE_ATC_AIRCRAFT = 0x28
    AI_CREATE_NON_ATC_AIRCRAFT = 0x29
    AI_CREATE_SIMULATED_OBJECT = 0x2A
    AI_RELEASE_CONTROL = 0x2B
    AI_REMOVE_OBJECT = 0x2C
    AI_SET_AIRCRAFT_FLIGHT_PLAN = 0x2D
    EXECUTE_MISSION_ACTION = 0x2E
    COMPLETE_CUSTOM_MISSION_ACTION = 0x2F
    CAMERA_SET_RELATIVE_6DOF = 0x30
    MENU_ADD_ITEM = 0x31
    MENU_DELETE_ITEM = 0x32
    MENU_ADD_SUB_ITEM = 0x33
    MENU_DELETE_SUB_ITEM = 0x34
    REQUEST_SYSTEM_STATE = 0x35
    SET_SYSTEM_STATE = 0x36
    MAP_CLIENT_DATA_NAME_TO_ID = 0x37
    CREATE_CLIENT_DATA = 0x38
    ADD_TO_CLIENT_DATA_DEFINITION = 0x39
    CLEAR_CLIENT_DATA_DEFINITION = 0x3A
    REQUEST_CLIENT_DATA = 0x3B
    SET_CLIENT_DATA = 0x3C
    FLIGHT_LOAD = 0x3D
    FLIGHT_SAVE = 0x3E
    FLIGHT_PLAN_LOAD = 0x3F
    TEXT = 0x40
    SUBSCRIBE_TO_FACILITIES = 0x41
    UNSUBSCRIBE_TO_FACILITIES = 0x42
    REQUEST_FACILITIES_LIST = 0x43
