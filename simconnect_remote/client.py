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
SimConnect — one client session with a SimConnect server.

Design notes
------------
* One method per command.  Each method validates its arguments first and
  only then encodes the payload into the shared send buffer of the
  ``Transport``, which adds the 16-byte header and sends the frame.  A
  validation error therefore never leaves a partial frame behind and never
  consumes a sequence id.

* Identifiers (events, groups, definitions, requests ...) are plain
  integers.  ``IntEnum`` members are accepted anywhere an identifier is
  expected; the member value is what goes on the wire.

* Strings are Latin-1, either zero padded to a fixed width or
  NUL-terminated, as each command requires.

* Commands that only exist in newer protocol versions are wrapped with
  ``requires_version``; commands whose layout differs between versions ask
  ``supports(protocol, Layout.X)``.

* Responses are not read here.  ``call_dispatch`` reads one frame and hands
  it to a ``Dispatcher``; ``receive`` returns the decoded record directly.
"""

import logging
import socket

from simconnect_remote import records
from simconnect_remote.buffer import encode_string
from simconnect_remote.config import Configuration, get_configuration
from simconnect_remote.constants import (
    DATA_SET_FLAG_DEFAULT,
    DATA_SET_FLAG_TAGGED,
    DEFAULT_PORT,
    MAX_PATH,
    RECEIVE_SIZE,
    UNUSED,
    ClientDataPeriod,
    DataType,
    EventFlag,
    FacilityListType,
    NotificationPriority,
    Opcode,
    Period,
    SimObjectType,
    TextType,
)
from simconnect_remote.data import GUID, InitPosition
from simconnect_remote.errors import ConfigurationNotFoundError, ValidationError
from simconnect_remote.transport import Transport
from simconnect_remote.version import (
    DEFAULT_PROTOCOL,
    HANDSHAKE,
    Layout,
    requires_version,
    supports,
)

_LOG = logging.getLogger(__name__)


def _member(enum_cls, value, what: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {what}: {value!r}") from None


def _guid_bytes(value) -> bytes:
    raw = bytes(value) if isinstance(value, GUID) else value
    if not isinstance(raw, (bytes, bytearray)) or len(raw) != 16:
        raise ValidationError("GUID must be exactly 16 bytes")
    return bytes(raw)


class SimConnect:
    """A client session.  The handshake is sent on construction."""

    def __init__(self, app_name: str, transport: Transport):
        self.app_name = app_name
        self.transport = transport
        self._open()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def connect(cls, app_name: str, host: str = "localhost", port: int = DEFAULT_PORT,
                protocol=DEFAULT_PROTOCOL, *, timeout: float = None, no_delay: bool = False,
                family: int = socket.AF_UNSPEC, receive_size: int = RECEIVE_SIZE) -> "SimConnect":
        transport = Transport.open(host, port, protocol, timeout=timeout, no_delay=no_delay,
                                   family=family, receive_size=receive_size)
        try:
            return cls(app_name, transport)
        except Exception:
            transport.close()
            raise

    @classmethod
    def from_config(cls, app_name: str, config: Configuration = None, protocol=DEFAULT_PROTOCOL, *,
                    config_number: int = 0, timeout: float = None) -> "SimConnect":
        """Connect using a ``Configuration``, or the ``SimConnect.cfg`` found on disk.

        Without an explicit configuration, a missing file falls back to the
        defaults (``localhost:8002``).
        """
        if config is None:
            try:
                config = get_configuration(config_number)
            except ConfigurationNotFoundError:
                _LOG.info("No SimConnect.cfg found, using default configuration")
                config = Configuration()
        family = socket.AF_INET6 if config.is_ipv6 else socket.AF_INET
        return cls.connect(
            app_name,
            host=config.address,
            port=config.port,
            protocol=protocol,
            timeout=timeout,
            no_delay=config.disable_nagle,
            family=family,
            receive_size=config.max_receive_size,
        )

    def _open(self):
        with self.transport.frame(Opcode.OPEN) as buf:
            buf.put_string(self.app_name, 256)
            buf.put_int32(0)
            buf.put_bytes(b"\0XSF")
            for value in HANDSHAKE[self.protocol]:
                buf.put_int32(value)
        _LOG.debug(f"Handshake sent for '{self.app_name}' ({self.protocol.name})")

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    @property
    def protocol(self):
        return self.transport.protocol

    @property
    def closed(self) -> bool:
        return self.transport.closed

    @property
    def last_sent_packet_id(self) -> int:
        return self.transport.last_sent_sequence_id

    @property
    def bytes_sent(self) -> int:
        return self.transport.bytes_sent

    @property
    def bytes_received(self) -> int:
        return self.transport.bytes_received

    @property
    def packets_sent(self) -> int:
        return self.transport.packets_sent

    @property
    def packets_received(self) -> int:
        return self.transport.packets_received

    def close(self):
        self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # ------------------------------------------------------------------
    # Receiving
    # ------------------------------------------------------------------

    def get_next_data(self) -> bytes:
        """Block for the next complete response frame and return it undecoded."""
        return self.transport.receive_frame()

    def receive(self) -> records.RecvPacket:
        return records.decode(self.transport.receive_frame())

    def call_dispatch(self, dispatcher) -> records.RecvPacket:
        """Read one frame and let ``dispatcher`` fan it out."""
        return dispatcher.dispatch(self, self.transport.receive_frame())

    # ------------------------------------------------------------------
    # Client events and notification groups
    # ------------------------------------------------------------------

    def map_client_event_to_sim_event(self, event_id, event_name: str = ""):
        with self.transport.frame(Opcode.MAP_CLIENT_EVENT_TO_SIM_EVENT) as buf:
            buf.put_int32(event_id)
            buf.put_string(event_name, 256)

    def transmit_client_event(self, object_id, event_id, data: int, group_id, flags=EventFlag.DEFAULT):
        with self.transport.frame(Opcode.TRANSMIT_CLIENT_EVENT) as buf:
            buf.put_int32(object_id)
            buf.put_int32(event_id)
            buf.put_int32(data)
            buf.put_int32(group_id)
            buf.put_int32(flags)

    def set_system_event_state(self, event_id, state: bool):
        with self.transport.frame(Opcode.SET_SYSTEM_EVENT_STATE) as buf:
            buf.put_int32(event_id)
            buf.put_int32(1 if state else 0)

    def add_client_event_to_notification_group(self, group_id, event_id, maskable: bool = False):
        with self.transport.frame(Opcode.ADD_CLIENT_EVENT_TO_NOTIFICATION_GROUP) as buf:
            buf.put_int32(group_id)
            buf.put_int32(event_id)
            buf.put_int32(1 if maskable else 0)

    def remove_client_event(self, group_id, event_id):
        with self.transport.frame(Opcode.REMOVE_CLIENT_EVENT) as buf:
            buf.put_int32(group_id)
            buf.put_int32(event_id)

    def set_notification_group_priority(self, group_id, priority):
        priority = _member(NotificationPriority, priority, "notification priority")
        with self.transport.frame(Opcode.SET_NOTIFICATION_GROUP_PRIORITY) as buf:
            buf.put_int32(group_id)
            buf.put_int32(priority)

    def clear_notification_group(self, group_id):
        with self.transport.frame(Opcode.CLEAR_NOTIFICATION_GROUP) as buf:
            buf.put_int32(group_id)

    def request_notification_group(self, group_id, reserved: int = 0, flags: int = 0):
        with self.transport.frame(Opcode.REQUEST_NOTIFICATION_GROUP) as buf:
            buf.put_int32(group_id)
            buf.put_int32(reserved)
            buf.put_int32(flags)

    def subscribe_to_system_event(self, event_id, event_name: str):
        with self.transport.frame(Opcode.SUBSCRIBE_TO_SYSTEM_EVENT) as buf:
            buf.put_int32(event_id)
            buf.put_string(event_name, 256)

    def unsubscribe_from_system_event(self, event_id):
        with self.transport.frame(Opcode.UNSUBSCRIBE_FROM_SYSTEM_EVENT) as buf:
            buf.put_int32(event_id)

    # ------------------------------------------------------------------
    # Data definitions and sim object data
    # ------------------------------------------------------------------

    def add_to_data_definition(self, define_id, datum_name: str, units_name: str,
                               data_type=DataType.FLOAT64, epsilon: float = 0.0, datum_id=UNUSED):
        data_type = _member(DataType, data_type, "data type")
        with self.transport.frame(Opcode.ADD_TO_DATA_DEFINITION) as buf:
            buf.put_int32(define_id)
            buf.put_string(datum_name, 256)
            buf.put_string(units_name, 256)
            buf.put_int32(data_type)
            buf.put_float32(epsilon)
            buf.put_int32(datum_id)

    def clear_data_definition(self, define_id):
        with self.transport.frame(Opcode.CLEAR_DATA_DEFINITION) as buf:
            buf.put_int32(define_id)

    def request_data_on_sim_object(self, request_id, define_id, object_id, period,
                                   flags: int = 0, origin: int = 0, interval: int = 0, limit: int = 0):
        period = _member(Period, period, "period")
        with self.transport.frame(Opcode.REQUEST_DATA_ON_SIM_OBJECT) as buf:
            buf.put_int32(request_id)
            buf.put_int32(define_id)
            buf.put_int32(object_id)
            buf.put_int32(period)
            buf.put_int32(flags)
            buf.put_int32(origin)
            buf.put_int32(interval)
            buf.put_int32(limit)

    def request_data_on_sim_object_type(self, request_id, define_id, radius: int, object_type):
        """Request data on all objects of ``object_type`` within ``radius`` metres."""
        object_type = _member(SimObjectType, object_type, "sim object type")
        with self.transport.frame(Opcode.REQUEST_DATA_ON_SIM_OBJECT_TYPE) as buf:
            buf.put_int32(request_id)
            buf.put_int32(define_id)
            buf.put_int32(radius)
            buf.put_int32(object_type)

    def set_data_on_sim_object(self, define_id, object_id, data, tagged: bool = False, count: int = 1):
        """Send ``data`` (raw bytes laid out per the definition) to an object."""
        data = bytes(data)
        with self.transport.frame(Opcode.SET_DATA_ON_SIM_OBJECT) as buf:
            buf.put_int32(define_id)
            buf.put_int32(object_id)
            buf.put_int32(DATA_SET_FLAG_TAGGED if tagged else DATA_SET_FLAG_DEFAULT)
            buf.put_int32(count or 1)
            buf.put_int32(len(data))
            buf.put_bytes(data)

    def set_data_on_sim_object_values(self, define_id, object_id, *values: float):
        """Send a definition made only of FLOAT64 entries."""
        with self.transport.frame(Opcode.SET_DATA_ON_SIM_OBJECT) as buf:
            buf.put_int32(define_id)
            buf.put_int32(object_id)
            buf.put_int32(DATA_SET_FLAG_DEFAULT)
            buf.put_int32(1)
            buf.put_int32(8 * len(values))
            for value in values:
                buf.put_float64(value)

    def set_data_on_sim_object_structs(self, define_id, object_id, items):
        """Send an array of structured values (e.g. a list of ``Waypoint``)."""
        items = list(items)
        with self.transport.frame(Opcode.SET_DATA_ON_SIM_OBJECT) as buf:
            buf.put_int32(define_id)
            buf.put_int32(object_id)
            buf.put_int32(DATA_SET_FLAG_DEFAULT)
            buf.put_int32(len(items) or 1)
            size_offset = buf.position
            buf.put_int32(0)
            for item in items:
                item.write(buf)
            buf.put_int32(buf.position - size_offset - 4, size_offset)

    # ------------------------------------------------------------------
    # Input events
    # ------------------------------------------------------------------

    def map_input_event_to_client_event(self, group_id, input_definition: str, down_event_id,
                                        down_value: int = 0, up_event_id=UNUSED, up_value: int = 0,
                                        maskable: bool = False):
        with self.transport.frame(Opcode.MAP_INPUT_EVENT_TO_CLIENT_EVENT) as buf:
            buf.put_int32(group_id)
            buf.put_string(input_definition, 256)
            buf.put_int32(down_event_id)
            buf.put_int32(down_value)
            buf.put_int32(up_event_id)
            buf.put_int32(up_value)
            buf.put_int32(1 if maskable else 0)

    def set_input_group_priority(self, group_id, priority):
        priority = _member(NotificationPriority, priority, "notification priority")
        with self.transport.frame(Opcode.SET_INPUT_GROUP_PRIORITY) as buf:
            buf.put_int32(group_id)
            buf.put_int32(priority)

    def remove_input_event(self, group_id, input_definition: str):
        with self.transport.frame(Opcode.REMOVE_INPUT_EVENT) as buf:
            buf.put_int32(group_id)
            buf.put_string(input_definition, 256)

    def clear_input_group(self, group_id):
        with self.transport.frame(Opcode.CLEAR_INPUT_GROUP) as buf:
            buf.put_int32(group_id)

    def set_input_group_state(self, group_id, state: bool):
        with self.transport.frame(Opcode.SET_INPUT_GROUP_STATE) as buf:
            buf.put_int32(group_id)
            buf.put_int32(1 if state else 0)

    def request_reserved_key(self, event_id, key_choice1: str, key_choice2: str = "", key_choice3: str = ""):
        with self.transport.frame(Opcode.REQUEST_RESERVED_KEY) as buf:
            buf.put_int32(event_id)
            for choice in (key_choice1, key_choice2, key_choice3):
                buf.put_string(choice or "", 30)

    # ------------------------------------------------------------------
    # Weather
    # ------------------------------------------------------------------

    def weather_request_interpolated_observation(self, request_id, lat: float, lon: float, alt: float):
        with self.transport.frame(Opcode.WEATHER_REQUEST_INTERPOLATED_OBSERVATION) as buf:
            buf.put_int32(request_id)
            buf.put_float32(lat)
            buf.put_float32(lon)
            buf.put_float32(alt)

    def weather_request_observation_at_station(self, request_id, icao: str):
        with self.transport.frame(Opcode.WEATHER_REQUEST_OBSERVATION_AT_STATION) as buf:
            buf.put_int32(request_id)
            buf.put_string(icao, 5)

    def weather_request_observation_at_nearest_station(self, request_id, lat: float, lon: float):
        with self.transport.frame(Opcode.WEATHER_REQUEST_OBSERVATION_AT_NEAREST_STATION) as buf:
            buf.put_int32(request_id)
            buf.put_float32(lat)
            buf.put_float32(lon)

    def weather_create_station(self, request_id, icao: str, name: str, lat: float, lon: float, alt: float):
        with self.transport.frame(Opcode.WEATHER_CREATE_STATION) as buf:
            buf.put_int32(request_id)
            buf.put_string(icao, 5)
            buf.put_string(name, 256)
            buf.put_float32(lat)
            buf.put_float32(lon)
            buf.put_float32(alt)

    def weather_remove_station(self, request_id, icao: str):
        with self.transport.frame(Opcode.WEATHER_REMOVE_STATION) as buf:
            buf.put_int32(request_id)
            buf.put_string(icao, 5)

    def weather_set_observation(self, seconds: int, metar: str):
        with self.transport.frame(Opcode.WEATHER_SET_OBSERVATION) as buf:
            buf.put_int32(seconds)
            buf.put_string_v(metar)

    def weather_set_mode_server(self, port: int, seconds: int):
        with self.transport.frame(Opcode.WEATHER_SET_MODE_SERVER) as buf:
            buf.put_int32(port)
            buf.put_int32(seconds)

    def weather_set_mode_theme(self, theme_name: str):
        with self.transport.frame(Opcode.WEATHER_SET_MODE_THEME) as buf:
            buf.put_string(theme_name, 256)

    def weather_set_mode_global(self):
        with self.transport.frame(Opcode.WEATHER_SET_MODE_GLOBAL):
            pass

    def weather_set_mode_custom(self):
        with self.transport.frame(Opcode.WEATHER_SET_MODE_CUSTOM):
            pass

    def weather_set_dynamic_update_rate(self, rate: int):
        with self.transport.frame(Opcode.WEATHER_SET_DYNAMIC_UPDATE_RATE) as buf:
            buf.put_int32(rate)

    def weather_request_cloud_state(self, request_id, min_lat: float, min_lon: float, min_alt: float,
                                    max_lat: float, max_lon: float, max_alt: float, flags: int = 0):
        with self.transport.frame(Opcode.WEATHER_REQUEST_CLOUD_STATE) as buf:
            buf.put_int32(request_id)
            for value in (min_lat, min_lon, min_alt, max_lat, max_lon, max_alt):
                buf.put_float32(value)
            buf.put_int32(flags)

    def weather_create_thermal(self, request_id, lat: float, lon: float, alt: float,
                               radius: float, height: float,
                               core_rate: float = 3.0, core_turbulence: float = 0.05,
                               sink_rate: float = 3.0, sink_turbulence: float = 0.2,
                               core_size: float = 0.4, core_transition_size: float = 0.1,
                               sink_layer_size: float = 0.4, sink_transition_size: float = 0.1):
        with self.transport.frame(Opcode.WEATHER_CREATE_THERMAL) as buf:
            buf.put_int32(request_id)
            for value in (lat, lon, alt, radius, height,
                          core_rate, core_turbulence, sink_rate, sink_turbulence,
                          core_size, core_transition_size, sink_layer_size, sink_transition_size):
                buf.put_float32(value)

    def weather_remove_thermal(self, object_id):
        with self.transport.frame(Opcode.WEATHER_REMOVE_THERMAL) as buf:
            buf.put_int32(object_id)

    # ------------------------------------------------------------------
    # AI objects
    # ------------------------------------------------------------------

    def ai_create_parked_atc_aircraft(self, container_title: str, tail_number: str, airport_id: str,
                                      request_id):
        with self.transport.frame(Opcode.AI_CREATE_PARKED_ATC_AIRCRAFT) as buf:
            buf.put_string(container_title, 256)
            buf.put_string(tail_number, 12)
            buf.put_string(airport_id, 5)
            buf.put_int32(request_id)

    def ai_create_enroute_atc_aircraft(self, container_title: str, tail_number: str, flight_number: int,
                                       flight_plan_path: str, flight_plan_position: float,
                                       touch_and_go: bool, request_id):
        with self.transport.frame(Opcode.AI_CREATE_ENROUTE_ATC_AIRCRAFT) as buf:
            buf.put_string(container_title, 256)
            buf.put_string(tail_number, 12)
            buf.put_int32(flight_number)
            buf.put_string(flight_plan_path, MAX_PATH)
            buf.put_float64(flight_plan_position)
            buf.put_int32(1 if touch_and_go else 0)
            buf.put_int32(request_id)

    def ai_create_non_atc_aircraft(self, container_title: str, tail_number: str,
                                   init_position: InitPosition, request_id):
        with self.transport.frame(Opcode.AI_CREATE_NON_ATC_AIRCRAFT) as buf:
            buf.put_string(container_title, 256)
            buf.put_string(tail_number, 12)
            init_position.write(buf)
            buf.put_int32(request_id)

    def ai_create_simulated_object(self, container_title: str, init_position: InitPosition, request_id):
        with self.transport.frame(Opcode.AI_CREATE_SIMULATED_OBJECT) as buf:
            buf.put_string(container_title, 256)
            init_position.write(buf)
            buf.put_int32(request_id)

    def ai_release_control(self, object_id, request_id):
        with self.transport.frame(Opcode.AI_RELEASE_CONTROL) as buf:
            buf.put_int32(object_id)
            buf.put_int32(request_id)

    def ai_remove_object(self, object_id, request_id):
        with self.transport.frame(Opcode.AI_REMOVE_OBJECT) as buf:
            buf.put_int32(object_id)
            buf.put_int32(request_id)

    def ai_set_aircraft_flight_plan(self, object_id, flight_plan_path: str, request_id):
        with self.transport.frame(Opcode.AI_SET_AIRCRAFT_FLIGHT_PLAN) as buf:
            buf.put_int32(object_id)
            buf.put_string(flight_plan_path, MAX_PATH)
            buf.put_int32(request_id)

    # ------------------------------------------------------------------
    # Missions and camera
    # ------------------------------------------------------------------

    def execute_mission_action(self, guid):
        raw = _guid_bytes(guid)
        with self.transport.frame(Opcode.EXECUTE_MISSION_ACTION) as buf:
            buf.put_bytes(raw)

    def complete_custom_mission_action(self, guid):
        raw = _guid_bytes(guid)
        with self.transport.frame(Opcode.COMPLETE_CUSTOM_MISSION_ACTION) as buf:
            buf.put_bytes(raw)

    def camera_set_relative_6dof(self, delta_x: float, delta_y: float, delta_z: float,
                                 pitch: float, bank: float, heading: float):
        """Move the cockpit camera; pass ``CAMERA_IGNORE_FIELD`` to keep an axis."""
        with self.transport.frame(Opcode.CAMERA_SET_RELATIVE_6DOF) as buf:
            for value in (delta_x, delta_y, delta_z, pitch, bank, heading):
                buf.put_float32(value)

    # ------------------------------------------------------------------
    # Add-on menu
    # ------------------------------------------------------------------

    def menu_add_item(self, menu_item: str, menu_event_id, data: int):
        with self.transport.frame(Opcode.MENU_ADD_ITEM) as buf:
            buf.put_string(menu_item, 256)
            buf.put_int32(menu_event_id)
            buf.put_int32(data)

    def menu_delete_item(self, menu_event_id):
        with self.transport.frame(Opcode.MENU_DELETE_ITEM) as buf:
            buf.put_int32(menu_event_id)

    def menu_add_sub_item(self, menu_event_id, menu_item: str, sub_menu_event_id, data: int):
        with self.transport.frame(Opcode.MENU_ADD_SUB_ITEM) as buf:
            buf.put_int32(menu_event_id)
            buf.put_string(menu_item, 256)
            buf.put_int32(sub_menu_event_id)
            buf.put_int32(data)

    def menu_delete_sub_item(self, menu_event_id, sub_menu_event_id):
        with self.transport.frame(Opcode.MENU_DELETE_SUB_ITEM) as buf:
            buf.put_int32(menu_event_id)
            buf.put_int32(sub_menu_event_id)

    # ------------------------------------------------------------------
    # System state
    # ------------------------------------------------------------------

    def request_system_state(self, request_id, state: str):
        with self.transport.frame(Opcode.REQUEST_SYSTEM_STATE) as buf:
            buf.put_int32(request_id)
            buf.put_string(state, 256)

    def set_system_state(self, state: str, int_value: int, float_value: float, string_value: str):
        with self.transport.frame(Opcode.SET_SYSTEM_STATE) as buf:
            buf.put_string(state, 256)
            buf.put_int32(int_value)
            buf.put_float32(float_value)
            buf.put_string(string_value, 256)
            buf.put_int32(0)

    # ------------------------------------------------------------------
    # Client data
    # ------------------------------------------------------------------

    def map_client_data_name_to_id(self, client_data_name: str, client_data_id):
        with self.transport.frame(Opcode.MAP_CLIENT_DATA_NAME_TO_ID) as buf:
            buf.put_string(client_data_name, 256)
            buf.put_int32(client_data_id)

    def create_client_data(self, client_data_id, size: int, read_only: bool = False):
        with self.transport.frame(Opcode.CREATE_CLIENT_DATA) as buf:
            buf.put_int32(client_data_id)
            buf.put_int32(size)
            buf.put_int32(1 if read_only else 0)

    def add_to_client_data_definition(self, define_id, offset: int, size: int, reserved: int = 0):
        with self.transport.frame(Opcode.ADD_TO_CLIENT_DATA_DEFINITION) as buf:
            buf.put_int32(define_id)
            buf.put_int32(offset)
            buf.put_int32(size)
            buf.put_int32(reserved)
            if supports(self.protocol, Layout.CLIENT_DATA_DEFINITION_TRAILER):
                buf.put_int32(-1)

    @requires_version
    def add_to_client_data_definition_typed(self, define_id, offset: int, size_or_type: int,
                                            epsilon: float = 0.0, datum_id=UNUSED):
        """``size_or_type`` is a byte count or a ``ClientDataType`` (negative)."""
        with self.transport.frame(Opcode.ADD_TO_CLIENT_DATA_DEFINITION) as buf:
            buf.put_int32(define_id)
            buf.put_int32(offset)
            buf.put_int32(size_or_type)
            buf.put_float32(epsilon)
            buf.put_int32(datum_id)

    def clear_client_data_definition(self, define_id):
        with self.transport.frame(Opcode.CLEAR_CLIENT_DATA_DEFINITION) as buf:
            buf.put_int32(define_id)

    def request_client_data(self, client_data_id, request_id, define_id,
                            reserved1: int = UNUSED, reserved2: int = 0):
        """One-shot request.  Newer protocols encode it as period ONCE."""
        with self.transport.frame(Opcode.REQUEST_CLIENT_DATA) as buf:
            buf.put_int32(client_data_id)
            buf.put_int32(request_id)
            buf.put_int32(define_id)
            if supports(self.protocol, Layout.CLIENT_DATA_REQUEST_PERIOD):
                buf.put_int32(ClientDataPeriod.ONCE)
                for _ in range(4):
                    buf.put_int32(0)
            else:
                buf.put_int32(reserved1)
                buf.put_int32(reserved2)

    @requires_version
    def request_client_data_periodic(self, client_data_id, request_id, define_id, period,
                                     flags: int = 0, origin: int = 0, interval: int = 0, limit: int = 0):
        period = _member(ClientDataPeriod, period, "client data period")
        with self.transport.frame(Opcode.REQUEST_CLIENT_DATA) as buf:
            buf.put_int32(client_data_id)
            buf.put_int32(request_id)
            buf.put_int32(define_id)
            buf.put_int32(period)
            buf.put_int32(flags)
            buf.put_int32(origin)
            buf.put_int32(interval)
            buf.put_int32(limit)

    def set_client_data(self, client_data_id, define_id, data):
        data = bytes(data)
        with self.transport.frame(Opcode.SET_CLIENT_DATA) as buf:
            buf.put_int32(client_data_id)
            buf.put_int32(define_id)
            buf.put_int32(0)     # reserved
            buf.put_int32(1)     # array count, always 1
            buf.put_int32(len(data))
            buf.put_bytes(data)

    # ------------------------------------------------------------------
    # Flights
    # ------------------------------------------------------------------

    def flight_load(self, file_name: str):
        with self.transport.frame(Opcode.FLIGHT_LOAD) as buf:
            buf.put_string(file_name, MAX_PATH)

    def flight_save(self, file_name: str, description: str, flags: int = UNUSED):
        """Save the flight.  Protocols with a title field use the file name as title."""
        title = file_name if supports(self.protocol, Layout.FLIGHT_SAVE_TITLE) else None
        self._flight_save(file_name, title, description, flags)

    @requires_version
    def flight_save_with_title(self, file_name: str, title: str, description: str, flags: int = UNUSED):
        self._flight_save(file_name, file_name if title is None else title, description, flags)

    def _flight_save(self, file_name, title, description, flags):
        with self.transport.frame(Opcode.FLIGHT_SAVE) as buf:
            buf.put_string(file_name, MAX_PATH)
            if title is not None:
                buf.put_string(title, MAX_PATH)
            buf.put_string(description, 2048)
            buf.put_int32(flags)

    def flight_plan_load(self, file_name: str):
        with self.transport.frame(Opcode.FLIGHT_PLAN_LOAD) as buf:
            buf.put_string(file_name, MAX_PATH)

    # ------------------------------------------------------------------
    # Text and menus
    # ------------------------------------------------------------------

    @requires_version
    def text(self, text_type, seconds: float, event_id, message: str):
        text_type = _member(TextType, text_type, "text type")
        raw = encode_string(message)
        with self.transport.frame(Opcode.TEXT) as buf:
            buf.put_int32(text_type)
            buf.put_float32(seconds)
            buf.put_int32(event_id)
            buf.put_int32(len(raw) + 1)
            buf.put_bytes(raw + b"\0")

    @requires_version
    def menu(self, seconds: float, event_id, title: str, prompt: str, *items: str):
        """Show a menu.  With no title, prompt or items, an open menu is removed."""
        with self.transport.frame(Opcode.TEXT) as buf:
            buf.put_int32(TextType.MENU)
            buf.put_float32(seconds)
            buf.put_int32(event_id)
            size_offset = buf.position
            buf.put_int32(0)
            if title is None and prompt is None and not items:
                buf.put_bytes(b"\0")
            else:
                buf.put_string_v(title or "")
                buf.put_string_v(prompt or "")
                for item in items:
                    if item is not None:
                        buf.put_string_v(item)
            buf.put_int32(buf.position - size_offset - 4, size_offset)

    # ------------------------------------------------------------------
    # Facilities
    # ------------------------------------------------------------------

    @requires_version
    def request_facilities_list(self, list_type, event_id):
        list_type = _member(FacilityListType, list_type, "facility list type")
        with self.transport.frame(Opcode.REQUEST_FACILITIES_LIST) as buf:
            buf.put_int32(list_type)
            buf.put_int32(event_id)

    @requires_version
    def subscribe_to_facilities(self, list_type, event_id):
        list_type = _member(FacilityListType, list_type, "facility list type")
        with self.transport.frame(Opcode.SUBSCRIBE_TO_FACILITIES) as buf:
            buf.put_int32(list_type)
            buf.put_int32(event_id)

    @requires_version
    def unsubscribe_to_facilities(self, list_type):
        list_type = _member(FacilityListType, list_type, "facility list type")
        with self.transport.frame(Opcode.UNSUBSCRIBE_TO_FACILITIES) as buf:
            buf.put_int32(list_type)
