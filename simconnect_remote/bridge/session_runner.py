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
SessionRunner — manages the one SimConnect session the bridge server drives.

Lifecycle:
  open  → connect, send the handshake, start the dispatch thread
  call  → invoke a whitelisted SimConnect command method
  poll  → hand out records the dispatch thread queued since the last poll
  close → close the session and join the dispatch thread

Records are queued as plain dicts (``RecvPacket.to_dict``) so they can be
sent back with msgpack unchanged.
"""

import collections
import logging
import threading

from simconnect_remote.client import SimConnect
from simconnect_remote.config import Configuration
from simconnect_remote.data import GUID, XYZ, InitPosition, LatLonAlt, MarkerState, Waypoint
from simconnect_remote.dispatcher import Dispatcher, DispatcherTask
from simconnect_remote.errors import ConnectionClosedError, ValidationError
from simconnect_remote.records import RecvPacket

_LOG = logging.getLogger(__name__)

# SimConnect methods a bridge client may invoke through "call"
CALLABLE_COMMANDS = frozenset({
    "map_client_event_to_sim_event",
    "transmit_client_event",
    "set_system_event_state",
    "add_client_event_to_notification_group",
    "remove_client_event",
    "set_notification_group_priority",
    "clear_notification_group",
    "request_notification_group",
    "subscribe_to_system_event",
    "unsubscribe_from_system_event",
    "add_to_data_definition",
    "clear_data_definition",
    "request_data_on_sim_object",
    "request_data_on_sim_object_type",
    "set_data_on_sim_object",
    "set_data_on_sim_object_values",
    "map_input_event_to_client_event",
    "set_input_group_priority",
    "remove_input_event",
    "clear_input_group",
    "set_input_group_state",
    "request_reserved_key",
    "weather_request_interpolated_observation",
    "weather_request_observation_at_station",
    "weather_request_observation_at_nearest_station",
    "weather_create_station",
    "weather_remove_station",
    "weather_set_observation",
    "weather_set_mode_server",
    "weather_set_mode_theme",
    "weather_set_mode_global",
    "weather_set_mode_custom",
    "weather_set_dynamic_update_rate",
    "weather_request_cloud_state",
    "weather_create_thermal",
    "weather_remove_thermal",
    "ai_create_parked_atc_aircraft",
    "ai_create_enroute_atc_aircraft",
    "ai_create_non_atc_aircraft",
    "ai_create_simulated_object",
    "ai_release_control",
    "ai_remove_object",
    "ai_set_aircraft_flight_plan",
    "execute_mission_action",
    "complete_custom_mission_action",
    "camera_set_relative_6dof",
    "menu_add_item",
    "menu_delete_item",
    "menu_add_sub_item",
    "menu_delete_sub_item",
    "request_system_state",
    "set_system_state",
    "map_client_data_name_to_id",
    "create_client_data",
    "add_to_client_data_definition",
    "add_to_client_data_definition_typed",
    "clear_client_data_definition",
    "request_client_data",
    "request_client_data_periodic",
    "set_client_data",
    "flight_load",
    "flight_save",
    "flight_save_with_title",
    "flight_plan_load",
    "text",
    "menu",
    "request_facilities_list",
    "subscribe_to_facilities",
    "unsubscribe_to_facilities",
})

# keyword arguments that arrive as dicts and must be turned back into values
_STRUCT_KWARGS = {
    "init_position": InitPosition,
    "waypoint": Waypoint,
    "lat_lon_alt": LatLonAlt,
    "marker_state": MarkerState,
    "xyz": XYZ,
}


def _convert_kwargs(kwargs: dict) -> dict:
    converted = dict(kwargs)
    for name, data_cls in _STRUCT_KWARGS.items():
        value = converted.get(name)
        if isinstance(value, dict):
            converted[name] = data_cls(**value)
    guid = converted.get("guid")
    if isinstance(guid, str):
        converted["guid"] = GUID.parse(guid)
    return converted


class SessionRunner:
    """Owns at most one open SimConnect session and its dispatch thread."""

    def __init__(self, max_queue: int = 10000):
        self._session: SimConnect = None
        self._task: DispatcherTask = None
        self._thread: threading.Thread = None
        self._records = collections.deque()
        self._records_lock = threading.Lock()
        self._max_queue = max_queue
        self.dropped = 0

    @property
    def is_open(self) -> bool:
        return self._session is not None and not self._session.closed

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def open(self, app_name: str, host: str = None, port: int = None, protocol=None,
             config: dict = None, timeout: float = None) -> dict:
        """Connect to the simulator.  An already open session is closed first.

        ``host``/``port`` override the values of ``config`` (a
        ``SimConnect.cfg`` style mapping).
        """
        if self._session is not None:
            _LOG.warning("Session already open, closing it before reopening")
            self.close()
        configuration = Configuration(config or {})
        if host:
            configuration.set_address(host)
        if port:
            configuration.set_port(port)
        kwargs = {"timeout": timeout}
        if protocol is not None:
            kwargs["protocol"] = protocol
        session = SimConnect.from_config(app_name, configuration, **kwargs)

        dispatcher = Dispatcher()
        dispatcher.subscribe(RecvPacket, self._collect)
        self._task = DispatcherTask(session, dispatcher)
        self._thread = self._task.create_thread(name="bridge-dispatch")
        self._session = session
        self._thread.start()
        _LOG.info(f"Session '{app_name}' open ({session.protocol.name})")
        return {"protocol": int(session.protocol), "protocol_name": session.protocol.name}

    def call(self, command: str, args: list = None, kwargs: dict = None):
        if command not in CALLABLE_COMMANDS:
            raise ValidationError(f"Command '{command}' cannot be called through the bridge")
        method = getattr(self._get(), command)
        result = method(*(args or ()), **_convert_kwargs(kwargs or {}))
        _LOG.debug(f"call {command} args={args} kwargs={list((kwargs or {}).keys())}")
        return result

    def poll(self, max_records: int = 0) -> list:
        """Return and forget up to ``max_records`` queued records (0 = all)."""
        with self._records_lock:
            count = len(self._records)
            if max_records and max_records < count:
                count = max_records
            return [self._records.popleft() for _ in range(count)]

    def stats(self) -> dict:
        session = self._session
        with self._records_lock:
            queued = len(self._records)
        stats = {"open": self.is_open, "queued": queued, "dropped": self.dropped}
        if session is not None:
            stats.update(
                protocol=int(session.protocol),
                bytes_sent=session.bytes_sent,
                bytes_received=session.bytes_received,
                packets_sent=session.packets_sent,
                packets_received=session.packets_received,
                last_sent_packet_id=session.last_sent_packet_id,
            )
        if self._task is not None and self._task.error is not None:
            stats["error"] = str(self._task.error)
        return stats

    def close(self):
        session, task, thread = self._session, self._task, self._thread
        self._session = self._task = self._thread = None
        if session is None:
            return
        task.stop()
        try:
            session.close()
        except Exception as exc:  # noqa: BLE001
            _LOG.warning(f"Error during session close: {exc}")
        if thread is not None:
            thread.join(timeout=2.0)
            if thread.is_alive():
                _LOG.warning("Dispatch thread did not stop within 2s")
        _LOG.info("Session closed.")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _collect(self, _simconnect, record: RecvPacket):
        with self._records_lock:
            if len(self._records) >= self._max_queue:
                self._records.popleft()
                self.dropped += 1
            self._records.append(record.to_dict())

    def _get(self) -> SimConnect:
        if self._session is None:
            raise ConnectionClosedError("No open SimConnect session")
        return self._session
