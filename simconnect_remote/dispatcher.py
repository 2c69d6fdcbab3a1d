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
Dispatcher — fans decoded records out to subscribed callbacks.

Design notes
------------
* Subscribers are keyed by record class (``RecvEvent``, ``RecvOpen`` ...).
  Matching is exact: ``RecvSimObjectDataByType`` subscribers do not see
  ``RecvSimObjectData`` records.  Subscribing to ``RecvPacket`` receives
  every record after the type-specific subscribers.

* Subscribe/unsubscribe calls never touch the live subscriber lists while
  a frame is being fanned out.  They are queued and the queue is drained
  right before and right after each fan-out, so a callback may remove
  itself or add others safely:
    - a callback added during dispatch is first called for the next frame,
    - a callback removed during dispatch still receives the current frame.

* Telemetry rows are rewound before each subscriber, so every subscriber
  reads the row from its first byte.

* Callbacks are called as ``callback(simconnect, record)``.  A callback
  that raises is logged; the remaining callbacks still get the record.
"""

import collections
import logging
import threading

from simconnect_remote import records
from simconnect_remote.errors import ConnectionClosedError, FramingError, SimConnectIOError
from simconnect_remote.records import (
    RecvAirportList,
    RecvAssignedObjectID,
    RecvClientData,
    RecvCloudState,
    RecvCustomAction,
    RecvEvent,
    RecvEventAddRemove,
    RecvEventFilename,
    RecvEventFrame,
    RecvEventMultiplayerClientStarted,
    RecvEventMultiplayerServerStarted,
    RecvEventMultiplayerSessionEnded,
    RecvEventRaceEnd,
    RecvEventRaceLap,
    RecvEventWeatherMode,
    RecvException,
    RecvNDBList,
    RecvOpen,
    RecvPacket,
    RecvQuit,
    RecvReservedKey,
    RecvSimObjectData,
    RecvSimObjectDataByType,
    RecvSystemState,
    RecvUnrecognized,
    RecvVORList,
    RecvWaypointList,
    RecvWeatherObservation,
)

_LOG = logging.getLogger(__name__)

# record class -> name of the handler method looked up by add_handlers()
HANDLER_NAMES = {
    RecvOpen: "handle_open",
    RecvException: "handle_exception",
    RecvQuit: "handle_quit",
    RecvEvent: "handle_event",
    RecvEventAddRemove: "handle_event_object",
    RecvEventFilename: "handle_filename",
    RecvEventFrame: "handle_event_frame",
    RecvSimObjectData: "handle_sim_object",
    RecvSimObjectDataByType: "handle_sim_object_type",
    RecvWeatherObservation: "handle_weather_observation",
    RecvCloudState: "handle_cloud_state",
    RecvAssignedObjectID: "handle_assigned_object",
    RecvReservedKey: "handle_reserved_key",
    RecvCustomAction: "handle_custom_action",
    RecvSystemState: "handle_system_state",
    RecvClientData: "handle_client_data",
    RecvEventWeatherMode: "handle_weather_mode",
    RecvAirportList: "handle_airport_list",
    RecvVORList: "handle_vor_list",
    RecvNDBList: "handle_ndb_list",
    RecvWaypointList: "handle_waypoint_list",
    RecvEventMultiplayerServerStarted: "handle_multiplayer_server_started",
    RecvEventMultiplayerClientStarted: "handle_multiplayer_client_started",
    RecvEventMultiplayerSessionEnded: "handle_multiplayer_session_ended",
    RecvEventRaceEnd: "handle_race_end",
    RecvEventRaceLap: "handle_race_lap",
    RecvUnrecognized: "handle_unrecognized",
}

_ADD = "add"
_REMOVE = "remove"


def _record_class(record_type):
    if isinstance(record_type, type) and issubclass(record_type, RecvPacket):
        return record_type
    return records.record_type_for(int(record_type))


class Dispatcher:
    """Multi-subscriber registry for decoded records."""

    def __init__(self):
        self._subscribers = collections.defaultdict(list)
        self._pending = collections.deque()
        self._lock = threading.Lock()
        self._dispatching = False

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def subscribe(self, record_type, callback):
        """Call ``callback(simconnect, record)`` for each record of ``record_type``.

        ``record_type`` is a record class or a ``RecvID`` value.
        """
        self._enqueue(_ADD, _record_class(record_type), callback)

    def unsubscribe(self, record_type, callback):
        self._enqueue(_REMOVE, _record_class(record_type), callback)

    def add_handlers(self, obj):
        """Subscribe every ``handle_*`` method ``obj`` provides."""
        for record_type, name in HANDLER_NAMES.items():
            method = getattr(obj, name, None)
            if callable(method):
                self.subscribe(record_type, method)

    def remove_handlers(self, obj):
        for record_type, name in HANDLER_NAMES.items():
            method = getattr(obj, name, None)
            if callable(method):
                self.unsubscribe(record_type, method)

    def subscribers(self, record_type) -> list:
        with self._lock:
            return list(self._subscribers.get(_record_class(record_type), ()))

    def _enqueue(self, op: str, record_type, callback):
        with self._lock:
            self._pending.append((op, record_type, callback))
            if not self._dispatching:
                self._drain_locked()

    def _drain_locked(self):
        while self._pending:
            op, record_type, callback = self._pending.popleft()
            callbacks = self._subscribers[record_type]
            if op == _ADD:
                callbacks.append(callback)
            elif callback in callbacks:
                callbacks.remove(callback)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, simconnect, frame: bytes) -> RecvPacket:
        """Decode ``frame`` and fan it out.  Returns the decoded record."""
        return self.dispatch_record(simconnect, records.decode(frame))

    def dispatch_record(self, simconnect, record: RecvPacket) -> RecvPacket:
        with self._lock:
            self._drain_locked()
            self._dispatching = True
            targets = list(self._subscribers.get(type(record), ()))
            if type(record) is not RecvPacket:
                targets.extend(self._subscribers.get(RecvPacket, ()))
        _LOG.debug(f"dispatch {type(record).__name__} to {len(targets)} subscriber(s)")
        try:
            for callback in targets:
                if isinstance(record, records.TELEMETRY_RECORDS):
                    record.reset()
                try:
                    callback(simconnect, record)
                except Exception:  # noqa: BLE001
                    _LOG.exception(f"Subscriber {callback!r} failed on {type(record).__name__}")
        finally:
            with self._lock:
                self._dispatching = False
                self._drain_locked()
        return record


class DispatcherTask:
    """Receive-and-dispatch loop, meant to run on its own thread.

    The loop ends when ``stop()`` was called (checked between frames) or
    when reading the next frame fails: the session was closed, the socket
    broke or the stream lost its framing.  Other errors are logged and the
    loop carries on.  Closing the session is the way to unblock a loop
    waiting for the next frame.
    """

    def __init__(self, simconnect, dispatcher: Dispatcher = None):
        self.simconnect = simconnect
        self.dispatcher = dispatcher if dispatcher is not None else Dispatcher()
        self._stop = threading.Event()
        self.error: Exception = None

    def run(self):
        self._stop.clear()
        while not self._stop.is_set():
            try:
                self.simconnect.call_dispatch(self.dispatcher)
            except (ConnectionClosedError, SimConnectIOError, FramingError) as exc:
                if not self._stop.is_set():
                    _LOG.info(f"Dispatch loop ended: {exc}")
                    self.error = exc
                break
            except Exception:  # noqa: BLE001
                _LOG.exception("Failed to handle a received frame")

    def stop(self):
        self._stop.set()

    def create_thread(self, name: str = "simconnect-dispatch") -> threading.Thread:
        return threading.Thread(target=self.run, daemon=True, name=name)
