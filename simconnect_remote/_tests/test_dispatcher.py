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

from simconnect_remote.constants import DataType, RecvID
from simconnect_remote.definition import DataDefinition
from simconnect_remote.dispatcher import Dispatcher, DispatcherTask
from simconnect_remote.errors import ConnectionClosedError
from simconnect_remote.records import (
    RecvEvent,
    RecvOpen,
    RecvPacket,
    RecvQuit,
    RecvSimObjectData,
    RecvSimObjectDataByType,
)
from simconnect_remote._tests.fakes import make_session, response_frame

EVENT = response_frame(RecvID.EVENT, struct.pack("<3i", 1, 2, 3))
QUIT = response_frame(RecvID.QUIT)


def _telemetry(value: float, define_id: int = 1) -> bytes:
    header = struct.pack("<7i", 1, 0, define_id, 0, 1, 1, 1)
    return response_frame(RecvID.SIMOBJECT_DATA, header + struct.pack("<d", value))


def test_subscriber_receives_session_and_record() -> None:
    dispatcher = Dispatcher()
    seen = []
    dispatcher.subscribe(RecvEvent, lambda sc, rec: seen.append((sc, rec)))
    record = dispatcher.dispatch("session", EVENT)
    assert seen == [("session", record)]
    assert record.event_id == 2


def test_matching_is_by_exact_type() -> None:
    dispatcher = Dispatcher()
    by_type, plain = [], []
    dispatcher.subscribe(RecvSimObjectDataByType, lambda sc, rec: by_type.append(rec))
    dispatcher.subscribe(RecvSimObjectData, lambda sc, rec: plain.append(rec))
    dispatcher.dispatch(None, _telemetry(1.0))
    assert len(plain) == 1
    assert by_type == []


def test_catch_all_sees_every_record_after_specific_subscribers() -> None:
    dispatcher = Dispatcher()
    order = []
    dispatcher.subscribe(RecvPacket, lambda sc, rec: order.append(("all", type(rec).__name__)))
    dispatcher.subscribe(RecvQuit, lambda sc, rec: order.append(("quit", type(rec).__name__)))
    dispatcher.dispatch(None, QUIT)
    dispatcher.dispatch(None, EVENT)
    assert order == [("quit", "RecvQuit"), ("all", "RecvQuit"), ("all", "RecvEvent")]


def test_subscribe_by_recv_id() -> None:
    dispatcher = Dispatcher()
    seen = []
    dispatcher.subscribe(RecvID.EVENT, lambda sc, rec: seen.append(rec))
    dispatcher.dispatch(None, EVENT)
    assert len(seen) == 1
    assert dispatcher.subscribers(RecvEvent) == dispatcher.subscribers(RecvID.EVENT)


def test_self_unsubscribe_during_dispatch() -> None:
    dispatcher = Dispatcher()
    calls = []

    def once(sc, rec):
        calls.append("once")
        dispatcher.unsubscribe(RecvEvent, once)

    def other(sc, rec):
        calls.append("other")

    dispatcher.subscribe(RecvEvent, once)
    dispatcher.subscribe(RecvEvent, other)
    dispatcher.dispatch(None, EVENT)
    dispatcher.dispatch(None, EVENT)
    assert calls == ["once", "other", "other"]


def test_removed_during_dispatch_still_gets_current_record() -> None:
    dispatcher = Dispatcher()
    calls = []

    def second(sc, rec):
        calls.append("second")

    def first(sc, rec):
        calls.append("first")
        dispatcher.unsubscribe(RecvEvent, second)

    dispatcher.subscribe(RecvEvent, first)
    dispatcher.subscribe(RecvEvent, second)
    dispatcher.dispatch(None, EVENT)
    dispatcher.dispatch(None, EVENT)
    assert calls == ["first", "second", "first"]


def test_subscribe_during_dispatch_starts_with_next_record() -> None:
    dispatcher = Dispatcher()
    calls = []

    def late(sc, rec):
        calls.append("late")

    def adder(sc, rec):
        calls.append("adder")
        if late not in dispatcher.subscribers(RecvEvent):
            dispatcher.subscribe(RecvEvent, late)

    dispatcher.subscribe(RecvEvent, adder)
    dispatcher.dispatch(None, EVENT)
    assert calls == ["adder"]
    dispatcher.dispatch(None, EVENT)
    assert calls == ["adder", "adder", "late"]


def test_telemetry_cursor_is_rewound_for_each_subscriber() -> None:
    dispatcher = Dispatcher()
    values = []
    dispatcher.subscribe(RecvSimObjectData, lambda sc, rec: values.append(rec.get_float64()))
    dispatcher.subscribe(RecvSimObjectData, lambda sc, rec: values.append(rec.get_float64()))
    dispatcher.subscribe(RecvPacket, lambda sc, rec: values.append(rec.get_float64()))
    dispatcher.dispatch(None, _telemetry(42.5))
    assert values == [42.5, 42.5, 42.5]


def test_handler_objects() -> None:
    class Handler:
        def __init__(self) -> None:
            self.events = []

        def handle_event(self, sc, rec):
            self.events.append(rec)

        def handle_open(self, sc, rec):
            self.events.append(rec)

    dispatcher = Dispatcher()
    handler = Handler()
    dispatcher.add_handlers(handler)
    assert dispatcher.subscribers(RecvOpen) == [handler.handle_open]
    dispatcher.dispatch(None, EVENT)
    dispatcher.remove_handlers(handler)
    dispatcher.dispatch(None, EVENT)
    assert len(handler.events) == 1


def test_dispatcher_task_runs_until_connection_closes() -> None:
    sc, sock = make_session(chunks=[EVENT, QUIT])
    dispatcher = Dispatcher()
    seen = []
    dispatcher.subscribe(RecvPacket, lambda s, rec: seen.append(type(rec)))
    task = DispatcherTask(sc, dispatcher)
    task.run()
    assert seen == [RecvEvent, RecvQuit]
    assert isinstance(task.error, ConnectionClosedError)


def test_dispatcher_task_survives_failing_subscriber() -> None:
    sc, sock = make_session(chunks=[EVENT, EVENT])
    dispatcher = Dispatcher()
    seen = []

    def broken(s, rec):
        raise RuntimeError("boom")

    dispatcher.subscribe(RecvEvent, broken)
    dispatcher.subscribe(RecvPacket, lambda s, rec: seen.append(type(rec)))
    task = DispatcherTask(sc, dispatcher)
    thread = task.create_thread()
    thread.start()
    thread.join(timeout=5.0)
    assert not thread.is_alive()
    assert seen == [RecvEvent, RecvEvent]
    assert sc.packets_received == 2
    assert isinstance(task.error, ConnectionClosedError)


def test_failing_subscriber_does_not_starve_the_others() -> None:
    dispatcher = Dispatcher()
    calls = []

    def broken(sc, rec):
        calls.append("broken")
        raise ValueError("bad callback")

    dispatcher.subscribe(RecvEvent, broken)
    dispatcher.subscribe(RecvEvent, lambda sc, rec: calls.append("second"))
    dispatcher.subscribe(RecvPacket, lambda sc, rec: calls.append("all"))
    record = dispatcher.dispatch(None, EVENT)
    assert isinstance(record, RecvEvent)
    assert calls == ["broken", "second", "all"]


def test_dispatcher_task_keeps_reading_after_a_rejected_row() -> None:
    sc, sock = make_session(chunks=[_telemetry(1.0, define_id=8), _telemetry(2.5, define_id=7), EVENT])
    definition = DataDefinition(7)
    definition.add("Plane Altitude", "feet", DataType.FLOAT64)
    events = []
    dispatcher = Dispatcher()
    dispatcher.subscribe(RecvSimObjectData, lambda s, rec: definition.fill_from(rec))
    dispatcher.subscribe(RecvEvent, lambda s, rec: events.append(rec))

    task = DispatcherTask(sc, dispatcher)
    task.run()
    assert sc.packets_received == 3
    assert definition["Plane Altitude"] == 2.5
    assert len(events) == 1
    assert isinstance(task.error, ConnectionClosedError)
