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
simconnect-remote — client for the SimConnect TCP protocol.

Typical use::

    from simconnect_remote import SimConnect, Dispatcher, DispatcherTask, RecvOpen

    sc = SimConnect.connect("my add-on", "fs-host", 500)
    dispatcher = Dispatcher()
    dispatcher.subscribe(RecvOpen, lambda sc, rec: print(rec.application_name))
    DispatcherTask(sc, dispatcher).create_thread().start()
"""

from simconnect_remote.client import SimConnect
from simconnect_remote.config import Configuration, ConfigurationManager, get_configuration, parse_config
from simconnect_remote.constants import *  # noqa: F401,F403
from simconnect_remote.data import GUID, XYZ, InitPosition, LatLonAlt, MarkerState, Waypoint
from simconnect_remote.definition import DataDefinition
from simconnect_remote.dispatcher import Dispatcher, DispatcherTask
from simconnect_remote.errors import (
    BufferOverflowError,
    BufferUnderflowError,
    ConfigurationNotFoundError,
    ConnectError,
    ConnectionClosedError,
    FramingError,
    IllegalDataDefinition,
    SimConnectError,
    SimConnectIOError,
    ValidationError,
    VersionError,
)
from simconnect_remote.records import *  # noqa: F401,F403
from simconnect_remote.transport import Transport
from simconnect_remote.version import ProtocolVersion

__version__ = "0.1.0"
