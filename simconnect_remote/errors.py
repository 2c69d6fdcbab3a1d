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
Exception hierarchy raised by the client.

Errors reported *by the simulator* are not raised; they arrive as
``RecvException`` records through the dispatcher.

  SimConnectError
    ConnectError              resolve/connect failed
    ConnectionClosedError     peer closed, or use after close()
    SimConnectIOError         socket error during send/receive
    FramingError              malformed or truncated response frame
      BufferUnderflowError    read past the end of a buffer
    ValidationError           bad argument, raised before anything is sent
      VersionError            command not available in the session protocol
      BufferOverflowError     payload does not fit in the send buffer
    IllegalDataDefinition     data definition / row mismatch
    ConfigurationNotFoundError
"""


class SimConnectError(Exception):
    """Base class for all errors raised by simconnect_remote."""


class ConnectError(SimConnectError):
    pass


class ConnectionClosedError(SimConnectError):
    pass


class SimConnectIOError(SimConnectError):
    pass


class FramingError(SimConnectError):
    pass


class BufferUnderflowError(FramingError):
    pass


class ValidationError(SimConnectError, ValueError):
    pass


class VersionError(ValidationError):
    pass


class BufferOverflowError(ValidationError):
    pass


class IllegalDataDefinition(SimConnectError):
    pass


class ConfigurationNotFoundError(SimConnectError, LookupError):
    pass
