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
Protocol versions and the rules that depend on them.

A session speaks exactly one protocol version, chosen at connect time.
The version decides:

* the four integers sent in the handshake,
* which commands may be sent at all (``MINIMUM_VERSION``, enforced by the
  ``requires_version`` decorator before anything is encoded),
* small layout differences inside otherwise identical commands
  (``supports(protocol, Layout.X)``).
"""

import functools
from enum import Enum, IntEnum

from simconnect_remote.errors import ValidationError, VersionError


class ProtocolVersion(IntEnum):
    FSX_RTM = 2
    FSX_SP1 = 3
    FSX_SP2 = 4     # also Acceleration / XPACK


DEFAULT_PROTOCOL = ProtocolVersion.FSX_SP2

# (major version, minor version, major build, minor build)
HANDSHAKE = {
    ProtocolVersion.FSX_RTM: (0, 0, 60905, 0),
    ProtocolVersion.FSX_SP1: (10, 0, 61355, 0),
    ProtocolVersion.FSX_SP2: (10, 0, 61259, 0),
}

MINIMUM_VERSION = {
    "add_to_client_data_definition_typed": ProtocolVersion.FSX_SP1,
    "request_client_data_periodic": ProtocolVersion.FSX_SP1,
    "text": ProtocolVersion.FSX_SP1,
    "menu": ProtocolVersion.FSX_SP1,
    "request_facilities_list": ProtocolVersion.FSX_SP1,
    "subscribe_to_facilities": ProtocolVersion.FSX_SP1,
    "unsubscribe_to_facilities": ProtocolVersion.FSX_SP1,
    "flight_save_with_title": ProtocolVersion.FSX_SP2,
}


class Layout(Enum):
    CLIENT_DATA_DEFINITION_TRAILER = "client_data_definition_trailer"
    CLIENT_DATA_REQUEST_PERIOD = "client_data_request_period"
    FLIGHT_SAVE_TITLE = "flight_save_title"


_LAYOUT_SINCE = {
    Layout.CLIENT_DATA_DEFINITION_TRAILER: ProtocolVersion.FSX_SP2,
    Layout.CLIENT_DATA_REQUEST_PERIOD: ProtocolVersion.FSX_SP1,
    Layout.FLIGHT_SAVE_TITLE: ProtocolVersion.FSX_SP2,
}


def check_protocol(protocol) -> ProtocolVersion:
    try:
        return ProtocolVersion(int(protocol))
    except (TypeError, ValueError):
        raise ValidationError(f"Unsupported protocol version: {protocol!r}") from None


def supports(protocol: ProtocolVersion, layout: Layout) -> bool:
    return protocol >= _LAYOUT_SINCE[layout]


def check_command(protocol: ProtocolVersion, command: str):
    minimum = MINIMUM_VERSION.get(command)
    if minimum is not None and protocol < minimum:
        raise VersionError(
            f"'{command}' requires protocol {minimum.name} or newer, "
            f"session uses {ProtocolVersion(protocol).name}"
        )


def requires_version(method):
    """Reject the call before encoding if the session protocol is too old."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        check_command(self.protocol, method.__name__)
        return method(self, *args, **kwargs)

    return wrapper
