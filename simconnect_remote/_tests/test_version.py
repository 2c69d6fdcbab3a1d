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

import pytest

from simconnect_remote.errors import ValidationError, VersionError
from simconnect_remote.version import (
    Layout,
    ProtocolVersion,
    check_command,
    check_protocol,
    supports,
)


@pytest.mark.parametrize("value", [2, 3, 4, "4", ProtocolVersion.FSX_SP1])
def test_check_protocol_accepts_known_versions(value) -> None:
    assert check_protocol(value) in tuple(ProtocolVersion)


@pytest.mark.parametrize("value", [1, 5, "x", None])
def test_check_protocol_rejects_others(value) -> None:
    with pytest.raises(ValidationError):
        check_protocol(value)


def test_layout_table() -> None:
    assert not supports(ProtocolVersion.FSX_RTM, Layout.CLIENT_DATA_REQUEST_PERIOD)
    assert supports(ProtocolVersion.FSX_SP1, Layout.CLIENT_DATA_REQUEST_PERIOD)
    assert not supports(ProtocolVersion.FSX_SP1, Layout.CLIENT_DATA_DEFINITION_TRAILER)
    assert supports(ProtocolVersion.FSX_SP2, Layout.FLIGHT_SAVE_TITLE)


def test_check_command() -> None:
    check_command(ProtocolVersion.FSX_RTM, "transmit_client_event")
    check_command(ProtocolVersion.FSX_SP1, "text")
    with pytest.raises(VersionError):
        check_command(ProtocolVersion.FSX_RTM, "text")
    with pytest.raises(VersionError):
        check_command(ProtocolVersion.FSX_SP1, "flight_save_with_title")
