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

import socket

import pytest

from simconnect_remote import transport as transport_module
from simconnect_remote.client import SimConnect
from simconnect_remote.config import Configuration, ConfigurationManager, parse_config
from simconnect_remote.errors import ConfigurationNotFoundError, ValidationError
from simconnect_remote._tests.fakes import FakeSocket

CFG = """\
# SimConnect client configuration
Address=ignored.example

[SimConnect]
Protocol=IPv4
Address=192.168.1.20   # flight sim box
Port=500
DisableNagle=1

[simconnect.2]
protocol = IPv6
address = ::1
port = 4506
MaxReceiveSize = 8192
"""


def test_parse_sections() -> None:
    configs = parse_config(CFG)
    assert sorted(configs) == [0, 2]
    first = configs[0]
    assert first["address"] == "192.168.1.20"
    assert first.get_int("PORT") == 500
    assert first.disable_nagle is True
    assert configs[2].is_ipv6
    assert configs[2].max_receive_size == 8192
    assert configs[2].address == "::1"


def test_typed_getters_fall_back_to_defaults() -> None:
    config = Configuration({"Port": "not-a-number", "DisableNagle": "yes"})
    assert config.get_int("port", 8002) == 8002
    assert config.get_bool("disablenagle") is False
    assert config.get_bool("missing", True) is True
    assert Configuration().address == "localhost"
    assert Configuration().port == 8002


def test_setters() -> None:
    config = Configuration()
    config.set_address("fs-host")
    config.set_port("500")
    config.set_protocol(6)
    assert dict(config) == {"address": "fs-host", "port": "500", "protocol": "IPv6"}
    config.set_protocol(255)
    assert config["Protocol"] == "Pipe"
    with pytest.raises(ValidationError):
        config.set_protocol(5)


def test_manager_searches_paths_in_order(tmp_path) -> None:
    first, second = tmp_path / "a", tmp_path / "b"
    first.mkdir()
    second.mkdir()
    (second / "SimConnect.cfg").write_text("[SimConnect]\nPort=600\n")
    manager = ConfigurationManager([first, second])
    assert manager.get_configuration(0).port == 600
    assert manager.source == second / "SimConnect.cfg"
    with pytest.raises(ConfigurationNotFoundError):
        manager.get_configuration(1)
    assert manager.add_configuration(Configuration(Port=700)) == 1
    assert manager.get_configuration(1).port == 700


def test_manager_without_file(tmp_path) -> None:
    with pytest.raises(ConfigurationNotFoundError):
        ConfigurationManager([tmp_path]).get_configuration(0)


def test_from_config_applies_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    sock = FakeSocket()
    calls = []

    def connect(host, port, family, timeout):
        calls.append((host, port, family))
        return sock

    monkeypatch.setattr(transport_module, "_connect", connect)
    sc = SimConnect.from_config("test", parse_config(CFG)[2], protocol=3)
    assert calls == [("::1", 4506, socket.AF_INET6)]
    assert sc.transport.receive_capacity == 8192
    assert sc.protocol == 3
    assert (socket.IPPROTO_TCP, socket.TCP_NODELAY) not in sock.options

    SimConnect.from_config("test", parse_config(CFG)[0])
    assert calls[-1] == ("192.168.1.20", 500, socket.AF_INET)
    assert sock.options[(socket.IPPROTO_TCP, socket.TCP_NODELAY)] == 1
