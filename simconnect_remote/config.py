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
Connection settings read from ``SimConnect.cfg``.

The file holds one section per numbered configuration::

    [SimConnect]            # configuration 0
    Protocol=IPv4
    Address=192.168.1.20
    Port=500

    [SimConnect.1]
    Address=10.0.0.5
    Port=4506

Keys are case-insensitive.  Text after ``#`` is ignored.
"""

import logging
import os
import re
from collections.abc import MutableMapping
from pathlib import Path

from simconnect_remote.constants import DEFAULT_PORT, RECEIVE_SIZE
from simconnect_remote.errors import ConfigurationNotFoundError, ValidationError

_LOG = logging.getLogger(__name__)

CONFIG_FILE_NAME = "SimConnect.cfg"

ADDRESS = "Address"
PORT = "Port"
PROTOCOL = "Protocol"
MAX_RECEIVE_SIZE = "MaxReceiveSize"
DISABLE_NAGLE = "DisableNagle"

PROTOCOL_IPV4 = "IPv4"
PROTOCOL_IPV6 = "IPv6"
PROTOCOL_PIPE = "Pipe"

_HEADER = re.compile(r"^\s*\[SimConnect(\.(\d+))?\]", re.IGNORECASE)
_ENTRY = re.compile(r"^\s*([^#=]*)=([^#]*)")


class Configuration(MutableMapping):
    """Case-insensitive string mapping of connection settings."""

    def __init__(self, values=None, **kwargs):
        self._values = {}
        self.update(values or {}, **kwargs)

    def __getitem__(self, key):
        return self._values[key.lower()]

    def __setitem__(self, key, value):
        self._values[key.lower()] = str(value)

    def __delitem__(self, key):
        del self._values[key.lower()]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"Configuration({self._values!r})"

    def get_int(self, key: str, default: int = None) -> int:
        """Integer value of ``key``; ``default`` when missing or not a number."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Booleans are stored as ``1`` / ``0``; anything but 1 is false."""
        return self.get_int(key, 1 if default else 0) == 1

    # ------------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------------

    def set_address(self, address: str):
        self[ADDRESS] = address

    def set_port(self, port):
        self[PORT] = int(port)

    def set_protocol(self, family: int):
        """Select the address family: 4, 6 or 255 (named pipe)."""
        if family == 255:
            self[PROTOCOL] = PROTOCOL_PIPE
        elif family in (4, 6):
            self[PROTOCOL] = PROTOCOL_IPV4 if family == 4 else PROTOCOL_IPV6
        else:
            raise ValidationError(f"Bad protocol version ({family})")

    def set_max_receive_size(self, size: int):
        self[MAX_RECEIVE_SIZE] = int(size)

    def set_disable_nagle(self, disable: bool):
        self[DISABLE_NAGLE] = 1 if disable else 0

    # ------------------------------------------------------------------
    # Typed views with connection defaults
    # ------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self.get(ADDRESS) or "localhost"

    @property
    def port(self) -> int:
        return self.get_int(PORT, DEFAULT_PORT)

    @property
    def is_ipv6(self) -> bool:
        return (self.get(PROTOCOL) or "").lower() == PROTOCOL_IPV6.lower()

    @property
    def max_receive_size(self) -> int:
        return self.get_int(MAX_RECEIVE_SIZE, RECEIVE_SIZE)

    @property
    def disable_nagle(self) -> bool:
        return self.get_bool(DISABLE_NAGLE, False)


def parse_config(text: str) -> dict:
    """Parse ``SimConnect.cfg`` content into ``{number: Configuration}``.

    Entries before the first section header are ignored.
    """
    configs = {}
    current = None
    for line in text.splitlines():
        header = _HEADER.match(line)
        if header:
            number = int(header.group(2)) if header.group(2) is not None else 0
            current = configs[number] = Configuration()
            continue
        entry = _ENTRY.match(line)
        if entry and current is not None:
            key = entry.group(1).strip()
            if key:
                current[key] = entry.group(2).strip()
    return configs


class ConfigurationManager:
    """Finds and caches ``SimConnect.cfg``.

    The working directory is searched first, then the home directory.
    Configurations added with ``add_configuration`` take the next free number.
    """

    def __init__(self, search_paths=None):
        self.search_paths = None if search_paths is None else [Path(p) for p in search_paths]
        self._configs = None
        self.source = None

    def _load(self) -> dict:
        if self._configs is not None:
            return self._configs
        self._configs = {}
        search_paths = self.search_paths
        if search_paths is None:
            search_paths = [Path.cwd(), Path(os.path.expanduser("~"))]
        for directory in search_paths:
            path = directory / CONFIG_FILE_NAME
            if not path.is_file():
                continue
            try:
                self._configs = parse_config(path.read_text(encoding="latin-1"))
            except OSError as exc:
                _LOG.warning(f"Cannot read {path}: {exc}")
                continue
            self.source = path
            _LOG.info(f"Loaded {len(self._configs)} configuration(s) from {path}")
            break
        return self._configs

    def add_configuration(self, config: Configuration) -> int:
        configs = self._load()
        number = max(configs, default=-1) + 1
        configs[number] = config
        return number

    def get_configuration(self, number: int = 0) -> Configuration:
        try:
            return self._load()[number]
        except KeyError:
            raise ConfigurationNotFoundError(f"SimConnect configuration {number} not found") from None


_default_manager = ConfigurationManager()


def get_configuration(number: int = 0) -> Configuration:
    """Look ``number`` up in the process-wide ``ConfigurationManager``."""
    return _default_manager.get_configuration(number)
