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
DataDefinition — named fields over one telemetry row.

A definition is an ordered list of ``(name, units, DataType)`` entries.
Each entry occupies ``DataType.size`` bytes, starting right after the
previous one, which is the layout the server uses for
``RecvSimObjectData.data``.  Fields are read and written by name
(case-insensitive) at their computed offsets::

    definition = DataDefinition(define_id=7)
    definition.add("Plane Altitude", "feet", DataType.FLOAT64)
    definition.add("Title", None, DataType.STRING256)
    definition.register(sc)                  # sends add_to_data_definition

    def on_data(sc, record):
        definition.fill_from(record)
        altitude = definition["plane altitude"]
"""

import logging
import threading
from dataclasses import dataclass

from simconnect_remote.buffer import DataBuffer
from simconnect_remote.constants import DataType
from simconnect_remote.data import XYZ, InitPosition, LatLonAlt, MarkerState, Waypoint
from simconnect_remote.errors import IllegalDataDefinition

_LOG = logging.getLogger(__name__)

_STRING_TYPES = {
    DataType.STRING8,
    DataType.STRING32,
    DataType.STRING64,
    DataType.STRING128,
    DataType.STRING256,
    DataType.STRING260,
}

_STRUCT_TYPES = {
    DataType.INITPOSITION: InitPosition,
    DataType.MARKERSTATE: MarkerState,
    DataType.WAYPOINT: Waypoint,
    DataType.LATLONALT: LatLonAlt,
    DataType.XYZ: XYZ,
}


@dataclass(frozen=True)
class Field:
    name: str
    units: str
    data_type: DataType
    offset: int


class DataDefinition:
    """Explicit field schema for one data definition id."""

    def __init__(self, define_id: int):
        self.define_id = int(define_id)
        self._fields = []
        self._by_name = {}
        self._size = 0
        self._row = None
        self._lock = threading.Lock()

    @property
    def size(self) -> int:
        """Total row size in bytes."""
        return self._size

    @property
    def fields(self) -> list:
        return list(self._fields)

    def __len__(self):
        return len(self._fields)

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def add(self, name: str, units: str, data_type) -> Field:
        data_type = DataType(data_type)
        size = data_type.size
        if size <= 0:
            raise IllegalDataDefinition(f"{data_type.name} cannot be used in a fixed-layout definition")
        key = name.lower()
        if key in self._by_name:
            raise IllegalDataDefinition(f"Field '{name}' is already defined")
        with self._lock:
            entry = Field(name, units, data_type, self._size)
            self._fields.append(entry)
            self._by_name[key] = entry
            self._size += size
            self._row = None
        return entry

    def register(self, simconnect, clear: bool = True):
        """Send the schema to the server, optionally clearing the id first."""
        if clear:
            simconnect.clear_data_definition(self.define_id)
        for entry in self._fields:
            simconnect.add_to_data_definition(self.define_id, entry.name, entry.units, entry.data_type)
        _LOG.debug(f"registered definition {self.define_id} with {len(self._fields)} field(s)")

    def clear(self, simconnect=None):
        with self._lock:
            self._fields.clear()
            self._by_name.clear()
            self._size = 0
            self._row = None
        if simconnect is not None:
            simconnect.clear_data_definition(self.define_id)

    def field(self, name: str) -> Field:
        try:
            return self._by_name[name.lower()]
        except KeyError:
            raise IllegalDataDefinition(f"Unknown field '{name}'") from None

    # ------------------------------------------------------------------
    # Row contents
    # ------------------------------------------------------------------

    def fill_from(self, record):
        """Take the row of a telemetry record received for this definition."""
        if record.define_id != self.define_id:
            raise IllegalDataDefinition(
                f"Record belongs to definition {record.define_id}, expected {self.define_id}"
            )
        if len(record.data) != self._size:
            raise IllegalDataDefinition(
                f"Row of {len(record.data)} bytes does not match definition size {self._size}"
            )
        with self._lock:
            self._row = DataBuffer(bytearray(record.data))

    def fill_empty(self):
        """Start from a zeroed row, e.g. before setting fields for a write."""
        with self._lock:
            self._row = DataBuffer(bytearray(self._size))

    def _require_row(self) -> DataBuffer:
        if self._row is None:
            raise IllegalDataDefinition(f"Definition {self.define_id} holds no data")
        return self._row

    def get(self, name: str):
        entry = self.field(name)
        return self._read(self._require_row(), entry)

    def set(self, name: str, value):
        entry = self.field(name)
        self._write(self._require_row(), entry, value)

    __getitem__ = get
    __setitem__ = set

    def __iter__(self):
        row = self._require_row()
        for entry in self._fields:
            yield self._read(row, entry)

    def items(self):
        row = self._require_row()
        return [(entry.name, self._read(row, entry)) for entry in self._fields]

    def __bytes__(self) -> bytes:
        return bytes(self._require_row())

    @staticmethod
    def _read(row: DataBuffer, entry: Field):
        data_type, offset = entry.data_type, entry.offset
        if data_type == DataType.INT32:
            return row.get_int32(offset)
        if data_type == DataType.INT64:
            return row.get_int64(offset)
        if data_type == DataType.FLOAT32:
            return row.get_float32(offset)
        if data_type == DataType.FLOAT64:
            return row.get_float64(offset)
        if data_type in _STRING_TYPES:
            return row.get_string(data_type.size, offset)
        return row.get_data(_STRUCT_TYPES[data_type], offset)

    @staticmethod
    def _write(row: DataBuffer, entry: Field, value):
        data_type, offset = entry.data_type, entry.offset
        if data_type == DataType.INT32:
            row.put_int32(value, offset)
        elif data_type == DataType.INT64:
            row.put_int64(value, offset)
        elif data_type == DataType.FLOAT32:
            row.put_float32(value, offset)
        elif data_type == DataType.FLOAT64:
            row.put_float64(value, offset)
        elif data_type in _STRING_TYPES:
            row.put_string(value, data_type.size, offset)
        else:
            if not isinstance(value, _STRUCT_TYPES[data_type]):
                raise IllegalDataDefinition(
                    f"Field '{entry.name}' expects {_STRUCT_TYPES[data_type].__name__}"
                )
            row.put_data(value, offset)

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def set_on_sim_object(self, simconnect, object_id):
        simconnect.set_data_on_sim_object(self.define_id, object_id, bytes(self))

    def set_client_data(self, simconnect, client_data_id):
        simconnect.set_client_data(client_data_id, self.define_id, bytes(self))
