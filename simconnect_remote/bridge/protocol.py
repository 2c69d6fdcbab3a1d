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
msgpack framing for simconnect-bridge requests and replies.

Request  (client → server):  { "cmd": <name>, "payload": { ... } }
Reply    (server → client):  { "status": "ok" | "error", ... }

An "error" reply carries "message" and, when an exception was raised
inside the bridge, "error" with the exception class name.

Requests and their payload keys:
  open      host, port, protocol, app_name, config, timeout
  call      command, args, kwargs       reply: result
  poll      max_records                 reply: records
  stats                                 reply: stats
  close
  heartbeat                             refreshes the server watchdog
  quit                                  ends the server loop
"""

import enum

import msgpack

DEFAULT_PORT = 7613


def _default(obj):
    # IntEnum members pack as ints already; other enums and byte-likes need help
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, (bytearray, memoryview)):
        return bytes(obj)
    raise TypeError(f"Cannot serialize {type(obj).__name__}")


def _pack(obj: dict) -> bytes:
    return msgpack.packb(obj, use_bin_type=True, default=_default)


def _unpack(data: bytes) -> dict:
    return msgpack.unpackb(data, raw=False)


def encode(cmd: str, payload: dict) -> bytes:
    return _pack({"cmd": cmd, "payload": payload})


def encode_response(status: str, **fields) -> bytes:
    return _pack(dict(fields, status=status))


# requests and replies share one encoding
decode = _unpack
decode_response = _unpack
