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
BridgeClient — talks to a simconnect-bridge server via ZMQ REQ/REP + msgpack.

Design notes
------------
* Each BridgeClient owns its own zmq.Context + REQ socket; one REQ/REP
  cycle per command, serialised by a lock so the heartbeat thread and the
  caller never interleave on the socket.

* The socket is opened with REQ_RELAXED, so a request may be sent again
  after a receive timed out.

* SimConnect commands are forwarded by name::

      with BridgeClient("fs-gateway") as bridge:
          bridge.open("my add-on")
          bridge.call("subscribe_to_system_event", 1, "4sec")
          for record in bridge.poll():
              ...
"""

import logging
import threading
import time

import zmq

from simconnect_remote.bridge import protocol

_LOG = logging.getLogger(__name__)


class BridgeError(RuntimeError):
    """A bridge command was answered with an error.

    ``remote_error`` names the exception class raised inside the bridge
    (e.g. ``VersionError``), or is None when the server gave no class.
    """

    def __init__(self, message: str, remote_error: str = None):
        super().__init__(message)
        self.remote_error = remote_error


class BridgeClient:

    # per-command timeout once connected
    _REQUEST_TIMEOUT_MS = 30_000
    _PING_PERIOD_S = 1.0
    _PING_TIMEOUT_MS = 2_000

    def __init__(self, endpoint: str = "127.0.0.1", connect_timeout: float = 5.0, heartbeat: bool = False):
        self.endpoint = _make_zmq_endpoint(endpoint)
        self._connect_timeout = connect_timeout
        self._context: zmq.Context = None
        self._socket: zmq.Socket = None
        self._socket_lock = threading.Lock()
        self._ping_enabled = heartbeat
        self._ping_stop = threading.Event()
        self._ping_thread: threading.Thread = None
        self.last_heartbeat_ok_time: float = None

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def connect(self):
        self._context = zmq.Context()
        self._socket = self._context.socket(zmq.REQ)
        self._socket.setsockopt(zmq.LINGER, 0)          # never block on close/term
        self._socket.setsockopt(zmq.REQ_RELAXED, 1)
        # fail fast while the server may not be up yet
        self._socket.setsockopt(zmq.SNDTIMEO, int(self._connect_timeout * 1000))
        self._socket.setsockopt(zmq.RCVTIMEO, int(self._connect_timeout * 1000))
        self._socket.connect(self.endpoint)
        _LOG.info(f"Connecting to simconnect-bridge at {self.endpoint} (timeout={self._connect_timeout}s) ...")

        try:
            self._check_response(self._send("heartbeat", {}), "heartbeat")
        except zmq.Again:
            self._close_socket()
            raise BridgeError(
                f"Cannot reach simconnect-bridge at {self.endpoint} "
                f"(timeout {self._connect_timeout}s). Is the server running?"
            ) from None

        self._socket.setsockopt(zmq.SNDTIMEO, self._REQUEST_TIMEOUT_MS)
        self._socket.setsockopt(zmq.RCVTIMEO, self._REQUEST_TIMEOUT_MS)
        _LOG.info(f"Connected to simconnect-bridge at {self.endpoint} OK")

        if self._ping_enabled:
            self.last_heartbeat_ok_time = time.monotonic()
            self._ping_stop.clear()
            self._ping_thread = threading.Thread(
                target=self._ping_loop, daemon=True, name="bridge-heartbeat"
            )
            self._ping_thread.start()
        return self

    def disconnect(self):
        if self._ping_thread is not None:
            self._ping_stop.set()
            self._ping_thread.join(timeout=2.0)
            self._ping_thread = None
        self._close_socket()

    def __enter__(self):
        return self.connect()

    def __exit__(self, *exc_info):
        self.disconnect()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def open(self, app_name: str, host: str = None, port: int = None, protocol_version: int = None,
             config: dict = None) -> dict:
        resp = self._command("open", {
            "app_name": app_name,
            "host": host,
            "port": port,
            "protocol": protocol_version,
            "config": config,
        })
        return {"protocol": resp.get("protocol"), "protocol_name": resp.get("protocol_name")}

    def call(self, command: str, *args, **kwargs):
        resp = self._command("call", {"command": command, "args": list(args), "kwargs": kwargs})
        return resp.get("result")

    def poll(self, max_records: int = 0) -> list:
        return self._command("poll", {"max_records": max_records}).get("records", [])

    def stats(self) -> dict:
        return self._command("stats", {}).get("stats", {})

    def close(self):
        self._command("close", {})

    def quit(self):
        self._command("quit", {})

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _command(self, cmd: str, payload: dict) -> dict:
        if self._socket is None:
            raise BridgeError("Not connected")
        resp = self._send(cmd, payload)
        self._check_response(resp, cmd)
        return resp

    def _ping_loop(self):
        """Background thread: one heartbeat per second keeps the server watchdog alive."""
        while not self._ping_stop.wait(timeout=self._PING_PERIOD_S):
            try:
                self._send("heartbeat", {}, rcvtimeo=self._PING_TIMEOUT_MS)
                self.last_heartbeat_ok_time = time.monotonic()
            except zmq.Again:
                _LOG.warning(f"Heartbeat ack timeout ({self._PING_TIMEOUT_MS} ms), server may be gone")
            except (zmq.ZMQError, AttributeError) as exc:
                # socket closed underneath us during shutdown
                _LOG.debug(f"Heartbeat loop ended: {exc}")
                break

    def _send(self, cmd: str, payload: dict, rcvtimeo: int = None) -> dict:
        with self._socket_lock:
            socket = self._socket
            if rcvtimeo is None:
                socket.send(protocol.encode(cmd, payload))
                return protocol.decode_response(socket.recv())
            socket.setsockopt(zmq.RCVTIMEO, rcvtimeo)
            try:
                socket.send(protocol.encode(cmd, payload))
                return protocol.decode_response(socket.recv())
            finally:
                socket.setsockopt(zmq.RCVTIMEO, self._REQUEST_TIMEOUT_MS)

    def _close_socket(self):
        with self._socket_lock:
            if self._socket is not None:
                self._socket.close()
                self._socket = None
            if self._context is not None:
                self._context.term()
                self._context = None

    @staticmethod
    def _check_response(resp: dict, cmd: str):
        if resp.get("status") == "ok":
            return
        raise BridgeError(f"Bridge command '{cmd}' failed: {resp.get('message', 'unknown error')}",
                          remote_error=resp.get("error"))


def _make_zmq_endpoint(endpoint: str) -> str:
    """Convert a user-supplied endpoint string to a ZMQ address.

    Rules:
      /path/...  or  ./path/...  →  ipc:///path/...  (Unix domain socket)
      host                       →  tcp://host:7613
      host:port                  →  tcp://host:port
    """
    if endpoint.startswith("ipc://") or endpoint.startswith("tcp://"):
        return endpoint
    if endpoint.startswith("/") or endpoint.startswith("./"):
        return f"ipc://{endpoint}"
    if ":" in endpoint:
        return f"tcp://{endpoint}"
    return f"tcp://{endpoint}:{protocol.DEFAULT_PORT}"
