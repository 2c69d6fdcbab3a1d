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
simconnect-bridge: a ZMQ REP endpoint in front of one SimConnect session.

Design
------
* A single REP socket, bound to tcp://*:<port> or ipc://<path>.
* Strict request/response: every request gets exactly one reply before
  the next one is read.  The bridge never pushes anything.
* Simulator records are buffered by the session runner's dispatch thread
  and collected by clients with "poll".
* The process ends on "quit", on SIGTERM, when nobody connects within the
  connect timeout, or when an attached client goes silent for longer
  than the watchdog.

Requests
--------
  open      { app_name, host, port, protocol, config, timeout } → protocol, protocol_name
  call      { command, args, kwargs }                            → result
  poll      { max_records }                                      → records
  stats     {}                                                   → stats
  close     {}
  heartbeat {}        keeps the watchdog quiet
  quit      {}        ends the server loop
"""

import argparse
import logging
import signal
import sys
import time

import zmq

from simconnect_remote.bridge import protocol
from simconnect_remote.bridge.session_runner import SessionRunner
from simconnect_remote.config import ConfigurationManager
from simconnect_remote.constants import DEFAULT_PORT as SIM_DEFAULT_PORT
from simconnect_remote.version import DEFAULT_PROTOCOL, ProtocolVersion

_LOG = logging.getLogger(__name__)

POLL_INTERVAL_MS = 500

# requests that arrive continuously and would flood INFO
_QUIET_COMMANDS = frozenset({"heartbeat", "poll", "stats"})


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stdout,
    )


class BridgeServer:
    """
    Answers bridge requests for one ``SessionRunner``.

    ``session_defaults`` supplies "open" keys a client leaves out or sets
    to None (typically the command-line simulator options).
    """

    def __init__(self, port: int = protocol.DEFAULT_PORT, socket_path: str = None, watchdog: int = 30,
                 connect_timeout: int = 15, session_defaults: dict = None, runner: SessionRunner = None):
        self.port = port
        self.socket_path = socket_path
        self._runner = runner if runner is not None else SessionRunner()
        self._session_defaults = dict(session_defaults or {})
        self._watchdog = watchdog                  # 0 disables
        self._connect_timeout = connect_timeout    # 0 disables
        self._context: zmq.Context = None
        self._socket: zmq.Socket = None
        self._running = False
        self._start_time: float = None
        self._last_msg_time: float = None
        self._handlers = {
            "open": self._on_open,
            "call": self._on_call,
            "poll": self._on_poll,
            "stats": self._on_stats,
            "close": self._on_close,
            "heartbeat": self._on_heartbeat,
            "quit": self._on_quit,
        }

    @property
    def bind_address(self) -> str:
        return f"ipc://{self.socket_path}" if self.socket_path else f"tcp://*:{self.port}"

    def start(self):
        """Bind and serve until stopped.  Blocks the calling thread."""
        self._context = zmq.Context()
        self._socket = self._context.socket(zmq.REP)
        self._socket.bind(self.bind_address)
        _LOG.info(f"simconnect-bridge listening on {self.bind_address}")
        self._start_time = time.monotonic()
        self._running = True
        try:
            self._serve()
        except KeyboardInterrupt:
            _LOG.info("Interrupted")
        finally:
            self._shutdown()

    def stop(self):
        self._running = False

    # ------------------------------------------------------------------
    # Serving
    # ------------------------------------------------------------------

    def _serve(self):
        poller = zmq.Poller()
        poller.register(self._socket, zmq.POLLIN)
        while self._running:
            try:
                ready = dict(poller.poll(POLL_INTERVAL_MS))
            except zmq.ZMQError as exc:
                if self._running:
                    _LOG.error(f"Polling the bridge socket failed: {exc}")
                break
            if ready.get(self._socket) != zmq.POLLIN:
                self._check_timeouts(time.monotonic())
                continue
            request = self._socket.recv()
            self._last_msg_time = time.monotonic()
            self._socket.send(self.handle(request))

    def _check_timeouts(self, now: float):
        if self._last_msg_time is None:
            if self._connect_timeout > 0 and now - self._start_time > self._connect_timeout:
                _LOG.info(f"No client within {self._connect_timeout}s of startup, stopping.")
                self._running = False
        elif self._watchdog > 0 and now - self._last_msg_time > self._watchdog:
            _LOG.info(f"Client silent for more than {self._watchdog}s, stopping.")
            self._running = False

    def handle(self, data: bytes) -> bytes:
        """Answer one encoded request.  Failures become "error" replies."""
        try:
            msg = protocol.decode(data)
            cmd = msg.get("cmd", "")
            payload = msg.get("payload") or {}
            handler = self._handlers.get(cmd)
            if handler is None:
                return protocol.encode_response("error", message=f"Unknown command: '{cmd}'")
            if cmd in _QUIET_COMMANDS:
                _LOG.debug(f"request {cmd}")
            else:
                _LOG.info(f"request {cmd} {payload.get('command', '')}".rstrip())
            return handler(payload)
        except Exception as exc:  # noqa: BLE001
            _LOG.exception("Request failed")
            return protocol.encode_response("error", message=str(exc), error=type(exc).__name__)

    # ------------------------------------------------------------------
    # Request handlers
    # ------------------------------------------------------------------

    def _on_open(self, payload: dict) -> bytes:
        options = dict(self._session_defaults)
        options.update((key, value) for key, value in payload.items() if value is not None)
        info = self._runner.open(
            app_name=options.get("app_name", "simconnect-bridge"),
            host=options.get("host"),
            port=options.get("port"),
            protocol=options.get("protocol"),
            config=options.get("config"),
            timeout=options.get("timeout"),
        )
        return protocol.encode_response("ok", **info)

    def _on_call(self, payload: dict) -> bytes:
        result = self._runner.call(payload["command"], payload.get("args") or [], payload.get("kwargs") or {})
        return protocol.encode_response("ok", result=result)

    def _on_poll(self, payload: dict) -> bytes:
        return protocol.encode_response("ok", records=self._runner.poll(int(payload.get("max_records") or 0)))

    def _on_stats(self, _payload: dict) -> bytes:
        return protocol.encode_response("ok", stats=self._runner.stats())

    def _on_close(self, _payload: dict) -> bytes:
        self._runner.close()
        return protocol.encode_response("ok")

    def _on_heartbeat(self, _payload: dict) -> bytes:
        return protocol.encode_response("ok")

    def _on_quit(self, _payload: dict) -> bytes:
        _LOG.info("Quit requested by client")
        self._running = False
        return protocol.encode_response("ok")

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _shutdown(self):
        try:
            self._runner.close()
        except Exception as exc:  # noqa: BLE001
            _LOG.warning(f"Closing the SimConnect session failed: {exc}")
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        if self._context is not None:
            self._context.term()
            self._context = None
        _LOG.info("simconnect-bridge stopped")


def _session_defaults(args) -> dict:
    defaults = {"app_name": args.app_name, "protocol": int(ProtocolVersion[args.protocol])}
    if args.sim_config is not None:
        defaults["config"] = dict(ConfigurationManager().get_configuration(args.sim_config))
    if args.sim_host:
        defaults["host"] = args.sim_host
    if args.sim_port:
        defaults["port"] = args.sim_port
    return defaults


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Drive one SimConnect session over ZeroMQ")

    bridge = parser.add_argument_group("bridge")
    bridge.add_argument("--port", "-p", type=int, default=protocol.DEFAULT_PORT,
                        help=f"TCP port to bind (default: {protocol.DEFAULT_PORT}); unused with --socket")
    bridge.add_argument("--socket", "-s", metavar="PATH",
                        help="bind a Unix domain socket instead of a TCP port")
    bridge.add_argument("--watchdog", "-w", type=int, default=10, metavar="SECONDS",
                        help="stop when a connected client is silent this long (0 disables, default: 10)")
    bridge.add_argument("--connect-timeout", "-c", type=int, default=15, metavar="SECONDS",
                        help="stop when no client shows up this long after start (0 disables, default: 15)")
    bridge.add_argument("--verbose", "-v", action="store_true", help="log at DEBUG level")

    sim = parser.add_argument_group("simulator")
    sim.add_argument("--sim-host", help="SimConnect server host (default: SimConnect.cfg, else localhost)")
    sim.add_argument("--sim-port", type=int,
                     help=f"SimConnect server port (default: SimConnect.cfg, else {SIM_DEFAULT_PORT})")
    sim.add_argument("--sim-config", type=int, metavar="N", help="use section N of SimConnect.cfg")
    sim.add_argument("--protocol", choices=[v.name for v in ProtocolVersion], default=DEFAULT_PROTOCOL.name,
                     help=f"protocol version to announce (default: {DEFAULT_PROTOCOL.name})")
    sim.add_argument("--app-name", default="simconnect-bridge", help="application name for the handshake")
    return parser


def main(argv=None):
    args = _build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    server = BridgeServer(
        port=args.port,
        socket_path=args.socket,
        watchdog=args.watchdog,
        connect_timeout=args.connect_timeout,
        session_defaults=_session_defaults(args),
    )

    # SIGINT keeps raising KeyboardInterrupt
    signal.signal(signal.SIGTERM, lambda _sig, _frame: server.stop())
    server.start()


if __name__ == "__main__":
    main()
