"""Command line entry point: parse options and start tunnel workers."""

from __future__ import annotations

import getopt
import logging
import os
import re
import socket
import sys
import threading
from dataclasses import dataclass, field

from .devices import GRE_PROTOCOL, DeviceError, open_gre_socket, open_tap
from .tunnel import Tunnel

log = logging.getLogger(__name__)

PROGRAM = "eoiptap"
USAGE = f"usage: {PROGRAM} -i interface -l local -r remote [-t tunnel-id]"


class UsageError(Exception):
    """The command line is incomplete or cannot be resolved."""


@dataclass(frozen=True)
class Options:
    """Resolved command line settings."""

    if_name: str
    local: tuple
    remote: tuple
    tid: int = 0


def resolve_address(host: str) -> tuple:
    """Resolve ``host`` to an IPv4 socket address for a raw GRE socket."""
    try:
        results = socket.getaddrinfo(host, None, socket.AF_INET, socket.SOCK_RAW, GRE_PROTOCOL)
    except socket.gaierror as exc:
        raise UsageError(f"getaddrinfo: {exc.strerror or exc}") from exc
    for family, _type, _proto, _canonname, sockaddr in results:
        if family == socket.AF_INET:
            return sockaddr
    raise UsageError("unable to bind specified address")


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def parse_args(argv: list[str] | None = None) -> Options:
    """Parse ``-i``, ``-l``, ``-r`` and ``-t`` into resolved options."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        opts, _rest = getopt.gnu_getopt(argv, "i:l:r:t:")
    except getopt.GetoptError as exc:
        raise UsageError(f"{exc.msg}\n{USAGE}") from exc

    if_name = local = remote = None
    tid = 0
    for opt, value in opts:
        if opt == "-i":
            if_name = value
        elif opt == "-l":
            local = resolve_address(value)
        elif opt == "-r":
            remote = resolve_address(value)
        elif opt == "-t":
            tid = _atoi(value) & 0xFFFF

    if if_name is None:
        raise UsageError("interface name is required")
    if local is None:
        raise UsageError("local address is required")
    if remote is None:
        raise UsageError("remote address is required")
    return Options(if_name=if_name, local=local, remote=remote, tid=tid)


@dataclass
class _Workers:
    tunnels: list[Tunnel] = field(default_factory=list)
    threads: list[threading.Thread] = field(default_factory=list)
    finished: threading.Event = field(default_factory=threading.Event)

    def start(self, tunnel: Tunnel) -> None:
        self.tunnels.append(tunnel)
        for loop in (tunnel.socket_loop, tunnel.tap_loop):
            thread = threading.Thread(target=self._run, args=(loop,), daemon=True)
            self.threads.append(thread)
            thread.start()

    def _run(self, loop) -> None:
        try:
            loop()
        except Exception:
            log.exception("tunnel loop failed")
        finally:
            self.finished.set()

    def wait(self) -> None:
        """Block until any loop ends."""
        self.finished.wait()


def spawn_workers(options: Options, cpu_count: int) -> _Workers:
    """Start up to ``cpu_count`` tunnel workers, or one if queues cannot be shared."""
    workers = _Workers()
    for _ in range(cpu_count):
        gre = open_gre_socket(options.local)
        tap = open_tap(options.if_name)
        workers.start(Tunnel(tid=options.tid, sock=gre.sock, tap=tap, remote=options.remote))
        if not (gre.multi_socket and tap.multi_queue):
            break
    return workers


def main(argv: list[str] | None = None) -> int:
    """Run the tunnel daemon; returns the process exit status."""
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    try:
        options = parse_args(argv)
    except UsageError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    cpu_count = os.cpu_count() or 1
    log.info("%d processors found", cpu_count)
    try:
        workers = spawn_workers(options, cpu_count)
    except DeviceError as exc:
        log.error("%s", exc)
        return 1
    workers.wait()
    return 0


if __name__ == "__main__":
    sys.exit(main())