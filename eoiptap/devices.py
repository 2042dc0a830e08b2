"""Opening the raw GRE socket and the TAP device used by a tunnel."""

from __future__ import annotations

import errno
import fcntl
import logging
import os
import socket
import struct
from dataclasses import dataclass

from .eoip import HEADER_SIZE, MAX_PAYLOAD_SIZE

log = logging.getLogger(__name__)

GRE_PROTOCOL = 47
IFNAMSIZ = 16
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000
IFF_MULTI_QUEUE = 0x0100
TUNSETIFF = 0x400454CA
TUN_DEVICE = "/dev/net/tun"

# Room for two whole packets; the packet structure is padded to 2-byte alignment.
SOCKET_BUFFER_SIZE = 2 * (HEADER_SIZE + MAX_PAYLOAD_SIZE + 1)

_IFREQ = struct.Struct(f"{IFNAMSIZ}sH22x")


class DeviceError(Exception):
    """A socket or TAP device could not be set up."""


@dataclass
class GreSocket:
    """A bound raw GRE socket; ``multi_socket`` tells whether SO_REUSEPORT is usable."""

    sock: socket.socket
    multi_socket: bool

    def fileno(self) -> int:
        return self.sock.fileno()

    def close(self) -> None:
        self.sock.close()

    def __enter__(self) -> GreSocket:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@dataclass
class TapDevice:
    """An attached TAP queue; ``multi_queue`` tells whether more queues may be attached."""

    fd: int
    name: str
    multi_queue: bool

    def fileno(self) -> int:
        return self.fd

    def read(self, size: int) -> bytes:
        return os.read(self.fd, size)

    def write(self, frame: bytes) -> int:
        return os.write(self.fd, frame)

    def close(self) -> None:
        os.close(self.fd)

    def __enter__(self) -> TapDevice:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_gre_socket(address: tuple) -> GreSocket:
    """Open a raw GRE socket bound to ``address``."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_RAW, GRE_PROTOCOL)
    except OSError as exc:
        raise DeviceError(f"socket: {exc.strerror or exc}") from exc

    multi_socket = True
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
    except OSError as exc:
        log.warning("setsockopt(SO_REUSEPORT): %s", exc.strerror or exc)
        if exc.errno == errno.ENOPROTOOPT:
            multi_socket = False
    else:
        log.info("setsockopt(SO_REUSEPORT) succeeded")

    try:
        sock.bind(address)
    except OSError as exc:
        sock.close()
        raise DeviceError(f"bind: {exc.strerror or exc}") from exc

    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, SOCKET_BUFFER_SIZE)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, SOCKET_BUFFER_SIZE)
    except OSError as exc:
        sock.close()
        raise DeviceError(f"setsockopt(socket): {exc.strerror or exc}") from exc

    return GreSocket(sock=sock, multi_socket=multi_socket)


def make_ifreq(if_name: str, flags: int) -> bytes:
    """Build a ``struct ifreq`` carrying an interface name and flags."""
    return _IFREQ.pack(os.fsencode(if_name)[:IFNAMSIZ], flags)


def open_tap(if_name: str) -> TapDevice:
    """Attach to TAP interface ``if_name``, as a multi-queue device when possible."""
    try:
        fd = os.open(TUN_DEVICE, os.O_RDWR)
    except OSError as exc:
        raise DeviceError(f"open({TUN_DEVICE}): {exc.strerror or exc}") from exc

    try:
        fcntl.ioctl(fd, TUNSETIFF, make_ifreq(if_name, IFF_TAP | IFF_NO_PI | IFF_MULTI_QUEUE))
        return TapDevice(fd=fd, name=if_name, multi_queue=True)
    except OSError as exc:
        failure = exc
        if exc.errno == errno.EINVAL:
            try:
                fcntl.ioctl(fd, TUNSETIFF, make_ifreq(if_name, IFF_TAP | IFF_NO_PI))
            except OSError as retry_exc:
                failure = retry_exc
            else:
                log.warning("multi-queue tap not supported")
                return TapDevice(fd=fd, name=if_name, multi_queue=False)

    os.close(fd)
    raise DeviceError(f"ioctl(TUNSETIFF): {failure.strerror or failure}") from failure