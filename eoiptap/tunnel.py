"""Forwarding frames between a TAP device and an EoIP peer."""

from __future__ import annotations

import logging
import select
import socket
from dataclasses import dataclass
from typing import Any

from .eoip import HEADER_SIZE, MAX_PAYLOAD_SIZE, build_packet, extract_frame

log = logging.getLogger(__name__)

MAX_IP_HEADER_SIZE = 60
RECV_BUFFER_SIZE = HEADER_SIZE + MAX_PAYLOAD_SIZE + 1 + MAX_IP_HEADER_SIZE


def send_with_retry(sock: Any, data: bytes, address: Any) -> int | None:
    """Send without blocking, retrying while the socket would block.

    Returns the number of bytes sent, or None after logging a send failure.
    """
    while True:
        try:
            return sock.sendto(data, socket.MSG_DONTWAIT, address)
        except BlockingIOError:
            continue
        except OSError as exc:
            log.error("sendto: %s", exc.strerror or exc)
            return None


@dataclass
class Tunnel:
    """One tunnel worker: a GRE socket, a TAP queue and the remote endpoint."""

    tid: int
    sock: Any
    tap: Any
    remote: Any

    def send_frame(self, frame: bytes) -> int | None:
        """Encapsulate an Ethernet frame and send it to the remote endpoint."""
        return send_with_retry(self.sock, build_packet(self.tid, frame), self.remote)

    def deliver_frame(self, frame: bytes) -> None:
        """Write a decapsulated frame to the TAP device."""
        self.tap.write(frame)

    def handle_datagram(self, datagram: bytes) -> bool:
        """Forward a received datagram's frame to the TAP device if it is valid."""
        frame = extract_frame(self.tid, datagram)
        if frame is None:
            return False
        self.deliver_frame(frame)
        return True

    def socket_loop(self) -> None:
        """Receive datagrams and deliver their frames until the socket yields nothing."""
        log.info("socket listener started")
        while True:
            select.select([self.sock], [], [])
            datagram = self.sock.recv(RECV_BUFFER_SIZE)
            if not datagram:
                return
            self.handle_datagram(datagram)

    def tap_loop(self) -> None:
        """Read frames from the TAP device and send them until it reaches end of file."""
        log.info("tap device listener started")
        while True:
            select.select([self.tap], [], [])
            frame = self.tap.read(MAX_PAYLOAD_SIZE)
            if not frame:
                return
            self.send_frame(frame)