"""EoIP (Ethernet over IP) packet header encoding and validation."""

from __future__ import annotations

import struct
from dataclasses import dataclass

EOIP_GRE_FLAGS = 0x2001
EOIP_PROTO_TYPE = 0x6400
MAX_PAYLOAD_SIZE = 0xFFFF
HEADER_SIZE = 8

# gre flags, protocol and frame size are big-endian; the tunnel id is little-endian.
_BE_PART = struct.Struct("!HHH")
_LE_PART = struct.Struct("<H")


@dataclass(frozen=True)
class EoipHeader:
    """The 8-byte header that precedes every tunnelled Ethernet frame."""

    tid: int
    size: int
    gre_flags: int = EOIP_GRE_FLAGS
    proto: int = EOIP_PROTO_TYPE

    def pack(self) -> bytes:
        """Encode the header in wire order."""
        return _BE_PART.pack(self.gre_flags, self.proto, self.size) + _LE_PART.pack(self.tid)


def parse_header(data: bytes) -> EoipHeader:
    """Decode an EoIP header from the first 8 bytes of ``data``."""
    if len(data) < HEADER_SIZE:
        raise ValueError(f"EoIP header needs {HEADER_SIZE} bytes, got {len(data)}")
    gre_flags, proto, size = _BE_PART.unpack_from(data, 0)
    (tid,) = _LE_PART.unpack_from(data, _BE_PART.size)
    return EoipHeader(tid=tid, size=size, gre_flags=gre_flags, proto=proto)


def build_packet(tid: int, frame: bytes) -> bytes:
    """Wrap an Ethernet frame in an EoIP header for tunnel ``tid``."""
    if len(frame) > MAX_PAYLOAD_SIZE:
        raise ValueError(f"frame of {len(frame)} bytes exceeds {MAX_PAYLOAD_SIZE}")
    return EoipHeader(tid=tid & 0xFFFF, size=len(frame)).pack() + bytes(frame)


def extract_frame(tid: int, datagram: bytes) -> bytes | None:
    """Return the Ethernet frame carried by a raw IP datagram, or None.

    The datagram starts with the IP header as delivered by a raw socket.
    None is returned when the datagram is too short or its EoIP header does
    not match the expected flags, protocol, payload size and tunnel id.
    """
    if not datagram:
        return None
    ip_header_size = (datagram[0] & 0x0F) * 4
    payload_offset = ip_header_size + HEADER_SIZE
    if payload_offset > len(datagram):
        return None
    frame_size = len(datagram) - payload_offset
    if frame_size > MAX_PAYLOAD_SIZE:
        return None
    expected = EoipHeader(tid=tid & 0xFFFF, size=frame_size).pack()
    if datagram[ip_header_size:payload_offset] != expected:
        return None
    return bytes(datagram[payload_offset:])