import pytest

from eoiptap.eoip import (
    EOIP_GRE_FLAGS,
    EOIP_PROTO_TYPE,
    HEADER_SIZE,
    MAX_PAYLOAD_SIZE,
    EoipHeader,
    build_packet,
    extract_frame,
    parse_header,
)

IP_HEADER = bytes([0x45]) + bytes(19)


def test_pack_wire_layout():
    packed = EoipHeader(tid=1, size=0x0102).pack()
    assert packed == b"\x20\x01\x64\x00\x01\x02\x01\x00"


def test_pack_length_matches_header_size():
    assert len(EoipHeader(tid=7, size=3).pack()) == HEADER_SIZE


def test_parse_round_trip():
    header = EoipHeader(tid=513, size=1500)
    assert parse_header(header.pack()) == header


def test_parse_defaults_to_protocol_constants():
    parsed = parse_header(EoipHeader(tid=5, size=10).pack())
    assert parsed.gre_flags == EOIP_GRE_FLAGS
    assert parsed.proto == EOIP_PROTO_TYPE


def test_parse_short_data_raises():
    with pytest.raises(ValueError):
        parse_header(b"\x20\x01\x64")


def test_build_packet_round_trip_through_extract():
    frame = b"ethernet-frame-bytes"
    packet = build_packet(42, frame)
    assert packet[HEADER_SIZE:] == frame
    assert parse_header(packet).size == len(frame)
    assert extract_frame(42, IP_HEADER + packet) == frame


def test_build_packet_rejects_oversized_frame():
    with pytest.raises(ValueError):
        build_packet(1, bytes(MAX_PAYLOAD_SIZE + 1))


def test_extract_frame_rejects_wrong_tid():
    packet = build_packet(42, b"abc")
    assert extract_frame(43, IP_HEADER + packet) is None


def test_extract_frame_rejects_short_datagram():
    assert extract_frame(1, IP_HEADER + b"\x20\x01") is None
    assert extract_frame(1, b"") is None


def test_extract_frame_rejects_size_mismatch():
    packet = build_packet(9, b"abcd")
    assert extract_frame(9, IP_HEADER + packet + b"extra") is None


def test_extract_frame_honours_ip_options():
    ip_header = bytes([0x46]) + bytes(23)
    packet = build_packet(3, b"payload")
    assert extract_frame(3, ip_header + packet) == b"payload"


def test_extract_empty_frame():
    assert extract_frame(4, IP_HEADER + build_packet(4, b"")) == b""