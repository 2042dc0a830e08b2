# eoiptap

A small daemon that carries Ethernet frames between a Linux TAP interface
and a remote peer using the EoIP protocol: Ethernet over GRE, with GRE flags
`0x2001`, protocol type `0x6400`, a big-endian payload length and a
little-endian tunnel id.

Frames read from the TAP device are wrapped in an EoIP header and sent over a
raw IPv4 socket (protocol 47) to the remote address. Datagrams that arrive
with a matching header, payload length and tunnel id are unwrapped and
written to the TAP device; all others are dropped.

## Requirements

- Linux with `/dev/net/tun`
- Root privileges, or `CAP_NET_ADMIN` and `CAP_NET_RAW`
- Python 3.10 or later

No third-party libraries are needed.

## Installation

```
pip install .
```

## Usage

```
eoiptap -i eoip0 -l 192.0.2.1 -r 198.51.100.7 -t 100
```

The same entry point can be run as `python -m eoiptap.cli`.

| Option | Meaning                                                  |
|--------|----------------------------------------------------------|
| `-i`   | TAP interface name (required)                            |
| `-l`   | local IPv4 address or host name to bind (required)       |
| `-r`   | remote tunnel endpoint, IPv4 address or host name (required) |
| `-t`   | tunnel id, a decimal number taken modulo 65536 (default 0) |

A missing required option, an unknown option or a name that does not resolve
to an IPv4 address prints an `[ERROR]` line and exits with status 1, as does
a failure to open the GRE socket or the TAP device.

For each online CPU the daemon opens a GRE socket and a TAP queue and runs
two worker threads: one reading datagrams from the socket, one reading frames
from the TAP device. It sets `SO_REUSEPORT` and asks for a multi-queue TAP
device; if the kernel does not support either, it stops after the first pair
of workers. The daemon exits when any worker loop ends.

Once the daemon is running, bring the interface up as usual:

```
ip link set eoip0 up
ip addr add 10.0.0.1/30 dev eoip0
```

## Library use

The packet format is in `eoiptap.eoip`:

```python
from eoiptap.eoip import build_packet, extract_frame, parse_header

packet = build_packet(100, b"\x00" * 60)
header = parse_header(packet)
assert header.tid == 100 and header.size == 60
```

- `EoipHeader(tid, size)` is the 8-byte header; `pack()` encodes it.
- `parse_header(data)` decodes the first 8 bytes and raises `ValueError` if
  there are fewer.
- `build_packet(tid, frame)` prefixes a frame with its header and raises
  `ValueError` for frames over 65535 bytes.
- `extract_frame(tid, datagram)` takes a whole IPv4 datagram as received on a
  raw socket and returns the Ethernet frame, or `None` if it is too short or
  its header does not match.

`eoiptap.devices` has `open_gre_socket(address)` and `open_tap(if_name)`,
which return `GreSocket` and `TapDevice` objects (both usable as context
managers) and raise `DeviceError` on failure. `eoiptap.tunnel.Tunnel` ties a
socket, a TAP device, a remote address and a tunnel id together:
`send_frame`, `handle_datagram`, `socket_loop` and `tap_loop` do the
forwarding.

## What it does not do

The daemon only moves frames. It does not create persistent interfaces,
assign addresses or bring links up, does not handle IPv6 endpoints, and has
no configuration file or keepalive handling.

## Tests

```
pip install .[test]
pytest
```