"""EoIP tunnel daemon bridging a Linux TAP device and a raw GRE socket."""

__version__ = "0.1.0"
__all__ = ["eoip", "devices", "tunnel", "cli"]