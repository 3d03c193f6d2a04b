"""Building blocks for a user-space TCP/IP stack: framing, ARP, ICMPv4 and scheduling helpers."""

__version__ = "0.1.0"