"""Transport adapters feeding records into the registry."""
from .base import handle_record
from .packet import PacketConnection, UDPPacketConnection, forward_packets
from .stream import forward_listener, handle_connection

__all__ = [
    "PacketConnection",
    "UDPPacketConnection",
    "forward_listener",
    "forward_packets",
    "handle_connection",
    "handle_record",
]
