"""MQTT v3.x packets: decoding, encoding and encoded sizes.

A packet is one of the body types ``Publish``, ``Subscribe``, ``Suback`` and
``Unsubscribe``, one of the packet-id acknowledgements defined here, or one of
the bodiless packets ``Pingreq``, ``Pingresp`` and ``Disconnect``. Connection
packets (connect and connack) are not handled by this codec; their headers are
rejected with ``InvalidHeader``.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import BinaryIO, Optional, Union

from ..errors import InvalidHeader, MqttError, StreamError
from ..types import Pid
from ..utils import encode_packet, read_u16, total_len
from .header import Header, PacketType
from .publish import Publish
from .subscribe import Suback, Subscribe, Unsubscribe


@dataclass(frozen=True)
class _PidPacket:
    """A packet whose whole body is a packet identifier."""

    pid: Pid

    def __post_init__(self) -> None:
        if not isinstance(self.pid, Pid):
            object.__setattr__(self, "pid", Pid(self.pid))


@dataclass(frozen=True)
class Puback(_PidPacket):
    """Acknowledges a QoS 1 publish."""


@dataclass(frozen=True)
class Pubrec(_PidPacket):
    """First acknowledgement of a QoS 2 publish."""


@dataclass(frozen=True)
class Pubrel(_PidPacket):
    """Release of a QoS 2 publish."""


@dataclass(frozen=True)
class Pubcomp(_PidPacket):
    """Completes a QoS 2 publish."""


@dataclass(frozen=True)
class Unsuback(_PidPacket):
    """Acknowledges an unsubscribe."""


@dataclass(frozen=True)
class Pingreq:
    """Keep-alive request."""


@dataclass(frozen=True)
class Pingresp:
    """Keep-alive response."""


@dataclass(frozen=True)
class Disconnect:
    """Client disconnect notice."""


Packet = Union[
    Publish,
    Puback,
    Pubrec,
    Pubrel,
    Pubcomp,
    Subscribe,
    Suback,
    Unsubscribe,
    Unsuback,
    Pingreq,
    Pingresp,
    Disconnect,
]

_TYPES = {
    Publish: PacketType.PUBLISH,
    Puback: PacketType.PUBACK,
    Pubrec: PacketType.PUBREC,
    Pubrel: PacketType.PUBREL,
    Pubcomp: PacketType.PUBCOMP,
    Subscribe: PacketType.SUBSCRIBE,
    Suback: PacketType.SUBACK,
    Unsubscribe: PacketType.UNSUBSCRIBE,
    Unsuback: PacketType.UNSUBACK,
    Pingreq: PacketType.PINGREQ,
    Pingresp: PacketType.PINGRESP,
    Disconnect: PacketType.DISCONNECT,
}

_PID_PACKETS = {
    PacketType.PUBACK: Puback,
    PacketType.PUBREC: Pubrec,
    PacketType.PUBREL: Pubrel,
    PacketType.PUBCOMP: Pubcomp,
    PacketType.UNSUBACK: Unsuback,
}

_EMPTY_PACKETS = {
    PacketType.PINGREQ: Pingreq,
    PacketType.PINGRESP: Pingresp,
    PacketType.DISCONNECT: Disconnect,
}

_CONTROL_BYTES = {
    PacketType.PUBACK: 0b0100_0000,
    PacketType.PUBREC: 0b0101_0000,
    PacketType.PUBREL: 0b0110_0010,
    PacketType.PUBCOMP: 0b0111_0000,
    PacketType.SUBSCRIBE: 0b1000_0010,
    PacketType.SUBACK: 0b1001_0000,
    PacketType.UNSUBSCRIBE: 0b1010_0010,
    PacketType.UNSUBACK: 0b1011_0000,
    PacketType.PINGREQ: 0b1100_0000,
    PacketType.PINGRESP: 0b1101_0000,
    PacketType.DISCONNECT: 0b1110_0000,
}


def get_type(packet: Packet) -> PacketType:
    """Return the packet type of ``packet``."""
    try:
        return _TYPES[type(packet)]
    except KeyError:
        raise TypeError(f"not an MQTT v3 packet: {packet!r}") from None


def _empty_packet(typ: PacketType) -> Optional[Packet]:
    factory = _EMPTY_PACKETS.get(typ)
    return factory() if factory is not None else None


def _decode_body(header: Header, reader: BinaryIO) -> Packet:
    """Decode the body that follows ``header``."""
    typ = header.typ
    empty = _empty_packet(typ)
    if empty is not None:
        return empty
    pid_packet = _PID_PACKETS.get(typ)
    if pid_packet is not None:
        return pid_packet(Pid(read_u16(reader)))
    if typ is PacketType.PUBLISH:
        return Publish.decode(reader, header)
    if typ is PacketType.SUBSCRIBE:
        return Subscribe.decode(reader, header.remaining_len)
    if typ is PacketType.SUBACK:
        return Suback.decode(reader, header.remaining_len)
    if typ is PacketType.UNSUBSCRIBE:
        return Unsubscribe.decode(reader, header.remaining_len)
    raise InvalidHeader()


def decode_from(reader: BinaryIO) -> Packet:
    """Read one packet from ``reader``."""
    header = Header.decode_from(reader)
    return _decode_body(header, reader)


def decode(data: bytes) -> Optional[Packet]:
    """Decode a packet from the start of ``data``; None if ``data`` is too short."""
    try:
        return decode_from(io.BytesIO(data))
    except MqttError as err:
        if err.is_eof():
            return None
        raise


def _publish_control_byte(publish: Publish) -> int:
    control_byte = 0b0011_0000 | (int(publish.qos_pid.qos) << 1)
    if publish.dup:
        control_byte |= 0b0000_1000
    if publish.retain:
        control_byte |= 0b0000_0001
    return control_byte


def encode(packet: Packet) -> bytes:
    """Encode ``packet`` into its wire bytes."""
    typ = get_type(packet)
    if isinstance(packet, Publish):
        return encode_packet(_publish_control_byte(packet), packet)
    control_byte = _CONTROL_BYTES[typ]
    if isinstance(packet, _PidPacket):
        value = packet.pid.value
        return bytes((control_byte, 2, value >> 8, value & 0xFF))
    if typ in _EMPTY_PACKETS:
        return bytes((control_byte, 0))
    return encode_packet(control_byte, packet)


def encode_to(packet: Packet, writer: BinaryIO) -> None:
    """Encode ``packet`` and write it to ``writer``."""
    data = encode(packet)
    try:
        writer.write(data)
    except OSError as err:
        raise StreamError(type(err).__name__, str(err)) from err


def encode_len(packet: Packet) -> int:
    """Return the total number of bytes ``packet`` encodes into."""
    typ = get_type(packet)
    if typ in _EMPTY_PACKETS:
        return 2
    if isinstance(packet, _PidPacket):
        return 4
    return total_len(packet.encode_len())