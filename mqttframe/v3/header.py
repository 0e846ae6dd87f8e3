"""Fixed header of MQTT v3.x packets."""

from __future__ import annotations

import enum
import io
from dataclasses import dataclass
from typing import BinaryIO

from ..errors import InvalidHeader
from ..types import QoS
from ..utils import decode_raw_header


class PacketType(enum.IntEnum):
    """Packet type; the value is the upper nibble of the control byte."""

    CONNECT = 1
    CONNACK = 2
    PUBLISH = 3
    PUBACK = 4
    PUBREC = 5
    PUBREL = 6
    PUBCOMP = 7
    SUBSCRIBE = 8
    SUBACK = 9
    UNSUBSCRIBE = 10
    UNSUBACK = 11
    PINGREQ = 12
    PINGRESP = 13
    DISCONNECT = 14


_REQUIRED_FLAGS = {
    PacketType.PUBREL: 0b0010,
    PacketType.SUBSCRIBE: 0b0010,
    PacketType.UNSUBSCRIBE: 0b0010,
}


@dataclass(frozen=True)
class Header:
    """Decoded fixed header."""

    typ: PacketType
    dup: bool = False
    qos: QoS = QoS.LEVEL0
    retain: bool = False
    remaining_len: int = 0

    @classmethod
    def new_with(cls, hd: int, remaining_len: int) -> "Header":
        """Build a header from a control byte, checking type and flags."""
        kind = hd >> 4
        if kind == PacketType.PUBLISH:
            return cls(
                PacketType.PUBLISH,
                dup=bool(hd & 0b1000),
                qos=QoS.from_u8((hd & 0b110) >> 1),
                retain=bool(hd & 1),
                remaining_len=remaining_len,
            )
        try:
            typ = PacketType(kind)
        except ValueError:
            raise InvalidHeader() from None
        if hd & 0b1111 != _REQUIRED_FLAGS.get(typ, 0):
            raise InvalidHeader()
        return cls(typ, remaining_len=remaining_len)

    @classmethod
    def decode(cls, data: bytes) -> "Header":
        """Decode a header from the start of ``data``."""
        return cls.decode_from(io.BytesIO(data))

    @classmethod
    def decode_from(cls, reader: BinaryIO) -> "Header":
        """Read a header from ``reader``."""
        control_byte, remaining = decode_raw_header(reader)
        return cls.new_with(control_byte, remaining)