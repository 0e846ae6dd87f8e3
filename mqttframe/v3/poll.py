"""Incremental reading of MQTT v3.x packets."""

from __future__ import annotations

from typing import BinaryIO, Optional

from ..poll import GenericPollPacket, PollHeader, PollState, read_packet
from .header import Header
from .packet import Packet, _decode_body, _empty_packet


class _V3Codec(PollHeader[Header, Packet]):
    """Header hooks for MQTT v3.x packets."""

    def new_with(self, hd: int, remaining_len: int) -> Header:
        return Header.new_with(hd, remaining_len)

    def build_empty_packet(self, header: Header) -> Optional[Packet]:
        return _empty_packet(header.typ)

    def block_decode(self, header: Header, reader: BinaryIO) -> Packet:
        return _decode_body(header, reader)

    def remaining_len(self, header: Header) -> int:
        return header.remaining_len


_CODEC = _V3Codec()


class PacketPoller(GenericPollPacket[Header, Packet]):
    """Reads v3.x packets from a possibly non-blocking reader, one at a time."""

    def __init__(self, state: Optional[PollState] = None) -> None:
        super().__init__(_CODEC, state)


def poll_packet(reader: BinaryIO) -> tuple[int, bytes, Packet]:
    """Read one packet; return ``(total size, body bytes, packet)``."""
    return read_packet(_CODEC, reader)