"""Incremental reading of whole packets from a byte stream."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Generic, Optional, TypeVar, Union

from .errors import (
    InvalidRemainingLength,
    InvalidVarByteInt,
    MqttError,
    StreamError,
    UnexpectedEofError,
)

H = TypeVar("H")
P = TypeVar("P")


class PollHeader(ABC, Generic[H, P]):
    """Packet-specific hooks that drive a ``GenericPollPacket``."""

    @abstractmethod
    def new_with(self, hd: int, remaining_len: int) -> H:
        """Build a header from the control byte and the remaining length."""

    @abstractmethod
    def build_empty_packet(self, header: H) -> Optional[P]:
        """Return the packet if it has no body, otherwise None."""

    @abstractmethod
    def block_decode(self, header: H, reader: BinaryIO) -> P:
        """Decode the packet body from a reader holding exactly the body."""

    @abstractmethod
    def remaining_len(self, header: H) -> int:
        """Return the body size announced by the header."""

    def is_eof_error(self, err: BaseException) -> bool:
        """Whether ``err`` means the body ended too early."""
        return isinstance(err, MqttError) and err.is_eof()


@dataclass
class PollHeaderState:
    """Progress while reading the fixed header."""

    control_byte: Optional[int] = None
    var_idx: int = 0
    var_int: int = 0


@dataclass
class PollBodyState(Generic[H]):
    """Progress while reading the packet body."""

    header: H
    total: int
    idx: int = 0
    buf: bytearray = field(default_factory=bytearray)


PollState = Union[PollHeaderState, PollBodyState]


def _read_some(reader: BinaryIO, size: int) -> Optional[bytes]:
    """Read up to ``size`` bytes; None when the reader has nothing yet."""
    try:
        data = reader.read(size)
    except BlockingIOError:
        return None
    except OSError as err:
        raise StreamError(type(err).__name__, str(err)) from err
    if data is None:
        return None
    if not data:
        raise UnexpectedEofError()
    return bytes(data[:size])


class GenericPollPacket(Generic[H, P]):
    """Reads one packet at a time, resuming where a non-blocking reader stopped.

    ``poll`` returns ``(total size, body bytes, packet)`` once a packet is
    complete, or None when the reader has no more data for now.
    """

    def __init__(self, codec: PollHeader[H, P], state: Optional[PollState] = None) -> None:
        self.codec = codec
        self.state: PollState = state if state is not None else PollHeaderState()

    def poll(self, reader: BinaryIO) -> Optional[tuple[int, bytes, Any]]:
        """Advance the read; return the finished packet or None if pending."""
        if isinstance(self.state, PollHeaderState):
            if not self._read_header(reader):
                return None
            head_state = self.state
            assert head_state.control_byte is not None
            header = self.codec.new_with(head_state.control_byte, head_state.var_int)
            empty = self.codec.build_empty_packet(header)
            if empty is not None:
                self.state = PollHeaderState()
                return 2, b"", empty
            size = self.codec.remaining_len(header)
            if size == 0:
                raise InvalidRemainingLength()
            self.state = PollBodyState(
                header=header,
                total=2 + head_state.var_idx + size,
                buf=bytearray(size),
            )
        return self._read_body(reader)

    def _read_header(self, reader: BinaryIO) -> bool:
        state = self.state
        assert isinstance(state, PollHeaderState)
        while True:
            data = _read_some(reader, 1)
            if data is None:
                return False
            byte = data[0]
            if state.control_byte is None:
                state.control_byte = byte
                continue
            state.var_int |= (byte & 0x7F) << (7 * state.var_idx)
            if not byte & 0x80:
                return True
            if state.var_idx < 3:
                state.var_idx += 1
            else:
                raise InvalidVarByteInt()

    def _read_body(self, reader: BinaryIO) -> Optional[tuple[int, bytes, Any]]:
        state = self.state
        assert isinstance(state, PollBodyState)
        while state.idx < len(state.buf):
            chunk = _read_some(reader, len(state.buf) - state.idx)
            if chunk is None:
                return None
            state.buf[state.idx : state.idx + len(chunk)] = chunk
            state.idx += len(chunk)

        data = bytes(state.buf)
        body = io.BytesIO(data)
        try:
            packet = self.codec.block_decode(state.header, body)
        except Exception as err:
            if self.codec.is_eof_error(err):
                raise InvalidRemainingLength() from err
            raise
        if body.tell() != len(data):
            raise InvalidRemainingLength()
        self.state = PollHeaderState()
        return state.total, data, packet


def read_packet(codec: PollHeader[H, P], reader: BinaryIO) -> tuple[int, bytes, Any]:
    """Read one whole packet from a blocking reader."""
    result = GenericPollPacket(codec).poll(reader)
    if result is None:
        raise StreamError("WouldBlock", "reader has no data available")
    return result