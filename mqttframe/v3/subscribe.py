"""Bodies of the MQTT v3.x subscribe, suback and unsubscribe packets."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import BinaryIO, Iterable

from ..errors import EmptySubscription, InvalidQos, InvalidRemainingLength
from ..types import Pid, QoS, TopicFilter
from ..utils import read_string, read_u16, read_u8, write_bytes, write_u16, write_u8


def _byte_len(value: str) -> int:
    return len(value.encode("utf-8"))


def _consume(remaining: int, size: int) -> int:
    remaining -= size
    if remaining < 0:
        raise InvalidRemainingLength()
    return remaining


class SubscribeReturnCode(enum.IntEnum):
    """Per-topic result in a suback packet."""

    MAX_LEVEL0 = 0
    MAX_LEVEL1 = 1
    MAX_LEVEL2 = 2
    FAILURE = 0x80

    @classmethod
    def from_u8(cls, value: int) -> "SubscribeReturnCode":
        """Return the code for a byte, raising ``InvalidQos`` if unknown."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidQos(value) from None

    @classmethod
    def from_qos(cls, qos: QoS) -> "SubscribeReturnCode":
        """Return the success code granting ``qos``."""
        return cls(int(QoS(qos)))


@dataclass(frozen=True)
class Subscribe:
    """Subscribe packet body: a packet id and (filter, maximum QoS) pairs."""

    pid: Pid
    topics: tuple[tuple[TopicFilter, QoS], ...]

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "topics",
            tuple((TopicFilter(f) if not isinstance(f, TopicFilter) else f, QoS(q))
                  for f, q in self.topics),
        )

    @classmethod
    def decode(cls, reader: BinaryIO, remaining_len: int) -> "Subscribe":
        """Read a body of ``remaining_len`` bytes."""
        pid = Pid(read_u16(reader))
        remaining = _consume(remaining_len, 2)
        if remaining == 0:
            raise EmptySubscription()
        topics = []
        while remaining > 0:
            topic_filter = TopicFilter(read_string(reader))
            max_qos = QoS.from_u8(read_u8(reader))
            remaining = _consume(remaining, 3 + _byte_len(topic_filter))
            topics.append((topic_filter, max_qos))
        return cls(pid, tuple(topics))

    def encode(self, writer: BinaryIO) -> None:
        write_u16(writer, self.pid.value)
        for topic_filter, max_qos in self.topics:
            write_bytes(writer, topic_filter.encode("utf-8"))
            write_u8(writer, int(max_qos))

    def encode_len(self) -> int:
        return 2 + sum(3 + _byte_len(f) for f, _ in self.topics)


@dataclass(frozen=True)
class Suback:
    """Suback packet body: a packet id and one return code per topic."""

    pid: Pid
    topics: tuple[SubscribeReturnCode, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "topics", tuple(SubscribeReturnCode(c) for c in self.topics))

    @classmethod
    def decode(cls, reader: BinaryIO, remaining_len: int) -> "Suback":
        """Read a body of ``remaining_len`` bytes."""
        pid = Pid(read_u16(reader))
        remaining = _consume(remaining_len, 2)
        codes = [SubscribeReturnCode.from_u8(read_u8(reader)) for _ in range(remaining)]
        return cls(pid, tuple(codes))

    def encode(self, writer: BinaryIO) -> None:
        write_u16(writer, self.pid.value)
        for code in self.topics:
            write_u8(writer, int(code))

    def encode_len(self) -> int:
        return 2 + len(self.topics)


@dataclass(frozen=True)
class Unsubscribe:
    """Unsubscribe packet body: a packet id and the filters to drop."""

    pid: Pid
    topics: tuple[TopicFilter, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "topics", _filters(self.topics))

    @classmethod
    def decode(cls, reader: BinaryIO, remaining_len: int) -> "Unsubscribe":
        """Read a body of ``remaining_len`` bytes."""
        pid = Pid(read_u16(reader))
        remaining = _consume(remaining_len, 2)
        if remaining == 0:
            raise EmptySubscription()
        topics = []
        while remaining > 0:
            topic_filter = TopicFilter(read_string(reader))
            remaining = _consume(remaining, 2 + _byte_len(topic_filter))
            topics.append(topic_filter)
        return cls(pid, tuple(topics))

    def encode(self, writer: BinaryIO) -> None:
        write_u16(writer, self.pid.value)
        for topic_filter in self.topics:
            write_bytes(writer, topic_filter.encode("utf-8"))

    def encode_len(self) -> int:
        return 2 + sum(2 + _byte_len(f) for f in self.topics)


def _filters(values: Iterable[str]) -> tuple[TopicFilter, ...]:
    return tuple(v if isinstance(v, TopicFilter) else TopicFilter(v) for v in values)