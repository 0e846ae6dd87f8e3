"""Core MQTT value types: protocol versions, packet ids, QoS and topics."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import BinaryIO, Optional

from .errors import (
    InvalidProtocol,
    InvalidQos,
    InvalidString,
    InvalidTopicFilter,
    InvalidTopicName,
    ZeroPid,
)
from .utils import read_bytes, read_u8, write_bytes, write_u8

LEVEL_SEP = "/"
"""Separates the levels of a topic tree."""
MATCH_ONE_CHAR = "+"
"""Wildcard matching exactly one topic level."""
MATCH_ALL_CHAR = "#"
"""Wildcard matching any number of topic levels."""
MATCH_ONE_STR = MATCH_ONE_CHAR
MATCH_ALL_STR = MATCH_ALL_CHAR

SYS_PREFIX = "$SYS/"
"""Prefix of system topics."""
SHARED_PREFIX = "$share/"
"""Prefix of shared subscription filters."""

MQISDP = b"MQIsdp"
MQTT = b"MQTT"

_U16_MAX = 0xFFFF


class Protocol(enum.IntEnum):
    """Protocol version; the value is the protocol level byte."""

    V310 = 3
    V311 = 4
    V500 = 5

    @classmethod
    def from_pair(cls, name: bytes, level: int) -> "Protocol":
        """Return the version for a protocol name and level."""
        for protocol in cls:
            if protocol.to_pair() == (bytes(name), level):
                return protocol
        try:
            text = bytes(name).decode("utf-8")
        except UnicodeDecodeError as err:
            raise InvalidString() from err
        raise InvalidProtocol(text, level)

    def to_pair(self) -> tuple[bytes, int]:
        """Return the protocol name and level."""
        return (MQISDP if self is Protocol.V310 else MQTT, int(self.value))

    @classmethod
    def decode(cls, reader: BinaryIO) -> "Protocol":
        """Read a protocol name and level from ``reader``."""
        name = read_bytes(reader)
        level = read_u8(reader)
        return cls.from_pair(name, level)

    def encode(self, writer: BinaryIO) -> None:
        """Write the protocol name and level."""
        name, level = self.to_pair()
        write_bytes(writer, name)
        write_u8(writer, level)

    def encode_len(self) -> int:
        """Return the encoded size in bytes."""
        name, _level = self.to_pair()
        return 2 + len(name) + 1

    def __str__(self) -> str:
        return {
            Protocol.V310: "v3.1",
            Protocol.V311: "v3.1.1",
            Protocol.V500: "v5.0",
        }[self]


@dataclass(frozen=True, order=True)
class Pid:
    """Packet identifier, a 16-bit value that is never 0."""

    value: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or not 0 <= self.value <= _U16_MAX:
            raise ValueError(f"packet identifier out of range: {self.value!r}")
        if self.value == 0:
            raise ZeroPid()

    @staticmethod
    def _check_step(other: object) -> int:
        if not 0 <= other <= _U16_MAX:  # type: ignore[operator]
            raise ValueError(f"step out of range: {other!r}")
        return other  # type: ignore[return-value]

    def __add__(self, other: object) -> "Pid":
        """Add, wrapping around and skipping 0."""
        if not isinstance(other, int):
            return NotImplemented
        step = self._check_step(other)
        total = self.value + step
        if total > _U16_MAX:
            total = total - (_U16_MAX + 1) + 1
        return Pid(total)

    def __sub__(self, other: object) -> "Pid":
        """Subtract, wrapping around and skipping 0."""
        if not isinstance(other, int):
            return NotImplemented
        step = self._check_step(other)
        diff = self.value - step
        overflowed = diff < 0
        wrapped = diff % (_U16_MAX + 1)
        if wrapped == 0:
            return Pid(_U16_MAX)
        if overflowed:
            return Pid(wrapped - 1)
        return Pid(wrapped)

    def __int__(self) -> int:
        return self.value


class QoS(enum.IntEnum):
    """Delivery quality of service level."""

    LEVEL0 = 0
    LEVEL1 = 1
    LEVEL2 = 2

    @classmethod
    def from_u8(cls, byte: int) -> "QoS":
        """Return the level for a byte, raising ``InvalidQos`` if unknown."""
        try:
            return cls(byte)
        except ValueError:
            raise InvalidQos(byte) from None


@dataclass(frozen=True)
class QosPid:
    """A QoS level together with the packet id it needs (none for level 0)."""

    qos: QoS
    pid: Optional[Pid] = None

    def __post_init__(self) -> None:
        if self.qos == QoS.LEVEL0:
            if self.pid is not None:
                raise ValueError("QoS 0 carries no packet identifier")
        elif self.pid is None:
            raise ValueError(f"QoS {int(self.qos)} needs a packet identifier")

    @classmethod
    def level0(cls) -> "QosPid":
        return cls(QoS.LEVEL0)

    @classmethod
    def level1(cls, pid: Pid) -> "QosPid":
        return cls(QoS.LEVEL1, pid)

    @classmethod
    def level2(cls, pid: Pid) -> "QosPid":
        return cls(QoS.LEVEL2, pid)


def _byte_len(value: str) -> int:
    return len(value.encode("utf-8"))


class TopicName(str):
    """A validated topic name."""

    __slots__ = ()

    def __new__(cls, value: str) -> "TopicName":
        if cls.is_invalid(value):
            raise InvalidTopicName(value)
        return super().__new__(cls, value)

    @staticmethod
    def is_invalid(value: str) -> bool:
        """Whether ``value`` cannot be a topic name."""
        if _byte_len(value) > _U16_MAX:
            return True
        return any(c in (MATCH_ONE_CHAR, MATCH_ALL_CHAR, "\0") for c in value)

    def is_shared(self) -> bool:
        return self.startswith(SHARED_PREFIX)

    def is_sys(self) -> bool:
        return self.startswith(SYS_PREFIX)

    def __repr__(self) -> str:
        return f"TopicName({str.__repr__(self)})"


_INVALID = (True, 0)


class TopicFilter(str):
    """A validated topic filter; equality, order and hash use the text only."""

    def __new__(cls, value: str) -> "TopicFilter":
        invalid, shared_filter_sep = cls.is_invalid(value)
        if invalid:
            raise InvalidTopicFilter(value)
        instance = super().__new__(cls, value)
        instance._shared_filter_sep = shared_filter_sep
        return instance

    @staticmethod
    def is_invalid(value: str) -> tuple[bool, int]:
        """Check a filter; also return the byte index of the '/' before a shared filter."""
        if _byte_len(value) > _U16_MAX or not value:
            return _INVALID

        last_sep: Optional[int] = None
        has_all = False
        has_one = False
        byte_idx = 0
        is_shared = True
        shared_group_sep = 0
        shared_filter_sep = 0
        for char_idx, c in enumerate(value):
            if c == "\0" or has_all:
                return _INVALID
            if is_shared and char_idx < len(SHARED_PREFIX) and c != SHARED_PREFIX[char_idx]:
                is_shared = False

            if c == LEVEL_SEP:
                if is_shared:
                    if shared_group_sep == 0:
                        shared_group_sep = byte_idx
                    elif shared_filter_sep == 0:
                        shared_filter_sep = byte_idx
                # "+" must occupy a whole level
                one_level = last_sep is not None and char_idx == last_sep + 2
                if has_one and not one_level and char_idx != 1:
                    return _INVALID
                last_sep = char_idx
                has_one = False
            elif c in (MATCH_ALL_CHAR, MATCH_ONE_CHAR):
                if shared_group_sep > 0 and shared_filter_sep == 0:
                    return _INVALID
                if has_one:
                    return _INVALID
                at_level_start = (
                    last_sep is not None and char_idx == last_sep + 1
                ) or char_idx == 0
                if not at_level_start:
                    return _INVALID
                if c == MATCH_ALL_CHAR:
                    has_all = True
                else:
                    has_one = True

            byte_idx += _byte_len(c)

        if shared_filter_sep > 0 and shared_filter_sep == _byte_len(value) - 1:
            return _INVALID
        if shared_group_sep > 0 and shared_filter_sep == 0:
            return _INVALID
        if shared_group_sep + 1 == shared_filter_sep:
            return _INVALID
        return (False, shared_filter_sep)

    def is_shared(self) -> bool:
        return self._shared_filter_sep > 0

    def is_sys(self) -> bool:
        return self.startswith(SYS_PREFIX)

    def shared_group_name(self) -> Optional[str]:
        """The group of a shared filter, or None."""
        info = self.shared_info()
        return info[0] if info else None

    def shared_filter(self) -> Optional[str]:
        """The filter part of a shared filter, or None."""
        info = self.shared_info()
        return info[1] if info else None

    def shared_info(self) -> Optional[tuple[str, str]]:
        """Return ``(group name, filter)`` of a shared filter, or None."""
        if not self.is_shared():
            return None
        raw = self.encode("utf-8")
        sep = self._shared_filter_sep
        prefix_len = len(SHARED_PREFIX)
        return raw[prefix_len:sep].decode("utf-8"), raw[sep + 1 :].decode("utf-8")

    def __getnewargs__(self) -> tuple[str]:
        return (str(self),)

    def __repr__(self) -> str:
        return f"TopicFilter({str.__repr__(self)})"