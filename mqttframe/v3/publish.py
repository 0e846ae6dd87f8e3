"""Body of the MQTT v3.x publish packet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from ..errors import InvalidRemainingLength
from ..types import Pid, QoS, QosPid, TopicName
from ..utils import read_exact, read_string, read_u16, write_bytes, write_u16
from .header import Header


@dataclass(frozen=True)
class Publish:
    """Publish packet body together with its header flags."""

    qos_pid: QosPid
    topic_name: TopicName
    payload: bytes = b""
    dup: bool = False
    retain: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.topic_name, TopicName):
            object.__setattr__(self, "topic_name", TopicName(self.topic_name))
        object.__setattr__(self, "payload", bytes(self.payload))

    @classmethod
    def decode(cls, reader: BinaryIO, header: Header) -> "Publish":
        """Read the body described by ``header`` from ``reader``."""
        remaining = header.remaining_len
        topic = read_string(reader)
        remaining -= 2 + len(topic.encode("utf-8"))
        if remaining < 0:
            raise InvalidRemainingLength()
        if header.qos == QoS.LEVEL0:
            qos_pid = QosPid.level0()
        else:
            remaining -= 2
            if remaining < 0:
                raise InvalidRemainingLength()
            qos_pid = QosPid(header.qos, Pid(read_u16(reader)))
        payload = read_exact(reader, remaining) if remaining > 0 else b""
        return cls(
            qos_pid=qos_pid,
            topic_name=TopicName(topic),
            payload=payload,
            dup=header.dup,
            retain=header.retain,
        )

    def encode(self, writer: BinaryIO) -> None:
        """Write the body: topic, packet id if any, then payload."""
        write_bytes(writer, self.topic_name.encode("utf-8"))
        if self.qos_pid.pid is not None:
            write_u16(writer, self.qos_pid.pid.value)
        writer.write(self.payload)

    def encode_len(self) -> int:
        """Return the body size in bytes."""
        length = 2 + len(self.topic_name.encode("utf-8"))
        if self.qos_pid.pid is not None:
            length += 2
        return length + len(self.payload)