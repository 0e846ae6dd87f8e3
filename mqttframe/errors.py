"""Errors raised while encoding and decoding MQTT packets."""

from __future__ import annotations

from typing import Any


class MqttError(Exception):
    """Base class of every encoding or decoding error."""

    template = "mqtt error"

    def __str__(self) -> str:
        return self.template.format(*self.args)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MqttError):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))

    def is_eof(self) -> bool:
        """Whether the error means the input ended too early."""
        return False


class InvalidRemainingLength(MqttError):
    """The remaining length does not match the packet body."""

    template = "invalid remaining length"


class EmptySubscription(MqttError):
    """A subscribe or unsubscribe packet carries no topic."""

    template = "empty subscription"


class ZeroPid(MqttError):
    """A packet identifier is 0."""

    template = "packet identifier is 0"


class InvalidQos(MqttError):
    """A QoS value outside 0..2."""

    template = "invalid qos: `{}`"

    def __init__(self, value: int) -> None:
        super().__init__(value)
        self.value = value


class InvalidConnectFlags(MqttError):
    """Connect flags with reserved or inconsistent bits."""

    template = "invalid connect flags: `{}`"

    def __init__(self, flags: int) -> None:
        super().__init__(flags)
        self.flags = flags


class InvalidConnackFlags(MqttError):
    """Connack flags other than 0 or 1."""

    template = "invalid connack flags: `{}`"

    def __init__(self, flags: int) -> None:
        super().__init__(flags)
        self.flags = flags


class InvalidConnectReturnCode(MqttError):
    """A connect return code greater than 5."""

    template = "invalid connect return code: `{}`"

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


class InvalidProtocol(MqttError):
    """An unknown protocol name and level pair."""

    template = "invalid protocol: {}, {}"

    def __init__(self, name: str, level: int) -> None:
        super().__init__(name, level)
        self.name = name
        self.level = level


class UnexpectedProtocol(MqttError):
    """A protocol version that is valid but not expected here."""

    template = "unexpected protocol version: `{}`"

    def __init__(self, protocol: Any) -> None:
        super().__init__(protocol)
        self.protocol = protocol


class InvalidHeader(MqttError):
    """Invalid fixed header: packet type, flags or remaining length."""

    template = "invalid header"


class InvalidVarByteInt(MqttError):
    """A variable byte integer not below 268,435,456."""

    template = "invalid variable byte integer"


class InvalidTopicName(MqttError):
    """A topic name that breaks the topic rules."""

    template = "invalid topic name: {}"

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


class InvalidTopicFilter(MqttError):
    """A topic filter that breaks the filter rules."""

    template = "invalid topic filter: {}"

    def __init__(self, value: str) -> None:
        super().__init__(value)
        self.value = value


class InvalidString(MqttError):
    """A string field that is not valid UTF-8."""

    template = "invalid string"


class StreamError(MqttError):
    """An input or output failure of the underlying stream."""

    template = "io error: {}, {}"

    def __init__(self, kind: str, info: str) -> None:
        super().__init__(kind, info)
        self.kind = kind
        self.info = info


class UnexpectedEofError(StreamError):
    """The stream ended before a whole value could be read."""

    KIND = "unexpected end of file"

    def __init__(self, info: str = "eof") -> None:
        super().__init__(self.KIND, info)

    def is_eof(self) -> bool:
        return True