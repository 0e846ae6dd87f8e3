# mqttframe

A pure-Python encoder and decoder for MQTT v3.1 and v3.1.1 control packets.
It uses only the standard library. It turns packet objects into bytes on the
wire and turns bytes back into packet objects. It checks the fixed-header
flags, the remaining-length limits and the topic rules along the way.

## Modules

- `mqttframe.errors`: `MqttError` and its subclasses (`InvalidHeader`,
  `InvalidRemainingLength`, `InvalidQos`, `InvalidString`, `ZeroPid`,
  `EmptySubscription`, `InvalidVarByteInt`, `InvalidTopicName`,
  `InvalidTopicFilter`, `InvalidProtocol`, `StreamError`,
  `UnexpectedEofError`, and others). `MqttError.is_eof()` is true only when
  the input ended too early.
- `mqttframe.utils`: readers and writers for the wire primitives. These
  cover big-endian integers, length-prefixed bytes and strings, and variable
  byte integers (`decode_var_int`, `write_var_int`). It also holds the size
  helpers `var_int_len`, `total_len`, `header_len` and `remaining_len`, and
  `encode_packet`.
- `mqttframe.types`:
  - `Protocol`: v3.1, v3.1.1 and v5.0 name and level pairs.
  - `Pid`: packet identifier, never zero, with wrapping arithmetic.
  - `QoS` and `QosPid`.
  - `TopicName` and `TopicFilter`: validated `str` subclasses.
- `mqttframe.v3.header`: `PacketType` and the fixed `Header`.
- `mqttframe.v3.publish`, `mqttframe.v3.subscribe`: the bodies `Publish`,
  `Subscribe`, `Suback` (with `SubscribeReturnCode`) and `Unsubscribe`.
- `mqttframe.v3.packet`: the acknowledgements `Puback`, `Pubrec`, `Pubrel`,
  `Pubcomp` and `Unsuback`, and `Pingreq`, `Pingresp` and `Disconnect`. It
  also has the functions `decode`, `decode_from`, `encode`, `encode_to`,
  `encode_len` and `get_type`.
- `mqttframe.v3.poll`: `PacketPoller` and `poll_packet` for reading packets
  from a stream.
- `mqttframe.poll`: the generic machinery behind `mqttframe.v3.poll`
  (`GenericPollPacket`, `PollHeader`, `read_packet`).

## Encoding and decoding

```python
from mqttframe.types import Pid, QosPid, TopicName
from mqttframe.v3.packet import Pingreq, decode, encode, encode_len
from mqttframe.v3.publish import Publish

publish = Publish(
    dup=False,
    retain=True,
    qos_pid=QosPid.level2(Pid(10)),
    topic_name=TopicName("asdf"),
    payload=b"hello",
)

data = encode(publish)
assert len(data) == encode_len(publish) == 15
assert decode(data) == publish

assert encode(Pingreq()) == b"\xc0\x00"
```

`decode` returns `None` when the bytes do not yet hold a whole packet. A
malformed packet raises a subclass of `MqttError`.

## Topics

```python
from mqttframe.types import TopicFilter, TopicName

assert TopicName.is_invalid("a/+/b")
assert not TopicName.is_invalid("a/b")

shared = TopicFilter("$share/group/sensors/+")
assert shared.is_shared()
assert shared.shared_info() == ("group", "sensors/+")
```

Building a `TopicName` or `TopicFilter` from an invalid string raises
`InvalidTopicName` or `InvalidTopicFilter`.

## Packet identifiers

`Pid` arithmetic wraps around and skips zero:

```python
from mqttframe.types import Pid

assert (Pid(65535) + 1).value == 1
assert (Pid(1) - 1).value == 65535
```

## Reading from a stream

`mqttframe.v3.poll.poll_packet(reader)` reads exactly one packet from a
blocking binary stream. It returns `(total size, body bytes, packet)`. If the
stream ends during the header or the body, it raises `UnexpectedEofError`. If
the body does not match the announced remaining length, it raises
`InvalidRemainingLength`.

For non-blocking readers, keep one `PacketPoller` and call its
`poll(reader)` method repeatedly. It returns `None` while the reader has no
data (a read returning `None` or raising `BlockingIOError`). Each call picks
up where the previous one stopped, and it returns the finished tuple once a
packet is complete.

## What it does not do

- It does not handle connect or connack packets. Their headers are parsed, but
  decoding them raises `InvalidHeader`, and there are no classes to encode them.
- It does not decode or encode MQTT v5.0 packets. `Protocol.V500` is only
  recognised as a name and level pair.
- It is a codec only. It has no client, broker, network connection or
  session handling.