import io

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mqttframe.errors import (
    InvalidRemainingLength,
    InvalidString,
    InvalidTopicName,
    UnexpectedEofError,
    ZeroPid,
)
from mqttframe.types import Pid, QoS, QosPid, TopicName
from mqttframe.utils import total_len
from mqttframe.v3.header import Header, PacketType
from mqttframe.v3.publish import Publish


def _encode(publish):
    buf = io.BytesIO()
    publish.encode(buf)
    return buf.getvalue()


def test_decode_qos0():
    header = Header.new_with(0b00110000, 10)
    publish = Publish.decode(io.BytesIO(b"\x00\x03a/bhello"), header)
    assert not publish.dup
    assert not publish.retain
    assert publish.qos_pid == QosPid.level0()
    assert publish.topic_name == "a/b"
    assert publish.payload == b"hello"


def test_decode_dup_flag():
    header = Header.new_with(0b00111000, 10)
    publish = Publish.decode(io.BytesIO(b"\x00\x03a/bhello"), header)
    assert publish.dup
    assert not publish.retain


def test_decode_qos2_with_pid():
    header = Header.new_with(0b00111101, 12)
    publish = Publish.decode(io.BytesIO(b"\x00\x03a/b\x00\x0ahello"), header)
    assert publish.dup
    assert publish.retain
    assert publish.qos_pid == QosPid.level2(Pid(10))
    assert publish.payload == b"hello"


def test_encode_wire_bytes():
    publish = Publish(QosPid.level2(Pid(10)), TopicName("a/b"), b"hello")
    data = _encode(publish)
    assert data == b"\x00\x03a/b\x00\x0ahello"
    assert publish.encode_len() == len(data)


def test_encode_total_length():
    publish = Publish(QosPid.level2(Pid(10)), TopicName("asdf"), b"hello", retain=True)
    assert total_len(publish.encode_len()) == 15


def test_defaults_and_plain_topic():
    publish = Publish(QosPid.level0(), "x/y")
    assert isinstance(publish.topic_name, TopicName)
    assert (publish.dup, publish.retain, publish.payload) == (False, False, b"")


def test_non_utf8_topic():
    header = Header.new_with(0b00110000, 10)
    with pytest.raises(InvalidString):
        Publish.decode(io.BytesIO(b"\x00\x03a/\xc0hello"), header)


def test_remaining_shorter_than_topic():
    header = Header.new_with(0b00110000, 3)
    with pytest.raises(InvalidRemainingLength):
        Publish.decode(io.BytesIO(b"\x00\x03a/b"), header)


def test_remaining_without_room_for_pid():
    header = Header.new_with(0b00110010, 5)
    with pytest.raises(InvalidRemainingLength):
        Publish.decode(io.BytesIO(b"\x00\x03a/b\x00\x01"), header)


def test_zero_pid():
    header = Header.new_with(0b00110010, 7)
    with pytest.raises(ZeroPid):
        Publish.decode(io.BytesIO(b"\x00\x03a/b\x00\x00"), header)


def test_wildcard_topic_name():
    header = Header.new_with(0b00110000, 5)
    with pytest.raises(InvalidTopicName):
        Publish.decode(io.BytesIO(b"\x00\x03a/+"), header)


def test_truncated_payload():
    header = Header.new_with(0b00110000, 10)
    with pytest.raises(UnexpectedEofError):
        Publish.decode(io.BytesIO(b"\x00\x03a/bhel"), header)


_topics = st.text(
    alphabet=st.characters(blacklist_characters="+#\0", blacklist_categories=("Cs",)),
    max_size=30,
)


@given(
    topic=_topics,
    payload=st.binary(max_size=200),
    qos=st.sampled_from(list(QoS)),
    pid=st.integers(min_value=1, max_value=0xFFFF),
    dup=st.booleans(),
    retain=st.booleans(),
)
def test_round_trip(topic, payload, qos, pid, dup, retain):
    qos_pid = QosPid.level0() if qos == QoS.LEVEL0 else QosPid(qos, Pid(pid))
    publish = Publish(qos_pid, TopicName(topic), payload, dup=dup, retain=retain)
    data = _encode(publish)
    assert len(data) == publish.encode_len()
    header = Header(PacketType.PUBLISH, dup, qos, retain, len(data))
    reader = io.BytesIO(data)
    assert Publish.decode(reader, header) == publish
    assert reader.read() == b""