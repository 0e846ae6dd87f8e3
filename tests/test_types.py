import io

import pytest
from hypothesis import given, strategies as st

from mqttframe.errors import (
    InvalidProtocol,
    InvalidQos,
    InvalidString,
    InvalidTopicFilter,
    InvalidTopicName,
    UnexpectedEofError,
    ZeroPid,
)
from mqttframe.types import Pid, Protocol, QoS, QosPid, TopicFilter, TopicName

U16_MAX = 0xFFFF


@pytest.mark.parametrize(
    "cur, d, prev, nxt",
    [
        (2, 1, 1, 3),
        (100, 1, 99, 101),
        (1, 1, U16_MAX, 2),
        (1, 2, U16_MAX - 1, 3),
        (1, 3, U16_MAX - 2, 4),
        (U16_MAX, 1, U16_MAX - 1, 1),
        (U16_MAX, 2, U16_MAX - 2, 2),
        (10, U16_MAX, 10, 10),
        (10, 0, 10, 10),
        (1, 0, 1, 1),
        (U16_MAX, 0, U16_MAX, U16_MAX),
    ],
)
def test_pid_add_sub(cur, d, prev, nxt):
    pid = Pid(cur)
    assert (pid - d).value == prev
    assert (pid + d).value == nxt


@given(st.integers(1, U16_MAX), st.integers(0, U16_MAX))
def test_pid_add_then_sub_is_identity(value, step):
    pid = Pid(value)
    assert (pid + step) - step == pid


def test_pid_zero_and_default():
    with pytest.raises(ZeroPid):
        Pid(0)
    assert Pid().value == 1


def test_pid_inplace_add():
    pid = Pid(U16_MAX)
    pid += 1
    assert pid == Pid(1)


@pytest.mark.parametrize(
    "value",
    ["/abc/def", "abc/def", "abc", "/", "//", ""],
)
def test_valid_topic_name(value):
    assert TopicName.is_invalid(value) is False


def test_topic_name_length_limit():
    assert TopicName.is_invalid("a" * U16_MAX) is False
    assert TopicName.is_invalid("a" * (U16_MAX + 1)) is True


@pytest.mark.parametrize(
    "value",
    ["#", "+", "/+", "/#", "abc/\0", "abc\0def", "abc#def", "abc+def"],
)
def test_invalid_topic_name(value):
    assert TopicName.is_invalid(value) is True
    with pytest.raises(InvalidTopicName):
        TopicName(value)


def test_topic_name_prefixes():
    assert TopicName("$SYS/a").is_sys() is True
    assert TopicName("$share/g/a").is_shared() is True
    assert TopicName("a/b").is_sys() is False
    assert TopicName("a/b") == "a/b"


VALID_FILTERS = [
    "abc/def", "abc/+", "abc/#", "#", "+", "+/", "+/+", "///", "//+/",
    "//abc/", "//+//#", "/abc/+//#", "+/abc/+",
]
INVALID_FILTERS = [
    "abc\0def", "abc/\0def", "++", "++/", "/++", "abc/++", "abc/++/", "#/abc",
    "/ab#", "##", "/abc/ab#", "/+#", "//+#", "/abc/+#", "xxx/abc/+#",
    "xxx/a+bc/", "x+x/abc/", "x+/abc/", "+x/abc/", "+/abc/++", "+/a+c/+",
]


@pytest.mark.parametrize("topic", VALID_FILTERS)
def test_valid_topic_filter(topic):
    assert TopicFilter.is_invalid(topic) == (False, 0)


@pytest.mark.parametrize("topic", INVALID_FILTERS + [""])
def test_invalid_topic_filter(topic):
    assert TopicFilter.is_invalid(topic) == (True, 0)
    with pytest.raises(InvalidTopicFilter):
        TopicFilter(topic)


def test_topic_filter_length_limit():
    assert TopicFilter.is_invalid("a" * U16_MAX) == (False, 0)
    assert TopicFilter.is_invalid("a" * (U16_MAX + 1)) == (True, 0)


@pytest.mark.parametrize("topic", VALID_FILTERS)
def test_valid_shared_topic_filter(topic):
    assert TopicFilter.is_invalid(f"$share/xyz/{topic}") == (False, 10)


@pytest.mark.parametrize("topic", INVALID_FILTERS)
def test_invalid_shared_topic_filter(topic):
    assert TopicFilter.is_invalid(f"$share/xyz/{topic}") == (True, 0)


@pytest.mark.parametrize(
    "raw, group, shared",
    [
        ("$abc/a/b", None, None),
        ("$abc/a/b/xyz/def", None, None),
        ("$sys/abc", None, None),
        ("$share/abc/xyz", "abc", "xyz"),
        ("$share/abc/xyz/ijk", "abc", "xyz/ijk"),
        ("$share/abc//xyz", "abc", "/xyz"),
        ("$share/abc//#", "abc", "/#"),
        ("$share/abc//a/x/+", "abc", "/a/x/+"),
        ("$share/abc/+", "abc", "+"),
        ("$share/你好/+", "你好", "+"),
        ("$share/你好/你好", "你好", "你好"),
        ("$share/abc/#", "abc", "#"),
    ],
)
def test_shared_filter_parts(raw, group, shared):
    topic_filter = TopicFilter(raw)
    assert topic_filter.shared_group_name() == group
    assert topic_filter.shared_filter() == shared
    if group is None:
        assert topic_filter.shared_info() is None
        assert topic_filter.is_shared() is False
    else:
        assert topic_filter.shared_info() == (group, shared)
        assert topic_filter.is_shared() is True


@pytest.mark.parametrize(
    "raw", ["$share/abc/", "$share/abc", "$share/+/y", "$share/+/+", "$share//y", "$share//+"]
)
def test_bad_shared_filters(raw):
    assert TopicFilter.is_invalid(raw) == (True, 0)


def test_topic_filter_equality_and_hash():
    assert TopicFilter("a/+") == TopicFilter("a/+")
    assert {TopicFilter("a/+"), TopicFilter("a/+")} == {TopicFilter("a/+")}
    assert TopicFilter("a") < TopicFilter("b")
    assert TopicFilter("$SYS/x").is_sys() is True


@pytest.mark.parametrize(
    "protocol, encoded, text",
    [
        (Protocol.V310, b"\x00\x06MQIsdp\x03", "v3.1"),
        (Protocol.V311, b"\x00\x04MQTT\x04", "v3.1.1"),
        (Protocol.V500, b"\x00\x04MQTT\x05", "v5.0"),
    ],
)
def test_protocol_encode_decode(protocol, encoded, text):
    buffer = io.BytesIO()
    protocol.encode(buffer)
    assert buffer.getvalue() == encoded
    assert protocol.encode_len() == len(encoded)
    assert Protocol.decode(io.BytesIO(encoded)) is protocol
    assert str(protocol) == text


def test_protocol_pairs():
    assert Protocol.V310.to_pair() == (b"MQIsdp", 3)
    assert Protocol.from_pair(b"MQTT", 4) is Protocol.V311


def test_protocol_invalid():
    with pytest.raises(InvalidProtocol) as info:
        Protocol.from_pair(b"MQTT", 1)
    assert info.value == InvalidProtocol("MQTT", 1)
    with pytest.raises(InvalidString):
        Protocol.from_pair(b"\xc0", 4)
    with pytest.raises(UnexpectedEofError):
        Protocol.decode(io.BytesIO(b"\x00\x04MQ"))


def test_qos_from_u8():
    assert QoS.from_u8(0) is QoS.LEVEL0
    assert QoS.from_u8(2) is QoS.LEVEL2
    with pytest.raises(InvalidQos) as info:
        QoS.from_u8(3)
    assert info.value.value == 3


def test_qos_pid():
    assert QosPid.level0().pid is None
    assert QosPid.level0().qos is QoS.LEVEL0
    assert QosPid.level1(Pid(5)).pid == Pid(5)
    assert QosPid.level2(Pid(7)).qos is QoS.LEVEL2
    assert QosPid.level1(Pid(5)) == QosPid(QoS.LEVEL1, Pid(5))
    with pytest.raises(ValueError):
        QosPid(QoS.LEVEL1)