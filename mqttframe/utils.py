"""Primitive readers and writers for the MQTT wire format."""

from __future__ import annotations

import io
import struct
from typing import BinaryIO, Protocol, runtime_checkable

from .errors import InvalidString, InvalidVarByteInt, StreamError, UnexpectedEofError

MAX_VAR_INT = 268_435_456
_U16_MAX = 0xFFFF


@runtime_checkable
class Encodable(Protocol):
    """A value that can write itself to a binary writer and tell its size."""

    def encode(self, writer: BinaryIO) -> None:
        """Write the encoded value to ``writer``."""

    def encode_len(self) -> int:
        """Return the encoded size in bytes."""


def read_exact(reader: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes, raising ``UnexpectedEofError`` if the input ends."""
    chunks = []
    missing = size
    while missing > 0:
        try:
            chunk = reader.read(missing)
        except OSError as err:
            raise StreamError(type(err).__name__, str(err)) from err
        if not chunk:
            raise UnexpectedEofError()
        chunks.append(chunk)
        missing -= len(chunk)
    return b"".join(chunks)


def read_u8(reader: BinaryIO) -> int:
    """Read one byte."""
    return read_exact(reader, 1)[0]


def read_u16(reader: BinaryIO) -> int:
    """Read a big-endian 16-bit unsigned integer."""
    return struct.unpack(">H", read_exact(reader, 2))[0]


def read_u32(reader: BinaryIO) -> int:
    """Read a big-endian 32-bit unsigned integer."""
    return struct.unpack(">I", read_exact(reader, 4))[0]


def read_bytes(reader: BinaryIO) -> bytes:
    """Read binary data prefixed by its 16-bit length."""
    return read_exact(reader, read_u16(reader))


def read_string(reader: BinaryIO) -> str:
    """Read a UTF-8 string prefixed by its 16-bit length."""
    data = read_bytes(reader)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as err:
        raise InvalidString() from err


def write_u8(writer: BinaryIO, value: int) -> None:
    """Write one byte."""
    writer.write(struct.pack(">B", value))


def write_u16(writer: BinaryIO, value: int) -> None:
    """Write a big-endian 16-bit unsigned integer."""
    writer.write(struct.pack(">H", value))


def write_u32(writer: BinaryIO, value: int) -> None:
    """Write a big-endian 32-bit unsigned integer."""
    writer.write(struct.pack(">I", value))


def write_bytes(writer: BinaryIO, data: bytes) -> None:
    """Write binary data prefixed by its 16-bit length."""
    if len(data) > _U16_MAX:
        raise ValueError(f"data of {len(data)} bytes does not fit a 16-bit length")
    write_u16(writer, len(data))
    writer.write(data)


def write_var_int(writer: BinaryIO, value: int) -> None:
    """Write a variable byte integer."""
    encoded = bytearray()
    while True:
        byte = value % 128
        value //= 128
        if value > 0:
            byte |= 0x80
        encoded.append(byte)
        if value == 0:
            break
    writer.write(bytes(encoded))


def decode_var_int(reader: BinaryIO) -> tuple[int, int]:
    """Read a variable byte integer of at most 4 bytes; return ``(value, size)``."""
    value = 0
    for index in range(4):
        byte = read_u8(reader)
        value |= (byte & 0x7F) << (7 * index)
        if not byte & 0x80:
            return value, index + 1
    raise InvalidVarByteInt()


def decode_raw_header(reader: BinaryIO) -> tuple[int, int]:
    """Read the control byte and the remaining length."""
    control_byte = read_u8(reader)
    remaining, _size = decode_var_int(reader)
    return control_byte, remaining


def var_int_len(value: int) -> int:
    """Return the encoded size of a variable byte integer."""
    if value < 128:
        return 1
    if value < 16_384:
        return 2
    if value < 2_097_152:
        return 3
    if value < MAX_VAR_INT:
        return 4
    raise InvalidVarByteInt()


def total_len(remaining_len: int) -> int:
    """Return the whole packet size for a given remaining length."""
    return 1 + var_int_len(remaining_len) + remaining_len


def header_len(total_len: int) -> int:
    """Return the fixed header size for a valid total packet size."""
    if total_len < 128 + 2:
        return 2
    if total_len < 16_384 + 3:
        return 3
    if total_len < 2_097_152 + 4:
        return 4
    return 5


def remaining_len(total_len: int) -> int:
    """Return the remaining length for a valid total packet size."""
    return total_len - header_len(total_len)


def encode_packet(control_byte: int, body: Encodable) -> bytes:
    """Encode a whole packet from its control byte and body."""
    body_len = body.encode_len()
    total = total_len(body_len)
    buffer = io.BytesIO()
    write_u8(buffer, control_byte)
    write_var_int(buffer, body_len)
    body.encode(buffer)
    data = buffer.getvalue()
    assert len(data) == total, "encoded size differs from encode_len"
    return data