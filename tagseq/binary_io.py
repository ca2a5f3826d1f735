"""Little-endian binary primitives shared by the mapping file formats.

Integers are unsigned 64-bit. Strings are a u64 byte length followed by their
UTF-8 bytes. Readers return None on a clean end of stream so that callers can
loop until the stream is exhausted.
"""
from __future__ import annotations
import struct
from typing import BinaryIO, Optional

from .errors import CorruptMappingError

_U64 = struct.Struct("<Q")


def write_u64(stream: BinaryIO, value: int) -> None:
    stream.write(_U64.pack(value))


def write_string(stream: BinaryIO, value: str) -> None:
    data = value.encode("utf-8")
    write_u64(stream, len(data))
    stream.write(data)


def _read_exact(stream: BinaryIO, size: int, what: str) -> Optional[bytes]:
    data = stream.read(size)
    if not data:
        return None
    while len(data) < size:
        # gzip streams may return short reads
        more = stream.read(size - len(data))
        if not more:
            raise CorruptMappingError(
                f"Truncated {what}: expected {size} bytes, got {len(data)}."
            )
        data += more
    return data


def read_u64(stream: BinaryIO) -> Optional[int]:
    """Reads one u64, or returns None if the stream is already exhausted."""
    data = _read_exact(stream, _U64.size, "integer")
    if data is None:
        return None
    return _U64.unpack(data)[0]


def read_string(stream: BinaryIO) -> Optional[str]:
    """Reads one length-prefixed string, or returns None at end of stream."""
    length = read_u64(stream)
    if length is None:
        return None
    if length == 0:
        return ""
    data = _read_exact(stream, length, "string")
    if data is None:
        raise CorruptMappingError(f"Missing {length} string bytes after length prefix.")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CorruptMappingError(f"String bytes are not valid UTF-8: {e}") from e


def read_record(stream: BinaryIO) -> Optional[tuple[str, int]]:
    """
    Reads one `{string key, u64 value}` record.

    Returns None when the stream ends cleanly before the record starts.

    Raises:
        CorruptMappingError: If the stream ends inside the record.
    """
    key = read_string(stream)
    if key is None:
        return None
    value = read_u64(stream)
    if value is None:
        raise CorruptMappingError(f"Record for key {key!r} has no value.")
    return key, value


def write_record(stream: BinaryIO, key: str, value: int) -> None:
    write_string(stream, key)
    write_u64(stream, value)
