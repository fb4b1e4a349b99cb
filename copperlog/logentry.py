"""Structured log entries, their binary encoding and text rebuilding."""

from __future__ import annotations

import io
import os
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, BinaryIO, Mapping, Sequence

from .errors import CuError

INDEX_DIR_NAME = "cu29_log_index"
ANONYMOUS = 0
MAX_LOG_PARAMS_ON_STACK = 10

_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1
_U128_MAX = 2**128 - 1
_I64_MIN = -(2**63)
_VARINT_WIDTHS = {251: 2, 252: 4, 253: 8, 254: 16}


class _Tag(IntEnum):
    UNIT = 0
    BOOL = 1
    UINT = 2
    INT = 3
    FLOAT = 4
    STR = 5
    BYTES = 6
    SEQ = 7
    MAP = 8


def _encode_varint(value: int, out: bytearray, limit: int = _U64_MAX) -> None:
    if value < 0 or value > limit:
        raise CuError(f"Integer {value} is out of range")
    if value < 251:
        out.append(value)
    elif value <= 0xFFFF:
        out.append(251)
        out += value.to_bytes(2, "little")
    elif value <= 0xFFFFFFFF:
        out.append(252)
        out += value.to_bytes(4, "little")
    elif value <= _U64_MAX:
        out.append(253)
        out += value.to_bytes(8, "little")
    else:
        out.append(254)
        out += value.to_bytes(16, "little")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) < size:
        raise EOFError("Unexpected end of log data")
    return data


def _decode_varint(stream: BinaryIO, limit: int = _U64_MAX) -> int:
    first = _read_exact(stream, 1)[0]
    if first < 251:
        value = first
    else:
        width = _VARINT_WIDTHS.get(first)
        if width is None:
            raise CuError(f"Invalid integer tag {first}")
        value = int.from_bytes(_read_exact(stream, width), "little")
    if value > limit:
        raise CuError(f"Integer {value} is out of range")
    return value


def _encode_value(value: Any, out: bytearray) -> None:
    if value is None:
        out.append(_Tag.UNIT)
    elif isinstance(value, bool):
        out.append(_Tag.BOOL)
        out.append(1 if value else 0)
    elif isinstance(value, int):
        if value >= 0:
            out.append(_Tag.UINT)
            _encode_varint(value, out)
        else:
            if value < _I64_MIN:
                raise CuError(f"Integer {value} is out of range")
            out.append(_Tag.INT)
            _encode_varint((-value << 1) - 1, out)
    elif isinstance(value, float):
        out.append(_Tag.FLOAT)
        out += struct.pack("<d", value)
    elif isinstance(value, str):
        raw = value.encode("utf-8")
        out.append(_Tag.STR)
        _encode_varint(len(raw), out)
        out += raw
    elif isinstance(value, (bytes, bytearray)):
        out.append(_Tag.BYTES)
        _encode_varint(len(value), out)
        out += value
    elif isinstance(value, Mapping):
        out.append(_Tag.MAP)
        _encode_varint(len(value), out)
        for key, item in value.items():
            _encode_value(key, out)
            _encode_value(item, out)
    elif isinstance(value, (list, tuple)):
        out.append(_Tag.SEQ)
        _encode_varint(len(value), out)
        for item in value:
            _encode_value(item, out)
    else:
        raise CuError(f"Unsupported log parameter type: {type(value).__name__}")


def _decode_value(stream: BinaryIO) -> Any:
    tag = _read_exact(stream, 1)[0]
    if tag == _Tag.UNIT:
        return None
    if tag == _Tag.BOOL:
        flag = _read_exact(stream, 1)[0]
        if flag > 1:
            raise CuError(f"Invalid boolean byte {flag}")
        return flag == 1
    if tag == _Tag.UINT:
        return _decode_varint(stream)
    if tag == _Tag.INT:
        zigzag = _decode_varint(stream)
        return -((zigzag + 1) >> 1)
    if tag == _Tag.FLOAT:
        return struct.unpack("<d", _read_exact(stream, 8))[0]
    if tag == _Tag.STR:
        raw = _read_exact(stream, _decode_varint(stream))
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CuError("Invalid UTF-8 string in log data", exc) from exc
    if tag == _Tag.BYTES:
        return _read_exact(stream, _decode_varint(stream))
    if tag == _Tag.SEQ:
        return [_decode_value(stream) for _ in range(_decode_varint(stream))]
    if tag == _Tag.MAP:
        result = {}
        for _ in range(_decode_varint(stream)):
            key = _decode_value(stream)
            result[key] = _decode_value(stream)
        return result
    raise CuError(f"Unknown value tag {tag}")


@dataclass
class CuLogEntry:
    """One structured log line: interned message, parameter names and values."""

    msg_index: int
    time: int = 0
    paramname_indexes: list[int] = field(default_factory=list)
    params: list[Any] = field(default_factory=list)

    def add_param(self, paramname_index: int, param: Any) -> None:
        """Append a parameter; index 0 marks it as anonymous."""
        self.paramname_indexes.append(paramname_index)
        self.params.append(param)

    def to_bytes(self) -> bytes:
        """Encode the entry in its binary log form."""
        out = bytearray()
        _encode_varint(self.time, out)
        _encode_varint(self.msg_index, out, _U32_MAX)
        _encode_varint(len(self.paramname_indexes), out)
        for index in self.paramname_indexes:
            _encode_varint(index, out, _U32_MAX)
        _encode_varint(len(self.params), out)
        for param in self.params:
            _encode_value(param, out)
        return bytes(out)

    def __str__(self) -> str:
        return (
            f"CuLogEntry {{ msg_index: {self.msg_index}, "
            f"paramname_indexes: {self.paramname_indexes!r}, params: {self.params!r} }}"
        )


def read_log_entry(stream: BinaryIO) -> CuLogEntry:
    """Read one entry from a binary stream; EOFError when the data runs out."""
    time = _decode_varint(stream)
    msg_index = _decode_varint(stream, _U32_MAX)
    paramname_indexes = [
        _decode_varint(stream, _U32_MAX) for _ in range(_decode_varint(stream))
    ]
    params = [_decode_value(stream) for _ in range(_decode_varint(stream))]
    return CuLogEntry(msg_index, time, paramname_indexes, params)


def decode_log_entry(data: bytes) -> tuple[CuLogEntry, int]:
    """Decode one entry from bytes; returns it with the number of bytes consumed."""
    buffer = io.BytesIO(bytes(data))
    entry = read_log_entry(buffer)
    return entry, buffer.tell()


def format_value(value: Any) -> str:
    """Render a parameter value as text."""
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return "[" + ", ".join(str(b) for b in value) + "]"
    if isinstance(value, Mapping):
        items = (f"{format_value(k)}: {format_value(v)}" for k, v in value.items())
        return "{" + ", ".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    return str(value)


def format_logline(
    time: int,
    format_str: str,
    params: Sequence[str],
    named_params: Mapping[str, str],
) -> str:
    """Fill the anonymous and named placeholders of a log format string."""
    for param in params:
        format_str = format_str.replace("{}", param, 1)
    if not named_params:
        return format_str
    try:
        logline = format_str.format_map(dict(named_params))
    except (KeyError, IndexError, ValueError, AttributeError) as exc:
        raise CuError(
            f"Failed to format log line: {format_str!r} with variables [{dict(named_params)!r}]",
            exc,
        ) from exc
    return f"{time}: {logline}"


def rebuild_logline(all_interned_strings: Sequence[str], entry: CuLogEntry) -> str:
    """Turn a structured entry back into text using the interned strings."""
    if len(entry.paramname_indexes) < len(entry.params):
        raise CuError("Log entry has more parameters than parameter names")
    format_string = all_interned_strings[entry.msg_index]
    anon_params: list[str] = []
    named_params: dict[str, str] = {}
    for name_index, param in zip(entry.paramname_indexes, entry.params):
        text = format_value(param)
        if name_index == ANONYMOUS:
            anon_params.append(text)
        else:
            named_params[all_interned_strings[name_index]] = text
    return format_logline(entry.time, format_string, anon_params, named_params)


def default_log_index_dir() -> Path:
    """Default location of the string index, derived from LOG_INDEX_DIR."""
    outdir = os.environ.get("LOG_INDEX_DIR")
    if outdir is None:
        raise CuError("no LOG_INDEX_DIR system variable set")
    try:
        base = Path(outdir).parents[2]
    except IndexError as exc:
        raise CuError(f"LOG_INDEX_DIR is too short: {outdir}") from exc
    return base / INDEX_DIR_NAME