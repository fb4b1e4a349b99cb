import io
from pathlib import Path

import pytest

from copperlog.errors import CuError
from copperlog.logentry import (
    CuLogEntry,
    decode_log_entry,
    default_log_index_dir,
    format_logline,
    format_value,
    read_log_entry,
    rebuild_logline,
)


def test_encode_decode_structured_log():
    entry = CuLogEntry(1, 0, [2, 3], ["test"])
    decoded, consumed = decode_log_entry(entry.to_bytes())
    assert decoded == entry
    assert consumed == len(entry.to_bytes())


def test_empty_entry_bytes():
    assert CuLogEntry(3).to_bytes() == bytes([0, 3, 0, 0])


def test_large_time_uses_varint():
    assert CuLogEntry(1, time=300).to_bytes()[:3] == b"\xfb\x2c\x01"


def test_roundtrip_all_value_kinds():
    entry = CuLogEntry(7, time=123456789)
    for value in [None, True, -5, 2**40, 1.5, "é", b"\x01\x02", [1, "a"], {"k": 2}]:
        entry.add_param(0, value)
    decoded, _ = decode_log_entry(entry.to_bytes())
    assert decoded == entry


def test_read_sequence_then_eof():
    first = CuLogEntry(1, params=["x"], paramname_indexes=[0])
    second = CuLogEntry(2)
    stream = io.BytesIO(first.to_bytes() + second.to_bytes())
    assert read_log_entry(stream) == first
    assert read_log_entry(stream) == second
    with pytest.raises(EOFError):
        read_log_entry(stream)


def test_truncated_data_raises_eof():
    data = CuLogEntry(1, params=["hello"], paramname_indexes=[0]).to_bytes()
    with pytest.raises(EOFError):
        decode_log_entry(data[:-2])


def test_unknown_value_tag():
    with pytest.raises(CuError):
        decode_log_entry(bytes([0, 1, 0, 1, 99]))


def test_unsupported_type_rejected():
    entry = CuLogEntry(1)
    entry.add_param(0, object())
    with pytest.raises(CuError):
        entry.to_bytes()


def test_integer_out_of_range():
    entry = CuLogEntry(1)
    entry.add_param(0, 2**64)
    with pytest.raises(CuError):
        entry.to_bytes()


def test_add_param_keeps_order():
    entry = CuLogEntry(4)
    entry.add_param(0, "Parameter for the log line")
    entry.add_param(5, 42)
    assert entry.paramname_indexes == [0, 5]
    assert entry.params == ["Parameter for the log line", 42]


def test_str_form():
    text = str(CuLogEntry(1, 0, [2, 3], ["test"]))
    assert text.startswith("CuLogEntry { msg_index: 1, paramname_indexes: [2, 3], params: ")


def test_format_value():
    assert format_value(True) == "true"
    assert format_value("zarma") == "zarma"
    assert format_value([1, "a"]) == "[1, a]"


def test_format_logline_anonymous():
    assert format_logline(0, "a = {}, b = {}", ["1", "2"], {}) == "a = 1, b = 2"


def test_format_logline_named():
    assert format_logline(5, "x {a}", [], {"a": "3"}) == "5: x 3"


def test_format_logline_missing_name():
    with pytest.raises(CuError):
        format_logline(0, "x {missing}", [], {"a": "3"})


def test_rebuild_anonymous():
    strings = ["", "Just a string {}"]
    entry = CuLogEntry(1)
    entry.add_param(0, "zarma")
    assert rebuild_logline(strings, entry) == "Just a string zarma"


def test_rebuild_named():
    strings = ["", "named {a} {b}", "a", "b"]
    entry = CuLogEntry(1)
    entry.add_param(2, 3)
    entry.add_param(3, 2)
    assert rebuild_logline(strings, entry) == "0: named 3 2"


def test_default_log_index_dir(monkeypatch, tmp_path):
    outdir = tmp_path / "a" / "b" / "c"
    monkeypatch.setenv("LOG_INDEX_DIR", str(outdir))
    assert default_log_index_dir() == tmp_path / "cu29_log_index"


def test_default_log_index_dir_missing(monkeypatch):
    monkeypatch.delenv("LOG_INDEX_DIR", raising=False)
    with pytest.raises(CuError):
        default_log_index_dir()


def test_default_log_index_dir_short(monkeypatch):
    monkeypatch.setenv("LOG_INDEX_DIR", str(Path("x")))
    with pytest.raises(CuError):
        default_log_index_dir()