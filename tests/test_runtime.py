import io
import logging

import pytest

from copperlog import runtime
from copperlog.errors import CuError, WriteStream
from copperlog.logentry import CuLogEntry, read_log_entry
from copperlog.runtime import LoggerRuntime, SimpleFileWriter, log, log_debug_mode


class FixedClock:
    def __init__(self, value):
        self.value = value

    def now(self):
        return self.value


class Collect(WriteStream):
    def __init__(self):
        self.items = []
        self.flushes = 0

    def log(self, obj):
        self.items.append(obj)

    def flush(self):
        self.flushes += 1


class Failing(WriteStream):
    def log(self, obj):
        raise CuError("disk full")


def test_log_stamps_time_and_writes():
    sink = Collect()
    with LoggerRuntime(FixedClock(42), sink):
        entry = CuLogEntry(4)
        entry.add_param(0, "Parameter for the log line")
        log(entry)
    assert entry.time == 42
    assert sink.items == [entry]
    assert sink.flushes == 1


def test_after_close_entries_are_not_written(capsys):
    sink = Collect()
    rt = LoggerRuntime(FixedClock(1), sink)
    rt.close()
    log(CuLogEntry(2))
    assert sink.items == []
    assert "Pending logs got cut" in capsys.readouterr().err


def test_log_without_runtime(monkeypatch):
    monkeypatch.setattr(runtime._state, "writer", None)
    with pytest.raises(CuError):
        log(CuLogEntry(1))


def test_write_failure_is_reported(capsys):
    with LoggerRuntime(FixedClock(1), Failing()):
        log(CuLogEntry(1))
    assert "Failed to log data: disk full" in capsys.readouterr().err


def test_log_debug_mode_text_logger(caplog):
    logger = logging.getLogger("copperlog-test")
    caplog.set_level(logging.INFO, logger="copperlog-test")
    sink = Collect()
    with LoggerRuntime(FixedClock(7), sink, logger):
        entry = CuLogEntry(1)
        entry.add_param(2, 3)
        entry.add_param(3, 2)
        log_debug_mode(entry, "named {a} {b}", ["a", "b"])
    assert sink.items == [entry]
    assert "7: named 3 2" in caplog.messages


def test_log_debug_mode_without_text_logger():
    sink = Collect()
    with LoggerRuntime(FixedClock(9), sink):
        entry = CuLogEntry(1)
        log_debug_mode(entry, "Just a string", [])
    assert [e.time for e in sink.items] == [9]


def test_simple_file_writer_roundtrip(tmp_path):
    path = tmp_path / "log.bin"
    first = CuLogEntry(1, 0, [2, 3], ["test"])
    second = CuLogEntry(5, 10, [0], [3.5])
    with SimpleFileWriter(path) as writer:
        writer.log(first)
        writer.log(second)
        written = writer.bytes_written()
    data = path.read_bytes()
    assert written == len(data) == len(first.to_bytes()) + len(second.to_bytes())
    stream = io.BytesIO(data)
    assert read_log_entry(stream) == first
    assert read_log_entry(stream) == second


def test_simple_file_writer_as_destination(tmp_path):
    path = tmp_path / "struct.bin"
    writer = SimpleFileWriter(path)
    with LoggerRuntime(FixedClock(3), writer):
        log(CuLogEntry(8))
    writer.close()
    assert read_log_entry(io.BytesIO(path.read_bytes())) == CuLogEntry(8, time=3)


def test_simple_file_writer_bad_path(tmp_path):
    with pytest.raises(CuError):
        SimpleFileWriter(tmp_path / "missing" / "log.bin")


def test_simple_file_writer_after_close(tmp_path):
    writer = SimpleFileWriter(tmp_path / "log.bin")
    writer.close()
    with pytest.raises(CuError):
        writer.log(CuLogEntry(1))