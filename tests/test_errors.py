import pytest

from copperlog.errors import CuError, WriteStream


def test_str_without_cause():
    assert str(CuError("boom")) == "boom\n   context:None"


def test_str_with_exception_cause():
    err = CuError("Error reading log", ValueError("bad data"))
    assert err.cause == "bad data"
    assert str(err) == "Error reading log\n   context:bad data"


def test_add_cause_returns_same_error():
    err = CuError("boom")
    result = err.add_cause("detail")
    assert result is err
    assert str(result).endswith("context:detail")


def test_raised_and_caught_as_exception():
    err = CuError("boom", "why")
    assert err.message == "boom"
    assert err.cause == "why"
    assert str(err) == "boom\n   context:why"
    with pytest.raises(CuError) as info:
        raise err
    assert info.value is err


def test_write_stream_requires_log():
    with pytest.raises(TypeError):
        WriteStream()


def test_write_stream_subclass_collects():
    class Collect(WriteStream):
        def __init__(self):
            self.items = []

        def log(self, obj):
            self.items.append(obj)

    stream = Collect()
    stream.log(1)
    stream.log(2)
    assert WriteStream.flush(stream) is None
    assert stream.items == [1, 2]