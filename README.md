# copperlog

Structured logging that stays small on disk.

A log call does not store its message as text. The format string and the
name of each parameter are *interned* once in an LMDB string index. Each log
entry then holds only:

- a timestamp in nanoseconds,
- the index of its format string,
- the indexes of its parameter names (`0` for an anonymous parameter),
- the parameter values, as tagged values.

Entries are written one after another in a varint-based binary encoding.
To read them, load the string index and the binary stream together. The
original text lines are then rebuilt.

The package also has `Soa`, a fixed-capacity structure-of-arrays container,
and helpers that turn configuration identifiers into valid identifier names.

## Installation

```
pip install copperlog
```

To run the test suite:

```
pip install "copperlog[test]"
pytest
```

## Modules

| Module                 | Contents                                                                                 |
|------------------------|------------------------------------------------------------------------------------------|
| `copperlog.errors`     | `CuError`, `UnifiedLogType`, and the `WriteStream` base class for append-only sinks      |
| `copperlog.logentry`   | `CuLogEntry`, its binary encoding, `read_log_entry`, `decode_log_entry`, `format_logline`, `rebuild_logline`, `default_log_index_dir` |
| `copperlog.interning`  | `StringIndex`, the LMDB string store, and `read_interned_strings`                        |
| `copperlog.structlog`  | `StructLogger` and its `debug(...)` method, and `to_value`                               |
| `copperlog.runtime`    | `LoggerRuntime`, the module-level `log` and `log_debug_mode` functions, and `SimpleFileWriter` |
| `copperlog.export`     | Reading logs back: `iter_log_entries`, `textlog_dump`, `struct_log_iterator_bare`, `entry_timestamp`, and the command line |
| `copperlog.soa`        | `Soa`, a fixed-capacity structure-of-arrays container                                    |
| `copperlog.naming`     | `config_id_to_enum`, `config_id_to_struct_member`, `caller_crate_root`                   |

Errors are raised as `CuError`. Its string form is the message, followed by a
`context:` line that holds the cause.

## Log entries

```python
from copperlog.logentry import CuLogEntry, decode_log_entry, rebuild_logline

entry = CuLogEntry(1)
entry.add_param(0, "world")          # 0 marks an anonymous parameter

data = entry.to_bytes()
decoded, consumed = decode_log_entry(data)
assert decoded == entry and consumed == len(data)

strings = ["", "Hello {}"]           # index 0 is reserved
print(rebuild_logline(strings, entry))
# Hello world
```

Anonymous parameters fill the `{}` placeholders from left to right. Named
parameters fill `{name}` placeholders. A line that has named parameters is
prefixed with its timestamp.

A parameter value can be any of these:

- `None`
- `bool`
- `int`, in the 64-bit signed or unsigned range
- `float`
- `str`
- `bytes`
- a list or tuple of values
- a mapping of values

## Interning strings

```python
from copperlog.interning import StringIndex, read_interned_strings

with StringIndex("cu29_log_index") as index:
    msg = index.intern("Temperature is {}")
    same = index.intern("Temperature is {}")   # the same index comes back
    assert msg == same

strings = read_interned_strings("cu29_log_index")
assert strings[msg] == "Temperature is {}"
```

Indexes start at 1. Index 0 is never assigned, because it means "anonymous
parameter".

`StringIndex()` with no path uses `default_log_index_dir()`. That is the
directory `cu29_log_index`, placed three levels above the path in the
`LOG_INDEX_DIR` environment variable.

## Logging

```python
from copperlog.interning import StringIndex
from copperlog.runtime import LoggerRuntime, SimpleFileWriter
from copperlog.structlog import StructLogger

with StringIndex("cu29_log_index") as index, \
        SimpleFileWriter("app.bin") as writer, \
        LoggerRuntime(None, writer):
    logger = StructLogger(index)
    logger.debug("a = {}, b = {}", 1, b=2)
```

What `StructLogger.debug` does:

- It interns the message and the name of each keyword argument.
- It converts every argument with `to_value`. This accepts dataclasses,
  enums, sets and path-like objects, as well as the plain value types.
- It hands the entry to the active `LoggerRuntime`.

If no runtime is active, `debug` prints a warning to stderr. It does not
raise.

`LoggerRuntime` takes three arguments:

- a clock: any object with a `now()` method that returns nanoseconds, or
  `None` for a monotonic clock,
- a `WriteStream` destination,
- optionally, a `logging.Logger`. Each line is also sent to it as text.

`LoggerRuntime` is a context manager. On exit it flushes the destination and
then detaches it.

`SimpleFileWriter` is a `WriteStream` that writes encoded entries to a plain
file. `bytes_written()` reports how many bytes it has written so far.

## Reading logs back

```python
import sys

from copperlog.export import entry_timestamp, struct_log_iterator_bare, textlog_dump

entries, strings = struct_log_iterator_bare("app.bin", "cu29_log_index")
for entry in entries:
    print(entry_timestamp(entry), entry.msg_index, entry.params)

with open("app.bin", "rb") as src:
    textlog_dump(src, "cu29_log_index", sys.stdout)
```

Reading stops cleanly in two cases: at the end of the data, and at an entry
whose message index is 0. If an entry cannot be rebuilt into text, it is
reported on stderr and skipped.

The same dump is available from the command line:

```
copperlog-export app.bin extract-log cu29_log_index
copperlog-export --help
```

## Structure of arrays

```python
from dataclasses import dataclass

from copperlog.soa import Soa


@dataclass
class Xyz:
    x: float
    y: float
    z: float


points = Soa(Xyz(0.0, 0.0, 0.0), 8)
points.push(Xyz(1.0, 2.0, 2.0))
points.push(Xyz(4.0, 6.0, 3.0))

print(len(points))                  # 2
print(points.get(1))                # Xyz(x=4.0, y=6.0, z=3.0)
print(points.column("x"))           # all 8 slots of the x column
print(points.column_range("x", 0, 2))
points.apply(lambda x, y, z: (x * 2, y, z))
```

The container raises these errors:

- `OverflowError` when you push beyond its capacity,
- `IndexError` when you read or set an index beyond its current length.

`pop()` returns `None` when the container is empty.

## Identifier helpers

```python
from copperlog.naming import config_id_to_enum, config_id_to_struct_member

config_id_to_struct_member("Test_Dunder")   # "test_dunder"
config_id_to_struct_member("#id")           # "id"
config_id_to_enum("hey?")                   # "Hey"
```

`caller_crate_root(crate_name, start_dir)` walks the directory tree and
skips `target` directories. It returns the directory of the first
`Cargo.toml` that declares that package name. If none matches, it returns
the start directory.

## What this package does not do

- Entries are read from and written to plain binary streams only. There is
  no multi-file unified log container.
- `UnifiedLogType` names the kinds of sections such a container would hold,
  but nothing here writes those sections.
- `ExportFormat` lists `json` and `csv`, but no exporter uses it. The
  command line only rebuilds text logs.
- There is no extraction of other recorded data.