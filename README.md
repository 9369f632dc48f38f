# logforge

A logging library built from a few small parts: **loggers**, **appenders**,
**filters**, **encoders** and **writers**. It has no dependencies beyond the
standard library.

## Records and levels

`logforge.record` defines:

- `Level`: `ERROR`, `WARN`, `INFO`, `DEBUG`, `TRACE`. A more verbose level
  compares greater.
- `LevelFilter`: `OFF` followed by the same names. `OFF` lets nothing through.
- `Level.parse(text)` and `LevelFilter.parse(text)` accept a name in any case.
  An unknown name raises `ValueError`, and a value that is not a string raises
  `TypeError`.
- `Record`: a frozen dataclass with `level`, `target`, `message`, and the
  optional `module_path`, `file` and `line`.
- The mapped diagnostic context, which is kept per thread: `insert_mdc`,
  `get_mdc`, `remove_mdc`, `clear_mdc` and `mdc_items`.

## Loggers

`logforge.logger.Logger` routes records through a hierarchy of named loggers.
Logger names are split into components by `::`. `app` is the parent of
`app::backend`, which is the parent of `app::backend::db`.

```python
Logger(root_level, root_appenders=(), appenders=(), loggers=(), err_handler=None)
```

- `appenders` is a sequence of `AppenderEntry(name, appender, filters=())`.
  An appender is any object that has `append(record)` and `flush()`.
- `loggers` is a sequence of `LoggerConfig(name, level, appenders=(), additive=True)`.
  `level` may be a `LevelFilter` or a level name.
- A configured logger also uses its parent's appenders unless `additive` is
  false.
- A component between configured loggers that has no configuration of its own
  takes its parent's level and appenders.
- A target with no configured logger is handled by its nearest configured
  ancestor, or by the root logger.
- An appender name that is not among `appenders` raises `ValueError`.

Methods:

- `enabled(target, level)`: whether a record at `level` for `target` would be
  logged.
- `log(record)`: sends the record to every appender of its logger. An
  exception raised by one appender does not stop the others. Each exception is
  passed to the error handler, which by default is `handle_error`; it prints
  `logforge: <error>` to standard error.
- `flush()`: flushes every appender.
- `max_log_level()`: the most verbose level that any logger lets through.

`Handle(logger)` holds a running logger. `Handle.set_logger(other)` makes that
logger behave as `other` from then on, and updates `Handle.max_level`.

## Filters

`AppenderEntry.append` runs the entry's filters in order. Each filter returns a
`logforge.filter.Response`:

- `ACCEPT`: the record goes to the appender at once, and the remaining filters
  are skipped.
- `NEUTRAL`: the next filter decides. If no filters remain, the record goes to
  the appender.
- `REJECT`: the record is dropped.

`ThresholdFilter(level)` rejects every record more verbose than `level`, and
returns `NEUTRAL` for every other record. The configuration helpers work on
plain mappings:

- `FilterConfig.from_mapping({"kind": "threshold", "level": "warn"})` splits
  off the `kind`. A missing `kind` raises `ValueError("missing field `kind`")`.
- `ThresholdFilterConfig.from_mapping(...)` reads `level`. A missing `level`
  raises `ValueError`, and so does an unknown level name.
- `ThresholdFilter.from_config(config)` accepts either a
  `ThresholdFilterConfig` or a mapping.

## Encoders

An encoder (`logforge.encode.Encoder`) writes a `Record` to a
`logforge.encode.Writer`. `EncoderConfig.from_mapping` splits a mapping into
its `kind` and the rest of its configuration. The `kind` defaults to
`"pattern"`.

### Pattern encoder

`logforge.pattern.PatternEncoder(pattern)` formats records from a pattern
string. The default pattern is `{d} {l} {t} - {m}{n}`.

| Formatter | Output |
|-----------|--------|
| `d`, `date` | The current time. It takes an optional strftime-style format (default `%+`, which gives RFC 3339) and an optional second argument, `utc` or `local`. |
| `l`, `level` | The level. |
| `m`, `message` | The message. |
| `M`, `module` | The module path, or `???`. |
| `f`, `file` | The source file, or `???`. |
| `L`, `line` | The line number, or `???`. |
| `t`, `target` | The target. |
| `T`, `thread` | The current thread's name. |
| `I`, `thread_id` | `threading.get_ident()`. |
| `i`, `tid` | `threading.get_native_id()`. |
| `P`, `pid` | The process id. |
| `n` | The platform newline. |
| `h`, `highlight` | Its argument, styled by level: error is intense red, warn is yellow, info is green, trace is cyan, and debug is left unstyled. |
| `D`, `debug` | Its argument, only when Python runs without `-O`. |
| `R`, `release` | Its argument, only when Python runs with `-O`. |
| `X`, `mdc` | An MDC value. The first argument is the key and the optional second is the default, which is empty if not given. |
| (no name) | Its argument, with the format specification applied, for example `{({l} {m}):15}`. |

A format specification follows a colon: `[[fill]align][min_width][.max_width]`.
`align` is `<` (the default) or `>`, and widths count characters. For example,
`{m:>10.15}` right-aligns the message in at least 10 characters and cuts it
after 15.

To write `{`, `}`, `(`, `)` or `\` literally, double it or put a backslash in
front of it. Mistakes in a pattern do not raise. They are written into the
output as `{ERROR: ...}`, and `PatternEncoder.errors()` lists the messages of
the top-level ones. `PatternEncoder.from_config(mapping)` accepts an optional
`pattern` field, and any other field except `kind` raises `ValueError`.

### JSON encoder

`logforge.json_encoder.JsonEncoder` writes one JSON object per line. The object
holds these fields:

- `time`
- `level`
- `message`
- `module_path`, `file` and `line`, each only when it is set
- `target`
- `thread`
- `thread_id`
- `mdc`

`encode_at(writer, time, record)` encodes the record with a given time.
`from_config` accepts a mapping that has no fields other than `kind`.

## Writers

`logforge.writers` provides three writers:

- `SimpleWriter(stream)` passes bytes to a binary stream and ignores styles.
- `AnsiWriter(stream)` writes ANSI escape sequences for styles.
  `ansi_escape(style)` returns the sequence for a `Style`. For example,
  `Style(text=Color.RED, intense=True)` gives `b"\x1b[0;31;1m"`.
- `ConsoleWriter.stdout()` and `ConsoleWriter.stderr()` return a styled writer
  for that stream, or `None` when color should not be used.
  `ConsoleWriter.lock()` returns a context manager that keeps other threads
  from writing until it exits.

`color_mode_from_env(environ=None)` decides the `ColorMode` from three
environment variables, checked in this order:

1. `NO_COLOR` set to anything other than `0` gives `NEVER`.
2. `CLICOLOR_FORCE` set to anything other than `0` gives `ALWAYS`.
3. `CLICOLOR=0` gives `NEVER`.

Otherwise the mode is `AUTO`, which means color only when the stream is a
terminal.

`logforge.align` holds the width-limiting writers used by the pattern encoder:
`MaxWidthWriter`, `LeftAlignWriter` and `RightAlignWriter`.

## Example

```python
import sys

from logforge.logger import AppenderEntry, Logger, LoggerConfig
from logforge.pattern import PatternEncoder
from logforge.record import Level, LevelFilter, Record
from logforge.writers import SimpleWriter


class StreamAppender:
    def __init__(self, stream, encoder):
        self.writer = SimpleWriter(stream)
        self.encoder = encoder

    def append(self, record):
        self.encoder.encode(self.writer, record)

    def flush(self):
        self.writer.flush()


stdout = StreamAppender(sys.stdout.buffer, PatternEncoder("{l} {t} - {m}{n}"))
logger = Logger(
    LevelFilter.WARN,
    root_appenders=["stdout"],
    appenders=[AppenderEntry("stdout", stdout)],
    loggers=[LoggerConfig("app::backend::db", "info")],
)
logger.log(Record(level=Level.INFO, target="app::backend::db", message="connected"))
# prints: INFO app::backend::db - connected
logger.log(Record(level=Level.INFO, target="app::web", message="dropped"))
# prints nothing: app::web falls back to the root logger, which is at WARN
```

## What the package does not do

- It ships no appenders. There is no console, file or rolling-file appender,
  so you supply your own object with `append` and `flush`, as in the example.
- It does not read configuration files and does not reload them.
- It does not install itself as a global logger and does not hook into the
  standard `logging` module. You call `Logger.log` yourself.