"""
Logging Setup
=============
stdlib logging for the ``storerota`` namespace.

- ``setup_logging`` attaches a console handler and, optionally, a rotating
  file handler to the ``storerota`` logger.
- ``TRACE`` (5) sits below DEBUG and carries ``@log_function_call`` output.
- ``RunTrace`` writes the indented day / pass / placement trail of one
  scheduling run at DEBUG.
"""
import functools
import logging
import sys
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, TextIO

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

CONSOLE_FORMAT = "%(levelname)-5s %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d | %(message)s"

# ANSI color per level, applied to the level name only
LEVEL_COLORS = {
    TRACE: "90",
    logging.DEBUG: "36",
    logging.INFO: "32",
    logging.WARNING: "33",
    logging.ERROR: "31",
    logging.CRITICAL: "35",
}


class LevelColorFormatter(logging.Formatter):
    """Colors the leading level name when the handler's stream is a terminal."""

    def __init__(self, fmt: str, stream: TextIO):
        super().__init__(fmt)
        self.use_color = bool(getattr(stream, "isatty", None) and stream.isatty())

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not (self.use_color and color):
            return text
        width = len(record.levelname)
        return f"\033[{color}m{text[:width]}\033[0m{text[width:]}"


def _level(name: Optional[str], default: int) -> int:
    if name is None:
        return default
    value = logging.getLevelName(str(name).upper())
    return value if isinstance(value, int) else default


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = "logs/storerota.log",
    console_level: Optional[str] = None,
    stream: Optional[TextIO] = None,
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 2,
) -> logging.Logger:
    """
    Configure the ``storerota`` logger.

    Args:
        level: File handler level (also the console level unless overridden)
        log_file: Rotating log file path; None disables file output
        console_level: Console handler level
        stream: Console stream (default stderr, so stdout stays free for results)
        max_bytes: Rotation size of the log file
        backup_count: Rotated files kept

    Returns:
        The ``storerota`` logger
    """
    root = logging.getLogger("storerota")
    root.setLevel(TRACE)
    root.handlers.clear()

    file_level = _level(level, logging.INFO)
    cons_level = _level(console_level, file_level)

    out = stream or sys.stderr
    console = logging.StreamHandler(out)
    console.setLevel(cons_level)
    console.setFormatter(LevelColorFormatter(CONSOLE_FORMAT, out))
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)

    root.debug(
        f"Logging ready: console={logging.getLevelName(cons_level)}, "
        f"file={logging.getLevelName(file_level) if log_file else 'off'}"
    )
    return root


def get_logger(name: str) -> logging.Logger:
    """Module logger, e.g. ``get_logger("storerota.solver.engine")``."""
    return logging.getLogger(name)


def _brief(value: Any) -> str:
    """Short argument rendering: containers by size, everything else by repr."""
    if isinstance(value, (list, tuple, set, dict)):
        return f"{type(value).__name__}[{len(value)}]"
    text = repr(value)
    return text if len(text) <= 40 else text[:37] + "..."


def log_function_call(func: Callable) -> Callable:
    """
    Trace calls at TRACE level under ``storerota.trace.<module>``.

    Exceptions are logged at ERROR and re-raised unchanged.
    """
    logger = logging.getLogger(f"storerota.trace.{func.__module__}")

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if logger.isEnabledFor(TRACE):
            shown = [_brief(a) for a in args] + [f"{k}={_brief(v)}" for k, v in kwargs.items()]
            logger.log(TRACE, f"call {func.__name__}({', '.join(shown)})")
        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            logger.error(f"{func.__name__} failed: {type(exc).__name__}: {exc}")
            raise
        logger.log(TRACE, f"{func.__name__} -> {_brief(result)}")
        return result

    return wrapper


def log_constraint(
    logger: logging.Logger,
    name: str,
    satisfied: bool,
    details: str = "",
    level: int = logging.DEBUG,
) -> None:
    """``[ok]`` lines go out at ``level``; ``[short]`` lines at WARNING."""
    line = f"[{'ok' if satisfied else 'short'}] {name}"
    if details:
        line = f"{line}: {details}"
    logger.log(level if satisfied else logging.WARNING, line)


class RunTrace:
    """
    Indented DEBUG trail of one scheduling run.

    Owned by a single run. ``scope`` restores the indentation when its
    block exits, including on an exception.
    """

    def __init__(self, name: str = "storerota.solver.engine"):
        self.logger = logging.getLogger(name)
        self.depth = 0

    def _debug(self, text: str) -> None:
        self.logger.debug(f"{'  ' * self.depth}{text}")

    def banner(self, title: str) -> None:
        self.logger.info(f"--- {title} ---")

    @contextmanager
    def scope(self, label: str) -> Iterator["RunTrace"]:
        """One day or one pass."""
        self._debug(f"> {label}")
        self.depth += 1
        try:
            yield self
        finally:
            self.depth -= 1

    def note(self, key: str, value: Any) -> None:
        self._debug(f"{key}: {value}")

    def placed(self, person_name: str, code: str, start: str, end: str, hours: float) -> None:
        self._debug(f"+ {person_name} {code} {start}-{end} ({hours:g}h)")

    def check(self, name: str, satisfied: bool, details: str = "") -> None:
        log_constraint(self.logger, name, satisfied, details)
