import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional, TextIO, Union


DEFAULT_FORMAT = "%(asctime)s  [%(levelname)s]  %(name)s › %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"

# Libraries to keep at WARNING even when the plugin runs at DEBUG.
# None of the current dependencies log; `quiet` stays for callers that add some.
NOISY_LOGGERS: tuple[str, ...] = ()


class TruncateLongMsgs(logging.Filter):
    """Truncates very long log messages to keep the host's stderr readable."""

    def __init__(self, max_len: int = 300):
        super().__init__()
        self.max_len = max_len

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            msg = record.getMessage()
        except Exception:
            # If formatting fails, let it pass unmodified.
            return True
        if self.max_len and len(msg) > self.max_len:
            record.msg = msg[: self.max_len] + " …(truncated)"
            record.args = ()
        return True


_configured = False  # guard against double-initialisation
_installed: list[logging.Handler] = []


def parse_level(level: Union[int, str]) -> int:
    """Accept `logging.DEBUG`, `"debug"` or `"10"`."""
    if isinstance(level, int):
        return level
    text = level.strip()
    if text.isdigit():
        return int(text)
    value = logging.getLevelName(text.upper())
    if not isinstance(value, int):
        raise ValueError(f"unknown log level: {level!r}")
    return value


def setup_logging(
    *,
    level: Union[int, str] = logging.WARNING,
    console: bool = True,
    console_truncate_len: int = 300,
    stream: Optional[TextIO] = None,
    fmt: str = DEFAULT_FORMAT,
    datefmt: str = DEFAULT_DATEFMT,
    log_file: Optional[str] = None,
    file_level: Optional[int] = None,
    file_max_bytes: int = 1_000_000,
    file_backup_count: int = 3,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Configure root logging once. Call this from the plugin's entry point.

    - Modules should *not* call this; they just use `logging.getLogger(__name__)`.
    - Adds a stderr console handler (with optional truncation) and an optional rotating file handler.
    - Silences noisy third-party loggers.
    """
    global _configured
    if _configured:
        return

    level = parse_level(level)
    root = logging.getLogger()
    # A host that already attached handlers does not get duplicated output.
    if root.handlers:
        for h in list(root.handlers):
            root.removeHandler(h)

    root.setLevel(level)

    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    if console:
        # stdout is the channel back to TTDL, so nothing but the record may go there
        ch = logging.StreamHandler(stream if stream is not None else sys.stderr)
        ch.setLevel(level)
        ch.setFormatter(formatter)
        if console_truncate_len and console_truncate_len > 0:
            ch.addFilter(TruncateLongMsgs(console_truncate_len))
        root.addHandler(ch)
        _installed.append(ch)

    if log_file:
        fh = RotatingFileHandler(
            log_file, maxBytes=file_max_bytes, backupCount=file_backup_count, encoding="utf-8"
        )
        fh.setLevel(file_level if file_level is not None else level)
        fh.setFormatter(formatter)
        # Keep full messages in files.
        root.addHandler(fh)
        _installed.append(fh)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True
    logging.getLogger(__name__).debug("🚀 Logging initialised (level=%s)", logging.getLevelName(level))


def reset_logging() -> None:
    """Drop the handlers installed by `setup_logging` so it can run again."""
    global _configured
    root = logging.getLogger()
    while _installed:
        h = _installed.pop()
        root.removeHandler(h)
        h.close()
    _configured = False
