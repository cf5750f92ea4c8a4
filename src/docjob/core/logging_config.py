"""Central logging configuration utilities.

A single composition-root driven `configure_logging` wires separate
stdout/stderr sinks and injects an operation id into every log record.
Managers and adapters never mutate global logging; they only emit via
`LoggingPort` or standard module loggers.

The operation id is the logical-operation key of the job flow currently
running on the event loop (set by `JobClient`), so interleaved log lines of
independent document jobs can be told apart.
"""

from __future__ import annotations

import contextvars
import logging
import sys
from typing import Optional

# Operation id context variable (populated per job flow by JobClient)
operation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "operation_id", default="-"
)

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s %(operation_id)s: %(message)s"


def coerce_level(level: int | str | None) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    key = str(level).upper().strip()
    mapping_getter = getattr(logging, "getLevelNamesMapping", None)
    if callable(mapping_getter):
        mapping = mapping_getter()
        if isinstance(mapping, dict) and key in mapping:
            return mapping[key]
    return logging._nameToLevel.get(key, logging.INFO)


class _OperationIdFilter(logging.Filter):
    """Inject operation id from contextvar into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - simple
        try:
            record.operation_id = operation_id_var.get()
        except LookupError:
            record.operation_id = "-"
        return True


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover
        return record.levelno <= self.max_level


class _MinLevelFilter(logging.Filter):
    def __init__(self, min_level: int):
        super().__init__()
        self.min_level = min_level

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover
        return record.levelno >= self.min_level


def configure_logging(
    level: int | str | None = None,
    fmt: Optional[str] = None,
    quiet_http: bool = True,
) -> None:
    """Configure root logger with separate stdout/stderr sinks & operation id.

    Notes
    -----
    * DEBUG/INFO go to stdout, WARNING and above to stderr.
    * `quiet_http` raises the level of aiohttp's own loggers so request
      chatter does not drown out job progress.
    """
    numeric_level = coerce_level(level)
    fmt = fmt or DEFAULT_FORMAT

    root = logging.getLogger()
    root.setLevel(numeric_level)

    # Clear existing handlers to avoid duplication on repeated configuration
    for h in list(root.handlers):
        root.removeHandler(h)

    formatter = logging.Formatter(fmt)
    op_filter = _OperationIdFilter()

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(_MaxLevelFilter(logging.INFO))
    stdout_handler.addFilter(op_filter)
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.addFilter(_MinLevelFilter(logging.WARNING))
    stderr_handler.addFilter(op_filter)
    stderr_handler.setFormatter(formatter)

    root.addHandler(stdout_handler)
    root.addHandler(stderr_handler)

    if quiet_http:
        logging.getLogger("aiohttp").setLevel(logging.WARNING)
        logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.getLogger("docjob").debug(
        "Logging configured level=%s quiet_http=%s", numeric_level, quiet_http
    )
