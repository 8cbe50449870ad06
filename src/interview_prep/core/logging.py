"""JSON-lines logging for interview sessions.

Every command funnels through :func:`configure_logger`, which attaches one
rotating file handler (and optionally a stderr echo) to the package logger.
Session code logs with ``extra=`` payloads such as topic, concepts and
timings; those land under the ``extra`` key of each JSON line.
"""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
]

_FILE_MARKER = "_interview_prep_file"
_CONSOLE_MARKER = "_interview_prep_console"

# Attributes every LogRecord carries; anything else came from ``extra=``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


class JsonLogFormatter(logging.Formatter):
    """Render a record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        }
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info
        return json.dumps(payload, ensure_ascii=True)


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
    filename: Optional[str] = None,
) -> tuple[logging.Logger, Path]:
    """Attach the JSON file handler to ``name`` and return the log path.

    Calling it again is safe: the file handler is reused while the target
    path stays the same and replaced when it moves. ``verbose`` forces
    DEBUG and echoes records to stderr. Directories that cannot be
    created or written fall back to a folder under the system temp dir.
    """

    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    log_name = filename or f"{name.rsplit('.', 1)[-1]}.log"
    handler, path = _file_handler(
        logger,
        _writable_path(log_dir, log_name),
        max_bytes=max_bytes,
        backup_count=backup_count,
    )
    handler.setLevel(logging.DEBUG if verbose else _level(level))

    console = _find(logger, _CONSOLE_MARKER)
    if verbose and console is None:
        console = logging.StreamHandler(stream=sys.stderr)
        console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        setattr(console, _CONSOLE_MARKER, True)
        logger.addHandler(console)
    elif not verbose and console is not None:
        logger.removeHandler(console)
        console.close()
    if console is not None and verbose:
        console.setLevel(logging.DEBUG)

    return logger, path


def _level(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else logging.INFO


def _find(logger: logging.Logger, marker: str) -> Optional[logging.Handler]:
    for handler in logger.handlers:
        if getattr(handler, marker, False):
            return handler
    return None


def _file_handler(
    logger: logging.Logger,
    path: Path,
    *,
    max_bytes: int,
    backup_count: int,
) -> tuple[logging.Handler, Path]:
    current = _find(logger, _FILE_MARKER)
    if current is not None:
        if getattr(current, "baseFilename", None) == str(path):
            return current, path
        logger.removeHandler(current)
        current.close()

    try:
        handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except PermissionError:
        path = _writable_path(_fallback_log_dir(), path.name)
        handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    handler.setFormatter(JsonLogFormatter())
    setattr(handler, _FILE_MARKER, True)
    logger.addHandler(handler)
    return handler, path


def _writable_path(log_dir: Path, filename: str) -> Path:
    """Create ``log_dir/filename`` with private permissions."""

    for directory in (log_dir, _fallback_log_dir()):
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path = directory / filename
            path.touch(exist_ok=True)
        except PermissionError:
            continue
        for target, mode in ((directory, 0o700), (path, 0o600)):
            try:
                target.chmod(mode)
            except PermissionError:  # pragma: no cover - filesystem specific
                pass
        return path
    raise PermissionError(f"No writable log directory for {filename}")


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _jsonable(val) for key, val in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted((_jsonable(item) for item in value), key=str)
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return repr(value)


def _fallback_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "interview-prep-logs"
