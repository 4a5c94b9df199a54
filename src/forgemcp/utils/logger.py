# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Logging setup for forgemcp.

Everything goes through the standard :mod:`logging` module.  Server components
log under ``forgemcp.server.<name>``; the dispatcher attaches ``method`` and
``duration_ms`` extras that the plain formatter renders inline and the JSON
formatter emits under ``context``.

Environment:

* ``FORGEMCP_LOG_LEVEL``: level name used when ``setup_logger`` gets none.
* ``FORGEMCP_LOG_JSON``: truthy value switches to structured JSON lines.
* ``NO_COLOR``: disables ANSI colors.
"""

from __future__ import annotations

from collections.abc import Callable
import json
import logging
import os
import sys
from typing import Any, ClassVar, Final


RESET: Final[str] = "\033[0m"
DEBUG_COLOR: Final[str] = "\033[36m"
INFO_COLOR: Final[str] = "\033[32m"
WARNING_COLOR: Final[str] = "\033[33m"
ERROR_COLOR: Final[str] = "\033[1;31m"
CRITICAL_COLOR: Final[str] = "\033[1;35m"
LOGGER_COLOR: Final[str] = "\033[94m"
EXTRA_COLOR: Final[str] = "\033[90m"

DEFAULT_LOGGER_NAME: Final[str] = "forgemcp"
ENV_LOG_LEVEL: Final[str] = "FORGEMCP_LOG_LEVEL"
ENV_LOG_JSON: Final[str] = "FORGEMCP_LOG_JSON"
ENV_NO_COLOR: Final[str] = "NO_COLOR"
DEFAULT_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT: Final[str] = "%Y-%m-%d %H:%M:%S"

JsonSerializer = Callable[[dict[str, Any]], str]
PayloadTransformer = Callable[[dict[str, Any]], dict[str, Any]]

_BUILTIN_RECORD_KEYS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
    | {"message", "asctime", "context", "taskName"}
)


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    extra: dict[str, Any] = {}
    context = record.__dict__.get("context")
    if isinstance(context, dict):
        extra.update(context)
    for key, value in record.__dict__.items():
        if key in _BUILTIN_RECORD_KEYS or key.startswith("_"):
            continue
        extra.setdefault(key, value)
    return extra


class PlainFormatter(logging.Formatter):
    """Text formatter that appends the dispatcher's timing extra.

    A record carrying ``duration_ms`` ends with ``[12.34 ms]``.
    """

    def format(self, record: logging.LogRecord) -> str:
        result = super().format(record)
        duration = record.__dict__.get("duration_ms")
        if isinstance(duration, (int, float)):
            result = f"{result} {self._decorate(f'[{duration:.2f} ms]')}"
        return result

    def _decorate(self, text: str) -> str:
        return text


class ColoredFormatter(PlainFormatter):
    """:class:`PlainFormatter` with ANSI colors for level and logger name.

    Override ``LEVEL_COLORS`` to customise the palette.
    """

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": DEBUG_COLOR,
        "INFO": INFO_COLOR,
        "WARNING": WARNING_COLOR,
        "ERROR": ERROR_COLOR,
        "CRITICAL": CRITICAL_COLOR,
    }

    def format(self, record: logging.LogRecord) -> str:
        orig_levelname = record.levelname
        orig_name = record.name
        record.levelname = f"{self.LEVEL_COLORS.get(orig_levelname, '')}{orig_levelname}{RESET}"
        record.name = f"{LOGGER_COLOR}{orig_name}{RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = orig_levelname
            record.name = orig_name

    def _decorate(self, text: str) -> str:
        return f"{EXTRA_COLOR}{text}{RESET}"


class ForgeMCPHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Stream handler installed by :func:`setup_logger`.

    Only handlers of this type are replaced on ``setup_logger(force=True)``,
    so handlers added by the host application survive reconfiguration.
    """


class StructuredJSONFormatter(logging.Formatter):
    """Serialize log records as one JSON object per line."""

    def __init__(
        self,
        serializer: JsonSerializer,
        *,
        datefmt: str | None = None,
        payload_transformer: PayloadTransformer | None = None,
    ) -> None:
        super().__init__(datefmt=datefmt)
        self._serializer = serializer
        self._transformer = payload_transformer or _identity

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        extra = _extras(record)
        if extra:
            payload["context"] = extra
        return self._serializer(self._transformer(payload))


def _default_json_serializer(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, default=str)


def _identity(payload: dict[str, Any]) -> dict[str, Any]:
    return payload


def _installed_handlers(root: logging.Logger) -> list[ForgeMCPHandler]:
    return [handler for handler in root.handlers if isinstance(handler, ForgeMCPHandler)]


def _read_bool_env(key: str) -> bool:
    value = os.getenv(key)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv(ENV_LOG_LEVEL) or logging.INFO
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    *,
    level: int | str | None = None,
    use_json: bool | None = None,
    use_color: bool | None = None,
    json_serializer: JsonSerializer | None = None,
    payload_transformer: PayloadTransformer | None = None,
    fmt: str | None = None,
    datefmt: str | None = DEFAULT_DATEFMT,
    stream: Any = None,
    force: bool = False,
) -> None:
    """Configure the root logger.

    Args:
        level: Log level; falls back to ``FORGEMCP_LOG_LEVEL`` then ``INFO``.
        use_json: Emit JSON lines; defaults to ``FORGEMCP_LOG_JSON``.
        use_color: Colorize text output; defaults to on unless ``NO_COLOR`` is
            set or JSON output is selected.
        json_serializer: Replacement for :func:`json.dumps` (e.g. ``orjson``).
        payload_transformer: Hook applied to the JSON payload before
            serialization.
        fmt: Format string for text output.
        datefmt: Date format for both text and JSON output.
        stream: Target stream.  Defaults to ``stderr`` because ``stdout`` is
            the stdio transport's wire.
        force: Replace a previously installed :class:`ForgeMCPHandler`.
    """
    root = logging.getLogger()

    existing = _installed_handlers(root)
    if existing and not force:
        return
    for handler in existing:
        root.removeHandler(handler)
        handler.close()

    resolved_level = _resolve_level(level)
    root.setLevel(resolved_level)

    resolved_use_json = use_json if use_json is not None else _read_bool_env(ENV_LOG_JSON)
    if use_color is not None:
        resolved_use_color = use_color
    elif os.getenv(ENV_NO_COLOR):
        resolved_use_color = False
    else:
        resolved_use_color = not resolved_use_json

    handler = ForgeMCPHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved_level)

    formatter: logging.Formatter
    if resolved_use_json:
        formatter = StructuredJSONFormatter(
            json_serializer or _default_json_serializer, datefmt=datefmt, payload_transformer=payload_transformer
        )
    elif resolved_use_color:
        formatter = ColoredFormatter(fmt or DEFAULT_FORMAT, datefmt=datefmt)
    else:
        formatter = PlainFormatter(fmt or DEFAULT_FORMAT, datefmt=datefmt)

    handler.setFormatter(formatter)
    root.addHandler(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger, installing the default handler on first use."""
    if not _installed_handlers(logging.getLogger()):
        setup_logger()
    return logging.getLogger(name or DEFAULT_LOGGER_NAME)


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "ColoredFormatter",
    "ForgeMCPHandler",
    "PlainFormatter",
    "StructuredJSONFormatter",
    "get_logger",
    "setup_logger",
]
