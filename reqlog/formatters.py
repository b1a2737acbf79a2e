"""Log-entry encodings for the access-log sink.

Both formatters are :class:`structlog.stdlib.ProcessorFormatter` instances
attached to a plain ``logging`` handler.  Structured fields come from
``record.fields``, a dict attached through
``logger.info(msg, extra={"fields": {...}})``; records without fields render
just the timestamp, level and message.

``TextFormatter`` (the default) writes logfmt lines::

    time=2026-10-19T10:00:00.123456Z level=info msg="completed handling request" status=200 took=1.2ms

``JSONFormatter`` writes one JSON object per line with the same keys.
"""

import logging
from datetime import timedelta
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

__all__ = [
    "JSONFormatter",
    "TextFormatter",
    "format_duration",
    "formatter_for",
]

# Keys owned by the formatter itself; colliding fields are renamed ``fields.<key>``.
_RESERVED_KEYS = ("time", "level", "msg", "event")

_CONTROL_ESCAPES = {i: f"\\x{i:02x}" for i in (*range(0x20), 0x7F)}
_CONTROL_ESCAPES.update({ord("\t"): "\\t", ord("\n"): "\\n", ord("\r"): "\\r"})


def format_duration(delta: timedelta) -> str:
    """Render *delta* the way Go prints a ``time.Duration`` (``1.5ms``, ``2m3s``)."""
    total_us = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    if total_us == 0:
        return "0s"
    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)
    if total_us < 1_000:
        return f"{sign}{total_us}µs"
    if total_us < 1_000_000:
        return f"{sign}{_trim(total_us / 1_000)}ms"

    hours, rem = divmod(total_us, 3_600_000_000)
    minutes, rem = divmod(rem, 60_000_000)
    out = sign
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return f"{out}{_trim(rem / 1_000_000)}s"


def _trim(value: float) -> str:
    return f"{value:.6f}".rstrip("0").rstrip(".")


def add_record_fields(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Copy ``record.fields`` from the originating ``LogRecord`` into the event."""
    record = event_dict.get("_record")
    fields: dict[str, Any] = getattr(record, "fields", None) or {}
    for key, value in fields.items():
        if key in _RESERVED_KEYS:
            key = f"fields.{key}"
        event_dict[key] = value
    return event_dict


def render_durations(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    for key, value in event_dict.items():
        if isinstance(value, timedelta):
            event_dict[key] = format_duration(value)
    return event_dict


def escape_control_chars(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Escape tabs, newlines and other control characters so one record stays one line."""
    for key, value in event_dict.items():
        if isinstance(value, str) and not key.startswith("_"):
            event_dict[key] = value.translate(_CONTROL_ESCAPES)
    return event_dict


def _pre_chain(timestamp_format: str | None, disable_timestamp: bool) -> list[Processor]:
    chain: list[Processor] = [structlog.stdlib.add_log_level]
    if not disable_timestamp:
        # fmt="iso" with utc=True yields RFC 3339 (``...Z``).
        chain.append(structlog.processors.TimeStamper(fmt=timestamp_format or "iso", utc=True, key="time"))
    chain += [
        add_record_fields,
        render_durations,
        structlog.processors.EventRenamer("msg"),
    ]
    return chain


class TextFormatter(structlog.stdlib.ProcessorFormatter):
    """Plain logfmt lines, colours disabled, ``time level msg`` first and fields sorted."""

    def __init__(
        self, timestamp_format: str | None = None, disable_timestamp: bool = False
    ) -> None:
        super().__init__(
            foreign_pre_chain=[*_pre_chain(timestamp_format, disable_timestamp), escape_control_chars],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.LogfmtRenderer(
                    sort_keys=True,
                    key_order=["time", "level", "msg"],
                    drop_missing=True,
                    bool_as_flag=False,
                ),
            ],
        )


class JSONFormatter(structlog.stdlib.ProcessorFormatter):
    """One JSON object per line: ``time``, ``level``, ``msg`` and every field."""

    def __init__(self, timestamp_format: str | None = None) -> None:
        super().__init__(
            foreign_pre_chain=_pre_chain(timestamp_format, disable_timestamp=False),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer(),
            ],
        )


_FORMATTERS: dict[str, type[logging.Formatter]] = {
    "text": TextFormatter,
    "json": JSONFormatter,
}


def formatter_for(name: str) -> logging.Formatter:
    """Return a new formatter for *name* (``"text"`` or ``"json"``)."""
    try:
        return _FORMATTERS[name]()
    except KeyError:
        raise ValueError(f"unknown log format {name!r}; expected one of {sorted(_FORMATTERS)}") from None
