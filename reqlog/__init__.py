"""Request access logging for Starlette / FastAPI applications."""

from reqlog.clock import Clock, RealClock
from reqlog.formatters import JSONFormatter, TextFormatter, format_duration, formatter_for
from reqlog.middleware.access_log import AccessLogMiddleware, LogOptions, RequestLogger, new_logger
from reqlog.middleware.response_capture import ResponseCapture

__all__ = [
    "AccessLogMiddleware",
    "Clock",
    "JSONFormatter",
    "LogOptions",
    "RealClock",
    "RequestLogger",
    "ResponseCapture",
    "TextFormatter",
    "format_duration",
    "formatter_for",
    "new_logger",
]
