"""Example service: a single ``GET /hello`` route behind the access logger.

Run with ``reqlog-example`` (or ``python -m reqlog.main``); settings come from
the environment, see :mod:`reqlog.config`.
"""

import logging

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from reqlog.config import settings
from reqlog.formatters import formatter_for
from reqlog.middleware.access_log import AccessLogMiddleware, LogOptions, new_logger

logger = logging.getLogger(__name__)

request_logger = new_logger(
    LogOptions(
        formatter=formatter_for(settings.log_format),
        enable_starting=settings.log_enable_starting,
    )
)

app = FastAPI(
    title=settings.app_name,
    version=settings.version,
)

app.add_middleware(AccessLogMiddleware, request_logger=request_logger)


@app.get("/hello", response_class=PlainTextResponse)
async def hello() -> str:
    return "hello!"


def run() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    logger.info("Listen on address %s:%d", settings.host, settings.port)
    uvicorn.run(
        "reqlog.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        # The access middleware replaces uvicorn's own access log.
        access_log=False,
    )


if __name__ == "__main__":
    run()
