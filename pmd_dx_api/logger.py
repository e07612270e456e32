"""Access and error logs.

The access log takes one line per request in Combined Log Format (without
referrer). The error log records internal failures together with the
function, file and line they originated from. Neither is ever exposed to
the client.
"""
import logging
import traceback
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from starlette.requests import Request

access_logger = logging.getLogger("pmd_dx_api.access")
error_logger = logging.getLogger("pmd_dx_api.error")

MAX_LOG_BYTES = 1024 * 1024
LOG_BACKUPS = 3


def init_logging(log_path: str = "logs"):
    """Attach rotating file handlers for access.log and error.log under log_path."""
    directory = Path(log_path)
    directory.mkdir(parents=True, exist_ok=True)
    for log in (access_logger, error_logger):
        for handler in list(log.handlers):
            log.removeHandler(handler)
            handler.close()

    access_handler = RotatingFileHandler(
        directory / "access.log", maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS
    )
    access_handler.setFormatter(logging.Formatter("%(message)s"))
    access_logger.addHandler(access_handler)
    access_logger.setLevel(logging.INFO)

    error_handler = RotatingFileHandler(
        directory / "error.log", maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS
    )
    error_handler.setFormatter(logging.Formatter("%(asctime)s %(message)s", "%Y/%m/%d %H:%M:%S"))
    error_logger.addHandler(error_handler)
    error_logger.setLevel(logging.ERROR)


def log_request(request: Request, status_code: int, size: int):
    client = request.client.host if request.client else "-"
    timestamp = datetime.now().astimezone().strftime("%d/%b/%Y:%H:%M:%S %z")
    version = request.scope.get("http_version", "1.1")
    url = request.url.path + (f"?{request.url.query}" if request.url.query else "")
    access_logger.info(
        '%s - - [%s] "%s %s HTTP/%s" %s %s "%s"',
        client,
        timestamp,
        request.method,
        url,
        version,
        status_code,
        size,
        request.headers.get("user-agent", ""),
    )


def caller_context(exc: BaseException) -> str:
    """``function(file:line)`` of the innermost frame that raised exc."""
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return "unknown"
    frame = frames[-1]
    return f"{frame.name}({Path(frame.filename).name}:{frame.lineno})"


def log_error(exc: BaseException):
    error_logger.error("%s - %s", caller_context(exc), exc)
