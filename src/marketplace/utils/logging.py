"""Logging configuration for the marketplace domain.

stdlib handlers carry the output (console, rotating file, rotating error
file); structlog renders key-value events on top of them. Request-scoped
fields such as the acting vendor or supplier are carried in structlog
context variables and merged into every event logged while they are bound.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

_LEVEL_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_STRUCTURED_ENVS = ("production", "staging")

# Libraries that are chatty at INFO
_QUIET_LOGGERS = ("protean", "asyncio", "urllib3", "httpx", "uvicorn.access")

_MAX_LOG_BYTES = 10 * 1024 * 1024
_LOG_BACKUPS = 5


def _current_env() -> str | None:
    env = os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV")
    return env.lower() if env else None


def get_log_level(default: str | None = None) -> str:
    """Resolve the log level: LOG_LEVEL wins, then a known environment, then `default`."""
    return os.getenv("LOG_LEVEL") or _LEVEL_BY_ENV.get(_current_env()) or default or "INFO"


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_LOG_BYTES,
        backupCount=_LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(level: str, log_dir: str, log_file_prefix: str) -> None:
    """Route the root logger to stdout, `<prefix>.log` and `<prefix>_error.log`."""
    directory = Path(log_dir)
    directory.mkdir(exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [
        console,
        _rotating_handler(directory / f"{log_file_prefix}.log", level),
        _rotating_handler(directory / f"{log_file_prefix}_error.log", logging.ERROR),
    ]

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
    ]


def _renderer():
    if _current_env() in _STRUCTURED_ENVS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=4),
    )


def setup_structlog() -> None:
    structlog.configure(
        processors=[*_shared_processors(), _renderer()],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(level: str = "INFO", log_dir: str = "logs", log_file_prefix: str = "marketplace") -> None:
    setup_stdlib_logging(get_log_level(level), log_dir, log_file_prefix)
    setup_structlog()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_actor(actor_id: str | None, role: str | None) -> None:
    """Tag every event logged until `clear_context` with the calling vendor or supplier."""
    fields = {key: value for key, value in (("actor_id", actor_id), ("actor_role", role)) if value}
    if fields:
        structlog.contextvars.bind_contextvars(**fields)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
