"""Logging configuration for the storefront.

stdlib logging carries the handlers; structlog renders structured events on
top of it. Order placement logs keyword context (code, stage, product_id) so
the JSON renderer in production yields queryable records.

Customer contact details never reach a log line in clear: the
``mask_customer_details`` processor rewrites them before rendering.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

_LEVEL_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_STRUCTURED_ENVIRONMENTS = ("production", "staging")

_MASKED_KEYS = ("email", "phone", "account_number", "payee_account_number")

_MAX_LOG_BYTES = 10 * 1024 * 1024


def configured_environment() -> str | None:
    """Environment name set through ENV, ENVIRONMENT or PROTEAN_ENV, lower-cased."""
    value = os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV")
    return value.lower() if value else None


def current_environment() -> str:
    return configured_environment() or "development"


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", _LEVEL_BY_ENV.get(current_environment(), "INFO"))


def _mask(value: str) -> str:
    if "@" in value:
        local, _, domain = value.partition("@")
        return f"{local[:1]}***@{domain}"
    return f"***{value[-4:]}" if len(value) > 4 else "***"


def mask_customer_details(_logger, _method_name, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor hiding emails, phone and account numbers."""
    for key in _MASKED_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str) and value:
            event_dict[key] = _mask(value)
    return event_dict


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_LOG_BYTES,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging() -> None:
    log_level = get_log_level()
    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    log_dir.mkdir(exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [
        console,
        _rotating_handler(log_dir / "storefront.log", log_level),
        # Safety-check rejections and infrastructure failures are tailed from here
        _rotating_handler(log_dir / "storefront_error.log", logging.ERROR),
    ]

    for noisy in ("protean", "urllib3", "asyncio", "redis"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def setup_structlog() -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        mask_customer_details,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if current_environment() in _STRUCTURED_ENVIRONMENTS:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    """Configure all logging for the application."""
    setup_stdlib_logging()
    setup_structlog()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_context(**kwargs: Any) -> None:
    """Bind values included in every subsequent log line of this request."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
