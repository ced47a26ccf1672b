"""Telemetry adapter that reports through structlog.

The error log file handler picks up everything at error level, which is
where an external collector tails from.
"""

from typing import Any

import structlog

from storefront.telemetry.port import Telemetry

_LOG_METHODS = {
    "debug": "debug",
    "info": "info",
    "warning": "warning",
    "error": "error",
    "fatal": "critical",
    "critical": "critical",
}


class StructlogTelemetry(Telemetry):
    def __init__(self, logger_name: str = "storefront.telemetry") -> None:
        self._logger = structlog.get_logger(logger_name)

    def _send_exception(self, error: BaseException, context: dict[str, Any]) -> None:
        self._logger.error(
            "Captured exception",
            error_type=type(error).__name__,
            error=str(error),
            exc_info=error,
            **context,
        )

    def _send_message(self, message: str, context: dict[str, Any], level: str) -> None:
        log = getattr(self._logger, _LOG_METHODS.get(level, "info"))
        log(message, **context)
