"""Telemetry port (abstract interface).

Error and message reporting is fire-and-forget: the public ``capture_*``
methods never raise, whatever the adapter does. Adapters implement the
``_send_*`` hooks.
"""

from abc import ABC, abstractmethod
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class Telemetry(ABC):
    """Abstract error/metric reporting interface."""

    def capture_exception(self, error: BaseException, context: dict[str, Any] | None = None) -> None:
        try:
            self._send_exception(error, context or {})
        except Exception as exc:  # noqa: BLE001
            logger.debug("Telemetry adapter failed", adapter=type(self).__name__, error=str(exc))

    def capture_message(self, message: str, context: dict[str, Any] | None = None, level: str = "info") -> None:
        try:
            self._send_message(message, context or {}, level)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Telemetry adapter failed", adapter=type(self).__name__, error=str(exc))

    @abstractmethod
    def _send_exception(self, error: BaseException, context: dict[str, Any]) -> None:
        """Report an exception with its context."""
        ...

    @abstractmethod
    def _send_message(self, message: str, context: dict[str, Any], level: str) -> None:
        """Report a message at the given level (info, warning, error)."""
        ...
