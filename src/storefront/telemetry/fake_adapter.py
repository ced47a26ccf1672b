"""Recording telemetry adapter for tests.

Keeps every captured exception and message so tests can assert on what the
pipeline reported. ``should_fail`` makes the adapter blow up on every call,
which the port absorbs.
"""

from typing import Any

from storefront.telemetry.port import Telemetry


class RecordingTelemetry(Telemetry):
    def __init__(self) -> None:
        self.exceptions: list[dict] = []
        self.messages: list[dict] = []
        self.should_fail: bool = False

    def _send_exception(self, error: BaseException, context: dict[str, Any]) -> None:
        if self.should_fail:
            raise RuntimeError("telemetry transport down")
        self.exceptions.append({"error": error, "context": context})

    def _send_message(self, message: str, context: dict[str, Any], level: str) -> None:
        if self.should_fail:
            raise RuntimeError("telemetry transport down")
        self.messages.append({"message": message, "context": context, "level": level})

    def messages_at(self, level: str) -> list[dict]:
        return [m for m in self.messages if m["level"] == level]
