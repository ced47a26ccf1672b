"""Telemetry factory.

Provides get_telemetry() / set_telemetry() to swap implementations:
- StructlogTelemetry by default
- RecordingTelemetry in tests
"""

from storefront.telemetry.port import Telemetry
from storefront.telemetry.structlog_adapter import StructlogTelemetry

_current_telemetry: Telemetry | None = None


def get_telemetry() -> Telemetry:
    """Return the current telemetry adapter. Defaults to StructlogTelemetry."""
    global _current_telemetry
    if _current_telemetry is None:
        _current_telemetry = StructlogTelemetry()
    return _current_telemetry


def set_telemetry(telemetry: Telemetry) -> None:
    """Override the active telemetry adapter (useful for tests)."""
    global _current_telemetry
    _current_telemetry = telemetry


def reset_telemetry() -> None:
    """Reset to default adapter."""
    global _current_telemetry
    _current_telemetry = None
