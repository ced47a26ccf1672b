"""Response error extraction for load test observability.

Parses Storefront API error responses into human-readable messages.
Handles three response shapes:

- Order placement results: {"code": "...", "message": "...", "errors": {"field": "msg"}}
- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Domain errors (400/404): {"error": "msg"} or {"error": {"field": "msg"}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response."""
    try:
        body = response.json()
    except Exception:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    # Placement results carry the outcome code and per-field messages
    if "code" in body and "success" in body:
        errors = body.get("errors") or {}
        if errors:
            return f"{body['code']}: " + " | ".join(f"{k}: {v}" for k, v in errors.items())
        retry_after = body.get("retryAfter")
        suffix = f" (retry after {retry_after}s)" if retry_after is not None else ""
        return f"{body['code']}: {body.get('message', '')}{suffix}"

    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            return " | ".join(f"{k}: {v}" for k, v in error.items())
        return str(error)

    return str(body)[:300]
