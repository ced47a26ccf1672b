"""Input sanitation for order submissions.

Cleans untrusted strings and rejects content that has no business in an
order form. The sanitizer never raises: whatever it is given, it returns a
``SanitizationResult``.
"""

import re
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any

from storefront.placement.request import OrderRequest

# Length ceilings applied before validation
MAX_LENGTHS = {
    "last_name": 50,
    "first_name": 50,
    "email": 100,
    "phone": 25,
    "platform_id": 64,
    "account_name": 100,
    "account_number": 100,
    "product_id": 64,
}

TEXT_FIELDS = tuple(MAX_LENGTHS)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_MARKUP_PATTERNS = (
    re.compile(r"<\s*script", re.IGNORECASE),
    re.compile(r"<\s*iframe", re.IGNORECASE),
    re.compile(r"javascript\s*:", re.IGNORECASE),
    re.compile(r"vbscript\s*:", re.IGNORECASE),
    re.compile(r"\bon[a-z]+\s*=", re.IGNORECASE),
    re.compile(r"<\s*/?\s*[a-z][^>]*>", re.IGNORECASE),
)
_INVISIBLE_SPACES = re.compile("[\u00a0\u200b\u200c\u200d\u2060\ufeff]")
_WHITESPACE_RUN = re.compile(r"\s+")

SUSPICIOUS_WORDS = ("admin", "root", "script", "select", "drop", "insert", "delete", "union", "null", "undefined")
_SUSPICIOUS = re.compile(r"\b(" + "|".join(SUSPICIOUS_WORDS) + r")\b", re.IGNORECASE)


@dataclass(frozen=True)
class SanitizationIssue:
    field_name: str
    rule: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SanitizationResult:
    success: bool
    record: OrderRequest | None
    issues: list[SanitizationIssue] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def contains_unsafe_content(value: str) -> bool:
    """True when ``value`` holds control characters or markup."""
    if _CONTROL_CHARS.search(value):
        return True
    return any(pattern.search(value) for pattern in _MARKUP_PATTERNS)


def clean_text(value: str) -> str:
    value = _INVISIBLE_SPACES.sub(" ", value)
    return _WHITESPACE_RUN.sub(" ", value).strip()


def _parse_fee(raw) -> Decimal | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        candidate = raw
    else:
        text = clean_text(str(raw)).replace(" ", "")
        if not text:
            return None
        try:
            candidate = Decimal(text)
        except (InvalidOperation, ValueError):
            return None
    if not candidate.is_finite():
        return None
    return candidate


def sanitize_order(request: OrderRequest) -> SanitizationResult:
    issues: list[SanitizationIssue] = []
    warnings: list[str] = []
    cleaned: dict[str, Any] = {}

    for name in TEXT_FIELDS:
        raw = getattr(request, name)
        if raw is None:
            cleaned[name] = None
            continue

        value = raw if isinstance(raw, str) else str(raw)
        # Checked on the raw value so that cleaning cannot hide them
        if "\x00" in value or contains_unsafe_content(value):
            issues.append(SanitizationIssue(name, "unsafe_content"))
            cleaned[name] = None
            continue

        value = clean_text(value)
        if len(value) > MAX_LENGTHS[name]:
            issues.append(SanitizationIssue(name, "too_long", {"max": MAX_LENGTHS[name]}))
            cleaned[name] = None
            continue

        match = _SUSPICIOUS.search(value)
        if match:
            warnings.append(f"{name}: suspicious word '{match.group(1).lower()}'")
        cleaned[name] = value

    fee = _parse_fee(request.expected_fee)
    if fee is None and request.expected_fee is not None and clean_text(str(request.expected_fee)):
        issues.append(SanitizationIssue("expected_fee", "fee_invalid"))
    cleaned["expected_fee"] = fee

    if issues:
        return SanitizationResult(success=False, record=None, issues=issues, warnings=warnings)
    return SanitizationResult(success=True, record=replace(request, **cleaned), warnings=warnings)
