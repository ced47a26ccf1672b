"""Cross-field business rules and the final safety check.

Both checks are pure and work on a ``ValidatedOrder``. Business rule
violations are ordinary client errors. A safety check failure means markup
or control characters survived sanitation and validation, which is treated
as a security event by the caller.
"""

from dataclasses import dataclass, field

from storefront.placement.sanitizer import contains_unsafe_content
from storefront.placement.schema import ValidatedOrder

SEQUENCE_LENGTH = 6

PLACEHOLDER_NAMES = frozenset(
    {
        "test",
        "testing",
        "test test",
        "demo",
        "example",
        "sample",
        "placeholder",
        "nom prenom",
        "prenom nom",
        "nom",
        "prenom",
        "xxx",
        "aaa",
        "abc",
        "asdf",
        "qwerty",
        "n/a",
        "na",
        "none",
    }
)

# Account holder names that are clearly not a real account
PLACEHOLDER_ACCOUNT_NAMES = PLACEHOLDER_NAMES | frozenset(
    {
        "account",
        "account name",
        "compte",
        "nom du compte",
        "my account",
        "mon compte",
    }
)


@dataclass(frozen=True)
class RuleCheck:
    passed: bool
    violations: list[str] = field(default_factory=list)


def _normalize(value: str) -> str:
    return " ".join(value.lower().split())


def has_sequential_run(value: str, length: int = SEQUENCE_LENGTH) -> bool:
    """True when ``value`` holds ``length`` consecutive ascending, descending or repeated characters.

    Only digits and letters take part. ``123456``, ``fedcba`` and ``000000``
    all count; separators break a run.
    """
    chars = value.lower()
    ascending = descending = repeated = 1
    for previous, current in zip(chars, chars[1:]):
        if not (previous.isalnum() and current.isalnum() and previous.isascii() and current.isascii()):
            ascending = descending = repeated = 1
            continue
        step = ord(current) - ord(previous)
        same_class = previous.isdigit() == current.isdigit()
        ascending = ascending + 1 if step == 1 and same_class else 1
        descending = descending + 1 if step == -1 and same_class else 1
        repeated = repeated + 1 if step == 0 else 1
        if max(ascending, descending, repeated) >= length:
            return True
    return False


def check_business_rules(order: ValidatedOrder) -> RuleCheck:
    violations = []

    if _normalize(order.account_name) in PLACEHOLDER_ACCOUNT_NAMES:
        violations.append("placeholder_account_name")

    first_name = _normalize(order.first_name)
    last_name = _normalize(order.last_name)
    if f"{first_name} {last_name}" in PLACEHOLDER_NAMES or (
        first_name in PLACEHOLDER_NAMES and last_name in PLACEHOLDER_NAMES
    ):
        violations.append("placeholder_customer_name")

    if has_sequential_run(order.account_number):
        violations.append("sequential_account_number")

    account_name = _normalize(order.account_name)
    if account_name in (order.email, order.phone, order.phone.lstrip("+")):
        violations.append("account_name_is_contact_detail")

    return RuleCheck(passed=not violations, violations=violations)


def check_safety(order: ValidatedOrder) -> RuleCheck:
    """Re-scan every string for markup or control characters."""
    violations = [name for name, value in order.text_fields().items() if contains_unsafe_content(value)]
    return RuleCheck(passed=not violations, violations=violations)
