"""Field-level validation of a sanitized order.

Pure: no I/O, no clock, no globals beyond the rule tables below. Produces a
``ValidatedOrder`` with normalized values, or a map of field to message.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal

from storefront.placement.messages import field_message
from storefront.placement.request import OrderRequest

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 100
ACCOUNT_NAME_MIN_LENGTH = 2
ACCOUNT_NAME_MAX_LENGTH = 100
ACCOUNT_NUMBER_MIN_LENGTH = 5
ACCOUNT_NUMBER_MAX_LENGTH = 50
MAX_FEE = 500_000

# Special characters allowed in a name, by field
MAX_NAME_SPECIALS = {"last_name": 3, "first_name": 2}

_LETTERS = "a-zA-Z\u00c0-\u00ff\u0100-\u017f\u0180-\u024f\u1e00-\u1eff"
_NAME = re.compile(rf"^[{_LETTERS}\s\-'.]+$")
_NAME_SPECIALS = re.compile(r"[\-'.]")
_DIGIT = re.compile(r"\d")
_EMAIL = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_PHONE_SEPARATORS = re.compile(r"[\s().-]")
_PHONE = re.compile(r"^\+?\d{8,15}$")
_UUID = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")
_ACCOUNT_NAME = re.compile(rf"^[{_LETTERS}0-9\s@._-]+$")
_ACCOUNT_NAME_SPECIAL_RUN = re.compile(r"[._@-]{3,}")
_ACCOUNT_NUMBER = re.compile(r"^[a-zA-Z0-9@._+-]+$")
_ALNUM = re.compile(r"[a-zA-Z0-9]")

DISPOSABLE_EMAIL_DOMAINS = (
    "10minutemail.com",
    "guerrillamail.com",
    "tempmail.org",
    "mailinator.com",
    "yopmail.com",
    "throwaway.email",
)

SENTINEL_IDS = frozenset(
    {
        "00000000-0000-0000-0000-000000000000",
        "ffffffff-ffff-ffff-ffff-ffffffffffff",
    }
)


@dataclass(frozen=True)
class ValidatedOrder:
    last_name: str
    first_name: str
    email: str
    phone: str
    platform_id: str
    account_name: str
    account_number: str
    product_id: str
    fee: Decimal

    def text_fields(self) -> dict[str, str]:
        return {
            "last_name": self.last_name,
            "first_name": self.first_name,
            "email": self.email,
            "phone": self.phone,
            "platform_id": self.platform_id,
            "account_name": self.account_name,
            "account_number": self.account_number,
            "product_id": self.product_id,
        }


@dataclass(frozen=True)
class SchemaResult:
    valid: bool
    order: ValidatedOrder | None = None
    errors: dict[str, str] = field(default_factory=dict)


class _FieldError(Exception):
    def __init__(self, rule, **params):
        super().__init__(rule)
        self.rule = rule
        self.params = params


def _required(value) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise _FieldError("required")
    return value.strip()


def capitalize_words(value: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in value.split(" ") if word)


def validate_name(value, field_name: str) -> str:
    value = _required(value)
    if len(value) < NAME_MIN_LENGTH:
        raise _FieldError("too_short", min=NAME_MIN_LENGTH)
    if len(value) > NAME_MAX_LENGTH:
        raise _FieldError("too_long", max=NAME_MAX_LENGTH)
    if _DIGIT.search(value):
        raise _FieldError("name_has_digits")
    if not _NAME.match(value):
        raise _FieldError("name_invalid_chars")
    if len(_NAME_SPECIALS.findall(value)) > MAX_NAME_SPECIALS[field_name]:
        raise _FieldError("name_too_many_specials")
    return capitalize_words(value)


def is_disposable_domain(domain: str) -> bool:
    return any(domain == blocked or domain.endswith("." + blocked) for blocked in DISPOSABLE_EMAIL_DOMAINS)


def validate_email(value) -> str:
    value = _required(value).lower()
    if len(value) > EMAIL_MAX_LENGTH:
        raise _FieldError("too_long", max=EMAIL_MAX_LENGTH)
    if not _EMAIL.match(value):
        raise _FieldError("email_invalid")
    domain = value.rsplit("@", 1)[1]
    if "." not in domain or len(domain) < 4 or ".." in domain or domain.startswith((".", "-")):
        raise _FieldError("email_domain_invalid")
    if is_disposable_domain(domain):
        raise _FieldError("email_disposable")
    return value


def normalize_phone(value: str) -> str:
    return _PHONE_SEPARATORS.sub("", value)


def validate_phone(value) -> str:
    value = normalize_phone(_required(value))
    if not _PHONE.match(value):
        raise _FieldError("phone_invalid")
    return value


def validate_identifier(value) -> str:
    value = _required(str(value) if value is not None else None).lower()
    if not _UUID.match(value) or value in SENTINEL_IDS:
        raise _FieldError("id_invalid")
    return value


def validate_account_name(value) -> str:
    value = _required(value)
    if len(value) < ACCOUNT_NAME_MIN_LENGTH:
        raise _FieldError("too_short", min=ACCOUNT_NAME_MIN_LENGTH)
    if len(value) > ACCOUNT_NAME_MAX_LENGTH:
        raise _FieldError("too_long", max=ACCOUNT_NAME_MAX_LENGTH)
    if not _ACCOUNT_NAME.match(value):
        raise _FieldError("account_name_invalid")
    if value.replace(" ", "").isdigit():
        raise _FieldError("account_name_digits_only")
    if _ACCOUNT_NAME_SPECIAL_RUN.search(value):
        raise _FieldError("account_name_repeated_specials")
    return value


def validate_account_number(value) -> str:
    value = _required(value)
    if len(value) < ACCOUNT_NUMBER_MIN_LENGTH:
        raise _FieldError("too_short", min=ACCOUNT_NUMBER_MIN_LENGTH)
    if len(value) > ACCOUNT_NUMBER_MAX_LENGTH:
        raise _FieldError("too_long", max=ACCOUNT_NUMBER_MAX_LENGTH)
    if not _ACCOUNT_NUMBER.match(value):
        raise _FieldError("account_number_invalid")
    if not _ALNUM.search(value):
        raise _FieldError("account_number_no_alnum")
    return value


def validate_fee(value) -> Decimal:
    if value is None:
        raise _FieldError("required")
    if not isinstance(value, Decimal):
        raise _FieldError("fee_invalid")
    if value <= 0 or value != value.to_integral_value():
        raise _FieldError("fee_not_positive")
    if value > MAX_FEE:
        raise _FieldError("fee_too_large")
    return Decimal(int(value))


_VALIDATORS = {
    "last_name": lambda value: validate_name(value, "last_name"),
    "first_name": lambda value: validate_name(value, "first_name"),
    "email": validate_email,
    "phone": validate_phone,
    "platform_id": validate_identifier,
    "account_name": validate_account_name,
    "account_number": validate_account_number,
    "product_id": validate_identifier,
}


def validate_order(record: OrderRequest, locale: str | None = None) -> SchemaResult:
    """Validate every field, collecting one message per failing field."""
    values = {}
    errors = {}

    for name, validator in _VALIDATORS.items():
        try:
            values[name] = validator(getattr(record, name))
        except _FieldError as exc:
            errors[name] = field_message(exc.rule, locale, **exc.params)

    try:
        values["fee"] = validate_fee(record.expected_fee)
    except _FieldError as exc:
        errors["expected_fee"] = field_message(exc.rule, locale, **exc.params)

    if errors:
        return SchemaResult(valid=False, errors=errors)
    return SchemaResult(valid=True, order=ValidatedOrder(**values))
