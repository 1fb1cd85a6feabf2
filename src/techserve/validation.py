"""Field validation for customer details and order lookup."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any, Mapping

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^07[0-9]{8}$")
PHONE_SEPARATORS = re.compile(r"[\s-]")

REQUIRED_MESSAGE = "This field is required"
EMAIL_MESSAGE = "Please enter a valid email address"
PHONE_MESSAGE = "Phone number must start with 07 and have 10 digits"

CUSTOMER_FIELDS = ("name", "email", "phone", "address")


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    errors: list[ValidationIssue]

    @property
    def ok(self) -> bool:
        return not self.errors

    def by_field(self) -> dict[str, str]:
        return {issue.path: issue.message for issue in self.errors}


def normalize_phone(value: str) -> str:
    return PHONE_SEPARATORS.sub("", value.strip())


def validate_required(value: Any, path: str) -> ValidationIssue | None:
    if value is None or not str(value).strip():
        return ValidationIssue(path, REQUIRED_MESSAGE)
    return None


def validate_email(value: str | None, path: str = "email") -> ValidationIssue | None:
    issue = validate_required(value, path)
    if issue:
        return issue
    if not EMAIL_PATTERN.match(str(value).strip()):
        return ValidationIssue(path, EMAIL_MESSAGE)
    return None


def validate_phone(value: str | None, path: str = "phone") -> ValidationIssue | None:
    issue = validate_required(value, path)
    if issue:
        return issue
    if not PHONE_PATTERN.fullmatch(normalize_phone(str(value))):
        return ValidationIssue(path, PHONE_MESSAGE)
    return None


def is_valid_email(value: str | None) -> bool:
    return validate_email(value) is None


def is_valid_phone(value: str | None) -> bool:
    return validate_phone(value) is None


def validate_field(field: str, value: str | None) -> ValidationIssue | None:
    """Single-field check used for live (on blur) feedback."""
    if field == "email":
        return validate_email(value, field)
    if field == "phone":
        return validate_phone(value, field)
    return validate_required(value, field)


def validate_customer_info(info: Mapping[str, Any] | Any) -> ValidationResult:
    """All-fields gate; reports one issue per invalid field and never edits the input."""
    values = info if isinstance(info, Mapping) else _as_mapping(info)
    errors: list[ValidationIssue] = []
    for field in CUSTOMER_FIELDS:
        issue = validate_field(field, values.get(field))
        if issue:
            errors.append(issue)
    return ValidationResult(errors=errors)


def validate_contact(email: str | None, phone: str | None) -> ValidationResult:
    errors = [issue for issue in (validate_email(email), validate_phone(phone)) if issue]
    return ValidationResult(errors=errors)


def _as_mapping(info: Any) -> dict[str, Any]:
    return {field: getattr(info, field, None) for field in CUSTOMER_FIELDS}
