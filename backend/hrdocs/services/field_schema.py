"""
Dynamic per-document-type field definitions and value validation.
Values are always stored as text; this module normalizes them on the way in.
"""
import json
import math
import re
from datetime import date, datetime, time

from hrdocs.errors import ValidationFailed

FIELD_TYPES = {
    "text", "textarea", "number", "date", "time", "datetime",
    "email", "phone", "url", "single_select", "multi_select",
    "checkbox", "radio", "file",
}
OPTION_TYPES = {"single_select", "multi_select", "radio"}
TEXT_TYPES = {"text", "textarea", "email", "phone", "url", "file"}

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_RE = re.compile(r"^\+?[0-9 ()-]{6,20}$")
URL_RE = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)
TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


def validate_field_definition(field_type: str, field_values: list | None, validation_rules: dict | None):
    if field_type not in FIELD_TYPES:
        raise ValidationFailed(
            "InvalidFieldDefinition",
            f"Unknown field type '{field_type}'. Must be one of: {sorted(FIELD_TYPES)}",
        )
    if field_type in OPTION_TYPES and not field_values:
        raise ValidationFailed(
            "InvalidFieldDefinition",
            f"Field type '{field_type}' requires a non-empty list of options",
        )
    if validation_rules is not None and not isinstance(validation_rules, dict):
        raise ValidationFailed("InvalidFieldDefinition", "validation_rules must be an object")
    pattern = (validation_rules or {}).get("pattern")
    if pattern is not None:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ValidationFailed("InvalidFieldDefinition", f"Invalid pattern: {exc}") from exc


def _invalid(field, reason: str) -> ValidationFailed:
    return ValidationFailed("InvalidFieldValue", f"Field '{field.field_name}': {reason}")


def _check_length(field, text: str, rules: dict):
    min_length = rules.get("min_length")
    max_length = rules.get("max_length")
    if min_length is not None and len(text) < min_length:
        raise _invalid(field, f"must be at least {min_length} characters")
    if max_length is not None and len(text) > max_length:
        raise _invalid(field, f"must be at most {max_length} characters")
    pattern = rules.get("pattern")
    if pattern is not None and not re.fullmatch(pattern, text):
        raise _invalid(field, "does not match the required format")


def _check_range(field, number, rules: dict):
    minimum = rules.get("min")
    maximum = rules.get("max")
    if minimum is not None and number < minimum:
        raise _invalid(field, f"must be >= {minimum}")
    if maximum is not None and number > maximum:
        raise _invalid(field, f"must be <= {maximum}")


def _as_list(field, value) -> list:
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = [v.strip() for v in value.split(",") if v.strip()]
        if isinstance(parsed, list):
            return parsed
    raise _invalid(field, "must be a list of options")


def validate_field_value(field, value) -> str | None:
    """Validate one submitted value against its field; return the stored text."""
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return None

    rules = field.validation_rules or {}
    options = [str(o) for o in (field.field_values or [])]
    ftype = field.field_type

    if ftype == "number":
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise _invalid(field, "must be a number")
        if not math.isfinite(number):
            raise _invalid(field, "must be a finite number")
        _check_range(field, number, rules)
        return str(int(number)) if number.is_integer() else str(number)

    if ftype == "date":
        try:
            parsed = date.fromisoformat(str(value))
        except ValueError:
            raise _invalid(field, "must be a date (YYYY-MM-DD)")
        return parsed.isoformat()

    if ftype == "time":
        try:
            parsed = time.fromisoformat(str(value))
        except ValueError:
            raise _invalid(field, "must be a time (HH:MM[:SS])")
        return parsed.isoformat()

    if ftype == "datetime":
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            raise _invalid(field, "must be an ISO-8601 datetime")
        return parsed.isoformat()

    if ftype == "checkbox":
        text = str(value).strip().lower()
        if isinstance(value, bool):
            return "true" if value else "false"
        if text in TRUE_VALUES:
            return "true"
        if text in FALSE_VALUES:
            return "false"
        raise _invalid(field, "must be a boolean")

    if ftype in ("single_select", "radio"):
        text = str(value)
        if text not in options:
            raise _invalid(field, f"must be one of {options}")
        return text

    if ftype == "multi_select":
        chosen = [str(v) for v in _as_list(field, value)]
        unknown = [v for v in chosen if v not in options]
        if unknown:
            raise _invalid(field, f"unknown options {unknown}")
        return json.dumps(chosen)

    text = str(value)
    if ftype == "email" and not EMAIL_RE.match(text):
        raise _invalid(field, "must be an email address")
    if ftype == "phone" and not PHONE_RE.match(text):
        raise _invalid(field, "must be a phone number")
    if ftype == "url" and not URL_RE.match(text):
        raise _invalid(field, "must be an http(s) URL")
    _check_length(field, text, rules)
    return text
