"""
Predicate Library

Pure, stateless constraint checks. Every predicate answers one question:
"does this value violate the constraint?" and returns True on violation.

Predicates are polymorphic over the value kinds they accept; the dispatcher
decides which predicates apply to which kind. A malformed rule parameter
(e.g. `min:abc`) raises ValueError, which the field evaluator reports as a
fault on that field.
"""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Iterable, Optional, Tuple

from email_validator import EmailNotValidError, validate_email

from .exceptions import ConfigurationError
from .record import UploadedFile, ValueKind

KILOBYTE = 1024
MEGABYTE = KILOBYTE * 1024
GIGABYTE = MEGABYTE * 1024

EMAIL_MIN_LENGTH = 6
EMAIL_MAX_LENGTH = 254
EMAIL_MAX_LOCAL_LENGTH = 64
EMAIL_BLOCKED_DOMAINS = frozenset({"localhost", "localhost.com", "example.com"})

IMAGE_EXTENSIONS = "jpg,jpeg,png,webp"

_STRING = re.compile(r"[0-9a-zA-Z+ .-]+")
_ASCII = re.compile(r"[\x00-\x7F]+")
_ALPHA = re.compile(r"[a-zA-Z]+")
_ALPHANUMERIC = re.compile(r"[a-zA-Z0-9]+")
_NUMERIC = re.compile(r"[0-9]+")
_INT = re.compile(r"-?(?:0|[1-9][0-9]*)")
# Requires two digits or more: 0-9 are reported as not unsigned
_UINT = re.compile(r"[1-9][0-9]+")
_FLOAT = re.compile(r"[-+]?[0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?")

_PHONE = re.compile(r"0[0-9]{9}")
_CALLING_CODES = (
    # Three digit codes, grouped by their first two digits
    "(?:99|97|96|89|88|87|85|83|80|69|68|67|59|50|42|38|37|35"
    "|29|28|26|25|24|23|22|21)[0-9]"
    "|98|95|94|93|92|91|90|86|84|82|81|66|65|64|63|62|61|60|58|57"
    "|56|55|54|53|52|51|49|48|47|46|45|44|43|41|40|39|36|34|33|32"
    "|31|30|27|20|7|1"
)
_PHONE_WITH_CODE = re.compile(r"\+(?:" + _CALLING_CODES + r")[0-9]{1,14}")

_GH_CARD = re.compile(r"GHA-[0-9]{9}-[0-9]")
_GH_GPS = re.compile(r"[A-Z]{2}-[0-9]{1,4}-[0-9]{4}")

_DATE = r"[0-9]{4}-[0-9]{2}-[0-9]{2}"
_TIME = r"[0-9]{2}:[0-9]{2}:[0-9]{2}(?:\.[0-9]+)?"
_DATETIME_LAYOUTS = {
    "rfc3339": re.compile(
        rf"(?P<date>{_DATE})T(?P<time>{_TIME})(?P<offset>Z|[+-][0-9]{{2}}:[0-9]{{2}})"
    ),
    "datetime": re.compile(rf"(?P<date>{_DATE}) (?P<time>{_TIME})"),
    "dateonly": re.compile(rf"(?P<date>{_DATE})"),
    "timeonly": re.compile(rf"(?P<time>{_TIME})"),
}

_FILE_SIZE = re.compile(r"([1-9]|[1-9][0-9]+)(kb|KB|mb|MB|gb|GB|tb|TB)")
_FILE_SIZE_UNITS = {
    "kb": (KILOBYTE, "size.file_kb"),
    "mb": (MEGABYTE, "size.file_mb"),
    "gb": (GIGABYTE, "size.file_gb"),
    # Accepted by the grammar without a multiplier: the limit stays 0
    "tb": (0, ""),
}


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------

def is_empty(value: Any, kind: ValueKind) -> bool:
    """True when the value counts as absent for its kind."""
    if kind in (ValueKind.TEXT, ValueKind.SEQUENCE, ValueKind.MAPPING):
        return len(value) == 0
    if kind is ValueKind.BOOLEAN:
        return not value
    if kind in (ValueKind.SIGNED_INT, ValueKind.UNSIGNED_INT, ValueKind.FLOAT):
        return value == 0
    if kind is ValueKind.REFERENCE:
        return value is None
    if kind is ValueKind.RECORD:
        return False
    return not value


# ---------------------------------------------------------------------------
# Shape
# ---------------------------------------------------------------------------

def is_not_string(value: str) -> bool:
    return _STRING.fullmatch(value) is None


def is_not_ascii(value: str) -> bool:
    return _ASCII.fullmatch(value) is None


def is_not_alpha(value: str) -> bool:
    return _ALPHA.fullmatch(value) is None


def is_not_alphanumeric(value: str) -> bool:
    return _ALPHANUMERIC.fullmatch(value) is None


def is_not_numeric(value: str) -> bool:
    return _NUMERIC.fullmatch(value) is None


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

def is_not_email(value: str) -> bool:
    """
    Check an email address.

    Rejects addresses outside 6-254 characters, without a local part, with
    fewer than two characters after the last `@`, on a blocked domain, with
    a local part over 64 characters, or that are not exactly one valid
    address (trailing text and address lists are rejected).
    """
    if len(value) < EMAIL_MIN_LENGTH or len(value) > EMAIL_MAX_LENGTH:
        return True
    at = value.rfind("@")
    if at <= 0 or at > len(value) - 3:
        return True
    if value[at + 1:] in EMAIL_BLOCKED_DOMAINS:
        return True
    if len(value[:at]) > EMAIL_MAX_LOCAL_LENGTH:
        return True

    try:
        validate_email(value, check_deliverability=False, allow_quoted_local=True)
    except EmailNotValidError:
        return True
    return False


def is_not_phone(value: str) -> bool:
    return _PHONE.fullmatch(value) is None


def is_not_phone_with_code(value: str) -> bool:
    return _PHONE_WITH_CODE.fullmatch(value) is None


def is_not_username(value: str) -> bool:
    """A username is an email, an international phone number or a local one."""
    if "@" in value:
        return is_not_email(value)
    if value.startswith("+"):
        return is_not_phone_with_code(value)
    return is_not_phone(value)


def is_not_gh_card(value: str) -> bool:
    return _GH_CARD.fullmatch(value) is None


def is_not_gh_gps(value: str) -> bool:
    return _GH_GPS.fullmatch(value) is None


def is_not_datetime(value: str, layout: str) -> bool:
    """
    Check a date/time string against a named layout.

    Layouts: rfc3339 (2006-01-02T15:04:05Z07:00), datetime
    (2006-01-02 15:04:05), dateonly (2006-01-02), timeonly (15:04:05).
    A fractional second after the seconds field is accepted.

    Raises:
        ValueError: If the layout is unknown
    """
    pattern = _DATETIME_LAYOUTS.get(layout)
    if pattern is None:
        raise ValueError(f"date format not supported: {layout}")

    match = pattern.fullmatch(value)
    if match is None:
        return True
    parts = match.groupdict()

    try:
        if parts.get("date"):
            datetime.strptime(parts["date"], "%Y-%m-%d")
        if parts.get("time"):
            datetime.strptime(parts["time"].split(".", 1)[0], "%H:%M:%S")
    except ValueError:
        return True

    offset = parts.get("offset")
    if offset and offset != "Z":
        hours, minutes = offset[1:].split(":")
        if int(hours) > 23 or int(minutes) > 59:
            return True
    return False


# ---------------------------------------------------------------------------
# Numeric classification
# ---------------------------------------------------------------------------

def is_not_int(value: int) -> bool:
    return _INT.fullmatch(str(value)) is None


def is_not_uint(value: int) -> bool:
    return _UINT.fullmatch(str(value)) is None


def is_not_float(value: float) -> bool:
    return _FLOAT.fullmatch(f"{value:.2f}") is None


# ---------------------------------------------------------------------------
# Comparative
# ---------------------------------------------------------------------------

def _measure(value: Any) -> Optional[Tuple[Any, type]]:
    """Return the compared quantity and the type its bounds parse to."""
    if isinstance(value, (str, list, tuple, Mapping)):
        return len(value), int
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value, int
    if isinstance(value, float):
        return value, float
    return None


def is_not_min(value: Any, comparable: str) -> bool:
    measured = _measure(value)
    if measured is None:
        return False
    quantity, parse = measured
    return not quantity >= parse(comparable)


def is_not_max(value: Any, comparable: str) -> bool:
    measured = _measure(value)
    if measured is None:
        return False
    quantity, parse = measured
    return not quantity <= parse(comparable)


def is_not_equal(value: Any, comparable: str) -> bool:
    measured = _measure(value)
    if measured is None:
        return False
    quantity, parse = measured
    return not quantity == parse(comparable)


# `size` is an alias of `equal` outside of file fields
is_not_size = is_not_equal


def is_not_between(value: Any, low: str, high: str) -> bool:
    """Exclusive range: violates unless low < value < high."""
    measured = _measure(value)
    if measured is None:
        return False
    quantity, parse = measured
    return not parse(low) < quantity < parse(high)


def is_not_from(value: Any, low: str, high: str) -> bool:
    """Inclusive range: violates unless low <= value <= high."""
    measured = _measure(value)
    if measured is None:
        return False
    quantity, parse = measured
    return not parse(low) <= quantity <= parse(high)


# ---------------------------------------------------------------------------
# Enumeration and cross-field
# ---------------------------------------------------------------------------

def is_not_enum(value: Any, tokens: Iterable[str]) -> bool:
    return str(value) not in tuple(tokens)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def is_not_same(value: Any, other: Any) -> bool:
    return _text(value).strip() != _text(other).strip()


# ---------------------------------------------------------------------------
# External uniqueness
# ---------------------------------------------------------------------------

def is_not_unique(checker, table_column: str, value: Any) -> bool:
    """
    Raises:
        ConfigurationError: If no uniqueness checker is configured
        UniquenessCheckError: If the store cannot answer
    """
    if checker is None:
        raise ConfigurationError(
            "unique rule used but no uniqueness checker or database is configured"
        )
    return checker.exists(table_column, value)


# ---------------------------------------------------------------------------
# File kind
# ---------------------------------------------------------------------------

def is_not_file(file: UploadedFile) -> bool:
    """True when the file cannot be opened and read."""
    try:
        file.read()
    except OSError:
        return True
    return False


def allowed_extensions(mimes: str) -> frozenset:
    return frozenset("." + m.lower() for m in mimes.split(","))


def is_not_mimes(file: UploadedFile, mimes: str, sniffer) -> bool:
    """True when the file is unreadable or its detected type is not listed."""
    try:
        data = file.read()
    except OSError:
        return True
    return sniffer(data).lower() not in allowed_extensions(mimes)


def file_size_limit(argument: str) -> Optional[Tuple[int, str, str]]:
    """
    Parse a file size rule argument such as "2mb".

    Returns:
        Tuple of (limit in bytes, message key, amount) or None when the
        argument does not follow the amount+unit grammar
    """
    match = _FILE_SIZE.fullmatch(argument)
    if match is None:
        return None
    amount, unit = match.groups()
    multiplier, key = _FILE_SIZE_UNITS[unit.lower()]
    return int(amount) * multiplier, key, amount


def is_not_file_size(file: UploadedFile, limit: int) -> bool:
    """Violates only when a positive limit is strictly exceeded."""
    return limit > 0 and file.get_size() > limit
