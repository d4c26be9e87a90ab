"""
Record views and value kinds.

A record is a dataclass instance. Fields take part in validation when they
carry both a wire label and a rule chain, declared with rule_field():

    @dataclass
    class SignUp:
        name: str = rule_field(json="name", validate="required|string|from:1,5")
        age: UInt = rule_field(json="age", validate="uint|max:130", default=0)
        nickname: str = ""  # not validated, not reported

Each validation call builds fresh FieldView objects over the record; the
record itself is only ever read.
"""

import dataclasses
import io
import logging
import os
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, BinaryIO, Dict, List, NewType, Optional, Tuple

from .exceptions import StructuralError

logger = logging.getLogger(__name__)

# Metadata keys stored on dataclass fields by rule_field()
LABEL_KEY = "json"
RULES_KEY = "validate"

# Marks an int field as unsigned for dispatch (annotation only, no runtime effect)
UInt = NewType("UInt", int)


class ValueKind(Enum):
    """Closed set of value kinds the dispatcher routes on."""

    TEXT = "text"
    SIGNED_INT = "signed_int"
    UNSIGNED_INT = "unsigned_int"
    FLOAT = "float"
    BOOLEAN = "boolean"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    REFERENCE = "reference"
    RECORD = "record"
    OTHER = "other"


@dataclass
class UploadedFile:
    """
    A file received alongside a record (e.g. one part of a multipart form).

    Content is either held in memory or read lazily from a path. `size` is
    the size announced by the sender; when omitted it is computed from the
    content.
    """

    filename: str
    content: Optional[bytes] = None
    path: Optional[str] = None
    size: Optional[int] = None

    @classmethod
    def from_path(cls, path: str) -> "UploadedFile":
        return cls(filename=os.path.basename(path), path=path)

    def open(self) -> BinaryIO:
        """
        Open the file for reading.

        Raises:
            OSError: If the file has no content or cannot be opened
        """
        if self.content is not None:
            return io.BytesIO(self.content)
        if self.path is not None:
            return open(self.path, "rb")
        raise FileNotFoundError(f"No content available for {self.filename}")

    def read(self) -> bytes:
        with self.open() as handle:
            return handle.read()

    def get_size(self) -> int:
        if self.size is not None:
            return self.size
        if self.content is not None:
            return len(self.content)
        if self.path is not None:
            return os.path.getsize(self.path)
        return 0


@dataclass(frozen=True)
class FieldView:
    """Read-only view of one validated field of a record."""

    name: str
    label: str
    value: Any
    kind: ValueKind
    rules: str


def rule_field(json: str, validate: Optional[str] = None, **kwargs) -> Any:
    """
    Declare a dataclass field with a wire label and a rule chain.

    Args:
        json: Wire label used as the report key (e.g. "userType")
        validate: Rule chain (e.g. "required|enum:admin,user"); fields
            without one are not validated but can still be referenced by
            same/match rules
        **kwargs: Passed through to dataclasses.field (default, default_factory...)
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[LABEL_KEY] = json
    if validate is not None:
        metadata[RULES_KEY] = validate
    return dataclasses.field(metadata=metadata, **kwargs)


def is_record(value: Any) -> bool:
    """True for dataclass instances (not dataclass types)."""
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def classify(value: Any, hint: Any = None) -> ValueKind:
    """Resolve the kind of a runtime value, using the declared type hint for ints."""
    if value is None:
        return ValueKind.REFERENCE
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        if hint is UInt or UInt in typing.get_args(hint):
            return ValueKind.UNSIGNED_INT
        return ValueKind.SIGNED_INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, UploadedFile):
        return ValueKind.REFERENCE
    if is_record(value):
        return ValueKind.RECORD
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    return ValueKind.OTHER


def _type_hints(record_type: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(record_type)
    except (NameError, TypeError) as e:
        # Unresolvable forward references: fall back to runtime classification
        logger.debug(
            "Type hints unavailable, classifying from runtime values",
            extra={"record_type": record_type.__name__, "error": str(e)},
        )
        return {}


def ensure_record(record: Any) -> None:
    """
    Raises:
        StructuralError: If record is not a dataclass instance
    """
    if record is None or isinstance(record, type):
        raise StructuralError("validate: a record instance is expected as an argument")
    if not dataclasses.is_dataclass(record):
        raise StructuralError(
            f"validate: a dataclass record is expected, got {type(record).__name__}"
        )


def field_views(record: Any) -> List[FieldView]:
    """
    Build the views of every validated field of a record.

    Fields lacking a wire label or a rule chain are skipped.

    Raises:
        StructuralError: If record is not a dataclass instance
    """
    ensure_record(record)
    hints = _type_hints(type(record))

    views = []
    for f in dataclasses.fields(record):
        label = f.metadata.get(LABEL_KEY)
        rules = f.metadata.get(RULES_KEY)
        if label is None or rules is None:
            continue
        value = getattr(record, f.name)
        views.append(
            FieldView(
                name=f.name,
                label=label,
                value=value,
                kind=classify(value, hints.get(f.name)),
                rules=rules,
            )
        )
    return views


def lookup_labelled(record: Any, label: str) -> Tuple[bool, Any]:
    """
    Find a field of the record by wire label.

    Returns:
        Tuple of (found, value); value is None when not found
    """
    for f in dataclasses.fields(record):
        if f.metadata.get(LABEL_KEY) == label:
            return True, getattr(record, f.name)
    return False, None
