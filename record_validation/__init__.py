"""
record-validation-lib: Declarative validation of dataclass records

This library provides a pure Python record validator with:
- A rule chain mini-language declared on dataclass fields
- Type-directed rule dispatch (text, numbers, sequences, files, nested records)
- Concurrent per-field evaluation with a bounded thread pool
- Localized messages from bundled YAML catalogs
- SQL backed uniqueness checks

Example:
    from record_validation import Validator

    validator = Validator()
    report = validator.validate(sign_up)
"""

from .api import Validator
from .config_loader import Config, DatabaseConfig
from .exceptions import (
    ConfigurationError,
    RecursionLimitError,
    StructuralError,
    UniquenessCheckError,
    ValidationLibError,
)
from .record import UInt, UploadedFile, rule_field
from .uniqueness import SqlUniquenessChecker, UniquenessChecker

__version__ = "0.1.0"
__all__ = [
    "Validator",
    "Config",
    "DatabaseConfig",
    "rule_field",
    "UInt",
    "UploadedFile",
    "UniquenessChecker",
    "SqlUniquenessChecker",
    "ValidationLibError",
    "StructuralError",
    "ConfigurationError",
    "UniquenessCheckError",
    "RecursionLimitError",
]
