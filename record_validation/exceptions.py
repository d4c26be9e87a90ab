"""Error taxonomy for record-validation-lib."""


class ValidationLibError(Exception):
    """Base class for every error raised by the library."""


class StructuralError(ValidationLibError, TypeError):
    """The argument handed to the validator is not a record instance."""


class ConfigurationError(ValidationLibError, ValueError):
    """Configuration, locale catalog or database settings are invalid."""


class UniquenessCheckError(ValidationLibError, RuntimeError):
    """The uniqueness store could not answer an existence query."""


class RecursionLimitError(ValidationLibError):
    """Nested validation went deeper than allowed or revisited a record."""
