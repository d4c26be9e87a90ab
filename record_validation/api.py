"""
Public API for record-validation-lib

This is the "front door" - the main entry point for validating records.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

from .config_loader import Config, ConfigLoader
from .field_evaluator import FieldEvaluator
from .messages import MessageCatalog, MessageSynthesizer
from .mime_sniffer import detect_extension
from .uniqueness import SqlUniquenessChecker
from .validation_engine import ValidationEngine

logger = logging.getLogger(__name__)


class Validator:
    """
    Validates dataclass records against the rule chains declared on their fields.

    Example:
        from dataclasses import dataclass
        from record_validation import Validator, rule_field

        @dataclass
        class SignUp:
            email: str = rule_field(json="email", validate="required|email")
            role: str = rule_field(json="role", validate="required|enum:admin,user")

        with Validator() as validator:
            report = validator.validate(SignUp(email="a@example.com", role="admins"))

        # {"email": "The email field must be a valid email address",
        #  "role": "The role field must be one of: admin,user"}
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize validator.

        The validator:
        1. Loads the bundled local-config.yaml (or config.config_path)
        2. Loads and checks every locale catalog it lists
        3. Builds the uniqueness checker (config.uniqueness_checker, or a SQL
           checker from config.db)
        4. Creates the field thread pool if field_parallelism is enabled

        Args:
            config: Caller options (locale, database, collaborators)

        Raises:
            ConfigurationError: If configuration, a catalog or the database
                settings are invalid
        """
        self.config = config or Config()
        self.config_loader = ConfigLoader(self.config.config_path)

        self.catalog = MessageCatalog(
            self.config_loader.load_catalogs(),
            default_locale=self.config_loader.get_default_locale(),
        )
        self.synthesizer = MessageSynthesizer(self.catalog, self.config.locale)

        self._owns_checker = False
        checker = self.config.uniqueness_checker
        if checker is None and self.config.db is not None:
            checker = SqlUniquenessChecker.from_database_config(self.config.db)
            self._owns_checker = True
        self.checker = checker

        self._pool: Optional[ThreadPoolExecutor] = None
        if self.config_loader.get_field_parallelism():
            self._pool = ThreadPoolExecutor(
                max_workers=self.config_loader.get_max_workers(),
                thread_name_prefix="record-validation",
            )

        self.engine = ValidationEngine(
            FieldEvaluator(
                self.synthesizer,
                checker=self.checker,
                sniffer=self.config.sniffer or detect_extension,
            ),
            max_depth=self.config_loader.get_max_depth(),
            executor=self._pool,
        )

        logger.info(
            "Validator created",
            extra={
                "locale": self.synthesizer.locale,
                "locales": self.catalog.locales,
                "field_parallelism": self._pool is not None,
            },
        )

    def validate(self, record: Any) -> Dict[str, Any]:
        """
        Validate a record.

        Args:
            record: Dataclass instance whose fields were declared with rule_field()

        Returns:
            Report dict keyed by wire label, holding only failing fields:
                - str: message for the first violated rule
                - dict: nested report of a record field
                - list: messages / nested reports of failing sequence elements
            An empty dict means the record is valid.

        Raises:
            StructuralError: If record is not a dataclass instance
            UniquenessCheckError: If the uniqueness store could not answer
        """
        return self.engine.validate(record)

    def close(self) -> None:
        """Shut the field pool down and release owned database connections."""
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None
            self.engine.executor = None
        if self._owns_checker:
            self.checker.dispose()
            self._owns_checker = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
