"""Configuration loading: bundled YAML config, locale catalogs, caller options."""

import hashlib
import logging
import os
import urllib.parse
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema
import requests
import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DRIVER_POSTGRES = "postgres"
DRIVER_MYSQL = "mysql"
DRIVER_SQLITE = "sqlite"

CONFIG_SCHEMA = {
    "type": "object",
    "required": ["default_locale", "locales"],
    "properties": {
        "default_locale": {"type": "string", "minLength": 1},
        "field_parallelism": {"type": "boolean"},
        "max_workers": {"type": ["integer", "null"], "minimum": 1},
        "max_depth": {"type": "integer", "minimum": 0},
        "locales": {
            "type": "object",
            "minProperties": 1,
            "additionalProperties": {"type": "string", "minLength": 1},
        },
    },
}

CATALOG_SCHEMA = {
    "type": "object",
    "additionalProperties": {
        "oneOf": [
            {"type": "string"},
            {"type": "object", "additionalProperties": {"type": "string"}},
        ]
    },
}


@dataclass
class DatabaseConfig:
    """Connection settings for the SQL uniqueness checker."""

    host: str = "localhost"
    port: int = 0
    name: str = ""
    username: str = ""
    password: str = ""
    driver: str = DRIVER_POSTGRES
    ssl_mode: str = ""


@dataclass
class Config:
    """
    Caller supplied options for a Validator.

    Attributes:
        locale: Message locale ("en", "fr"); defaults to the configured default
        db: Database settings used to build a SQL uniqueness checker
        uniqueness_checker: Ready-made checker, takes precedence over db
        sniffer: Callable detecting a file extension from bytes
        config_path: Path to a local-config.yaml replacing the bundled one
    """

    locale: Optional[str] = None
    db: Optional[DatabaseConfig] = None
    uniqueness_checker: Any = None
    sniffer: Any = None
    config_path: Optional[str] = None


class ConfigLoader:
    """Loads local-config.yaml and the locale catalogs it references."""

    CACHE_DIR = Path.home() / ".cache" / "record-validation-lib"
    FETCH_TIMEOUT = 10

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_path: Optional path to a local-config.yaml. The config
                bundled with the package is used when omitted.

        Raises:
            ConfigurationError: If the config cannot be read or is invalid
        """
        if config_path is None:
            config_file = files("record_validation").joinpath("local-config.yaml")
            self.config_path = str(config_file)
        else:
            self.config_path = os.path.abspath(config_path)

        self.cache_dir = self.CACHE_DIR
        self.config = self._load_yaml(self.config_path)
        self._check(self.config, CONFIG_SCHEMA, self.config_path)

    def _load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML file from disk."""
        try:
            with open(path, encoding="utf-8") as f:
                return yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    def _check(self, document: Any, schema: Dict[str, Any], source: str) -> None:
        try:
            jsonschema.validate(instance=document, schema=schema)
        except jsonschema.ValidationError as e:
            location = " -> ".join(str(p) for p in e.path) if e.path else "root"
            raise ConfigurationError(
                f"Invalid configuration in {source} at {location}: {e.message}"
            ) from e

    def _load_from_uri(self, uri: str) -> Dict[str, Any]:
        """
        Load a YAML document from a URI (with caching for remote ones).

        Supports:
        - Relative paths - resolved against the config file directory
        - file:// - Local filesystem (absolute paths)
        - https:// and http:// - Remote, cached on disk

        Args:
            uri: Document URI or relative path

        Returns:
            Parsed YAML document
        """
        parsed = urllib.parse.urlparse(uri)

        if not parsed.scheme:
            config_dir = os.path.dirname(self.config_path)
            return self._load_yaml(os.path.join(config_dir, uri))

        if parsed.scheme == "file":
            return self._load_yaml(urllib.parse.unquote(parsed.path))

        if parsed.scheme in ("http", "https"):
            cache_key = hashlib.sha256(uri.encode()).hexdigest()
            cache_path = self.cache_dir / f"catalog_{cache_key}.yaml"

            if cache_path.exists():
                return self._load_yaml(str(cache_path))

            content = self._fetch_uri(uri)
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            cache_path.write_text(content, encoding="utf-8")
            try:
                return yaml.safe_load(content)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML at {uri}: {e}") from e

        raise ConfigurationError(f"Unsupported URI scheme: {parsed.scheme} in {uri}")

    def _fetch_uri(self, uri: str) -> str:
        """Fetch content from HTTP/HTTPS URI."""
        try:
            response = requests.get(uri, timeout=self.FETCH_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ConfigurationError(f"Failed to fetch catalog from {uri}: {e}") from e
        return response.text

    def load_catalogs(self) -> Dict[str, Dict[str, Any]]:
        """
        Load every locale catalog listed under `locales`.

        Returns:
            Dict keyed by locale identifier of message templates

        Raises:
            ConfigurationError: If a catalog is missing or malformed
        """
        catalogs = {}
        for locale, uri in self.config["locales"].items():
            catalog = self._load_from_uri(uri) or {}
            self._check(catalog, CATALOG_SCHEMA, uri)
            catalogs[locale] = catalog
            logger.debug(
                "Locale catalog loaded",
                extra={"locale": locale, "uri": uri, "entries": len(catalog)},
            )
        return catalogs

    def get_default_locale(self) -> str:
        return self.config["default_locale"]

    def get_field_parallelism(self) -> bool:
        """Whether top-level fields are evaluated on a thread pool."""
        return self.config.get("field_parallelism", True)

    def get_max_workers(self) -> Optional[int]:
        """Thread pool size; None lets concurrent.futures pick a default."""
        return self.config.get("max_workers")

    def get_max_depth(self) -> int:
        return self.config.get("max_depth", 32)
