"""
Message Synthesizer

Turns a violated rule into a human readable, localized message.

Resolution order for one violation:
1. Override message carried by the rule (`min:3>Too short`), used verbatim
2. Locale template for the message key, formatted with positional
   placeholders: {0} field label, {1} and {2} rule parameters
3. The raw message key itself (missing templates never fail)

Message keys are either flat (`email`) or compound (`min.string`); compound
keys read a nested mapping in the catalog:

    min:
      string: "The {0} field must be at least {1} characters"
      numeric: "The {0} field must be at least {1}"
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"


def _freeze(entries: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType({
        key: _freeze(value) if isinstance(value, Mapping) else value
        for key, value in entries.items()
    })


def format_field_name(label: str) -> str:
    """
    Convert a camelCase wire label into lowercase words.

    Example: "userType" -> "user type", "dateOfBirth" -> "date of birth"
    """
    words = []
    for char in label:
        if char.isupper() and words:
            words.append(" ")
        words.append(char.lower())
    return "".join(words)


class MessageCatalog:
    """Read-only store of message templates, keyed by locale then message key."""

    def __init__(self, catalogs: Dict[str, Mapping[str, Any]],
                 default_locale: str = DEFAULT_LOCALE):
        """
        Args:
            catalogs: Dict keyed by locale identifier ("en", "fr") of
                message templates
            default_locale: Locale used when an unknown locale is requested
        """
        self._catalogs = MappingProxyType({
            locale.lower(): _freeze(entries) for locale, entries in catalogs.items()
        })
        self.default_locale = default_locale.lower()

    @property
    def locales(self):
        return sorted(self._catalogs)

    def _catalog_for(self, locale: Optional[str]) -> Mapping[str, Any]:
        if locale and locale.lower() in self._catalogs:
            return self._catalogs[locale.lower()]
        return self._catalogs.get(self.default_locale, MappingProxyType({}))

    def lookup(self, locale: Optional[str], key: str) -> Optional[str]:
        """
        Find the template for a message key.

        Returns:
            Template string, or None if the locale has no entry for the key
        """
        catalog = self._catalog_for(locale)
        if "." in key:
            category, subtype = key.split(".", 1)
            group = catalog.get(category)
            if isinstance(group, Mapping):
                template = group.get(subtype)
                return template if isinstance(template, str) else None
            return None
        template = catalog.get(key)
        return template if isinstance(template, str) else None


class MessageSynthesizer:
    """Renders violation messages for one locale."""

    def __init__(self, catalog: MessageCatalog, locale: Optional[str] = None):
        self.catalog = catalog
        self.locale = locale or catalog.default_locale

    def render(self, key: str, label: str, *params: str,
               override: Optional[str] = None) -> str:
        """
        Render the message for a violated rule.

        Args:
            key: Message key ("required", "min.string", ...)
            label: Human readable field label
            *params: Up to two rule parameters
            override: Caller supplied message, returned verbatim when set
        """
        if override:
            return override

        template = self.catalog.lookup(self.locale, key)
        if template is None:
            logger.debug(
                "No message template, using raw key",
                extra={"locale": self.locale, "key": key},
            )
            return key
        return template.format(label, *params)
