"""
Tests for message catalogs and rendering.
"""
import pytest
from record_validation.messages import MessageCatalog, MessageSynthesizer, format_field_name


@pytest.fixture
def catalog():
    """Small two-locale catalog."""
    return MessageCatalog(
        {
            "en": {
                "required": "The {0} field is required",
                "between": {"numeric": "The {0} field must be between {1} and {2}"},
            },
            "fr": {
                "required": "Le champ {0} est obligatoire",
            },
        },
        default_locale="en",
    )


class TestFormatFieldName:
    """Test camelCase label formatting."""

    @pytest.mark.parametrize("label,expected", [
        ("name", "name"),
        ("userType", "user type"),
        ("dateOfBirth", "date of birth"),
        ("phone_number", "phone_number"),
    ])
    def test_format(self, label, expected):
        assert format_field_name(label) == expected


class TestMessageCatalog:
    """Test MessageCatalog.lookup()."""

    def test_flat_key(self, catalog):
        assert catalog.lookup("en", "required") == "The {0} field is required"

    def test_compound_key(self, catalog):
        assert catalog.lookup("en", "between.numeric").startswith("The {0} field must be between")

    def test_missing_key(self, catalog):
        assert catalog.lookup("en", "between.string") is None
        assert catalog.lookup("en", "email") is None

    def test_unknown_locale_falls_back(self, catalog):
        assert catalog.lookup("de", "required") == "The {0} field is required"

    def test_locale_does_not_fall_back_per_key(self, catalog):
        """Test that a known locale missing a key does not borrow the default."""
        assert catalog.lookup("fr", "between.numeric") is None

    def test_catalog_is_read_only(self, catalog):
        with pytest.raises(TypeError):
            catalog._catalogs["en"]["required"] = "changed"

    def test_locales(self, catalog):
        assert catalog.locales == ["en", "fr"]


class TestMessageSynthesizer:
    """Test MessageSynthesizer.render()."""

    def test_template_with_params(self, catalog):
        synthesizer = MessageSynthesizer(catalog, "en")
        message = synthesizer.render("between.numeric", "age", "1", "5")
        assert message == "The age field must be between 1 and 5"

    def test_override_is_verbatim(self, catalog):
        synthesizer = MessageSynthesizer(catalog, "en")
        assert synthesizer.render("required", "name", override="Name please {0}") == "Name please {0}"

    def test_missing_template_returns_key(self, catalog):
        synthesizer = MessageSynthesizer(catalog, "en")
        assert synthesizer.render("gh_card", "card") == "gh_card"

    def test_locale(self, catalog):
        synthesizer = MessageSynthesizer(catalog, "fr")
        assert synthesizer.render("required", "nom") == "Le champ nom est obligatoire"

    def test_default_locale(self, catalog):
        assert MessageSynthesizer(catalog).locale == "en"
