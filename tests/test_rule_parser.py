"""
Tests for the rule chain parser.
"""
import pytest
from record_validation.rule_parser import RuleSpec, parse_chain, parse_rule


class TestParseRule:
    """Test parse_rule() on single tokens."""

    def test_bare_rule(self):
        """Test a rule without argument or message."""
        spec = parse_rule("email")
        assert spec == RuleSpec(rule="email", name="email")
        assert spec.params == ()

    def test_rule_with_argument(self):
        """Test that the argument follows the first colon."""
        spec = parse_rule("min:3")
        assert spec.name == "min"
        assert spec.argument == "3"
        assert spec.rule == "min:3"

    def test_nested_selector_keeps_remainder(self):
        """Test that only the first colon separates the name."""
        spec = parse_rule("slice:max:2")
        assert spec.name == "slice"
        assert spec.argument == "max:2"

    def test_override_message(self):
        """Test that the message is everything after the first '>'."""
        spec = parse_rule("min:3>Must be > 3 chars")
        assert spec.rule == "min:3"
        assert spec.argument == "3"
        assert spec.message == "Must be > 3 chars"

    def test_required_with_message(self):
        """Test that required keeps its override message."""
        spec = parse_rule("required>Name is required")
        assert spec.is_required
        assert spec.message == "Name is required"

    def test_params_split_on_comma(self):
        """Test list parameters."""
        assert parse_rule("enum:admin,user").params == ("admin", "user")


class TestRuleSpecHelpers:
    """Test bounds() and table_column()."""

    def test_bounds(self):
        assert parse_rule("between:1,5").bounds() == ("1", "5")

    def test_bounds_without_comma_raises(self):
        """Test that a single bound is rejected."""
        with pytest.raises(ValueError):
            parse_rule("from:5").bounds()

    def test_table_column(self):
        assert parse_rule("unique:users.email").table_column() == ("users", "email")

    def test_table_column_without_dot(self):
        assert parse_rule("unique:users").table_column() is None


class TestParseChain:
    """Test parse_chain()."""

    def test_chain_order_preserved(self):
        """Test that rules come back in declaration order."""
        specs = parse_chain("required|string|from:1,5")
        assert [s.name for s in specs] == ["required", "string", "from"]

    def test_messages_per_rule(self):
        """Test that each rule carries its own override."""
        specs = parse_chain("required>Needed|max:3>Too long")
        assert [s.message for s in specs] == ["Needed", "Too long"]
