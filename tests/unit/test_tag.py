"""Unit tests for annotation tag parsing."""

import pytest

from vgen.errors import RuleValueError, TagSyntaxError
from vgen.models import Rule
from vgen.parser.tag import as_int, as_list, format_rules, parse_tag


class TestParseTag:
    """Test parse_tag tokenization."""

    def test_flags_and_values(self):
        """Test mixed flag and key/value rules keep declared order."""
        rules = parse_tag("required,min=2,max=50")
        assert rules == [Rule("required"), Rule("min", "2"), Rule("max", "50")]

    def test_whitespace_is_trimmed(self):
        rules = parse_tag("  required , min = 2 ")
        assert rules == [Rule("required"), Rule("min", "2")]

    def test_stray_separators_are_dropped(self):
        """Test leading, trailing and doubled commas are ignored."""
        assert parse_tag(",required,,email,") == [Rule("required"), Rule("email")]

    def test_empty_and_blank_tags(self):
        assert parse_tag("") == []
        assert parse_tag("  ,  , ") == []

    def test_duplicates_are_kept(self):
        rules = parse_tag("min=1,min=1")
        assert rules == [Rule("min", "1"), Rule("min", "1")]

    def test_value_split_at_first_separator(self):
        assert parse_tag("pattern=a=b") == [Rule("pattern", "a=b")]

    def test_missing_name_is_syntax_error(self):
        """Test a segment starting with '=' has no extractable name."""
        with pytest.raises(TagSyntaxError) as exc_info:
            parse_tag("required,=5")
        assert exc_info.value.segment == "=5"
        assert "invalid tag part" in str(exc_info.value)

    def test_blank_name_is_syntax_error(self):
        with pytest.raises(TagSyntaxError):
            parse_tag("  = value")

    def test_in_rule_takes_rest_of_tag(self):
        """Test the comma-separated allow-list stays with the in rule."""
        rules = parse_tag("required,in=active,pending,disabled")
        assert rules == [Rule("required"), Rule("in", "active,pending,disabled")]

    def test_in_flag_without_value(self):
        assert parse_tag("in,required") == [Rule("in"), Rule("required")]

    @pytest.mark.parametrize("raw", [
        "required,min=2,max=50",
        " required , email ",
        "len=5",
        "in=active, pending ,disabled",
        "required,in=a,,b",
        ",,min = -3,",
        "in=",
    ])
    def test_round_trip_is_idempotent(self, raw):
        """Test re-serializing and re-parsing yields the same rules."""
        rules = parse_tag(raw)
        assert parse_tag(format_rules(rules)) == rules


class TestAsInt:
    """Test integer rule values."""

    @pytest.mark.parametrize("value,expected", [("0", 0), ("-3", -3), ("150", 150), ("+7", 7)])
    def test_valid_integers(self, value, expected):
        assert as_int(Rule("min", value)) == expected

    @pytest.mark.parametrize("value", ["", "abc", "1.5", "1_000", "1e3", "0x10", "- 3"])
    def test_invalid_integers(self, value):
        with pytest.raises(ValueError):
            as_int(Rule("min", value))

    def test_error_names_rule(self):
        with pytest.raises(RuleValueError) as exc_info:
            as_int(Rule("max", "ten"))
        assert exc_info.value.rule == "max"
        assert "'ten'" in str(exc_info.value)

    def test_empty_value_message(self):
        with pytest.raises(RuleValueError, match="has no value"):
            as_int(Rule("len"))


class TestAsList:
    """Test allow-list rule values."""

    def test_trims_and_keeps_order(self):
        assert as_list(Rule("in", "active, pending ,disabled")) == ["active", "pending", "disabled"]

    def test_drops_empty_elements(self):
        assert as_list(Rule("in", ",a,, b ,")) == ["a", "b"]

    def test_keeps_duplicates(self):
        assert as_list(Rule("in", "a,b,a")) == ["a", "b", "a"]

    def test_empty_value(self):
        assert as_list(Rule("in")) == []

    def test_other_rules_rejected(self):
        with pytest.raises(RuleValueError):
            as_list(Rule("min", "1,2"))
