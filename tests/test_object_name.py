# tests/test_object_name.py
"""
Tests for object names and wildcard patterns.

Tests cover:
- Parsing and canonical form
- Malformed names
- Pattern matching (domain, values, property-list patterns)
- Alias derivation
"""

import pytest

from datamart_extractor.errors import MalformedObjectNameError
from datamart_extractor.registry.object_name import ObjectName, name_to_alias, wildcard_match


class TestParsing:
    """Tests for ObjectName.parse."""

    def test_parse_simple_name(self):
        """Test parsing a name with one key."""
        name = ObjectName.parse("python.lang:type=Runtime")
        assert name.domain == "python.lang"
        assert name.properties == {"type": "Runtime"}
        assert not name.is_pattern

    def test_canonical_name_sorts_keys(self):
        """Test that keys are sorted in the canonical form."""
        name = ObjectName.parse("app:type=Cache,name=users")
        assert name.canonical_name == "app:name=users,type=Cache"

    def test_equal_regardless_of_key_order(self):
        """Test equality and hashing use the canonical form."""
        a = ObjectName.parse("app:type=Cache,name=users")
        b = ObjectName.parse("app:name=users,type=Cache")
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_property_list_pattern(self):
        """Test a trailing '*' in the key list."""
        name = ObjectName.parse("app:type=Cache,*")
        assert name.is_property_list_pattern
        assert name.is_pattern
        assert name.canonical_name == "app:type=Cache,*"

    def test_bare_star_key_list(self):
        """Test '*' as the whole key list."""
        name = ObjectName.parse("app:*")
        assert name.properties == {}
        assert name.canonical_name == "app:*"

    def test_wildcard_value_is_pattern(self):
        """Test wildcards inside values make a pattern."""
        assert ObjectName.parse("app:type=Cache,name=u*").is_pattern
        assert ObjectName.parse("app*:type=Cache").is_pattern

    @pytest.mark.parametrize(
        "bad",
        [
            "",
            "no-colon",
            "app:",
            "app:type",
            "app:type=",
            "app:=value",
            "app:type=a,type=b",
            "app:*,*",
            "app:ty*pe=x",
        ],
    )
    def test_malformed_names(self, bad):
        """Test malformed names raise MalformedObjectNameError."""
        with pytest.raises(MalformedObjectNameError):
            ObjectName.parse(bad)

    def test_malformed_is_value_error(self):
        """Test MalformedObjectNameError is also a ValueError."""
        with pytest.raises(ValueError):
            ObjectName.parse("broken")


class TestMatching:
    """Tests for ObjectName.matches."""

    def test_exact_match(self):
        pattern = ObjectName.parse("app:type=Server")
        assert pattern.matches(ObjectName.parse("app:type=Server"))
        assert not pattern.matches(ObjectName.parse("app:type=Client"))

    def test_exact_requires_same_keys(self):
        """Test an exact name does not select names with extra keys."""
        pattern = ObjectName.parse("app:type=Cache")
        assert not pattern.matches(ObjectName.parse("app:type=Cache,name=users"))

    def test_property_list_pattern_allows_extra_keys(self):
        pattern = ObjectName.parse("app:type=Cache,*")
        assert pattern.matches(ObjectName.parse("app:type=Cache,name=users"))
        assert pattern.matches(ObjectName.parse("app:type=Cache"))
        assert not pattern.matches(ObjectName.parse("app:type=Server"))

    def test_value_wildcards(self):
        pattern = ObjectName.parse("python.lang:type=GarbageCollector,name=gen?")
        assert pattern.matches(ObjectName.parse("python.lang:type=GarbageCollector,name=gen2"))
        assert not pattern.matches(ObjectName.parse("python.lang:type=GarbageCollector,name=gen10"))

    def test_domain_wildcard(self):
        pattern = ObjectName.parse("py*:type=Memory")
        assert pattern.matches(ObjectName.parse("python.lang:type=Memory"))
        assert not pattern.matches(ObjectName.parse("app:type=Memory"))

    def test_pattern_never_matches_pattern(self):
        pattern = ObjectName.parse("app:*")
        assert not pattern.matches(ObjectName.parse("app:type=Cache,*"))

    def test_wildcard_match_escapes_regex(self):
        """Test regex metacharacters are matched literally."""
        assert wildcard_match("a.b", "a.b")
        assert not wildcard_match("a.b", "axb")
        assert wildcard_match("[x]*", "[x]yz")


class TestAlias:
    """Tests for alias derivation."""

    def test_name_to_alias(self):
        alias = name_to_alias("python.lang:name=gen0,type=GarbageCollector")
        assert alias == "python_lang_name_gen0_type_GarbageCollector"

    def test_alias_of_symbols_only(self):
        assert name_to_alias(":::") == "_"
