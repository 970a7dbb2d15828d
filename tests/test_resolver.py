"""Tests for nova.core.resolver — entity reference resolution."""

from dataclasses import dataclass

from nova.core.resolver import DEFAULT_RESOLVER, SubstringResolver, field_value, find_by_id, resolve_record


@dataclass
class Goal:
    id: str
    name: str


class TestSubstringResolver:
    def test_first_match_wins_case_insensitively(self):
        goals = [{"id": "1", "name": "Laptop Fund"}, {"id": "2", "name": "laptop accessories"}]
        for _ in range(5):
            assert DEFAULT_RESOLVER.resolve("laptop", goals, "name")["name"] == "Laptop Fund"

    def test_uppercase_reference(self):
        goals = [{"id": "1", "name": "emergency fund"}]
        assert DEFAULT_RESOLVER.resolve("EMERGENCY", goals, "name")["id"] == "1"

    def test_no_match(self):
        assert DEFAULT_RESOLVER.resolve("car", [{"id": "1", "name": "Laptop"}], "name") is None

    def test_empty_reference_matches_nothing(self):
        goals = [{"id": "1", "name": "Laptop"}]
        assert DEFAULT_RESOLVER.resolve("", goals, "name") is None
        assert DEFAULT_RESOLVER.resolve("   ", goals, "name") is None

    def test_attribute_records(self):
        goals = [Goal("1", "Bike"), Goal("2", "Laptop")]
        assert SubstringResolver().resolve("lap", goals, "name").id == "2"

    def test_missing_field_is_skipped(self):
        records = [{"id": "1"}, {"id": "2", "name": "Laptop"}]
        assert DEFAULT_RESOLVER.resolve("lap", records, "name")["id"] == "2"

    def test_none_collection(self):
        assert DEFAULT_RESOLVER.resolve("x", None, "name") is None


class TestResolveRecord:
    def test_exact_id_before_substring(self):
        records = [{"id": "a1", "title": "Groceries"}, {"id": "b2", "title": "Groceries run"}]
        match = resolve_record(DEFAULT_RESOLVER, records, "title", "groceries", "b2")
        assert match["id"] == "b2"

    def test_unknown_id_falls_back_to_reference(self):
        records = [{"id": "a1", "title": "Groceries"}]
        assert resolve_record(DEFAULT_RESOLVER, records, "title", "groc", "zz")["id"] == "a1"

    def test_id_used_as_text_when_no_reference(self):
        records = [{"id": "a1", "title": "Call mom"}]
        assert resolve_record(DEFAULT_RESOLVER, records, "title", None, "mom")["id"] == "a1"

    def test_nothing_given(self):
        assert resolve_record(DEFAULT_RESOLVER, [{"id": "1", "title": "x"}], "title", None) is None


class TestHelpers:
    def test_field_value_mapping_and_object(self):
        assert field_value({"name": "x"}, "name") == "x"
        assert field_value(Goal("1", "y"), "name") == "y"
        assert field_value(Goal("1", "y"), "missing") is None

    def test_find_by_id_compares_as_string(self):
        assert find_by_id([{"id": 7, "name": "x"}], "7")["name"] == "x"
        assert find_by_id([{"id": 7}], "") is None
