"""
Unit tests for the fact store.
"""

import pytest

from rules_engine.facts import Fact, Facts
from shared.errors import NoSuchFactError


class TestFacts:
    """Test cases for Facts."""

    @pytest.fixture
    def facts(self):
        """Create a populated fact store."""
        facts = Facts()
        facts.put("rain", True)
        facts.put("age", 18)
        return facts

    def test_put_and_get(self, facts):
        """Test reading back facts."""
        assert facts.get("rain") is True
        assert facts.get("age") == 18
        assert len(facts) == 2

    def test_put_overwrites_existing_fact(self, facts):
        """Test that names are unique and put replaces the value."""
        previous = facts.put("age", 30)

        assert previous == 18
        assert facts.get("age") == 30
        assert len(facts) == 2

    def test_put_rejects_blank_name(self):
        """Test fact name validation."""
        facts = Facts()

        with pytest.raises(ValueError):
            facts.put("", 1)
        with pytest.raises(ValueError):
            facts.put(None, 1)

    def test_get_missing_fact(self, facts):
        """Test absent facts."""
        assert facts.get("missing") is None
        assert facts.get("missing", "fallback") == "fallback"
        assert facts.get_fact("missing") is None
        assert "missing" not in facts

    def test_get_fact(self, facts):
        """Test fact objects."""
        fact = facts.get_fact("age")

        assert fact == Fact("age", 18)
        assert fact.value == 18

    def test_require_missing_fact(self, facts):
        """Test the declared-but-missing fact condition."""
        with pytest.raises(NoSuchFactError) as exc_info:
            facts.require("temperature")

        error = exc_info.value
        assert error.missing_fact == "temperature"
        assert error.code == "NO_SUCH_FACT"
        assert error.details["known_facts"] == ["rain", "age"]

        response = error.to_response()
        assert response.code == "NO_SUCH_FACT"
        assert response.trace_id is None

    def test_remove(self, facts):
        """Test fact removal."""
        removed = facts.remove("rain")

        assert removed is True
        assert "rain" not in facts
        assert facts.remove("rain") is None

    def test_iteration_follows_insertion_order(self):
        """Test iteration order."""
        facts = Facts({"c": 3, "a": 1})
        facts.put("b", 2)

        assert [fact.name for fact in facts] == ["c", "a", "b"]

    def test_iteration_tolerates_mutation(self, facts):
        """Test removing facts while iterating."""
        for fact in facts:
            facts.remove(fact.name)

        assert len(facts) == 0

    def test_as_map_is_a_snapshot(self, facts):
        """Test that as_map returns a copy."""
        snapshot = facts.as_map()
        snapshot["rain"] = False
        facts.put("wind", 12)

        assert facts.get("rain") is True
        assert "wind" not in snapshot

    def test_add_fact_object_and_clear(self, facts):
        """Test adding Fact objects and clearing the store."""
        facts.add(Fact("wind", 12))
        assert facts.get("wind") == 12

        facts.clear()
        assert len(facts) == 0

    def test_fact_equality_by_name(self):
        """Test that facts are identified by name only."""
        assert Fact("age", 18) == Fact("age", 30)
        assert hash(Fact("age", 18)) == hash(Fact("age", 30))
        assert Fact("age", 18) != Fact("height", 18)

    def test_repr_lists_facts(self, facts):
        """Test the readable representation."""
        assert repr(facts) == "Facts[Fact{name='rain', value=True}, Fact{name='age', value=18}]"
