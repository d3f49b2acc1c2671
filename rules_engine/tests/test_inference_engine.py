"""
Unit tests for the forward chaining rules engine.
"""

import pytest

from rules_engine.engine import DefaultRulesEngine
from rules_engine.facts import Facts
from rules_engine.inference import InferenceRulesEngine
from rules_engine.parameters import RulesEngineParameters
from rules_engine.rules import Rules
from shared.errors import ConfigurationError
from shared.test_helpers import (
    RecordingRule, RecordingRuleListener, RecordingRulesEngineListener,
    create_facts, create_retracting_rule
)


class TestInferenceRulesEngine:
    """Test cases for InferenceRulesEngine."""

    @pytest.fixture
    def engine(self):
        """Create an inference engine."""
        return InferenceRulesEngine()

    def test_candidate_selection(self, engine):
        """Test that only rules whose condition holds are fired."""
        facts = create_facts(foo=True)
        foo_rule = create_retracting_rule("FooRule", "foo", priority=1)
        bar_rule = create_retracting_rule("BarRule", "bar", priority=2)

        engine.fire(Rules(foo_rule, bar_rule), facts)

        assert foo_rule.executed
        assert not bar_rule.executed
        assert "foo" not in facts

    def test_candidate_ordering(self, engine):
        """Test that candidates fire in registry order within an iteration."""
        events = []
        facts = create_facts(foo=True, bar=True)
        foo_rule = create_retracting_rule("FooRule", "foo", priority=1, events=events)
        bar_rule = create_retracting_rule("BarRule", "bar", priority=2, events=events)

        engine.fire(Rules(bar_rule, foo_rule), facts)

        executions = [event[1] for event in events if event[0] == "execute"]
        assert executions == ["FooRule", "BarRule"]
        assert facts.as_map() == {}

    def test_fixpoint_executes_retracting_rules_once(self, engine):
        """Test termination when actions retract their triggering facts."""
        facts = create_facts(foo=True)
        rule = create_retracting_rule("FooRule", "foo")

        engine.fire(Rules(rule), facts)

        assert rule.execution_count == 1
        assert "foo" not in facts

    def test_chaining_across_iterations(self, engine):
        """Test that facts produced by one iteration trigger rules in the next."""
        facts = create_facts(order_received=True)
        receive = RecordingRule(
            "receive",
            priority=2,
            outcome=lambda f: f.get("order_received", False),
            action=lambda f: (f.remove("order_received"), f.put("order_validated", True))
        )
        ship = RecordingRule(
            "ship",
            priority=1,
            outcome=lambda f: f.get("order_validated", False),
            action=lambda f: (f.remove("order_validated"), f.put("shipped", True))
        )

        engine.fire(Rules(receive, ship), facts)

        assert receive.execution_count == 1
        assert ship.execution_count == 1
        assert facts.as_map() == {"shipped": True}

    def test_no_candidates_fires_nothing(self, engine):
        """Test that nothing happens when no rule is a candidate."""
        listener = RecordingRuleListener()
        engine.register_rule_listener(listener)
        rule = create_retracting_rule("FooRule", "foo")

        engine.fire(Rules(rule), Facts())

        assert not rule.executed
        assert listener.events == []

    def test_session_listeners_called_once(self, engine):
        """Test session listeners wrap the whole loop, not each iteration."""
        session_listener = RecordingRulesEngineListener()
        engine.register_rules_engine_listener(session_listener)
        facts = create_facts(foo=True, bar=True)
        rules = Rules(
            create_retracting_rule("FooRule", "foo", priority=1),
            RecordingRule(
                "Chain",
                priority=2,
                outcome=lambda f: f.get("bar", False),
                action=lambda f: (f.remove("bar"), f.put("foo", True))
            )
        )

        engine.fire(rules, facts)

        assert [event[0] for event in session_listener.events] == [
            "session_before_evaluate", "session_after_execute"
        ]
        assert session_listener.events[0][1] == 2
        assert session_listener.events[-1][2] == {}

    def test_rule_listeners_observe_every_iteration(self, engine):
        """Test rule listeners are called once per rule per iteration."""
        listener = RecordingRuleListener()
        engine.register_rule_listener(listener)
        facts = create_facts(count=2)

        def decrement(f):
            f.put("count", f.get("count") - 1)

        rule = RecordingRule("countdown", outcome=lambda f: f.get("count") > 0, action=decrement)

        engine.fire(Rules(rule), facts)

        assert rule.execution_count == 2
        assert listener.callbacks_for("countdown") == [
            "before_evaluate", "after_evaluate", "before_execute", "on_success",
            "before_evaluate", "after_evaluate", "before_execute", "on_success",
        ]

    def test_max_iterations_bounds_the_loop(self):
        """Test the safety bound for rules that never retract their condition."""
        engine = InferenceRulesEngine(RulesEngineParameters(max_iterations=3))
        session_listener = RecordingRulesEngineListener()
        engine.register_rules_engine_listener(session_listener)
        rule = RecordingRule("forever", outcome=True)

        engine.fire(Rules(rule), Facts())

        assert rule.execution_count == 3
        assert len(session_listener.events) == 2

    def test_invalid_max_iterations(self):
        """Test configuration validation."""
        with pytest.raises(ConfigurationError):
            InferenceRulesEngine(RulesEngineParameters(max_iterations=-1))

    def test_parameters_apply_to_each_iteration(self):
        """Test that skip parameters shape every inner pass."""
        engine = InferenceRulesEngine(RulesEngineParameters(skip_on_first_applied_rule=True))
        events = []
        facts = create_facts(foo=True, bar=True)
        rules = Rules(
            create_retracting_rule("FooRule", "foo", priority=1, events=events),
            create_retracting_rule("BarRule", "bar", priority=2, events=events)
        )

        engine.fire(rules, facts)

        # One rule per iteration, both eventually fire
        executions = [event[1] for event in events if event[0] == "execute"]
        assert executions == ["FooRule", "BarRule"]
        assert facts.as_map() == {}

    def test_priority_threshold_applies_to_candidates(self):
        """Test that candidates above the threshold are never fired."""
        engine = InferenceRulesEngine(RulesEngineParameters(priority_threshold=1))
        low = create_retracting_rule("Low", "foo", priority=1)
        high = create_retracting_rule("High", "bar", priority=2)
        facts = create_facts(foo=True, bar=True)

        engine.fire(Rules(low, high), facts)

        assert low.execution_count == 1
        assert not high.executed
        assert facts.as_map() == {"bar": True}

    def test_vetoed_candidates_stop_the_loop(self, engine):
        """Test termination when no candidate can be evaluated."""
        listener = RecordingRuleListener(veto=["FooRule"])
        engine.register_rule_listener(listener)
        session_listener = RecordingRulesEngineListener()
        engine.register_rules_engine_listener(session_listener)
        rule = create_retracting_rule("FooRule", "foo")
        facts = create_facts(foo=True)

        engine.fire(Rules(rule), facts)

        assert not rule.executed
        assert listener.callbacks_for("FooRule") == ["before_evaluate"]
        assert facts.get("foo") is True
        assert len(session_listener.events) == 2

    def test_candidate_evaluation_error_excludes_rule(self, engine):
        """Test that a failing condition is not a candidate and does not escape."""
        failing = RecordingRule("failing", outcome=RuntimeError("boom"))
        facts = create_facts(foo=True)
        foo_rule = create_retracting_rule("FooRule", "foo")

        engine.fire(Rules(failing, foo_rule), facts)

        assert foo_rule.executed
        assert not failing.executed

    def test_check_delegates_to_single_pass(self, engine):
        """Test check on the inference engine."""
        session_listener = RecordingRulesEngineListener()
        engine.register_rules_engine_listener(session_listener)
        facts = create_facts(foo=True)
        foo_rule = create_retracting_rule("FooRule", "foo", priority=1)
        bar_rule = create_retracting_rule("BarRule", "bar", priority=2)

        result = engine.check(Rules(foo_rule, bar_rule), facts)

        assert result == {foo_rule: True, bar_rule: False}
        assert not foo_rule.executed
        assert facts.get("foo") is True
        assert len(session_listener.events) == 2

    def test_shares_listeners_and_parameters_with_delegate(self, engine):
        """Test the inner engine configuration."""
        listener = RecordingRuleListener()
        engine.register_rule_listener(listener)

        assert isinstance(engine.delegate, DefaultRulesEngine)
        assert engine.delegate.get_rule_listeners() == [listener]
        assert engine.delegate.get_rules_engine_listeners() == []
        assert engine.delegate.get_parameters() == engine.get_parameters()
