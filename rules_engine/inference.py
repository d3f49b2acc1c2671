"""
Forward chaining engine.
"""

from typing import Dict, Optional

from shared.logging import session_context
from .engine import AbstractRulesEngine, DefaultRulesEngine
from .facts import Facts
from .parameters import RulesEngineParameters
from .rules import Rule, Rules


class InferenceRulesEngine(AbstractRulesEngine):
    """
    Engine that fires candidate rules until no candidate remains.

    On each iteration the candidate set (rules whose condition currently
    holds) is fired as one pass of a ``DefaultRulesEngine`` sharing this
    engine's parameters and rule listeners. Actions are expected to retract
    the facts that triggered them; ``max_iterations`` bounds the loop for
    rules that never do. The loop also stops when an inner pass evaluates
    no candidate (all of them vetoed or above the priority threshold),
    since the facts can no longer change.

    Session listeners are invoked once per ``fire``/``check`` call, around
    the whole loop.
    """

    engine_name = "inference"

    def __init__(self, parameters: Optional[RulesEngineParameters] = None):
        super().__init__(parameters)
        self.delegate = DefaultRulesEngine(self.parameters)
        # Same list object: listeners registered here are seen by every inner pass
        self.delegate.rule_listeners = self.rule_listeners

    def fire(self, rules: Rules, facts: Facts) -> None:
        with session_context(self.engine_name):
            self._trigger_listeners_before_rules(rules, facts)
            self._do_fire(rules, facts)
            self._trigger_listeners_after_rules(rules, facts)

    def _do_fire(self, rules: Rules, facts: Facts):
        max_iterations = self.parameters.max_iterations
        iterations = 0
        while True:
            self.logger.debug("Selecting candidate rules based on the current facts", iteration=iterations + 1)
            candidates = self._select_candidates(rules, facts)
            if candidates.is_empty():
                self.logger.debug("No candidate rules left, fixpoint reached", iterations=iterations)
                break
            if max_iterations is not None and iterations >= max_iterations:
                self.logger.warning(
                    "Inference stopped before reaching a fixpoint",
                    max_iterations=max_iterations,
                    candidates=[rule.name for rule in candidates]
                )
                break
            iterations += 1
            self.logger.debug(
                "Firing candidate rules",
                iteration=iterations,
                candidates=[rule.name for rule in candidates]
            )
            # The inner pass runs inside this session, without session listeners
            if self.delegate._do_fire(candidates, facts) == 0:
                self.logger.warning(
                    "Inference stopped, no candidate rule could be evaluated",
                    iteration=iterations,
                    candidates=[rule.name for rule in candidates]
                )
                break

    def _select_candidates(self, rules: Rules, facts: Facts) -> Rules:
        candidates = Rules()
        for rule in rules:
            try:
                triggered = rule.evaluate(facts)
            except Exception as e:
                self.logger.warning("Rule excluded from candidates after evaluation error", rule=rule.name, error=str(e))
                continue
            if triggered:
                candidates.register(rule)
        return candidates

    def check(self, rules: Rules, facts: Facts) -> Dict[Rule, bool]:
        """Evaluate rules against the current facts; see ``DefaultRulesEngine.check``."""
        with session_context(self.engine_name):
            self._trigger_listeners_before_rules(rules, facts)
            result = self.delegate.check(rules, facts)
            self._trigger_listeners_after_rules(rules, facts)
        return result
