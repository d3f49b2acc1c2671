"""
Listener protocol invoked by the engines at fixed extension points.

Every callback is a no-op by default; subclass and override what you need.
"""

from .facts import Facts
from .rules import Rule, Rules


class RuleListener:
    """Callbacks around the evaluation and execution of a single rule."""

    def before_evaluate(self, rule: Rule, facts: Facts) -> bool:
        """Called before evaluating a rule.

        Returns:
            False to skip the rule; no other callback fires for it.
        """
        return True

    def after_evaluate(self, rule: Rule, facts: Facts, evaluation_result: bool) -> None:
        """Called after a rule evaluated to ``evaluation_result``."""

    def on_evaluation_error(self, rule: Rule, facts: Facts, error: Exception) -> None:
        """Called when a rule's condition raised."""

    def before_execute(self, rule: Rule, facts: Facts) -> None:
        """Called before executing a triggered rule."""

    def on_success(self, rule: Rule, facts: Facts) -> None:
        """Called after a rule executed successfully."""

    def on_failure(self, rule: Rule, facts: Facts, error: Exception) -> None:
        """Called when a rule's action raised."""


class RulesEngineListener:
    """Callbacks around a whole firing session."""

    def before_evaluate(self, rules: Rules, facts: Facts) -> None:
        """Called once before the rule set is evaluated."""

    def after_execute(self, rules: Rules, facts: Facts) -> None:
        """Called once after the rule set was fired."""
