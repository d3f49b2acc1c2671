"""
Structured logging and Prometheus listeners.

These plug into the listener protocol, so observability never requires
changes to the engines themselves.
"""

import time
from typing import List, Optional

import structlog

from shared.errors import NoSuchFactError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .facts import Facts
from .listeners import RuleListener, RulesEngineListener
from .rules import Rule, Rules


class LoggingRuleListener(RuleListener):
    """Emit one structured event per rule extension point."""

    def __init__(self, logger: Optional[structlog.BoundLogger] = None):
        self.logger = logger or get_logger("rules_engine.listener")

    def before_evaluate(self, rule: Rule, facts: Facts) -> bool:
        self.logger.debug("Evaluating rule", rule=rule.name, priority=rule.priority)
        return True

    def after_evaluate(self, rule: Rule, facts: Facts, evaluation_result: bool) -> None:
        self.logger.info("Rule evaluated", rule=rule.name, result=evaluation_result)

    def on_evaluation_error(self, rule: Rule, facts: Facts, error: Exception) -> None:
        # A missing fact is an expected outcome, not a programming error
        if isinstance(error, NoSuchFactError):
            self.logger.warning("Rule not applicable, declared fact is missing",
                                rule=rule.name, fact=error.missing_fact)
            return
        self.logger.error("Rule evaluation failed", rule=rule.name,
                          error_type=type(error).__name__, error=str(error))

    def before_execute(self, rule: Rule, facts: Facts) -> None:
        self.logger.debug("Executing rule", rule=rule.name)

    def on_success(self, rule: Rule, facts: Facts) -> None:
        self.logger.info("Rule executed", rule=rule.name)

    def on_failure(self, rule: Rule, facts: Facts, error: Exception) -> None:
        self.logger.error("Rule execution failed", rule=rule.name,
                          error_type=type(error).__name__, error=str(error))


class LoggingRulesEngineListener(RulesEngineListener):
    """Log the start and end of each firing session."""

    def __init__(self, logger: Optional[structlog.BoundLogger] = None):
        self.logger = logger or get_logger("rules_engine.listener")

    def before_evaluate(self, rules: Rules, facts: Facts) -> None:
        self.logger.info("Rules session started", rules=len(rules), facts=len(facts))

    def after_execute(self, rules: Rules, facts: Facts) -> None:
        self.logger.info("Rules session finished", facts=sorted(facts.as_map()))


class MetricsRuleListener(RuleListener):
    """Count evaluations, executions and errors per rule."""

    def __init__(self, collector: MetricsCollector):
        self.collector = collector

    def after_evaluate(self, rule: Rule, facts: Facts, evaluation_result: bool) -> None:
        self.collector.record_evaluation(rule.name, evaluation_result)

    def on_evaluation_error(self, rule: Rule, facts: Facts, error: Exception) -> None:
        self.collector.record_error(rule.name, "evaluate")

    def on_success(self, rule: Rule, facts: Facts) -> None:
        self.collector.record_execution(rule.name, "success")

    def on_failure(self, rule: Rule, facts: Facts, error: Exception) -> None:
        self.collector.record_execution(rule.name, "failure")
        self.collector.record_error(rule.name, "execute")


class MetricsRulesEngineListener(RulesEngineListener):
    """Time firing sessions."""

    def __init__(self, collector: MetricsCollector, engine: str = "default"):
        self.collector = collector
        self.engine = engine
        self._started: List[float] = []

    def before_evaluate(self, rules: Rules, facts: Facts) -> None:
        self._started.append(time.perf_counter())

    def after_execute(self, rules: Rules, facts: Facts) -> None:
        if not self._started:
            return
        self.collector.record_session(self.engine, time.perf_counter() - self._started.pop())
