"""
Rules engine base class and the single pass engine.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from shared.errors import ConfigurationError
from shared.logging import get_logger, session_context
from .facts import Facts
from .listeners import RuleListener, RulesEngineListener
from .parameters import RulesEngineParameters
from .rules import Rule, Rules


class AbstractRulesEngine(ABC):
    """
    Parameters and listener registration shared by the engines.

    Parameters are copied on construction and on read: changing them after
    the engine was built has no effect on it.
    """

    engine_name = "abstract"

    def __init__(self, parameters: Optional[RulesEngineParameters] = None):
        parameters = parameters if parameters is not None else RulesEngineParameters()
        if parameters.max_iterations is not None and parameters.max_iterations < 1:
            raise ConfigurationError(
                "max_iterations must be at least 1",
                {"max_iterations": parameters.max_iterations}
            )
        self.parameters = parameters.model_copy()
        self.rule_listeners: List[RuleListener] = []
        self.rules_engine_listeners: List[RulesEngineListener] = []
        self.logger = get_logger(f"rules_engine.{self.engine_name}")

    def get_parameters(self) -> RulesEngineParameters:
        """Return a copy of the engine parameters."""
        return self.parameters.model_copy()

    def get_rule_listeners(self) -> List[RuleListener]:
        return list(self.rule_listeners)

    def get_rules_engine_listeners(self) -> List[RulesEngineListener]:
        return list(self.rules_engine_listeners)

    def register_rule_listener(self, listener: RuleListener):
        self.rule_listeners.append(listener)

    def register_rule_listeners(self, listeners: Iterable[RuleListener]):
        self.rule_listeners.extend(listeners)

    def register_rules_engine_listener(self, listener: RulesEngineListener):
        self.rules_engine_listeners.append(listener)

    def register_rules_engine_listeners(self, listeners: Iterable[RulesEngineListener]):
        self.rules_engine_listeners.extend(listeners)

    @abstractmethod
    def fire(self, rules: Rules, facts: Facts) -> None:
        """Fire all registered rules on the given facts."""

    @abstractmethod
    def check(self, rules: Rules, facts: Facts) -> Dict[Rule, bool]:
        """Evaluate rules without executing them."""

    def _trigger_listeners_before_rules(self, rules: Rules, facts: Facts):
        for listener in self.rules_engine_listeners:
            listener.before_evaluate(rules, facts)

    def _trigger_listeners_after_rules(self, rules: Rules, facts: Facts):
        for listener in self.rules_engine_listeners:
            listener.after_execute(rules, facts)


class DefaultRulesEngine(AbstractRulesEngine):
    """
    Single pass engine.

    Iterates the registry once in ascending order, evaluates each rule and
    executes it when its condition holds. Errors raised by rules are
    reported to the rule listeners and never escape ``fire`` or ``check``.
    """

    engine_name = "default"

    def fire(self, rules: Rules, facts: Facts) -> None:
        with session_context(self.engine_name):
            self._trigger_listeners_before_rules(rules, facts)
            self._do_fire(rules, facts)
            self._trigger_listeners_after_rules(rules, facts)

    def _do_fire(self, rules: Rules, facts: Facts) -> int:
        """Run one pass and return how many rules were evaluated."""
        if rules.is_empty():
            self.logger.warning("No rules registered! Nothing to apply")
            return 0

        self._log_session(rules, facts)
        params = self.parameters
        self.logger.debug("Rules evaluation started")
        evaluated = 0

        for rule in rules:
            name = rule.name
            priority = rule.priority
            if priority > params.priority_threshold:
                self.logger.debug(
                    "Rule priority threshold exceeded, next rules will be skipped",
                    threshold=params.priority_threshold,
                    rule=name,
                    priority=priority
                )
                break

            if not self._should_be_evaluated(rule, facts):
                self.logger.debug("Rule has been skipped before being evaluated", rule=name)
                continue

            evaluated += 1
            try:
                evaluation_result = rule.evaluate(facts)
            except Exception as e:
                self.logger.error("Rule evaluated with error", rule=name, error=str(e), exc_info=True)
                self._trigger_listeners_on_evaluation_error(rule, facts, e)
                if params.skip_on_first_non_triggered_rule:
                    self.logger.debug("Next rules will be skipped since skip_on_first_non_triggered_rule is set")
                    break
                continue

            if evaluation_result:
                self.logger.debug("Rule triggered", rule=name)
                self._trigger_listeners_after_evaluate(rule, facts, True)
                try:
                    self._trigger_listeners_before_execute(rule, facts)
                    rule.execute(facts)
                except Exception as e:
                    self.logger.error("Rule performed with error", rule=name, error=str(e), exc_info=True)
                    self._trigger_listeners_on_failure(rule, facts, e)
                    if params.skip_on_first_failed_rule:
                        self.logger.debug("Next rules will be skipped since skip_on_first_failed_rule is set")
                        break
                else:
                    self.logger.debug("Rule performed successfully", rule=name)
                    self._trigger_listeners_on_success(rule, facts)
                    if params.skip_on_first_applied_rule:
                        self.logger.debug("Next rules will be skipped since skip_on_first_applied_rule is set")
                        break
            else:
                self.logger.debug("Rule has been evaluated to false, it has not been executed", rule=name)
                self._trigger_listeners_after_evaluate(rule, facts, False)
                if params.skip_on_first_non_triggered_rule:
                    self.logger.debug("Next rules will be skipped since skip_on_first_non_triggered_rule is set")
                    break

        return evaluated

    def check(self, rules: Rules, facts: Facts) -> Dict[Rule, bool]:
        """
        Evaluate every rule that passes the listener veto, without executing.

        Priority threshold and skip parameters do not apply. A rule whose
        condition raises is reported to ``on_evaluation_error`` listeners and
        recorded as ``False``.

        Returns:
            Mapping of evaluated rule to its evaluation result, in rule order.
        """
        with session_context(self.engine_name):
            self._trigger_listeners_before_rules(rules, facts)
            result = self._do_check(rules, facts)
            self._trigger_listeners_after_rules(rules, facts)
        return result

    def _do_check(self, rules: Rules, facts: Facts) -> Dict[Rule, bool]:
        self.logger.debug("Checking rules")
        result: Dict[Rule, bool] = {}
        for rule in rules:
            if not self._should_be_evaluated(rule, facts):
                continue
            try:
                result[rule] = bool(rule.evaluate(facts))
            except Exception as e:
                self.logger.error("Rule checked with error", rule=rule.name, error=str(e), exc_info=True)
                self._trigger_listeners_on_evaluation_error(rule, facts, e)
                result[rule] = False
        return result

    def _log_session(self, rules: Rules, facts: Facts):
        self.logger.debug("Engine parameters", parameters=str(self.parameters))
        self.logger.debug(
            "Registered rules",
            rules=[
                {"name": rule.name, "description": rule.description, "priority": rule.priority}
                for rule in rules
            ]
        )
        self.logger.debug("Known facts", facts=[str(fact) for fact in facts])

    def _should_be_evaluated(self, rule: Rule, facts: Facts) -> bool:
        # Every listener is consulted, any veto skips the rule
        results = [listener.before_evaluate(rule, facts) for listener in self.rule_listeners]
        return all(results)

    def _trigger_listeners_after_evaluate(self, rule: Rule, facts: Facts, evaluation_result: bool):
        for listener in self.rule_listeners:
            listener.after_evaluate(rule, facts, evaluation_result)

    def _trigger_listeners_on_evaluation_error(self, rule: Rule, facts: Facts, error: Exception):
        for listener in self.rule_listeners:
            listener.on_evaluation_error(rule, facts, error)

    def _trigger_listeners_before_execute(self, rule: Rule, facts: Facts):
        for listener in self.rule_listeners:
            listener.before_execute(rule, facts)

    def _trigger_listeners_on_success(self, rule: Rule, facts: Facts):
        for listener in self.rule_listeners:
            listener.on_success(rule, facts)

    def _trigger_listeners_on_failure(self, rule: Rule, facts: Facts, error: Exception):
        for listener in self.rule_listeners:
            listener.on_failure(rule, facts, error)
