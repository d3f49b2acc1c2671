"""
Rule contract, base rule implementations and the rule registry.
"""

import sys
from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Protocol

from shared.errors import NoSuchFactError, RuleDefinitionError
from shared.logging import get_logger
from .facts import Facts

DEFAULT_NAME = "rule"
DEFAULT_DESCRIPTION = "description"
DEFAULT_PRIORITY = sys.maxsize - 1

Condition = Callable[[Facts], bool]
Action = Callable[[Facts], None]
Comparator = Callable[[Any, Any], int]
RULE_CONTRACT = ("name", "description", "priority", "evaluate", "execute")

logger = get_logger("rules_engine.rules")


class Rule(Protocol):
    """
    Rule contract consumed by the engines.

    Lower priority values take precedence. Equality and hashing must rely on
    name, description and priority only, never on identity or behavior.
    """

    @property
    def name(self) -> str:
        ...

    @property
    def description(self) -> str:
        ...

    @property
    def priority(self) -> int:
        ...

    def evaluate(self, facts: Facts) -> bool:
        """Rule condition. Expected to be side-effect free."""
        ...

    def execute(self, facts: Facts) -> None:
        """Rule action. May mutate ``facts`` and may raise."""
        ...


def natural_order(rule: Any, other: Any) -> int:
    """Priority ascending, then name ascending."""
    if rule.priority < other.priority:
        return -1
    if rule.priority > other.priority:
        return 1
    if rule.name < other.name:
        return -1
    if rule.name > other.name:
        return 1
    return 0


def _defines_own_order(rule: Any) -> bool:
    for klass in type(rule).__mro__:
        if "__lt__" in vars(klass):
            return klass is not object and klass is not BasicRule
    return False


def compare_rules(rule: Any, other: Any) -> int:
    """
    Compare two rules.

    A rule class overriding ``__lt__`` is ordered by it. Otherwise a rule's
    own ``compare_to`` is used when it has one, then the natural order.
    """
    if _defines_own_order(rule):
        if rule < other:
            return -1
        if other < rule:
            return 1
        return 0
    compare_to = getattr(rule, "compare_to", None)
    if callable(compare_to):
        return compare_to(other)
    return natural_order(rule, other)


class BasicRule:
    """
    Base rule implementation.

    Override ``evaluate`` and ``execute`` to provide the condition and the
    action. A ``comparator`` strategy replaces the natural order for this
    rule when the registry sorts it.
    """

    def __init__(self, name: str = DEFAULT_NAME, description: str = DEFAULT_DESCRIPTION,
                 priority: int = DEFAULT_PRIORITY, comparator: Optional[Comparator] = None):
        if not isinstance(name, str) or not name:
            raise RuleDefinitionError("Rule name must be a non-empty string", {"name": name})
        if not isinstance(priority, int) or isinstance(priority, bool):
            raise RuleDefinitionError("Rule priority must be an integer", {"name": name, "priority": priority})
        self._name = name
        self._description = description
        self._priority = priority
        self.comparator = comparator

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def priority(self) -> int:
        return self._priority

    def evaluate(self, facts: Facts) -> bool:
        return False

    def execute(self, facts: Facts) -> None:
        pass

    def compare_to(self, other: Any) -> int:
        if self.comparator is not None:
            return self.comparator(self, other)
        return natural_order(self, other)

    def __lt__(self, other: Any) -> bool:
        return self.compare_to(other) < 0

    # Rules are unique by name, description and priority within a registry
    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, BasicRule):
            return NotImplemented
        return (
            self.priority == other.priority
            and self.name == other.name
            and self.description == other.description
        )

    def __hash__(self) -> int:
        return hash((self.name, self.description, self.priority))

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


class DefaultRule(BasicRule):
    """
    Rule assembled from a condition and an ordered list of actions.

    A condition that depends on a missing fact (``NoSuchFactError``) makes
    the rule not applicable instead of reporting an evaluation error.
    """

    def __init__(self, name: str = DEFAULT_NAME, description: str = DEFAULT_DESCRIPTION,
                 priority: int = DEFAULT_PRIORITY, condition: Optional[Condition] = None,
                 actions: Optional[Iterable[Action]] = None, comparator: Optional[Comparator] = None):
        super().__init__(name, description, priority, comparator)
        self.condition: Condition = condition or (lambda facts: False)
        self.actions: List[Action] = list(actions or [])
        for action in self.actions:
            if not callable(action):
                raise RuleDefinitionError("Rule actions must be callable", {"name": name})

    def evaluate(self, facts: Facts) -> bool:
        try:
            return bool(self.condition(facts))
        except NoSuchFactError as e:
            logger.warning(
                "Rule evaluated to false due to a declared but missing fact",
                rule=self.name,
                fact=e.missing_fact
            )
            return False

    def execute(self, facts: Facts) -> None:
        for action in self.actions:
            action(facts)


class Rules:
    """
    Registry of rules.

    Rules are de-duplicated by equality and always iterated in ascending
    order. The order is recomputed from the current members on every
    traversal.
    """

    def __init__(self, *rules: Rule):
        self._rules: Dict[Rule, Rule] = {}
        self.register(*rules)

    def register(self, *rules: Rule):
        """Register rules. Registering a rule equal to a member is a no-op."""
        for rule in rules:
            if rule is None or not all(hasattr(rule, member) for member in RULE_CONTRACT):
                raise RuleDefinitionError(
                    "Object does not satisfy the rule contract",
                    {"type": type(rule).__name__}
                )
            if rule not in self._rules:
                self._rules[rule] = rule

    def register_all(self, rules: Iterable[Rule]):
        self.register(*rules)

    def unregister(self, *rules: Rule):
        for rule in rules:
            self._rules.pop(rule, None)

    def unregister_by_name(self, name: str):
        """Unregister every rule with the given name."""
        for rule in [r for r in self._rules if r.name == name]:
            del self._rules[rule]

    def is_empty(self) -> bool:
        return not self._rules

    def size(self) -> int:
        return len(self._rules)

    def clear(self):
        self._rules.clear()

    def __contains__(self, rule: object) -> bool:
        return rule in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(sorted(self._rules, key=cmp_to_key(compare_rules)))

    def __repr__(self) -> str:
        return "Rules[" + ", ".join(rule.name for rule in self) + "]"
