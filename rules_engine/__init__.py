"""
Rules engine package.

Evaluates a registry of condition/action rules against a mutable store of
named facts, in a deterministic priority order, with early-exit
parameters and listener extension points.

Modules of interest:
- facts: Fact store shared by the rules of a session.
- rules: Rule contract, BasicRule/DefaultRule and the Rules registry.
- parameters: Early-exit and priority cutoff parameters.
- listeners: Rule and session listener protocol.
- engine: Single pass engine (fire/check).
- inference: Forward chaining engine running passes until a fixpoint.
- instrumentation: structlog and Prometheus listeners.
- factory: Engine construction from environment settings.

Engines are synchronous and not thread-safe; give each concurrent session
its own Facts.
"""

from .facts import Fact, Facts
from .rules import (
    DEFAULT_DESCRIPTION, DEFAULT_NAME, DEFAULT_PRIORITY,
    BasicRule, DefaultRule, Rule, Rules, compare_rules, natural_order
)
from .parameters import DEFAULT_RULE_PRIORITY_THRESHOLD, RulesEngineParameters
from .listeners import RuleListener, RulesEngineListener
from .engine import AbstractRulesEngine, DefaultRulesEngine
from .inference import InferenceRulesEngine
from .factory import create_engine

__all__ = [
    "Fact", "Facts",
    "Rule", "BasicRule", "DefaultRule", "Rules", "compare_rules", "natural_order",
    "DEFAULT_NAME", "DEFAULT_DESCRIPTION", "DEFAULT_PRIORITY",
    "RulesEngineParameters", "DEFAULT_RULE_PRIORITY_THRESHOLD",
    "RuleListener", "RulesEngineListener",
    "AbstractRulesEngine", "DefaultRulesEngine", "InferenceRulesEngine",
    "create_engine",
]
