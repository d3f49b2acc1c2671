"""
Engine construction from settings.
"""

from typing import Optional

from shared.config import EngineSettings, get_settings
from shared.errors import ConfigurationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector, get_metrics_collector
from .engine import AbstractRulesEngine, DefaultRulesEngine
from .inference import InferenceRulesEngine
from .instrumentation import (
    LoggingRuleListener, LoggingRulesEngineListener,
    MetricsRuleListener, MetricsRulesEngineListener
)

ENGINES = {
    "default": DefaultRulesEngine,
    "inference": InferenceRulesEngine,
}

logger = get_logger("rules_engine.factory")


def create_engine(kind: str = "default", settings: Optional[EngineSettings] = None,
                  collector: Optional[MetricsCollector] = None) -> AbstractRulesEngine:
    """
    Build an engine from settings and attach the observability listeners.

    Logging listeners are always attached. Metrics listeners are attached
    when ``collector`` is given or ``settings.metrics_enabled`` is set.
    """
    if kind not in ENGINES:
        raise ConfigurationError(f"Unknown engine kind '{kind}'", {"known": sorted(ENGINES)})

    settings = settings or get_settings()
    engine = ENGINES[kind](settings.to_parameters())

    engine.register_rule_listener(LoggingRuleListener())
    engine.register_rules_engine_listener(LoggingRulesEngineListener())

    if collector is None and settings.metrics_enabled:
        collector = get_metrics_collector("rules_engine", namespace=settings.metrics_namespace)
    if collector is not None:
        engine.register_rule_listener(MetricsRuleListener(collector))
        engine.register_rules_engine_listener(MetricsRulesEngineListener(collector, engine=kind))

    logger.info("Rules engine created", kind=kind, env=settings.env, parameters=str(engine.get_parameters()))
    return engine
