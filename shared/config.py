"""
Shared configuration management for the rules engine.
"""

import sys
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RULES_",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Observability
    metrics_enabled: bool = Field(default=False)
    metrics_namespace: str = Field(default="rules_engine")


class EngineSettings(BaseConfig):
    """Engine control parameters read from the environment.

    Every field maps to ``RULES_<FIELD>``, e.g. ``RULES_PRIORITY_THRESHOLD=10``.
    """

    skip_on_first_applied_rule: bool = Field(default=False)
    skip_on_first_non_triggered_rule: bool = Field(default=False)
    skip_on_first_failed_rule: bool = Field(default=False)
    priority_threshold: int = Field(default=sys.maxsize)
    max_iterations: Optional[int] = Field(default=None)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        if value.upper() not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"unknown log level '{value}'")
        return value.lower()

    def to_parameters(self):
        """Build engine parameters from these settings."""
        from rules_engine.parameters import RulesEngineParameters

        return RulesEngineParameters(
            skip_on_first_applied_rule=self.skip_on_first_applied_rule,
            skip_on_first_non_triggered_rule=self.skip_on_first_non_triggered_rule,
            skip_on_first_failed_rule=self.skip_on_first_failed_rule,
            priority_threshold=self.priority_threshold,
            max_iterations=self.max_iterations,
        )


def get_settings(**overrides) -> EngineSettings:
    """Get engine settings, environment first, explicit overrides last."""
    return EngineSettings(**overrides)
