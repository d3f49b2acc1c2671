"""
Engine control parameters.
"""

import sys
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_RULE_PRIORITY_THRESHOLD = sys.maxsize


class RulesEngineParameters(BaseModel):
    """
    Parameters of a rules engine.

    With a ``DefaultRulesEngine`` they apply to all registered rules; with an
    ``InferenceRulesEngine`` they apply to the candidate rules of each
    iteration. ``max_iterations`` bounds the inference loop and is ignored
    by the single pass engine.
    """

    model_config = ConfigDict(validate_assignment=True)

    skip_on_first_applied_rule: bool = Field(default=False, description="Stop the pass after the first successful rule")
    skip_on_first_non_triggered_rule: bool = Field(default=False, description="Stop the pass after the first rule not triggered")
    skip_on_first_failed_rule: bool = Field(default=False, description="Stop the pass after the first failed rule")
    priority_threshold: int = Field(default=DEFAULT_RULE_PRIORITY_THRESHOLD, description="Rules above this priority are never reached")
    max_iterations: Optional[int] = Field(default=None, description="Inference loop bound, unbounded when None. Candidates that keep holding without retracting their facts loop until this bound")

    def skip_on_first_applied(self, value: bool = True) -> "RulesEngineParameters":
        self.skip_on_first_applied_rule = value
        return self

    def skip_on_first_non_triggered(self, value: bool = True) -> "RulesEngineParameters":
        self.skip_on_first_non_triggered_rule = value
        return self

    def skip_on_first_failed(self, value: bool = True) -> "RulesEngineParameters":
        self.skip_on_first_failed_rule = value
        return self

    def with_priority_threshold(self, threshold: int) -> "RulesEngineParameters":
        self.priority_threshold = threshold
        return self

    def with_max_iterations(self, max_iterations: Optional[int]) -> "RulesEngineParameters":
        self.max_iterations = max_iterations
        return self

    def __str__(self) -> str:
        return (
            "RulesEngineParameters("
            f"skip_on_first_applied_rule={self.skip_on_first_applied_rule}, "
            f"skip_on_first_non_triggered_rule={self.skip_on_first_non_triggered_rule}, "
            f"skip_on_first_failed_rule={self.skip_on_first_failed_rule}, "
            f"priority_threshold={self.priority_threshold}, "
            f"max_iterations={self.max_iterations})"
        )
