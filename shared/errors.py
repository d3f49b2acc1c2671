"""
Shared error handling for the rules engine.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error report format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class RulesEngineException(Exception):
    """Base exception for the rules engine."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        # Get trace ID from current span
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class NoSuchFactError(RulesEngineException):
    """A fact declared by a rule is absent from the fact store."""

    def __init__(self, fact_name: str, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.missing_fact = fact_name
        super().__init__(
            "NO_SUCH_FACT",
            message or f"No fact named '{fact_name}' found in known facts",
            {"fact": fact_name, **(details or {})}
        )


class ConfigurationError(RulesEngineException):
    """Invalid engine configuration."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class RuleDefinitionError(RulesEngineException):
    """A rule does not satisfy the rule contract."""

    def __init__(self, message: str = "Invalid rule definition", details: Optional[Dict[str, Any]] = None):
        super().__init__("RULE_DEFINITION_ERROR", message, details)
