"""
Shared utilities for the rules engine.

This package aggregates the ambient building blocks used by the engine
and by applications embedding it:

- config: Engine settings via pydantic-settings
- logging: Structured logging with trace and session correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- test_helpers: Recording rules and listeners for test suites

Only test_helpers imports rules_engine at module level; keep the other
modules free of such imports to avoid import cycles.
"""
