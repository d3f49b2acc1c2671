"""
Shared metrics configuration for the rules engine.
"""

from prometheus_client import Counter, Histogram, Info, start_http_server, CollectorRegistry
from typing import Dict, Any, Optional


class MetricsCollector:
    """Centralized Prometheus metrics for rule firing sessions."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None,
                 namespace: str = "rules_engine"):
        self.service_name = service_name
        self.namespace = namespace
        # A private registry keeps repeated collectors from clashing on the global one
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up rule engine metrics."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            namespace=self.namespace,
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        self._metrics["rules_evaluated_total"] = Counter(
            "rules_evaluated_total",
            "Total rule evaluations",
            ["rule", "result"],
            namespace=self.namespace,
            registry=self.registry
        )

        self._metrics["rules_executed_total"] = Counter(
            "rules_executed_total",
            "Total rule executions",
            ["rule", "outcome"],
            namespace=self.namespace,
            registry=self.registry
        )

        self._metrics["rule_errors_total"] = Counter(
            "rule_errors_total",
            "Total rule errors",
            ["rule", "stage"],
            namespace=self.namespace,
            registry=self.registry
        )

        self._metrics["rules_sessions_total"] = Counter(
            "rules_sessions_total",
            "Total firing sessions",
            ["engine"],
            namespace=self.namespace,
            registry=self.registry
        )

        self._metrics["rules_session_duration_seconds"] = Histogram(
            "rules_session_duration_seconds",
            "Firing session duration in seconds",
            ["engine"],
            namespace=self.namespace,
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def get_sample_value(self, name: str, **labels) -> Optional[float]:
        """Read back a sample, ``None`` when it was never recorded."""
        return self.registry.get_sample_value(f"{self.namespace}_{name}", labels)

    def start_metrics_server(self, port: int = 9090):
        """Start the Prometheus metrics server."""
        start_http_server(port, registry=self.registry)

    def record_evaluation(self, rule_name: str, result: bool):
        """Record a rule evaluation."""
        self._metrics["rules_evaluated_total"].labels(
            rule=rule_name,
            result=str(result).lower()
        ).inc()

    def record_execution(self, rule_name: str, outcome: str):
        """Record a rule execution outcome (``success`` or ``failure``)."""
        self._metrics["rules_executed_total"].labels(rule=rule_name, outcome=outcome).inc()

    def record_error(self, rule_name: str, stage: str):
        """Record a rule error raised during ``evaluate`` or ``execute``."""
        self._metrics["rule_errors_total"].labels(rule=rule_name, stage=stage).inc()

    def record_session(self, engine: str, duration: float):
        """Record a completed firing session."""
        self._metrics["rules_sessions_total"].labels(engine=engine).inc()
        self._metrics["rules_session_duration_seconds"].labels(engine=engine).observe(duration)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None,
                          namespace: str = "rules_engine") -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry, namespace)
