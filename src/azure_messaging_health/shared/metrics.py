"""Prometheus metrics for health probes."""
from prometheus_client import REGISTRY, Counter, Gauge, Histogram


def _get_or_create_metric(metric_class, name: str, doc: str, labelnames=None, **kwargs):
    """Get existing metric or create new one to avoid duplication errors in tests."""
    for collector in list(REGISTRY._collector_to_names.keys()):
        if hasattr(collector, "_name") and collector._name == name:
            return collector
    try:
        if labelnames is not None:
            kwargs["labelnames"] = labelnames
        return metric_class(name, doc, registry=REGISTRY, **kwargs)
    except ValueError as e:
        if "Duplicated timeseries" in str(e):
            # Race condition - try to find it again
            for collector in list(REGISTRY._collector_to_names.keys()):
                if hasattr(collector, "_name") and collector._name == name:
                    return collector
        raise


probe_checks_total = _get_or_create_metric(
    Counter,
    "azure_health_probe_checks_total",
    "Total number of health probe invocations by outcome",
    ["check_type", "status"],
)

probe_duration_seconds = _get_or_create_metric(
    Histogram,
    "azure_health_probe_duration_seconds",
    "Time taken by a health probe invocation",
    ["check_type"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

cached_clients = _get_or_create_metric(
    Gauge,
    "azure_health_cached_clients",
    "Number of SDK clients held by client registries",
)

client_registry_conflicts_total = _get_or_create_metric(
    Counter,
    "azure_health_client_registry_conflicts_total",
    "Total number of lost insert races on the client registry",
)


class MetricsCollector:
    """Helper class for updating probe metrics."""

    def record_probe(self, check_type: str, status: str, duration_seconds: float):
        """Record the outcome and duration of one probe invocation."""
        probe_checks_total.labels(check_type=check_type, status=status).inc()
        probe_duration_seconds.labels(check_type=check_type).observe(duration_seconds)

    def record_client_cached(self):
        cached_clients.inc()

    def record_clients_released(self, count: int):
        cached_clients.dec(count)

    def record_registry_conflict(self):
        client_registry_conflicts_total.inc()


# Global metrics collector instance
metrics_collector = MetricsCollector()
