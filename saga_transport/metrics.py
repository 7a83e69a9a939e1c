"""
Prometheus metrics for the saga HTTP transport.

Counters and histograms live in the default prometheus_client registry; the
host application is responsible for exposing it.
"""

import logging
from prometheus_client import Counter, Histogram

from .request import METHOD_FACTORIES

logger = logging.getLogger("saga_transport.metrics")

# Label for verbs outside the dispatch table
OTHER_METHOD = "OTHER"

# Invocations by HTTP method and outcome ("success" or the error kind)
REQUEST_COUNT = Counter(
    "saga_transport_requests_total",
    "Total number of remote invocations",
    ["method", "outcome"],
)

REQUEST_LATENCY = Histogram(
    "saga_transport_request_latency_seconds",
    "Remote invocation latency in seconds",
    ["method"],
)


def record_request(method: str, outcome: str, latency: float) -> None:
    """
    Record metrics for one invocation.

    Args:
        method: HTTP method as supplied by the caller, unsupported verbs are
            counted under ``OTHER``
        outcome: ``success`` or the failure kind (e.g. ``remote``)
        latency: Invocation duration in seconds
    """
    try:
        label = method_label(method)
        REQUEST_COUNT.labels(method=label, outcome=outcome).inc()
        REQUEST_LATENCY.labels(method=label).observe(latency)
    except Exception as e:
        # Metrics failures must not turn into transport failures
        logger.debug("Failed to record metrics: %s", e)


def method_label(method: str) -> str:
    """Bounded label value for a caller-supplied HTTP method."""
    verb = method.upper()
    return verb if verb in METHOD_FACTORIES else OTHER_METHOD
