"""Prometheus metrics for configuration loading and reference resolution."""

from prometheus_client import Counter, Histogram

SOURCES_LOADED = Counter(
    "refconfig_sources_loaded_total",
    "Total number of configuration files loaded",
    labelnames=["kind"],
)

REFERENCES_RESOLVED = Counter(
    "refconfig_references_resolved_total",
    "Total number of primary keys rewritten from a reference",
    labelnames=["source"],
)

REFERENCE_CHAIN_DEPTH = Histogram(
    "refconfig_reference_chain_depth",
    "Number of hops followed to resolve a reference",
    buckets=(1, 2, 3, 4, 5, 8, 13),
)

RESOLUTION_FAILURES = Counter(
    "refconfig_resolution_failures_total",
    "Total number of failed reference resolutions",
    labelnames=["reason"],
)


def setup_metrics() -> None:
    """Initialize metrics configuration.

    Currently a no-op as prometheus_client registers collectors on import.
    """
    pass
