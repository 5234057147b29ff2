from prometheus_client import (
    generate_latest,
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    CollectorRegistry
)

# Project registry; /metrics only exposes what is registered here
REPLICATION_REGISTRY = CollectorRegistry()

# Discovery cache metrics
DISCOVERY_CACHE_HITS = Counter(
    'unified_replication_discovery_cache_hits_total',
    'Number of backend lookups served from the discovery cache',
    registry=REPLICATION_REGISTRY
)

DISCOVERY_CACHE_MISSES = Counter(
    'unified_replication_discovery_cache_misses_total',
    'Number of backend lookups that required a live discovery pass',
    registry=REPLICATION_REGISTRY
)

# Pipeline metrics
OPERATIONS = Counter(
    'unified_replication_operations_total',
    'Replication operations processed',
    ['backend', 'operation', 'result'],  # result: success, error
    registry=REPLICATION_REGISTRY
)

OPERATION_DURATION = Histogram(
    'unified_replication_operation_duration_seconds',
    'Replication operation latency in seconds',
    ['backend', 'operation'],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REPLICATION_REGISTRY
)

PIPELINE_ERRORS = Counter(
    'unified_replication_pipeline_errors_total',
    'Pipeline failures by stage',
    ['stage'],
    registry=REPLICATION_REGISTRY
)

# Translation metrics
TRANSLATION_ERRORS = Counter(
    'unified_replication_translation_errors_total',
    'Failed state or mode translations',
    ['backend', 'field', 'kind'],
    registry=REPLICATION_REGISTRY
)


def render_metrics():
    """Return (body, content type) for the project registry."""
    return generate_latest(REPLICATION_REGISTRY), CONTENT_TYPE_LATEST
