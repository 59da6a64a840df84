"""Prometheus metric inventory.

Every metric the service exports is declared here.  The HTTP metrics are
fed by MetricsMiddleware; the domain counters are incremented by the
service that owns the behavior.  Label values are kept to small fixed
sets (kind, operation, outcome) so cardinality stays bounded.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Domain metrics
# ---------------------------------------------------------------------------

ENROLLMENTS_CREATED = Counter(
    "lms_enrollments_created_total",
    "Module enrollments created",
)

RESULTS_RECORDED = Counter(
    "lms_test_results_recorded_total",
    "Test results appended, by test kind",
    ["kind"],  # "level", "subtopic" or "module"
)

QUESTION_REFS_DROPPED = Counter(
    "lms_question_refs_dropped_total",
    "Question references that could not be resolved during test assembly",
)

CERTIFICATES_ISSUED = Counter(
    "lms_certificates_issued_total",
    "Certificates issued",
)

PAYMENT_GATEWAY_CALLS = Counter(
    "lms_payment_gateway_calls_total",
    "Calls to the payment gateway by operation and outcome",
    ["operation", "outcome"],  # initialize|verify ; ok|rejected|timeout|error
)
