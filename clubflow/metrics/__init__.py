# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "clubflow_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "clubflow_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "clubflow_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
AUTHORIZATION_DENIALS = Counter(
    "clubflow_authorization_denials_total",
    "Authorization checks that failed",
    ["action"],
)
APPLICATIONS_TOTAL = Counter(
    "clubflow_applications_total",
    "Track applications by outcome",
    ["outcome"],
)
DECISIONS_TOTAL = Counter(
    "clubflow_applicant_decisions_total",
    "Applicant decisions taken",
    ["decision"],
)
SUBMISSIONS_TOTAL = Counter(
    "clubflow_task_submissions_total",
    "Course task submissions",
)
RATINGS_TOTAL = Counter(
    "clubflow_submission_ratings_total",
    "Submission ratings written (including overwrites)",
)
ANNOUNCEMENTS_TOTAL = Counter(
    "clubflow_announcements_total",
    "Announcement writes",
    ["action"],
)
ANNOUNCEMENTS_EXPIRED = Counter(
    "clubflow_announcements_expired_total",
    "Announcements removed by the lazy expiry sweep",
)
FANOUT_DELIVERIES = Counter(
    "clubflow_fanout_deliveries_total",
    "Per-member inbox deliveries",
    ["result"],
)
FANOUT_DURATION = Histogram(
    "clubflow_fanout_duration_seconds",
    "Time to deliver one broadcast to every member",
)
CONCURRENCY_RETRIES = Counter(
    "clubflow_concurrency_retries_total",
    "Operations re-run after a stale versioned write",
    ["operation"],
)
MIRROR_REPAIRS = Counter(
    "clubflow_mirror_repairs_total",
    "Track/course mirror entries fixed by reconciliation",
    ["side"],
)
NOTIFICATIONS_SENT = Counter(
    "clubflow_notifications_sent_total",
    "Outbound notifications to the notification service",
    ["channel"],
)
MEMBERS_REGISTERED = Gauge(
    "clubflow_members",
    "Number of registered members",
)
