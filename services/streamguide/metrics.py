from prometheus_client import Counter, Histogram


CLIENT_LATENCY_MS = Histogram(
    "streamguide_client_latency_ms",
    "Latency of calls to the StreamGuide API in milliseconds",
    buckets=(25, 50, 100, 200, 400, 800, 1600, 3200, 6400, 10000),
    labelnames=["operation"],
)
CLIENT_ERRORS = Counter("streamguide_client_errors_total", "Failed StreamGuide API calls", ["operation"])

# Terminal state of each widget run (skipped|rendered|failed)
WIDGET_OUTCOMES = Counter(
    "streamguide_widget_outcomes_total",
    "Widget injection outcomes per site",
    ["site", "state"],
)
