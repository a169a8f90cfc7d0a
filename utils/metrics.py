"""
Prometheus metrics for the zip weather proxy.
"""
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)

# Application info metric
app_info = Info(
    "zipweather_app_info",
    "Application information for the zip weather proxy",
)

# Request metrics
request_counter = Counter(
    "zipweather_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

# Latency metrics
request_duration = Histogram(
    "zipweather_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Lookup metrics
weather_lookup_counter = Counter(
    "zipweather_lookups_total",
    "Total number of weather lookups by outcome",
    ["outcome"],
)

# Outbound provider metrics
provider_call_counter = Counter(
    "zipweather_provider_calls_total",
    "Total number of OpenWeatherMap calls",
    ["status"],
)

provider_call_duration = Histogram(
    "zipweather_provider_call_duration_seconds",
    "OpenWeatherMap call duration in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Quota and cache state
requests_remaining_gauge = Gauge(
    "zipweather_rate_limit_remaining",
    "Outbound requests remaining in the current window",
)

cache_entries_gauge = Gauge(
    "zipweather_cache_entries",
    "Entries held by the response cache, including expired ones",
)

# Health metrics
health_check_counter = Counter(
    "zipweather_health_checks_total",
    "Total number of health check requests",
    ["status"],
)


def set_app_info(version: str, environment: str = "production"):
    """Set application information."""
    app_info.info(
        {"version": version, "environment": environment, "application": "zipweather"}
    )


def get_metrics() -> bytes:
    """Get all metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST
