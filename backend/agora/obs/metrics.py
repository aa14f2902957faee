"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


REQUEST_COUNTER = Counter(
	"agora_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"agora_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

SEARCH_QUERIES = Counter(
	"agora_search_queries_total",
	"Search queries executed",
	["kind"],
)

SEARCH_LATENCY = Histogram(
	"agora_search_latency_seconds",
	"Search latency in seconds",
	["kind"],
	buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0),
)

SEARCH_RESULTS = Histogram(
	"agora_search_results",
	"Items returned per search page",
	["kind"],
	buckets=(0, 1, 5, 10, 20, 50),
)

SEARCH_CANDIDATES_DROPPED = Counter(
	"agora_search_candidates_dropped_total",
	"Candidates excluded from ranking because required fields were missing",
)

SEARCH_RATE_LIMITED = Counter(
	"agora_search_rate_limited_total",
	"Search requests rejected by the per-viewer rate limit",
	["kind"],
)

HANDLE_CHECKS = Counter(
	"agora_handle_checks_total",
	"Handle availability checks by outcome",
	["outcome"],
)

REDIS_UP = Gauge("agora_redis_up", "Redis reachability (1 = up)")
POSTGRES_UP = Gauge("agora_postgres_up", "Postgres reachability (1 = up)")


def observe_request(route: str, method: str, status: int, latency_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(latency_seconds)


def inc_search_query(kind: str) -> None:
	SEARCH_QUERIES.labels(kind=kind).inc()


def observe_search_latency(kind: str, latency_seconds: float) -> None:
	SEARCH_LATENCY.labels(kind=kind).observe(latency_seconds)


def observe_search_results(kind: str, count: int) -> None:
	SEARCH_RESULTS.labels(kind=kind).observe(count)


def inc_candidates_dropped(count: int = 1) -> None:
	if count > 0:
		SEARCH_CANDIDATES_DROPPED.inc(count)


def inc_rate_limited(kind: str) -> None:
	SEARCH_RATE_LIMITED.labels(kind=kind).inc()


def inc_handle_check(outcome: str) -> None:
	HANDLE_CHECKS.labels(outcome=outcome).inc()


def mark_redis(ok: bool) -> None:
	REDIS_UP.set(1 if ok else 0)


def mark_postgres(ok: bool) -> None:
	POSTGRES_UP.set(1 if ok else 0)
