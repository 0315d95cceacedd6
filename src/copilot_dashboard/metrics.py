from typing import Sequence

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

from copilot_dashboard.models import SeatSummary, TimeFrame, UsageRecord


class DashboardMetrics:
    """
    exposes the dashboard's own health (fetch durations, fetch errors,
    refresh outcomes) and the currently displayed figures as Prometheus
    metrics.
    """

    def __init__(self, registry: "CollectorRegistry" = REGISTRY) -> "None":
        self._fetch_duration: "Histogram" = Histogram(
            "copilot_dashboard_fetch_duration_seconds",
            "Duration of data source fetches",
            ["source", "kind"],
            registry=registry,
        )
        self._fetch_errors: "Counter" = Counter(
            "copilot_dashboard_fetch_errors_total",
            "Total number of failed data source fetches by kind",
            ["source", "kind"],
            registry=registry,
        )
        self._refreshes: "Counter" = Counter(
            "copilot_dashboard_refreshes_total",
            "Total number of dashboard refreshes by outcome",
            ["outcome"],
            registry=registry,
        )
        self._seats: "Gauge" = Gauge(
            "copilot_dashboard_seats",
            "Number of assigned seats in the current view",
            registry=registry,
        )
        self._active_seats: "Gauge" = Gauge(
            "copilot_dashboard_active_seats",
            "Number of seats active in the last 30 days in the current view",
            registry=registry,
        )
        self._suggestions: "Gauge" = Gauge(
            "copilot_dashboard_suggestions",
            "Suggestions shown per time bucket in the current view",
            ["bucket"],
            registry=registry,
        )
        self._acceptances: "Gauge" = Gauge(
            "copilot_dashboard_acceptances",
            "Suggestions accepted per time bucket in the current view",
            ["bucket"],
            registry=registry,
        )

    def observe_fetch_duration(
        self, source: "str", kind: "str", duration_seconds: "float"
    ) -> "None":
        self._fetch_duration.labels(source=source, kind=kind).observe(
            duration_seconds
        )

    def inc_fetch_error(self, source: "str", kind: "str") -> "None":
        self._fetch_errors.labels(source=source, kind=kind).inc()

    def inc_refresh(self, outcome: "str") -> "None":
        self._refreshes.labels(outcome=outcome).inc()

    def update_seats(self, summary: "SeatSummary") -> "None":
        self._seats.set(summary.total_seats)
        self._active_seats.set(summary.total_active_seats)

    def update_usage(
        self,
        records: "Sequence[UsageRecord]",
        time_frame: "TimeFrame" = TimeFrame.WEEKLY,
    ) -> "None":
        """
        replaces the per bucket gauges with the given view, summing the
        breakdown entries left after filtering. Daily buckets are labeled
        with the ISO date since the display label carries no year.
        """
        self._suggestions.clear()
        self._acceptances.clear()
        for record in records:
            if time_frame is TimeFrame.DAILY:
                bucket = record.day.isoformat()
            else:
                bucket = record.time_frame_display
            self._suggestions.labels(bucket=bucket).set(
                sum(b.suggestions_count for b in record.breakdown)
            )
            self._acceptances.labels(bucket=bucket).set(
                sum(b.acceptances_count for b in record.breakdown)
            )
