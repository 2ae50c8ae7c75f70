"""Prometheus metrics for membership caching and the club gate."""

from prometheus_client import Counter

membership_cache_lookups_total = Counter(
    "membership_cache_lookups_total",
    "Membership snapshot lookups by tier result",
    ["result"],
)

membership_cache_loads_total = Counter(
    "membership_cache_loads_total",
    "Membership loads from the system of record",
    ["outcome"],
)

membership_cache_invalidations_total = Counter(
    "membership_cache_invalidations_total",
    "Membership cache invalidations",
)

club_gate_decisions_total = Counter(
    "club_gate_decisions_total",
    "Club membership gate decisions",
    ["decision"],
)


class PrometheusMembershipMetrics:
    """Prometheus-based membership metrics implementation."""

    def inc_lookup(self, result: str) -> None:
        """Count a lookup: local_hit, shared_hit or miss."""
        membership_cache_lookups_total.labels(result=result).inc()

    def inc_load(self, outcome: str) -> None:
        """Count a load: success, error or cancelled."""
        membership_cache_loads_total.labels(outcome=outcome).inc()

    def inc_invalidation(self) -> None:
        membership_cache_invalidations_total.inc()

    def inc_gate_decision(self, decision: str) -> None:
        club_gate_decisions_total.labels(decision=decision).inc()
