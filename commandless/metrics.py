"""
Commandless Metrics Collection

Tracks routing decisions, match scores, latency and AI cost of the engine.
"""

import statistics
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Optional

ROUTES = ("execute", "clarify", "conversational", "rejected")
PATHS = ("heuristic", "ai", "followup", "filter")

MAX_SAMPLES = 10000


@dataclass
class DecisionMetrics:
    """Metrics for a single routed message."""
    route: str  # "execute", "clarify", "conversational", "rejected"
    path: str  # "heuristic", "ai", "followup", "filter"
    score: float  # 0.0-1.0
    latency_ms: float  # Milliseconds
    cost_usd: float  # Dollars
    timestamp: float = field(default_factory=time.time)


class EngineMetrics:
    """Centralized metrics collection for the matching engine.

    Tracks:
    - Route distribution (execute / clarify / conversational / rejected)
    - Decision path (heuristic scoring, AI analysis, clarification follow-up, filter)
    - Latency per message (P50, P95, P99)
    - Match scores and AI cost

    Example:
        metrics = EngineMetrics()
        metrics.record_decision(route="execute", path="heuristic", score=0.82, latency_ms=1.4)
        print(metrics.get_summary())
    """

    def __init__(self, max_samples: int = MAX_SAMPLES):
        """Initialize metrics collector."""
        self.max_samples = max_samples
        self.decisions: Deque[DecisionMetrics] = deque(maxlen=max_samples)
        self._init_state()

    def _init_state(self):
        self.counters: Dict[str, int] = {"decisions_total": 0}
        for route in ROUTES:
            self.counters[f"route_{route}"] = 0
        for path in PATHS:
            self.counters[f"path_{path}"] = 0
        self.counters["ai_unavailable"] = 0

        # Histograms (for percentile calculation), bounded
        self.histograms: Dict[str, Deque[float]] = {
            "latency_ms": deque(maxlen=self.max_samples),
            "score": deque(maxlen=self.max_samples),
            "cost_usd": deque(maxlen=self.max_samples),
        }

    def record_decision(
        self,
        route: str,
        path: str,
        score: float = 0.0,
        latency_ms: float = 0.0,
        cost_usd: float = 0.0
    ):
        """Record metrics for one routed message.

        Args:
            route: Result kind
            path: Which part of the pipeline decided
            score: Aggregate or AI confidence (0.0-1.0)
            latency_ms: Processing latency in milliseconds
            cost_usd: Estimated AI cost in USD
        """
        self.decisions.append(DecisionMetrics(
            route=route,
            path=path,
            score=score,
            latency_ms=latency_ms,
            cost_usd=cost_usd
        ))

        self.counters["decisions_total"] += 1
        for key in (f"route_{route}", f"path_{path}"):
            if key in self.counters:
                self.counters[key] += 1

        self.histograms["latency_ms"].append(latency_ms)
        self.histograms["score"].append(score)
        self.histograms["cost_usd"].append(cost_usd)

    def record_ai_unavailable(self):
        self.counters["ai_unavailable"] += 1

    def get_route_distribution(self) -> Dict[str, float]:
        """Get distribution of routes (fraction 0.0-1.0 per route)."""
        total = self.counters["decisions_total"]
        if total == 0:
            return {}
        return {route: self.counters[f"route_{route}"] / total for route in ROUTES}

    def get_percentile_latency(self, percentile: float) -> float:
        """Get latency at a percentile (0.0-1.0) in milliseconds."""
        latencies = sorted(self.histograms["latency_ms"])
        if not latencies:
            return 0.0

        idx = int(len(latencies) * percentile)
        return latencies[idx] if idx < len(latencies) else latencies[-1]

    def get_p50_latency(self) -> float:
        latencies = self.histograms["latency_ms"]
        return statistics.median(latencies) if latencies else 0.0

    def get_p95_latency(self) -> float:
        return self.get_percentile_latency(0.95)

    def get_p99_latency(self) -> float:
        return self.get_percentile_latency(0.99)

    def get_average_score(self) -> float:
        scores = self.histograms["score"]
        return statistics.mean(scores) if scores else 0.0

    def get_total_cost(self) -> float:
        return sum(self.histograms["cost_usd"])

    def to_dict(self) -> Dict[str, object]:
        return {
            "counters": dict(self.counters),
            "route_distribution": self.get_route_distribution(),
            "latency_ms": {
                "p50": self.get_p50_latency(),
                "p95": self.get_p95_latency(),
                "p99": self.get_p99_latency(),
            },
            "average_score": self.get_average_score(),
            "total_cost_usd": self.get_total_cost(),
        }

    def get_summary(self) -> str:
        """Get human-readable metrics summary.

        Returns:
            Formatted string with key metrics
        """
        if self.counters["decisions_total"] == 0:
            return "No metrics collected yet"

        dist = self.get_route_distribution()

        lines = [
            "Commandless Metrics Summary",
            "=" * 60,
            f"\nTotal messages: {self.counters['decisions_total']}",
            "",
            "Routes:",
            f"  Execute:        {dist.get('execute', 0.0) * 100:5.1f}%",
            f"  Clarify:        {dist.get('clarify', 0.0) * 100:5.1f}%",
            f"  Conversational: {dist.get('conversational', 0.0) * 100:5.1f}%",
            f"  Rejected:       {dist.get('rejected', 0.0) * 100:5.1f}%",
            "",
            "Decision path:",
        ]
        for path in PATHS:
            lines.append(f"  {path:<10} {self.counters[f'path_{path}']}")
        lines.extend([
            f"  AI unavailable: {self.counters['ai_unavailable']}",
            "",
            "Performance:",
            f"  P50 latency:  {self.get_p50_latency():6.1f} ms",
            f"  P95 latency:  {self.get_p95_latency():6.1f} ms",
            f"  P99 latency:  {self.get_p99_latency():6.1f} ms",
            "",
            "Quality:",
            f"  Avg score:    {self.get_average_score():.3f}",
            f"  AI cost:      ${self.get_total_cost():.4f}",
        ])

        return "\n".join(lines)

    def reset(self):
        """Reset all metrics (for testing)."""
        self.decisions.clear()
        self._init_state()


# Global metrics instance (singleton)
_global_metrics: Optional[EngineMetrics] = None


def get_global_metrics() -> EngineMetrics:
    """Get global metrics instance (singleton).

    Returns:
        Global EngineMetrics instance
    """
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = EngineMetrics()
    return _global_metrics
