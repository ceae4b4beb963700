"""
Metrics collection and monitoring for Bot Gateway.
"""

import time
import threading
from typing import Dict, Any, List, Optional, Union
from collections import defaultdict, deque
from dataclasses import dataclass, field
from functools import wraps

from ...config.settings import get_settings


@dataclass
class Metric:
    """Represents a single metric measurement."""

    name: str
    value: Union[int, float]
    timestamp: float
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def age_seconds(self) -> float:
        """Get age of metric in seconds."""
        return time.time() - self.timestamp


class MetricsCollector:
    """
    Collects and stores performance metrics for gateway operations.

    Provides thread-safe metric collection with time-series storage
    and basic analytics capabilities.
    """

    _instance: Optional["MetricsCollector"] = None
    _lock = threading.RLock()

    def __new__(cls) -> "MetricsCollector":
        """Singleton pattern."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize metrics collector."""
        if self._initialized:
            return

        self.settings = get_settings()
        config = self.settings.monitoring_config

        self.enabled = config.get('enabled', True)
        self.max_history = config.get('max_history', 1000)
        self.retention_seconds = config.get('retention_seconds', 3600)

        self._metrics: Dict[str, deque] = defaultdict(lambda: deque(maxlen=self.max_history))
        self._counters: Dict[str, int] = defaultdict(int)
        self._gauges: Dict[str, float] = defaultdict(float)
        self._timers: Dict[str, List[float]] = defaultdict(list)

        self._initialized = True

    def counter(self, name: str, value: int = 1, tags: Dict[str, str] = None) -> None:
        """
        Increment a counter metric.

        Args:
            name: Counter name
            value: Increment value
            tags: Optional tags
        """
        if not self.enabled:
            return

        with self._lock:
            self._counters[name] += value
            self._append(name, self._counters[name], tags)

    def gauge(self, name: str, value: float, tags: Dict[str, str] = None) -> None:
        """
        Set a gauge metric value.

        Args:
            name: Gauge name
            value: Current value
            tags: Optional tags
        """
        if not self.enabled:
            return

        with self._lock:
            self._gauges[name] = value
            self._append(name, value, tags)

    def timer(self, name: str, duration_seconds: float, tags: Dict[str, str] = None) -> None:
        """
        Record a timing metric.

        Args:
            name: Timer name
            duration_seconds: Duration in seconds
            tags: Optional tags
        """
        if not self.enabled:
            return

        with self._lock:
            self._timers[name].append(duration_seconds)

            if len(self._timers[name]) > self.max_history:
                self._timers[name] = self._timers[name][-self.max_history:]

            self._append(name, duration_seconds, tags)

    def _append(self, name: str, value: Union[int, float], tags: Optional[Dict[str, str]]) -> None:
        self._metrics[name].append(Metric(name=name, value=value, timestamp=time.time(), tags=tags or {}))

        # Drop samples past the retention window
        current_time = time.time()
        metrics_queue = self._metrics[name]
        while metrics_queue and current_time - metrics_queue[0].timestamp > self.retention_seconds:
            metrics_queue.popleft()

    def get_counter(self, name: str) -> int:
        """Get current counter value."""
        return self._counters.get(name, 0)

    def get_gauge(self, name: str) -> float:
        """Get current gauge value."""
        return self._gauges.get(name, 0.0)

    def get_timer_stats(self, name: str) -> Dict[str, float]:
        """Get timer statistics."""
        timings = self._timers.get(name, [])

        if not timings:
            return {'count': 0, 'mean': 0.0, 'min': 0.0, 'max': 0.0, 'p95': 0.0}

        sorted_timings = sorted(timings)
        count = len(sorted_timings)

        return {
            'count': count,
            'mean': sum(sorted_timings) / count,
            'min': sorted_timings[0],
            'max': sorted_timings[-1],
            'p95': sorted_timings[min(int(0.95 * count), count - 1)],
        }

    def get_all_metrics(self) -> Dict[str, Any]:
        """Get all current metric values."""
        with self._lock:
            return {
                'counters': dict(self._counters),
                'gauges': dict(self._gauges),
                'timers': {name: self.get_timer_stats(name) for name in self._timers},
            }

    def reset(self) -> None:
        """Drop every recorded value."""
        with self._lock:
            self._metrics.clear()
            self._counters.clear()
            self._gauges.clear()
            self._timers.clear()

    def record_api_request(self,
                          endpoint: str,
                          method: str,
                          duration_seconds: float,
                          status_code: int) -> None:
        """Record API request metrics."""
        tags = {
            'endpoint': endpoint,
            'method': method,
            'status_code': str(status_code)
        }

        self.counter('api_requests_total', tags=tags)
        self.timer('api_request_duration', duration_seconds, tags=tags)

    def record_chat_request(self, mode: str, outcome: str) -> None:
        """Record one chat request by delivery mode and terminal outcome."""
        self.counter('chat_requests_total', tags={'mode': mode, 'outcome': outcome})
        self.counter(f'chat_requests_{outcome}')

    def record_model_inference(self,
                             model_name: str,
                             duration_seconds: float,
                             tokens_streamed: int = 0) -> None:
        """Record model inference metrics."""
        tags = {'model': model_name}

        self.counter('model_inferences_total', tags=tags)
        self.timer('model_inference_duration', duration_seconds, tags=tags)

        if tokens_streamed > 0:
            self.counter('model_tokens_streamed', tokens_streamed, tags=tags)

    def record_history_write(self, bot_id: str, duration_seconds: float) -> None:
        """Record one persisted history record."""
        tags = {'bot_id': bot_id}

        self.counter('history_writes_total', tags=tags)
        self.timer('history_write_duration', duration_seconds, tags=tags)


def timed_operation(metric_name: str, tags: Dict[str, str] = None):
    """
    Decorator for timing async operations.

    Args:
        metric_name: Name of the timing metric
        tags: Optional tags for the metric
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            metrics = get_metrics()
            start_time = time.time()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                error_tags = (tags or {}).copy()
                error_tags['error'] = type(e).__name__
                metrics.timer(f"{metric_name}_error", time.time() - start_time, error_tags)
                raise
            metrics.timer(metric_name, time.time() - start_time, tags)
            return result

        return wrapper
    return decorator


# Global instance
_metrics_collector = None
_metrics_lock = threading.Lock()


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector instance.

    Returns:
        MetricsCollector singleton instance
    """
    global _metrics_collector

    if _metrics_collector is None:
        with _metrics_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()

    return _metrics_collector
