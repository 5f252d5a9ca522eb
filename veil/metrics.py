"""
Prometheus metrics for monitoring.

Each Metrics instance owns its own registry, so several clients can live in
one process without colliding on metric names.
"""

from typing import Optional
import logging

from prometheus_client import CollectorRegistry, Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)


class Metrics:
    """
    Prometheus metrics collector.

    Tracks:
    - API request count and latency
    - Session authentications by outcome
    - Expired-session signals
    """

    def __init__(
        self,
        enabled: bool = True,
        port: Optional[int] = None,
        registry: Optional[CollectorRegistry] = None
    ):
        """
        Initialize metrics.

        Args:
            enabled: Enable metrics collection
            port: Serve metrics over HTTP on this port (no server if None)
            registry: Registry to register collectors in (new one if None)
        """
        self.enabled = enabled
        self.registry = registry or CollectorRegistry()

        if not self.enabled:
            return

        self.api_requests = Counter(
            'veil_api_requests_total',
            'Total API requests',
            ['method', 'endpoint', 'status'],
            registry=self.registry
        )

        self.api_latency = Histogram(
            'veil_api_latency_seconds',
            'API request latency',
            ['method', 'endpoint'],
            registry=self.registry
        )

        self.authentications = Counter(
            'veil_session_authentications_total',
            'Session authentication attempts',
            ['outcome'],
            registry=self.registry
        )

        self.session_expirations = Counter(
            'veil_session_expirations_total',
            'Requests rejected because the session expired',
            registry=self.registry
        )

        if port is not None:
            try:
                start_http_server(port, registry=self.registry)
                logger.info(f"Metrics server started on port {port}")
            except OSError as e:
                logger.error(f"Failed to start metrics server: {e}")

    def track_api_request(self, method: str, endpoint: str, status: str) -> None:
        """Record API request."""
        if self.enabled:
            self.api_requests.labels(method=method, endpoint=endpoint, status=status).inc()

    def track_api_latency(self, method: str, endpoint: str, duration: float) -> None:
        """Record API latency."""
        if self.enabled:
            self.api_latency.labels(method=method, endpoint=endpoint).observe(duration)

    def track_authentication(self, outcome: str) -> None:
        """Record a session authentication attempt ("success" or "failure")."""
        if self.enabled:
            self.authentications.labels(outcome=outcome).inc()

    def track_session_expired(self) -> None:
        if self.enabled:
            self.session_expirations.inc()


def get_metrics(enabled: bool = True, port: Optional[int] = None) -> Metrics:
    """Create a metrics instance."""
    return Metrics(enabled=enabled, port=port)
