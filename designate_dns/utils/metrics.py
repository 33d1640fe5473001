"""
API call metrics for Designate-DNS.

The Designate client reports every call here. The recorder is passed to the
client explicitly, and the status server renders it in the Prometheus text
format on ``/metrics``.
"""

import threading
from typing import Dict


class ApiMetrics:
    """
    In-process recorder for Designate API call volume, failures and latency.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.connected = False
        self.total_calls = 0
        self.failed_calls = 0
        self.latency_count: Dict[str, int] = {}
        self.latency_sum: Dict[str, float] = {}

    def set_connected(self, connected: bool) -> None:
        with self._lock:
            self.connected = connected

    def record_call(self) -> None:
        with self._lock:
            self.total_calls += 1

    def record_failure(self) -> None:
        with self._lock:
            self.failed_calls += 1

    def observe_latency(self, method: str, seconds: float) -> None:
        with self._lock:
            self.latency_count[method] = self.latency_count.get(method, 0) + 1
            self.latency_sum[method] = self.latency_sum.get(method, 0.0) + seconds

    def render(self) -> str:
        """
        Render all metrics in the Prometheus text exposition format.

        Returns:
            str: Metrics text
        """
        with self._lock:
            lines = [
                "# HELP external_dns_webhook_openstack_connection Indicates if the webhook has a connection to the OpenStack API (1 for connected, 0 for not connected)",
                "# TYPE external_dns_webhook_openstack_connection gauge",
                f"external_dns_webhook_openstack_connection {1 if self.connected else 0}",
                "# HELP external_dns_webhook_total_api_calls Total number of API calls",
                "# TYPE external_dns_webhook_total_api_calls counter",
                f"external_dns_webhook_total_api_calls {self.total_calls}",
                "# HELP external_dns_webhook_failed_api_calls_total Total number of failed API calls",
                "# TYPE external_dns_webhook_failed_api_calls_total counter",
                f"external_dns_webhook_failed_api_calls_total {self.failed_calls}",
                "# HELP external_dns_webhook_api_call_latency_seconds Latency of OpenStack API calls",
                "# TYPE external_dns_webhook_api_call_latency_seconds summary",
            ]
            for method in sorted(self.latency_count):
                lines.append(
                    f'external_dns_webhook_api_call_latency_seconds_sum{{method="{method}"}} {self.latency_sum[method]}'
                )
                lines.append(
                    f'external_dns_webhook_api_call_latency_seconds_count{{method="{method}"}} {self.latency_count[method]}'
                )
        return "\n".join(lines) + "\n"
