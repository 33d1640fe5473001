"""
Health check module for Designate-DNS.

This module provides the status endpoints used by Kubernetes probes and
Prometheus scrapes.
"""

import logging
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from threading import Thread
from typing import Optional

from designate_dns.utils.metrics import ApiMetrics


class HealthCheckHandler(BaseHTTPRequestHandler):
    """
    HTTP request handler for health check endpoints.
    """

    # Set on the handler class built by HealthCheckServer
    metrics: ApiMetrics
    started: threading.Event

    def __init__(self, *args, **kwargs):
        self.logger = logging.getLogger("designate-dns.health")
        super().__init__(*args, **kwargs)

    def do_GET(self):
        """
        Handle GET requests.
        """
        if self.path == "/healthz":
            self._handle_health_check()
        elif self.path == "/metrics":
            self._handle_metrics()
        else:
            self.send_response(404)
            self.end_headers()
            self.wfile.write(b"Not Found")

    def _handle_health_check(self):
        """
        Healthy once the webhook API is serving.
        """
        if self.started.is_set():
            self.send_response(200)
            self.end_headers()
            self.wfile.write(b"OK")
        else:
            self.send_response(500)
            self.end_headers()
            self.wfile.write(b"webhook server not started")

    def _handle_metrics(self):
        body = self.metrics.render().encode()
        self.send_response(200)
        self.send_header("Content-type", "text/plain; version=0.0.4")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        """
        Override log_message to use the application logger.
        """
        self.logger.debug(format % args)


class HealthCheckServer:
    """
    HTTP server for health check endpoints.
    """

    def __init__(
        self,
        metrics: ApiMetrics,
        started: threading.Event,
        host: str = "0.0.0.0",
        port: int = 8080,
    ):
        """
        Initialize a HealthCheckServer.

        Args:
            metrics: Metrics rendered on /metrics
            started: Set once the webhook API is serving
            host: Host to bind to
            port: Port to bind to
        """
        self.host = host
        self.port = port
        self.metrics = metrics
        self.started = started
        self.server: Optional[HTTPServer] = None
        self.thread: Optional[Thread] = None
        self.logger = logging.getLogger("designate-dns.health")

    def start(self):
        """
        Start the health check server.
        """
        handler = type(
            "BoundHealthCheckHandler",
            (HealthCheckHandler,),
            {"metrics": self.metrics, "started": self.started},
        )
        self.server = HTTPServer((self.host, self.port), handler)
        self.port = self.server.server_address[1]
        self.thread = Thread(target=self.server.serve_forever)
        self.thread.daemon = True
        self.thread.start()
        self.logger.info(f"Health check: {self.host}:{self.port}/healthz")

    def stop(self):
        """
        Stop the health check server.
        """
        if self.server:
            self.server.shutdown()
            self.server.server_close()
            self.logger.info("Health check server stopped")
