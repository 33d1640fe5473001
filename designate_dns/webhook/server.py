"""
Webhook API module for Designate-DNS.

This module serves the external-dns webhook protocol on top of the Designate
provider.
"""

import asyncio
import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Optional

from designate_dns.exceptions import DesignateDNSError
from designate_dns.models.models import Changes, Endpoint
from designate_dns.provider.designate import DesignateProvider

MEDIA_TYPE = "application/external.dns.webhook+json;version=1"


class WebhookHandler(BaseHTTPRequestHandler):
    """
    HTTP request handler for the external-dns webhook endpoints.
    """

    # Set on the handler class built by WebhookServer
    provider: DesignateProvider
    started: threading.Event

    def __init__(self, *args, **kwargs):
        self.logger = logging.getLogger("designate-dns.webhook")
        super().__init__(*args, **kwargs)

    def do_GET(self):
        """
        Handle GET requests.
        """
        if self.path == "/":
            self.started.set()
            self._send_json(200, self.provider.domain_filter.to_dict())
        elif self.path == "/records":
            self._handle_records()
        elif self.path == "/adjustendpoints":
            self._send_error(405, "Method Not Allowed")
        else:
            self._send_error(404, "Not Found")

    def do_POST(self):
        """
        Handle POST requests.
        """
        if self.path == "/records":
            self._handle_apply_changes()
        elif self.path == "/adjustendpoints":
            self._handle_adjust_endpoints()
        elif self.path == "/":
            self._send_error(405, "Method Not Allowed")
        else:
            self._send_error(404, "Not Found")

    def _handle_records(self):
        try:
            endpoints = asyncio.run(self.provider.records())
        except DesignateDNSError as e:
            self.logger.error(f"Failed to list records: {e}")
            self._send_error(500, str(e))
            return
        self._send_json(200, [endpoint.to_dict() for endpoint in endpoints])

    def _handle_apply_changes(self):
        try:
            changes = Changes.from_dict(self._read_json())
        except ValueError as e:
            self.logger.warning(f"Rejected change request: {e}")
            self._send_error(400, str(e))
            return

        try:
            asyncio.run(self.provider.apply_changes(changes))
        except DesignateDNSError as e:
            self.logger.error(f"Failed to apply changes: {e}")
            self._send_error(500, str(e))
            return
        self.send_response(204)
        self.end_headers()

    def _handle_adjust_endpoints(self):
        try:
            data = self._read_json()
            if not isinstance(data, list):
                raise ValueError("expected a list of endpoints")
            endpoints = [Endpoint.from_dict(item) for item in data]
        except ValueError as e:
            self.logger.warning(f"Rejected adjust request: {e}")
            self._send_error(400, str(e))
            return

        adjusted = asyncio.run(self.provider.adjust_endpoints(endpoints))
        self._send_json(200, [endpoint.to_dict() for endpoint in adjusted])

    def _read_json(self) -> Any:
        """
        Decode the request body.

        Raises:
            ValueError: If the body is not valid JSON
        """
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        try:
            return json.loads(body or b"null")
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON body: {e}") from e

    def _send_json(self, status: int, payload: Any):
        body = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", MEDIA_TYPE)
        self.send_header("Vary", "Content-Type")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_error(self, status: int, message: str):
        body = message.encode()
        self.send_response(status)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        """
        Override log_message to use the application logger.
        """
        self.logger.debug(format % args)


class WebhookServer:
    """
    HTTP server exposing a DesignateProvider to external-dns.

    Requests are served one at a time so that reconciliations never overlap.
    """

    def __init__(
        self,
        provider: DesignateProvider,
        started: Optional[threading.Event] = None,
        host: str = "127.0.0.1",
        port: int = 8888,
    ):
        """
        Initialize a WebhookServer.

        Args:
            provider: Provider backing the API
            started: Set once the server accepts requests
            host: Host to bind to
            port: Port to bind to
        """
        self.provider = provider
        self.started = started or threading.Event()
        self.host = host
        self.port = port
        self.server: Optional[HTTPServer] = None
        self.logger = logging.getLogger("designate-dns.webhook")

    def bind(self) -> None:
        """
        Bind the listening socket.
        """
        handler = type(
            "BoundWebhookHandler",
            (WebhookHandler,),
            {"provider": self.provider, "started": self.started},
        )
        self.server = HTTPServer((self.host, self.port), handler)
        self.port = self.server.server_address[1]

    def serve_forever(self) -> None:
        """
        Serve the webhook API until shutdown() is called.
        """
        if self.server is None:
            self.bind()
        self.logger.debug(f"Starting webhook server on {self.host}:{self.port}")
        self.started.set()
        self.server.serve_forever()

    def shutdown(self) -> None:
        if self.server:
            self.server.shutdown()
            self.server.server_close()
            self.logger.info("Webhook server stopped")
