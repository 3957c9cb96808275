"""HTTP endpoints: Prometheus metrics and the VICI health check."""

import json
import logging
import signal
from socketserver import ThreadingMixIn
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app

from .collector import IPsecCollector
from .defaults import HEALTHCHECK_PATH, METRICS_PATH
from .util import ViciConnectionError

log = logging.getLogger(__name__)

JSON_HEADERS = [
    ("Content-Type", "application/json"),
    ("Cache-Control", "no-cache, no-store, must-revalidate"),
]


class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """WSGI server handling each request in its own thread."""
    daemon_threads = True


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)


def _json(start_response, status: str, body: dict):
    start_response(status, JSON_HEADERS)
    return [json.dumps(body).encode()]


def create_app(registry: CollectorRegistry, collector: IPsecCollector):
    """Create the WSGI application serving /metrics and /healthcheck."""
    metrics_app = make_wsgi_app(registry)

    def app(environ, start_response):
        path = environ.get("PATH_INFO", "").rstrip("/") or "/"

        if path == METRICS_PATH:
            return metrics_app(environ, start_response)

        if path == HEALTHCHECK_PATH:
            try:
                collector.check()
            except ViciConnectionError as exc:
                log.warning(f"Health check failed: {exc}")
                return _json(start_response, "503 Service Unavailable", {
                    "status": "Service Unavailable",
                    "errors": {"vici": str(exc)},
                })
            return _json(start_response, "200 OK", {"status": "OK"})

        return _json(start_response, "404 Not Found", {"status": "Not Found"})

    return app


def _interrupt(signum, frame):
    raise KeyboardInterrupt


def serve(app, address: str, port: int):
    """Serve app until SIGINT or SIGTERM."""
    httpd = make_server(address, port, app, ThreadingWSGIServer, handler_class=_QuietHandler)
    signal.signal(signal.SIGTERM, _interrupt)
    log.info(f"Starting admin server on port '{port}'")
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        log.info("Shutting down the service")
    finally:
        httpd.server_close()
