"""HTTP view of the live reservoir.

Every path serves the same view; each request takes one fresh snapshot.
"""

from __future__ import annotations

import logging
import threading

from flask import Flask, Response, request
from werkzeug.serving import make_server

from ssample.config import ConfigurationError, parse_listen_address
from ssample.render import render, select_format
from ssample.reservoir.store import ReservoirStore

logger = logging.getLogger(__name__)


def create_app(store: ReservoirStore) -> Flask:
    """Build the Flask app exposing *store*."""
    app = Flask(__name__)

    @app.route("/", defaults={"path": ""}, methods=["GET", "POST"])
    @app.route("/<path:path>", methods=["GET", "POST"])
    def sample(path: str) -> Response:
        fmt = select_format(request.values)
        snapshot = store.snapshot()
        try:
            body = render(snapshot, fmt)
        except (TypeError, ValueError) as exc:
            logger.warning("failed to render %s snapshot: %s", fmt.value, exc)
            return Response(f"{fmt.value} err: {exc}", status=500, mimetype="text/plain")
        return Response(body, mimetype=fmt.content_type)

    return app


class ExposureServer:
    """Threaded werkzeug server running :func:`create_app` in the background.

    The socket is bound in the constructor so an unusable address fails
    before any input is consumed.
    """

    def __init__(self, store: ReservoirStore, address: str) -> None:
        host, port = parse_listen_address(address)
        try:
            self._server = make_server(host, port, create_app(store), threaded=True)
        # werkzeug reports bind failures with sys.exit(1)
        except (OSError, SystemExit) as exc:
            raise ConfigurationError(f"cannot listen on {address}: {exc}") from exc
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="ssample-http", daemon=True
        )

    @property
    def host(self) -> str:
        return self._server.host

    @property
    def port(self) -> int:
        return self._server.server_port

    def start(self) -> None:
        self._thread.start()
        logger.info("serving sample on http://%s:%d/", self.host, self.port)

    def shutdown(self) -> None:
        if self._thread.is_alive():
            self._server.shutdown()
            self._thread.join()
        self._server.server_close()
