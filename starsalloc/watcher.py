"""Run a command and kill it when ``/kill`` is requested over HTTP."""

from __future__ import annotations

import logging
import subprocess
import sys
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlsplit

DEFAULT_PORT = 8090

_log = logging.getLogger(__name__)


def _make_handler(process: subprocess.Popen):
    class _KillHandler(BaseHTTPRequestHandler):
        def _reply(self, status: int, body: bytes) -> None:
            self.send_response(status)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def _dispatch(self) -> None:
            if urlsplit(self.path).path != "/kill":
                self.send_response(404)
                body = b"404 page not found\n"
                self.send_header("Content-Type", "text/plain; charset=utf-8")
                self.send_header("X-Content-Type-Options", "nosniff")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)
                return
            try:
                process.kill()
            except OSError as exc:
                print("error killing process", exc)
            self._reply(200, b"OK")
            self.server.shutdown()

        do_GET = do_POST = do_PUT = do_DELETE = do_PATCH = _dispatch

        def log_message(self, format, *args):
            _log.debug(format, *args)

    return _KillHandler


def run(command, port=DEFAULT_PORT) -> int:
    """Start ``command`` and serve ``/kill`` on ``port`` until it is requested.

    The process is killed once serving ends. Serving ends only by failing to
    start or by being shut down, and both count as failure, so the status is 1.
    """
    process = subprocess.Popen(list(command), stdout=sys.stdout, stderr=sys.stderr)
    try:
        try:
            server = ThreadingHTTPServer(("", port), _make_handler(process))
        except OSError as exc:
            _log.error("%s", exc)
        else:
            with server:
                server.serve_forever()
            _log.error("http: Server closed")
        try:
            process.kill()
        except OSError as exc:
            _log.error("%s", exc)
    finally:
        process.wait()
    return 1


def main(argv=None) -> int:
    """Run ``argv`` (program and at least one argument) under the watcher."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        _log.error("missing arguments")
        return 1
    try:
        return run(args)
    except OSError as exc:
        _log.error("%s", exc)
        return 1