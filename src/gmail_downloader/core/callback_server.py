"""Local HTTP listener that receives the OAuth authorization redirect."""

from __future__ import annotations

import logging
import threading
import wsgiref.simple_server
from collections.abc import Callable, Iterable
from concurrent.futures import Future
from typing import Any
from urllib.parse import parse_qs

from gmail_downloader.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

SUCCESS_PAGE = b"<h1>Success</h1>Authorized."

StartResponse = Callable[[str, list[tuple[str, str]]], Any]


class _QuietRequestHandler(wsgiref.simple_server.WSGIRequestHandler):
    """Route access logs through logging instead of stderr."""

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("Callback request: " + format, *args)


class CallbackApp:
    """WSGI app that validates the ``state`` parameter and hands over the code.

    The first request carrying a valid ``state`` and a ``code`` resolves the
    future; every later request is refused.
    """

    def __init__(self, expected_state: str, future: Future[str]) -> None:
        self._expected_state = expected_state
        self._future = future

    def __call__(
        self, environ: dict[str, Any], start_response: StartResponse
    ) -> Iterable[bytes]:
        if environ.get("PATH_INFO", "") == "/favicon.ico":
            return self._respond(start_response, "404 Not Found")

        params = parse_qs(environ.get("QUERY_STRING", ""))
        state = params.get("state", [""])[0]
        if state != self._expected_state:
            logger.warning(
                "State doesn't match: path=%s query=%s",
                environ.get("PATH_INFO", ""),
                environ.get("QUERY_STRING", ""),
            )
            return self._respond(start_response, "500 Internal Server Error")

        if self._future.done():
            logger.warning("Ignoring callback after authorization completed")
            return self._respond(start_response, "500 Internal Server Error")

        code = params.get("code", [""])[0]
        if code:
            start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
            self._future.set_result(code)
            return [SUCCESS_PAGE]

        error = params.get("error", [""])[0]
        if error:
            logger.error("Authorization denied: %s", error)
            self._future.set_exception(AuthenticationError(f"Authorization failed: {error}"))
        else:
            logger.warning("no code")
        return self._respond(start_response, "500 Internal Server Error")

    @staticmethod
    def _respond(start_response: StartResponse, status: str) -> list[bytes]:
        start_response(status, [("Content-Type", "text/plain; charset=utf-8")])
        return [b""]


class AuthorizationCallbackServer:
    """Serve :class:`CallbackApp` on an ephemeral localhost port in a background thread.

    Use as a context manager. Leaving the context stops the server and
    cancels the code future if nothing resolved it, so no waiter is left
    blocked.

    Example::

        with AuthorizationCallbackServer(state) as server:
            open_browser(auth_url(server.redirect_uri))
            code = server.wait_for_code()
    """

    def __init__(self, expected_state: str, host: str = "localhost") -> None:
        self._host = host
        self._future: Future[str] = Future()
        self._app = CallbackApp(expected_state, self._future)
        self._server: wsgiref.simple_server.WSGIServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def future(self) -> Future[str]:
        return self._future

    @property
    def port(self) -> int:
        if self._server is None:
            raise RuntimeError("Callback server is not running")
        return self._server.server_port

    @property
    def redirect_uri(self) -> str:
        return f"http://{self._host}:{self.port}/"

    def start(self) -> None:
        """Bind the listener and start its serve loop."""
        wsgiref.simple_server.WSGIServer.allow_reuse_address = False
        self._server = wsgiref.simple_server.make_server(
            self._host, 0, self._app, handler_class=_QuietRequestHandler
        )
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="oauth-callback",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Callback server listening on %s", self.redirect_uri)

    def wait_for_code(self, timeout: float | None = None) -> str:
        """Block until the authorization code arrives.

        Raises:
            AuthenticationError: If the provider redirected with an error.
            concurrent.futures.CancelledError: If the server was stopped first.
        """
        return self._future.result(timeout=timeout)

    def stop(self) -> None:
        """Stop the serve loop, release the port and cancel a pending waiter."""
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if not self._future.done():
            self._future.cancel()

    def __enter__(self) -> AuthorizationCallbackServer:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
