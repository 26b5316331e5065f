"""HTTP transport: server-sent events downstream, POSTed requests upstream.

A client opens ``GET <sse_path>`` and first receives an ``endpoint`` event
with the URL to POST to (``<post_path>?sessionId=<id>``). Each POSTed
JSON-RPC message is answered ``202 Accepted`` and handled as its own task;
the response is pushed as a ``message`` event on that session's stream.

HTTP is served by a ``ThreadingHTTPServer`` (one thread per connection).
Tool calls run on an anyio event loop owned by a blocking portal, so a slow
tool in one session never holds up another.
"""

from __future__ import annotations

import json
import logging
import queue
import threading
import uuid
from concurrent.futures import Future
from contextlib import ExitStack
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import parse_qs, urlsplit

from anyio.from_thread import BlockingPortal, start_blocking_portal

from dynamic_mcp.dispatcher import ProtocolDispatcher
from dynamic_mcp.jsonrpc import decode, encode
from dynamic_mcp.models.sse_config import SseConfig

if TYPE_CHECKING:
    from dynamic_mcp.server import ToolServer

logger = logging.getLogger(__name__)

SESSION_QUERY_PARAM = "sessionId"


def _pending_key(request_id: Any) -> Optional[tuple[str, Any]]:
    if isinstance(request_id, bool) or not isinstance(request_id, (int, str)):
        return None
    return (type(request_id).__name__, request_id)


class SseSession:
    def __init__(self, dispatcher: ProtocolDispatcher, portal: BlockingPortal) -> None:
        self.id: str = uuid.uuid4().hex
        self._dispatcher = dispatcher
        self._portal = portal
        self._outbox: "queue.Queue[str | None]" = queue.Queue()
        self._pending: dict[tuple[str, Any], Future[None]] = {}
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def submit(self, message: Any) -> None:
        """Schedule ``message`` on the event loop; returns immediately."""
        if isinstance(message, dict) and message.get("method") == "notifications/cancelled":
            params = message.get("params")
            if isinstance(params, dict):
                self.cancel(params.get("requestId"))

        future = self._portal.start_task_soon(self._handle, message)
        key = _pending_key(message.get("id")) if isinstance(message, dict) else None
        if key is None:
            return
        with self._lock:
            if self._closed:
                future.cancel()
                return
            self._pending[key] = future
        future.add_done_callback(lambda done: self._forget(key, done))

    def cancel(self, request_id: Any) -> bool:
        key = _pending_key(request_id)
        if key is None:
            return False
        with self._lock:
            future = self._pending.get(key)
        if future is None:
            return False
        logger.info("Session %s: cancelling request %r", self.id, request_id)
        return future.cancel()

    def send(self, message: dict[str, Any]) -> None:
        if self._closed:
            logger.debug("Session %s closed, dropping response %r", self.id, message.get("id"))
            return
        self._outbox.put(encode(message))

    def next_message(self, timeout: float) -> str | None:
        """Next encoded message, ``None`` once closed. Raises ``queue.Empty`` on timeout."""
        return self._outbox.get(timeout=timeout)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            pending = list(self._pending.values())
            self._pending.clear()
        for future in pending:
            future.cancel()
        self._dispatcher.close()
        self._outbox.put(None)
        if pending:
            logger.info("Session %s closed with %d pending requests", self.id, len(pending))

    async def _handle(self, message: Any) -> None:
        response = await self._dispatcher.handle(message)
        if response is not None:
            self.send(response)

    def _forget(self, key: tuple[str, Any], future: Future[None]) -> None:
        with self._lock:
            if self._pending.get(key) is future:
                del self._pending[key]


def _make_handler(transport: "SseTransport") -> type[BaseHTTPRequestHandler]:
    config = transport.config

    class SseRequestHandler(BaseHTTPRequestHandler):
        server_version = "dynamic-mcp"

        def log_message(self, format: str, *args: Any) -> None:
            logger.debug("%s - %s", self.address_string(), format % args)

        def _send(self, status: int, body: bytes, content_type: str = "application/json") -> None:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def _send_error_json(self, status: int, message: str) -> None:
            self._send(status, json.dumps({"error": message}).encode("utf-8"))

        def _write_event(self, event: str, data: str) -> None:
            self.wfile.write(f"event: {event}\ndata: {data}\n\n".encode("utf-8"))
            self.wfile.flush()

        def do_GET(self) -> None:
            if urlsplit(self.path).path != config.sse_path:
                self._send_error_json(HTTPStatus.NOT_FOUND, "not_found")
                return

            session = transport.open_session()
            self.send_response(HTTPStatus.OK)
            self.send_header("Content-Type", "text/event-stream")
            self.send_header("Cache-Control", "no-cache")
            self.end_headers()
            try:
                self._write_event("endpoint", f"{config.post_path}?{SESSION_QUERY_PARAM}={session.id}")
                while True:
                    try:
                        data = session.next_message(timeout=config.keep_alive_duration)
                    except queue.Empty:
                        self.wfile.write(b": keep-alive\n\n")
                        self.wfile.flush()
                        continue
                    if data is None:
                        break
                    self._write_event("message", data)
            except ConnectionError:
                logger.info("Session %s: client disconnected", session.id)
            finally:
                transport.close_session(session.id)

        def do_POST(self) -> None:
            parts = urlsplit(self.path)
            if parts.path != config.post_path:
                self._send_error_json(HTTPStatus.NOT_FOUND, "not_found")
                return
            session_id = parse_qs(parts.query).get(SESSION_QUERY_PARAM, [""])[0]
            session = transport.get_session(session_id)
            if session is None:
                self._send_error_json(HTTPStatus.NOT_FOUND, "session_not_found")
                return
            try:
                length = int(self.headers.get("Content-Length") or 0)
                if length < 0:
                    raise ValueError(f"negative Content-Length {length}")
                message = decode(self.rfile.read(length))
            except ValueError as exc:
                self._send_error_json(HTTPStatus.BAD_REQUEST, f"invalid_json: {exc}")
                return
            session.submit(message)
            self._send(HTTPStatus.ACCEPTED, b"Accepted", "text/plain; charset=utf-8")

    return SseRequestHandler


class SseTransport:
    def __init__(self, server: "ToolServer", config: SseConfig) -> None:
        self._server = server
        self.config: SseConfig = config
        self._sessions: dict[str, SseSession] = {}
        self._lock = threading.Lock()
        self._exit_stack: ExitStack | None = None
        self._portal: BlockingPortal | None = None
        self._httpd: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def server_address(self) -> tuple[str, int]:
        if self._httpd is None:
            raise RuntimeError("SSE transport is not running.")
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    def start(self) -> None:
        if self._httpd is not None:
            raise RuntimeError("SSE transport already started.")
        stack = ExitStack()
        self._portal = stack.enter_context(start_blocking_portal())
        try:
            self._httpd = ThreadingHTTPServer((self.config.host, self.config.port), _make_handler(self))
        except OSError:
            stack.close()
            self._portal = None
            raise
        self._exit_stack = stack
        self._thread = threading.Thread(target=self._httpd.serve_forever, name="sse-http", daemon=True)
        self._thread.start()
        host, port = self.server_address
        logger.info(
            "SSE server listening on http://%s:%s (stream %s, post %s)",
            host,
            port,
            self.config.sse_path,
            self.config.post_path,
        )

    def stop(self) -> None:
        if self._httpd is None:
            return
        self._httpd.shutdown()
        with self._lock:
            session_ids = list(self._sessions)
        for session_id in session_ids:
            self.close_session(session_id)
        self._httpd.server_close()
        self._httpd = None
        if self._exit_stack is not None:
            self._exit_stack.close()
        self._exit_stack = None
        self._portal = None
        logger.info("SSE server stopped")

    def serve_forever(self) -> None:
        self.start()
        try:
            while self._thread is not None and self._thread.is_alive():
                self._thread.join(0.5)
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")
        finally:
            self.stop()

    def open_session(self) -> SseSession:
        if self._portal is None:
            raise RuntimeError("SSE transport is not running.")
        session = SseSession(self._server.new_dispatcher(), self._portal)
        with self._lock:
            self._sessions[session.id] = session
        logger.info("Session %s opened", session.id)
        return session

    def get_session(self, session_id: str) -> SseSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def close_session(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return
        session.close()
        logger.info("Session %s closed", session.id)
