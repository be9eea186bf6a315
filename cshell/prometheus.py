"""Metrics exposition buffer and a minimal HTTP exporter serving it."""

from __future__ import annotations

import logging
import socket
import threading

_log = logging.getLogger(__name__)

DEFAULT_PORT = 9101
BUFFER_LIMIT = 10 * 1024 * 1024
HEADER = "HTTP/1.1 200 OK;\r\nContent-Type: text/plain;\r\n\r\n"
_REQUEST_PREFIX = b"GET /metrics"


class MetricsBuffer:
    """Collects exposition lines until they are scraped; drops lines once full."""

    def __init__(self, limit: int = BUFFER_LIMIT) -> None:
        self.limit = limit
        self._lines: list[str] = []
        self._size = 0
        self._lock = threading.Lock()

    def add(self, line: str) -> bool:
        """Append a line; return False if it would not fit under the limit."""
        length = len(line.encode("utf-8"))
        with self._lock:
            accepted = self._size + length < self.limit
            if accepted:
                self._lines.append(line)
                self._size += length
        _log.debug("prometheus add %s", line.rstrip("\n"))
        return accepted

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()
            self._size = 0

    def drain(self) -> str:
        """Return everything collected so far and empty the buffer."""
        with self._lock:
            text = "".join(self._lines)
            self._lines.clear()
            self._size = 0
        return text

    def __len__(self) -> int:
        with self._lock:
            return self._size


class PrometheusExporter:
    """Serves the metrics buffer on GET /metrics, emptying it on each scrape."""

    def __init__(
        self,
        buffer: MetricsBuffer | None = None,
        host: str = "",
        port: int = DEFAULT_PORT,
        retry_interval: float = 1.0,
    ) -> None:
        self.buffer = MetricsBuffer() if buffer is None else buffer
        self.host = host
        self.port = port
        self.retry_interval = retry_interval
        self.bound_port: int | None = None
        self.ready = threading.Event()
        self._stop = threading.Event()
        self._sock: socket.socket | None = None
        self._thread: threading.Thread | None = None

    def handle_request(self, request: bytes) -> bytes | None:
        """Return the full response for a scrape request, or None to drop it."""
        if not request.startswith(_REQUEST_PREFIX):
            return None
        return HEADER.encode("ascii") + self.buffer.drain().encode("utf-8")

    def start(self) -> None:
        """Start serving in a background thread, retrying the bind until it works."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self.ready.clear()
        self._thread = threading.Thread(target=self._serve, name="prometheus", daemon=True)
        self._thread.start()

    def close(self) -> None:
        self._stop.set()
        if self._sock is not None:
            self._sock.close()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None

    def _bind(self) -> socket.socket | None:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock = sock
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        except OSError:
            _log.warning("setsockopt(SO_REUSEADDR) failed")
        while not self._stop.is_set():
            try:
                sock.bind((self.host, self.port))
            except OSError:
                _log.warning("Cannot bind prometheus to port %d", self.port)
                self._stop.wait(self.retry_interval)
                continue
            self.bound_port = sock.getsockname()[1]
            _log.info("Prometheus exporter listening on port %d", self.bound_port)
            return sock
        sock.close()
        return None

    def _serve(self) -> None:
        sock = self._bind()
        if sock is None:
            return
        sock.listen(100)
        sock.settimeout(0.2)
        self.ready.set()
        while not self._stop.is_set():
            try:
                conn, _ = sock.accept()
            except socket.timeout:
                continue
            except OSError:
                if self._stop.is_set():
                    break
                continue
            with conn:
                self._answer(conn)
        sock.close()

    def _answer(self, conn: socket.socket) -> None:
        conn.settimeout(5)
        try:
            request = conn.recv(1024)
        except OSError:
            return
        if not request:
            return
        response = self.handle_request(request)
        if response is None:
            return
        try:
            conn.sendall(response)
            conn.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass