"""
Shared pytest fixtures: a loopback Fluentd collector.

The collector accepts any number of sequential connections, records every
byte it receives, and decodes the stream with msgpack.
"""

import socket
import threading
import time
from typing import List

import msgpack
import pytest


class LoopbackCollector:
    """Minimal TCP sink standing in for a Fluentd in_forward input."""

    def __init__(self):
        self._server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._server.bind(("127.0.0.1", 0))
        self._server.listen(8)
        self._server.settimeout(0.05)
        self.host, self.port = self._server.getsockname()

        self._lock = threading.Lock()
        self._buffers: List[bytearray] = []
        self._connections: List[socket.socket] = []
        self._running = True
        self._thread = threading.Thread(target=self._accept_loop, daemon=True)
        self._thread.start()

    def _accept_loop(self) -> None:
        while self._running:
            try:
                conn, _ = self._server.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            buffer = bytearray()
            with self._lock:
                self._connections.append(conn)
                self._buffers.append(buffer)
            threading.Thread(target=self._read_loop, args=(conn, buffer), daemon=True).start()

    def _read_loop(self, conn: socket.socket, buffer: bytearray) -> None:
        while True:
            try:
                data = conn.recv(65536)
            except OSError:
                break
            if not data:
                break
            with self._lock:
                buffer.extend(data)

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._connections)

    def raw_bytes(self) -> bytes:
        with self._lock:
            return b"".join(bytes(buffer) for buffer in self._buffers)

    def messages(self) -> list:
        """Decode every complete message received so far, in arrival order."""
        unpacker = msgpack.Unpacker(raw=False)
        unpacker.feed(self.raw_bytes())
        return list(unpacker)

    def wait_for_messages(self, count: int, timeout: float = 5.0) -> list:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            messages = self.messages()
            if len(messages) >= count:
                return messages
            time.sleep(0.01)
        raise AssertionError(f"expected {count} messages, got {len(self.messages())}")

    def drop_connections(self) -> None:
        """Close every accepted connection from the collector side."""
        with self._lock:
            connections = list(self._connections)
        for conn in connections:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            conn.close()

    def stop(self) -> None:
        self._running = False
        self._thread.join(timeout=1.0)
        self._server.close()
        self.drop_connections()


def wait_until(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def collector():
    server = LoopbackCollector()
    try:
        yield server
    finally:
        server.stop()


@pytest.fixture
def closed_port() -> int:
    """A loopback port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
