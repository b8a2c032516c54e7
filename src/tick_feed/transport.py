from __future__ import annotations

import socket
from typing import Protocol


class TransportError(RuntimeError):
    """Raised when a connection cannot be opened or a send/receive fails."""


class Connection(Protocol):
    def send(self, data: bytes) -> None: ...

    def receive(self, max_len: int) -> bytes:
        """Return up to ``max_len`` bytes; an empty result means the peer closed."""
        ...

    def close(self) -> None: ...


class Transport(Protocol):
    def open(self) -> Connection: ...


class SocketConnection:
    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._closed = False

    def send(self, data: bytes) -> None:
        try:
            self._sock.sendall(data)
        except OSError as exc:
            raise TransportError(f"send failed: {exc}") from exc

    def receive(self, max_len: int) -> bytes:
        try:
            return self._sock.recv(max_len)
        except socket.timeout as exc:
            raise TransportError("read timeout") from exc
        except OSError as exc:
            raise TransportError(f"receive failed: {exc}") from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # peer already gone
            pass
        self._sock.close()


class SocketTransport:
    def __init__(
        self,
        *,
        host: str,
        port: int,
        connect_timeout_ms: int,
        read_timeout_ms: int,
    ) -> None:
        self.host = host
        self.port = port
        self._connect_timeout_ms = connect_timeout_ms
        self._read_timeout_ms = read_timeout_ms

    @property
    def endpoint(self) -> str:
        return f"{self.host}:{self.port}"

    def open(self) -> SocketConnection:
        try:
            sock = socket.create_connection(
                (self.host, self.port), timeout=self._connect_timeout_ms / 1000
            )
        except OSError as exc:
            raise TransportError(f"connect to {self.endpoint} failed: {exc}") from exc
        sock.settimeout(self._read_timeout_ms / 1000)
        return SocketConnection(sock)
