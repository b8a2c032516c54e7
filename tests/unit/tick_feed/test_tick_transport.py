import socket
import unittest

from tick_feed.transport import SocketConnection, SocketTransport, TransportError


def _unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("127.0.0.1", 0))
        return probe.getsockname()[1]


class TestSocketConnection(unittest.TestCase):
    def setUp(self) -> None:
        self.local, self.peer = socket.socketpair()
        self.local.settimeout(0.5)
        self.connection = SocketConnection(self.local)

    def tearDown(self) -> None:
        self.connection.close()
        self.peer.close()

    def test_send_and_receive(self) -> None:
        self.connection.send(b"\x01\x00")
        self.assertEqual(self.peer.recv(2), b"\x01\x00")

        self.peer.sendall(b"payload")
        self.assertEqual(self.connection.receive(170), b"payload")

    def test_peer_close_reads_as_empty(self) -> None:
        self.peer.close()

        self.assertEqual(self.connection.receive(170), b"")

    def test_read_timeout_is_transport_error(self) -> None:
        self.local.settimeout(0.01)

        with self.assertRaisesRegex(TransportError, "read timeout"):
            self.connection.receive(170)

    def test_close_is_idempotent(self) -> None:
        self.connection.close()
        self.connection.close()

        with self.assertRaises(TransportError):
            self.connection.send(b"\x01\x00")


class TestSocketTransport(unittest.TestCase):
    def test_refused_connection_is_transport_error(self) -> None:
        transport = SocketTransport(
            host="127.0.0.1",
            port=_unused_port(),
            connect_timeout_ms=200,
            read_timeout_ms=200,
        )

        with self.assertRaisesRegex(TransportError, "connect to 127.0.0.1"):
            transport.open()

    def test_endpoint(self) -> None:
        transport = SocketTransport(
            host="127.0.0.1", port=3000, connect_timeout_ms=1, read_timeout_ms=1
        )

        self.assertEqual(transport.endpoint, "127.0.0.1:3000")


if __name__ == "__main__":
    unittest.main()
