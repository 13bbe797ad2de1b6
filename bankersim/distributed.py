"""Message exchange between nodes over local TCP sockets."""

from __future__ import annotations

import logging
import socket
import struct
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

from bankersim.banker import MAX_RESOURCES, Node

DEFAULT_HOST = "127.0.0.1"
DEFAULT_BASE_PORT = 8080
MAX_CONNECTIONS = 5

_WIRE = struct.Struct(f"<3i{MAX_RESOURCES}i")
MESSAGE_SIZE = _WIRE.size

_POLL_INTERVAL = 0.2
_RECV_TIMEOUT = 2.0
_CONNECT_TIMEOUT = 5.0

log = logging.getLogger(__name__)


class RequestType(IntEnum):
    """Kinds of message a node understands."""

    REQUEST = 0
    RELEASE = 1
    BORROW = 2
    BORROW_GRANT = 3


def _coerce_type(value: int) -> int:
    try:
        return RequestType(value)
    except ValueError:
        return int(value)


@dataclass(frozen=True)
class Message:
    """A fixed-size message; resources are padded to MAX_RESOURCES entries."""

    source_node: int
    dest_node: int
    request_type: int
    resources: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        values = tuple(int(r) for r in self.resources)
        if len(values) > MAX_RESOURCES:
            raise ValueError(
                f"a message carries at most {MAX_RESOURCES} resource counts"
            )
        padded = values + (0,) * (MAX_RESOURCES - len(values))
        object.__setattr__(self, "resources", padded)
        object.__setattr__(self, "request_type", _coerce_type(self.request_type))

    def to_bytes(self) -> bytes:
        """Encode the message as little-endian 32-bit integers."""
        try:
            return _WIRE.pack(
                self.source_node,
                self.dest_node,
                int(self.request_type),
                *self.resources,
            )
        except struct.error as exc:
            raise ValueError(f"message field out of range: {exc}") from exc

    @classmethod
    def from_bytes(cls, data: bytes) -> Message:
        """Decode a message produced by to_bytes."""
        if len(data) != MESSAGE_SIZE:
            raise ValueError(
                f"a message is {MESSAGE_SIZE} bytes long, got {len(data)}"
            )
        source, dest, kind, *resources = _WIRE.unpack(data)
        return cls(source, dest, kind, tuple(resources))


def create_listener(
    node_id: int,
    host: str = DEFAULT_HOST,
    base_port: int = DEFAULT_BASE_PORT,
) -> socket.socket:
    """Open a listening socket on base_port + node_id."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, base_port + node_id))
        sock.listen(MAX_CONNECTIONS)
    except OSError:
        sock.close()
        raise
    return sock


def send_message(
    dest_node_id: int,
    message: Message,
    host: str = DEFAULT_HOST,
    base_port: int = DEFAULT_BASE_PORT,
) -> None:
    """Deliver a message to the node listening on base_port + dest_node_id."""
    payload = message.to_bytes()
    with socket.create_connection(
        (host, base_port + dest_node_id), timeout=_CONNECT_TIMEOUT
    ) as sock:
        sock.sendall(payload)


def process_message(
    node: Node,
    message: Message,
    host: str = DEFAULT_HOST,
    base_port: int = DEFAULT_BASE_PORT,
) -> bool:
    """Apply an incoming message to the node; return whether it took effect."""
    resources = list(message.resources[: node.num_resources])
    kind = message.request_type
    if kind == RequestType.REQUEST:
        if node.can_grant_request(message.source_node, resources):
            return node.request_resources(message.source_node, resources)
        return False
    if kind == RequestType.RELEASE:
        node.release_resources(message.source_node, resources)
        return True
    if kind == RequestType.BORROW:
        return process_borrow_request(node, message, host, base_port)
    return False


def request_borrow(
    source_node: Node,
    dest_node_id: int,
    resources: Sequence[int],
    host: str = DEFAULT_HOST,
    base_port: int = DEFAULT_BASE_PORT,
) -> Message:
    """Ask another node to lend resources; return the message sent."""
    message = Message(
        source_node.node_id,
        dest_node_id,
        RequestType.BORROW,
        tuple(resources[: source_node.num_resources]),
    )
    send_message(dest_node_id, message, host, base_port)
    return message


def process_borrow_request(
    node: Node,
    message: Message,
    host: str = DEFAULT_HOST,
    base_port: int = DEFAULT_BASE_PORT,
) -> bool:
    """Lend the requested resources if they are free and notify the borrower.

    Returns False when the node cannot spare them.
    """
    wanted = message.resources[: node.num_resources]
    if any(w > a for w, a in zip(wanted, node.available)):
        return False
    node.available = [a - w for a, w in zip(node.available, wanted)]
    response = Message(
        node.node_id, message.source_node, RequestType.BORROW_GRANT, wanted
    )
    send_message(message.source_node, response, host, base_port)
    return True


def _recv_message(conn: socket.socket) -> bytes | None:
    chunks: list[bytes] = []
    received = 0
    try:
        while received < MESSAGE_SIZE:
            chunk = conn.recv(MESSAGE_SIZE - received)
            if not chunk:
                return None
            chunks.append(chunk)
            received += len(chunk)
    except OSError as exc:
        log.warning("receive failed: %s", exc)
        return None
    return b"".join(chunks)


def message_handler(
    node: Node,
    stop_event: threading.Event,
    host: str = DEFAULT_HOST,
    base_port: int = DEFAULT_BASE_PORT,
) -> None:
    """Accept and apply messages for the node until stop_event is set."""
    with create_listener(node.node_id, host, base_port) as listener:
        listener.settimeout(_POLL_INTERVAL)
        while not stop_event.is_set():
            try:
                conn, _ = listener.accept()
            except TimeoutError:
                continue
            except OSError as exc:
                log.warning("node %d: accept failed: %s", node.node_id, exc)
                continue
            with conn:
                conn.settimeout(_RECV_TIMEOUT)
                data = _recv_message(conn)
            if data is None:
                continue
            try:
                process_message(node, Message.from_bytes(data), host, base_port)
            except (ValueError, IndexError, OSError) as exc:
                log.warning("node %d: message rejected: %s", node.node_id, exc)