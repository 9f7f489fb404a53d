"""Broadcast hub for the realtime chat channel.

The hub owns three pieces of state: the registry of connected clients, the
session history, and a bounded inbox. Only the owner task (``run``) touches
the registry and the history. Connection handlers talk to it by putting
commands in the inbox, which serializes registration, history replay, history
appends and relays without any lock.

History is transient: it is replayed to every client that joins and dropped
as soon as the last client leaves.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Union
import logging

import anyio
from pydantic import ValidationError

from app.exceptions import MessageDecodeError
from domain.schemas.message_schemas import ChatMessage, InboundMessage

logger = logging.getLogger("dynamicrecipes.realtime")


class RealtimeConnection(Protocol):
    """Bidirectional text transport. Starlette's ``WebSocket`` satisfies it."""

    async def receive_text(self) -> str: ...

    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


@dataclass(eq=False)
class _Client:
    connection: RealtimeConnection
    user_id: str
    # Set by the owner once it has closed the connection itself
    dropped: bool = False


@dataclass
class _Register:
    client: _Client
    ready: anyio.Event = field(repr=False)


@dataclass
class _Unregister:
    client: _Client


@dataclass
class _Publish:
    client: _Client
    message: ChatMessage


_Command = Union[_Register, _Unregister, _Publish]


class BroadcastHub:
    """Connection registry, relay loop and transient history in one owner task."""

    def __init__(self, buffer_size: int = 64, send_timeout_sec: Optional[float] = None):
        self._inbox, self._commands = anyio.create_memory_object_stream(
            max_buffer_size=buffer_size
        )
        self._clients: Dict[_Client, str] = {}
        self._history: List[ChatMessage] = []
        self._send_timeout = send_timeout_sec

    # ------------------ Introspection ------------------
    @property
    def client_count(self) -> int:
        return len(self._clients)

    def connected_users(self) -> List[str]:
        return list(self._clients.values())

    def history(self) -> List[ChatMessage]:
        return list(self._history)

    # ------------------ Owner loop ------------------
    async def run(self) -> None:
        """
        Relay loop. Runs for the lifetime of the application and returns only
        once ``close`` has been called and the inbox is drained.
        """
        logger.info("Broadcast loop started")
        async with self._commands:
            async for command in self._commands:
                await self._dispatch(command)
        logger.info("Broadcast loop stopped")

    async def close(self) -> None:
        await self._inbox.aclose()

    async def _dispatch(self, command: _Command) -> None:
        if isinstance(command, _Publish):
            await self._relay(command.client, command.message)
        elif isinstance(command, _Register):
            try:
                await self._register(command.client)
            finally:
                command.ready.set()
        elif isinstance(command, _Unregister):
            self._clients.pop(command.client, None)
            logger.info("Realtime client %s disconnected", command.client.user_id)
            self._clear_history_if_idle()

    async def _register(self, client: _Client) -> None:
        self._clients[client] = client.user_id
        logger.info(
            "Realtime client %s connected (%d online, replaying %d messages)",
            client.user_id,
            len(self._clients),
            len(self._history),
        )
        for message in list(self._history):
            try:
                payload = message.to_json()
            except ValueError:
                logger.warning("Skipping history item that failed to serialize", exc_info=True)
                continue
            if not await self._deliver(client, payload):
                await self._drop(client)
                return

    async def _relay(self, sender: _Client, message: ChatMessage) -> None:
        if sender not in self._clients:
            # Queued before its sender was dropped
            logger.debug("Discarding message from departed client %s", sender.user_id)
            return

        self._history.append(message)
        try:
            payload = message.to_json()
        except ValueError:
            logger.exception("Could not serialize message from %s", message.user_id)
            return

        # Snapshot: a failing client is removed mid-iteration.
        for client in list(self._clients):
            if not await self._deliver(client, payload):
                await self._drop(client)

    async def _deliver(self, client: _Client, payload: str) -> bool:
        try:
            with anyio.fail_after(self._send_timeout):
                await client.connection.send_text(payload)
        except Exception as exc:
            logger.warning("Write to realtime client %s failed: %r", client.user_id, exc)
            return False
        return True

    async def _drop(self, client: _Client) -> None:
        """Remove a client whose connection failed and close it."""
        self._clients.pop(client, None)
        client.dropped = True
        try:
            await client.connection.close()
        except Exception:
            logger.debug("Closing realtime client %s failed", client.user_id, exc_info=True)
        self._clear_history_if_idle()

    def _clear_history_if_idle(self) -> None:
        if not self._clients and self._history:
            logger.info("No more clients connected, clearing chat history")
            self._history.clear()

    # ------------------ Connection handlers ------------------
    async def handle_connection(self, connection: RealtimeConnection, user_id: str) -> None:
        """
        Serve one accepted connection until it fails or closes.

        The client receives the history replay before any relayed message.
        Each inbound frame is tagged with ``user_id`` and relayed to every
        client, the sender included. Returns normally once the hub has dropped
        and closed the connection after a failed write.

        Raises:
            MessageDecodeError: An inbound frame was not a valid message; the
                caller should close the connection
            Exception: Whatever the transport raises on disconnect
        """
        client = _Client(connection, user_id)
        try:
            ready = anyio.Event()
            await self._inbox.send(_Register(client, ready))
            await ready.wait()

            while True:
                try:
                    raw = await connection.receive_text()
                except Exception:
                    if client.dropped:
                        # Closed by the hub; the transport no longer reads
                        logger.info("Realtime client %s was dropped by the hub", user_id)
                        return
                    raise
                await self._inbox.send(_Publish(client, self._decode(raw, user_id)))
        finally:
            with anyio.CancelScope(shield=True):
                try:
                    await self._inbox.send(_Unregister(client))
                except (anyio.ClosedResourceError, anyio.BrokenResourceError):
                    logger.debug("Broadcast loop already stopped; %s not unregistered", user_id)

    @staticmethod
    def _decode(raw: str, user_id: str) -> ChatMessage:
        try:
            inbound = InboundMessage.model_validate_json(raw)
        except ValidationError as exc:
            raise MessageDecodeError(
                f"Malformed message from {user_id}",
                details={"user_id": user_id, "error_count": exc.error_count()},
            ) from exc
        return ChatMessage(
            user_id=user_id, message=inbound.message, timestamp=inbound.timestamp
        )
