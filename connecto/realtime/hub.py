import logging
import uuid
from typing import Any, Dict, Iterable, Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from connecto.realtime.presence import InMemoryPresenceService, PresenceService

logger = logging.getLogger(__name__)

NEW_MESSAGE = "newMessage"
NEW_GROUP_MESSAGE = "newGroupMessage"
ONLINE_USERS = "getOnlineUsers"


class ConnectionHub:
    """
    Pushes events to live WebSocket connections.

    Delivery is best-effort and notification-only: nothing is acknowledged,
    retried or recorded. The database stays the source of truth and clients
    catch up by fetching. Return values only say whether a frame was handed
    to a socket, never whether it arrived.

    A user has one active connection. When a newer one arrives the older
    socket is detached (no rooms, no further frames) but not closed.
    """

    def __init__(self, presence: Optional[PresenceService] = None):
        self.presence = presence or InMemoryPresenceService()
        self._sockets: Dict[str, WebSocket] = {}

    def _detach(self, connection_id: str) -> None:
        self._sockets.pop(connection_id, None)
        self.presence.leave_rooms(connection_id)

    async def connect(self, websocket: WebSocket, user_id: int, rooms: Iterable[str] = ()) -> str:
        # Nothing is registered until the handshake completes
        await websocket.accept()

        connection_id = uuid.uuid4().hex
        previous = self.presence.lookup(user_id)
        if previous is not None:
            self._detach(previous)
            logger.info("User %s reconnected, detaching %s", user_id, previous)

        self._sockets[connection_id] = websocket
        self.presence.register(user_id, connection_id)
        for room in rooms:
            self.presence.join_room(room, connection_id)
        logger.info("User %s connected (%s)", user_id, connection_id)
        await self.broadcast_online_users()
        return connection_id

    async def disconnect(self, user_id: int, connection_id: str) -> None:
        self._detach(connection_id)
        if not self.presence.unregister(user_id, connection_id):
            logger.info("User %s disconnected (%s), was no longer active", user_id, connection_id)
        else:
            logger.info("User %s disconnected (%s)", user_id, connection_id)
        await self.broadcast_online_users()

    async def drop_user(self, user_id: int) -> bool:
        """Take the user offline and out of every room without closing the socket."""
        connection_id = self.presence.lookup(user_id)
        if connection_id is None:
            return False
        self._detach(connection_id)
        self.presence.unregister(user_id, connection_id)
        logger.info("User %s dropped from realtime (%s)", user_id, connection_id)
        await self.broadcast_online_users()
        return True

    async def subscribe(self, user_id: int, room: str) -> bool:
        """Add the user's active connection, if any, to `room`."""
        connection_id = self.presence.lookup(user_id)
        if connection_id is None:
            return False
        self.presence.join_room(room, connection_id)
        return True

    async def emit_to_user(self, user_id: int, event: str, data: Any) -> bool:
        connection_id = self.presence.lookup(user_id)
        if connection_id is None:
            logger.debug("User %s offline, skipping %s", user_id, event)
            return False
        return await self._send(connection_id, event, data)

    async def emit_to_room(self, room: str, event: str, data: Any) -> int:
        sent = 0
        for connection_id in self.presence.room_members(room):
            if await self._send(connection_id, event, data):
                sent += 1
        return sent

    async def broadcast_online_users(self) -> None:
        online = self.presence.online_user_ids()
        for connection_id in list(self._sockets):
            await self._send(connection_id, ONLINE_USERS, online)

    async def _send(self, connection_id: str, event: str, data: Any) -> bool:
        websocket = self._sockets.get(connection_id)
        if websocket is None:
            return False
        try:
            await websocket.send_json({"event": event, "data": data})
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.warning("Dropping %s for connection %s: %s", event, connection_id, e)
            return False
        return True


# Process-wide hub used by the app; override `get_hub` to inject another
hub = ConnectionHub()


def get_hub() -> ConnectionHub:
    return hub
