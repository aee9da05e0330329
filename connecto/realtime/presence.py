"""
Presence registry: which live connection belongs to which user, and which
connections are subscribed to which broadcast rooms.

State lives in process memory only. It is lost on restart and is not shared
between server processes; a shared-store implementation of `PresenceService`
would be needed for that.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Set


class PresenceService(ABC):

    @abstractmethod
    def register(self, user_id: int, connection_id: str) -> None:
        """Record `connection_id` as the user's active connection. Last connect wins."""

    @abstractmethod
    def lookup(self, user_id: int) -> Optional[str]:
        """Return the user's active connection id, or None when offline."""

    @abstractmethod
    def unregister(self, user_id: int, connection_id: Optional[str] = None) -> bool:
        """
        Drop the user's entry.

        When `connection_id` is given, the entry is only removed if it still
        points at that connection, so a late disconnect from an older
        connection leaves a newer one in place. Returns True if removed.
        """

    @abstractmethod
    def online_user_ids(self) -> List[int]:
        ...

    @abstractmethod
    def join_room(self, room: str, connection_id: str) -> None:
        ...

    @abstractmethod
    def leave_rooms(self, connection_id: str) -> None:
        ...

    @abstractmethod
    def room_members(self, room: str) -> Set[str]:
        ...


class InMemoryPresenceService(PresenceService):
    """Single-process presence table. No locking: callers run on one event loop."""

    def __init__(self):
        self._connections: Dict[int, str] = {}
        self._rooms: Dict[str, Set[str]] = {}

    def register(self, user_id: int, connection_id: str) -> None:
        self._connections[user_id] = connection_id

    def lookup(self, user_id: int) -> Optional[str]:
        return self._connections.get(user_id)

    def unregister(self, user_id: int, connection_id: Optional[str] = None) -> bool:
        current = self._connections.get(user_id)
        if current is None:
            return False
        if connection_id is not None and current != connection_id:
            return False
        del self._connections[user_id]
        return True

    def online_user_ids(self) -> List[int]:
        return list(self._connections.keys())

    def join_room(self, room: str, connection_id: str) -> None:
        self._rooms.setdefault(room, set()).add(connection_id)

    def leave_rooms(self, connection_id: str) -> None:
        for room in list(self._rooms):
            members = self._rooms[room]
            members.discard(connection_id)
            if not members:
                del self._rooms[room]

    def room_members(self, room: str) -> Set[str]:
        return set(self._rooms.get(room, ()))
