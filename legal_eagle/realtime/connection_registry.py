"""
Connection Registry

Purpose
-------
In-memory index of live WebSocket connections:
- connection id -> socket
- principal key (``user:<id>`` / ``lawyer:<id>``) -> connection id
- chat id -> set of connection ids that joined the room

Design
------
- One instance per application, stored on ``app.state.connection_registry``
  and shared by the WebSocket handler and the REST routes.
- Registering a principal key again replaces the previous connection for that
  key; the older socket stays open but no longer receives direct notifications.
- A failed send drops the connection from the registry and is only logged.
"""

import logging
import uuid
from typing import Any, Dict, Iterable, Optional, Set

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """
    Registry of live connections, keyed by connection id.
    """

    def __init__(self):
        self._sockets: Dict[str, Any] = {}
        self._principals: Dict[str, str] = {}
        self._owners: Dict[str, str] = {}
        self._rooms: Dict[str, Set[str]] = {}

    def add(self, websocket) -> str:
        connection_id = uuid.uuid4().hex
        self._sockets[connection_id] = websocket
        return connection_id

    def register(self, connection_id: str, principal_key: str) -> None:
        previous = self._owners.pop(connection_id, None)
        if previous is not None and self._principals.get(previous) == connection_id:
            del self._principals[previous]
        self._principals[principal_key] = connection_id
        self._owners[connection_id] = principal_key

    def remove(self, connection_id: str) -> None:
        """Forget a connection: its socket, its principal binding and every room it joined."""
        self._sockets.pop(connection_id, None)
        key = self._owners.pop(connection_id, None)
        if key is not None and self._principals.get(key) == connection_id:
            del self._principals[key]
        self.leave_all(connection_id)

    def join(self, connection_id: str, chat_id: str) -> None:
        self._rooms.setdefault(chat_id, set()).add(connection_id)

    def leave(self, connection_id: str, chat_id: str) -> None:
        members = self._rooms.get(chat_id)
        if members is None:
            return
        members.discard(connection_id)
        if not members:
            del self._rooms[chat_id]

    def leave_all(self, connection_id: str) -> None:
        for chat_id in list(self._rooms):
            self.leave(connection_id, chat_id)

    def principal_of(self, connection_id: str) -> Optional[str]:
        return self._owners.get(connection_id)

    def connection_of(self, principal_key: str) -> Optional[str]:
        return self._principals.get(principal_key)

    def room_members(self, chat_id: str) -> Set[str]:
        return set(self._rooms.get(chat_id, ()))

    def rooms_of(self, connection_id: str) -> Set[str]:
        return {chat_id for chat_id, members in self._rooms.items() if connection_id in members}

    async def send(self, connection_id: str, event: str, data: dict) -> bool:
        """
        Send one ``{"event", "data"}`` frame.

        Returns
        -------
        bool
            False if the connection is unknown or the send failed.
        """
        websocket = self._sockets.get(connection_id)
        if websocket is None:
            return False
        try:
            await websocket.send_json({"event": event, "data": data})
            return True
        except Exception as e:
            logger.debug(f"Dropping connection {connection_id} after failed send of '{event}'. Error: {e}")
            self.remove(connection_id)
            return False

    async def send_to_principal(self, principal_key: str, event: str, data: dict) -> bool:
        connection_id = self._principals.get(principal_key)
        if connection_id is None:
            return False
        return await self.send(connection_id, event, data)

    async def notify(self, principal_keys: Iterable[str], event: str, data: dict) -> None:
        for key in principal_keys:
            await self.send_to_principal(key, event, data)

    async def broadcast_to_room(self, chat_id: str, event: str, data: dict, exclude: Optional[str] = None) -> int:
        """Send to every connection that joined `chat_id`, except `exclude`. Returns the delivered count."""
        delivered = 0
        for connection_id in self.room_members(chat_id):
            if connection_id == exclude:
                continue
            if await self.send(connection_id, event, data):
                delivered += 1
        return delivered
