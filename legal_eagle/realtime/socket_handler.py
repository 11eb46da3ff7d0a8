"""
WebSocket event loop for ``/ws``.

Frames in both directions are JSON objects ``{"event": <name>, "data": {...}}``.

Client events
-------------
- ``authenticate {token}``       -> ``authenticated`` or ``authError``
- ``joinRoom {chatId}``          -> ``joinedRoom`` (members only)
- ``leaveRoom {chatId}``
- ``sendMessage {chatId, text}`` -> ``receiveMessage`` to the room,
  ``newMessageNotification`` to the counterparty
- ``typing`` / ``stopTyping {chatId}`` -> ``userTyping`` / ``userStoppedTyping``
- ``markAsRead {chatId}``        -> ``messagesRead`` to the other room members

Failures never close the socket: they are answered with an ``error`` frame
(``appointmentEnded`` when the appointment window is over).
"""

import json
import logging
from typing import Optional
from uuid import UUID

from fastapi import WebSocket, WebSocketDisconnect
from starlette.concurrency import run_in_threadpool

from legal_eagle.database.core.auth_funcs import validate_token
from legal_eagle.database.core.chat_funcs import check_membership, list_room_ids, mark_as_read, send_message
from legal_eagle.database.core.principal import Principal
from legal_eagle.errors import AppError, AppointmentEndedError, AuthenticationError, ValidationError
from legal_eagle.realtime.connection_registry import ConnectionRegistry
from legal_eagle.realtime.events import publish_message, publish_read

logger = logging.getLogger(__name__)


def _chat_id(data: dict) -> UUID:
    raw = data.get("chatId")
    try:
        return UUID(str(raw))
    except ValueError:
        raise ValidationError("A valid chatId is required") from None


class SocketSession:
    """
    State of one WebSocket connection: its registry id and, once
    authenticated, its principal.
    """

    def __init__(self, websocket: WebSocket, registry: ConnectionRegistry):
        self.websocket = websocket
        self.registry = registry
        self.connection_id = registry.add(websocket)
        self.principal: Optional[Principal] = None

    async def emit(self, event: str, data: dict) -> None:
        await self.registry.send(self.connection_id, event, data)

    def _require_principal(self) -> Principal:
        if self.principal is None:
            raise AuthenticationError("Authentication required")
        return self.principal

    async def on_authenticate(self, data: dict) -> None:
        token = data.get("token")
        principal = await run_in_threadpool(validate_token, token=token) if token else None
        if principal is None:
            await self.emit("authError", {"message": "Invalid session" if token else "Missing token"})
            return
        # Rooms joined under a previous principal are not this one's to keep.
        self.registry.leave_all(self.connection_id)
        self.principal = principal
        self.registry.register(self.connection_id, principal.key)
        rooms = await run_in_threadpool(list_room_ids, principal=principal)
        for chat_id in rooms:
            self.registry.join(self.connection_id, chat_id)
        body = principal.to_dict()
        await self.emit(
            "authenticated",
            {"userId": body["userId"], "role": body["role"], "lawyerId": body["lawyerId"], "rooms": rooms},
        )
        logger.info(f"Socket {self.connection_id} authenticated as {principal.key}")

    async def on_join_room(self, data: dict) -> None:
        principal = self._require_principal()
        chat_id = _chat_id(data)
        await run_in_threadpool(check_membership, principal=principal, chat_id=chat_id)
        self.registry.join(self.connection_id, str(chat_id))
        await self.emit("joinedRoom", {"chatId": str(chat_id)})

    async def on_leave_room(self, data: dict) -> None:
        self._require_principal()
        self.registry.leave(self.connection_id, str(_chat_id(data)))

    async def on_send_message(self, data: dict) -> None:
        principal = self._require_principal()
        result = await run_in_threadpool(
            send_message, principal=principal, chat_id=_chat_id(data), text=data.get("text")
        )
        await publish_message(self.registry, result, origin=self.connection_id)

    async def _typing(self, data: dict, event: str) -> None:
        principal = self._require_principal()
        chat_id = str(_chat_id(data))
        if self.connection_id not in self.registry.room_members(chat_id):
            return
        payload = {"chatId": chat_id, "userId": str(principal.principal_id), "role": principal.role}
        await self.registry.broadcast_to_room(chat_id, event, payload, exclude=self.connection_id)

    async def on_typing(self, data: dict) -> None:
        await self._typing(data, "userTyping")

    async def on_stop_typing(self, data: dict) -> None:
        await self._typing(data, "userStoppedTyping")

    async def on_mark_as_read(self, data: dict) -> None:
        principal = self._require_principal()
        result = await run_in_threadpool(mark_as_read, principal=principal, chat_id=_chat_id(data))
        await publish_read(self.registry, result, origin=self.connection_id)

    async def dispatch(self, frame: dict) -> None:
        handlers = {
            "authenticate": self.on_authenticate,
            "joinRoom": self.on_join_room,
            "leaveRoom": self.on_leave_room,
            "sendMessage": self.on_send_message,
            "typing": self.on_typing,
            "stopTyping": self.on_stop_typing,
            "markAsRead": self.on_mark_as_read,
        }
        event = frame.get("event")
        data = frame.get("data") or {}
        handler = handlers.get(event)
        if handler is None:
            await self.emit("error", {"error": f"Unknown event '{event}'", "code": "UNKNOWN_EVENT", "status": 400})
            return
        if not isinstance(data, dict):
            await self.emit("error", {"error": "Event data must be an object", "status": 400})
            return
        try:
            await handler(data)
        except AppointmentEndedError as e:
            await self.emit("appointmentEnded", {**e.to_dict(), "chatId": data.get("chatId")})
        except AppError as e:
            await self.emit("error", {**e.to_dict(), "status": e.status_code, "event": event})
        except Exception as e:
            logger.exception(f"Unhandled error in socket event '{event}' on {self.connection_id}: {e}")
            await self.emit("error", {"error": "Internal server error", "status": 500, "event": event})


async def handle_socket(websocket: WebSocket, registry: ConnectionRegistry) -> None:
    """Accept a connection and serve its events until it disconnects."""
    await websocket.accept()
    session = SocketSession(websocket, registry)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except json.JSONDecodeError:
                await session.emit("error", {"error": "Frames must be JSON", "status": 400})
                continue
            if not isinstance(frame, dict):
                await session.emit("error", {"error": "Frames must be JSON objects", "status": 400})
                continue
            await session.dispatch(frame)
    except WebSocketDisconnect:
        logger.info(f"Socket {session.connection_id} disconnected")
    finally:
        registry.remove(session.connection_id)
