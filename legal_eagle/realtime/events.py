"""
Outbound event fan-out shared by the WebSocket handler and the REST routes.

Each function takes the result dict of a chat operation (see
`legal_eagle.database.core.chat_funcs`) and delivers it through the registry.
"""

from typing import Optional

from legal_eagle.realtime.connection_registry import ConnectionRegistry


async def publish_message(registry: ConnectionRegistry, result: dict, origin: Optional[str] = None) -> None:
    """`receiveMessage` to the room, `newMessageNotification` to the other members."""
    chat_id = result["chatId"]
    message = result["message"]
    await registry.broadcast_to_room(chat_id, "receiveMessage", message)
    if origin is not None and origin not in registry.room_members(chat_id):
        await registry.send(origin, "receiveMessage", message)
    await registry.notify(result["recipients"], "newMessageNotification", {"chatId": chat_id, "message": message})


async def publish_read(registry: ConnectionRegistry, result: dict, origin: Optional[str] = None) -> None:
    """`messagesRead` to the room, and to the other members that have not joined it."""
    chat_id = result["chatId"]
    payload = {"chatId": chat_id, "reader": result["reader"], "updated": result["updated"]}
    await registry.broadcast_to_room(chat_id, "messagesRead", payload, exclude=origin)
    members = registry.room_members(chat_id)
    for key in result["recipients"]:
        connection_id = registry.connection_of(key)
        if connection_id is not None and connection_id not in members:
            await registry.send(connection_id, "messagesRead", payload)


async def publish_chat_request(registry: ConnectionRegistry, result: dict) -> None:
    if result["created"]:
        await registry.notify(result["recipients"], "newChatRequest", result["chat"])


async def publish_decision(registry: ConnectionRegistry, result: dict) -> None:
    chat = result["chat"]
    await registry.notify(result["recipients"], "chatRequestUpdate", chat)
    await registry.broadcast_to_room(chat["id"], "receiveMessage", result["message"])


async def publish_unlock(registry: ConnectionRegistry, result: dict) -> None:
    chat = result["chat"]
    payload = {"chatId": chat["id"], "isChatUnlocked": chat["isChatUnlocked"]}
    await registry.notify(result["recipients"], "chatUnlocked", payload)
