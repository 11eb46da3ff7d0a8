"""
Chat Room DAO

Purpose
-------
Data-access layer for the `ChatRoom` ORM entity:
- Create rooms (unique per client/lawyer pair)
- Fetch by id, by pair, by client or by lawyer (most recent activity first)
- Reserve the next message position of a room

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller.
- `reserveMessagePosition` increments `message_count` with a single UPDATE.
  The row stays locked until the surrounding transaction ends, so concurrent
  appends to the same room are serialized and receive consecutive positions.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from legal_eagle.database.entities.chat_room import ChatRoom

logger = logging.getLogger(__name__)


class ChatRoomDao:
    """
    Data Access Object (DAO) for managing ChatRoom entities.
    """

    def createChatRoom(self, session: Session, chat_room: ChatRoom) -> ChatRoom:
        try:
            session.add(chat_room)
            session.flush()
            return chat_room
        except Exception as e:
            logger.error(f"Error in ChatRoomDao.createChatRoom. Error: {e}")
            raise e

    def fetchChatRoomById(self, session: Session, chat_room_id: UUID) -> Optional[ChatRoom]:
        try:
            return session.get(ChatRoom, chat_room_id)
        except Exception as e:
            logger.error(f"Error in ChatRoomDao.fetchChatRoomById. Error: {e}")
            raise e

    def fetchChatRoomByPair(self, session: Session, user_id: UUID, lawyer_id: UUID) -> Optional[ChatRoom]:
        try:
            return (
                session.query(ChatRoom)
                .filter(ChatRoom.user_id == user_id, ChatRoom.lawyer_id == lawyer_id)
                .one_or_none()
            )
        except Exception as e:
            logger.error(f"Error in ChatRoomDao.fetchChatRoomByPair. Error: {e}")
            raise e

    def fetchChatRoomsByUserId(self, session: Session, user_id: UUID) -> List[ChatRoom]:
        try:
            return (
                session.query(ChatRoom)
                .filter(ChatRoom.user_id == user_id)
                .order_by(desc(ChatRoom.last_activity))
                .all()
            )
        except Exception as e:
            logger.error(f"Error in ChatRoomDao.fetchChatRoomsByUserId. Error: {e}")
            raise e

    def fetchChatRoomsByLawyerId(self, session: Session, lawyer_id: UUID) -> List[ChatRoom]:
        try:
            return (
                session.query(ChatRoom)
                .filter(ChatRoom.lawyer_id == lawyer_id)
                .order_by(desc(ChatRoom.last_activity))
                .all()
            )
        except Exception as e:
            logger.error(f"Error in ChatRoomDao.fetchChatRoomsByLawyerId. Error: {e}")
            raise e

    def reserveMessagePosition(self, session: Session, chat_room: ChatRoom, timestamp: datetime) -> int:
        """
        Claim the next log position of `chat_room` and bump its last activity.

        Returns
        -------
        int
            Zero-based position for the message about to be appended.
        """
        try:
            (
                session.query(ChatRoom)
                .filter(ChatRoom.id == chat_room.id)
                .update(
                    {ChatRoom.message_count: ChatRoom.message_count + 1, ChatRoom.last_activity: timestamp},
                    synchronize_session=False,
                )
            )
            count = session.query(ChatRoom.message_count).filter(ChatRoom.id == chat_room.id).scalar()
            chat_room.message_count = count
            chat_room.last_activity = timestamp
            return count - 1
        except Exception as e:
            logger.error(f"Error in ChatRoomDao.reserveMessagePosition. Error: {e}")
            raise e
