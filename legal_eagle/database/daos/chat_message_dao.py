"""
Chat Message DAO

Purpose
-------
Data-access layer for the `ChatMessage` ORM entity:
- Append a message at a reserved position
- Fetch a room's log in position order
- Flip unread messages to read for one reader side, and count unread ones

Design
------
- Requires an active SQLAlchemy `Session` provided by the caller.
- There is no delete or reorder operation; the only mutation after insert is
  `is_read` False -> True, restricted to messages not authored by the reader.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import asc
from sqlalchemy.orm import Session

from legal_eagle.database.entities.chat_message import ChatMessage

logger = logging.getLogger(__name__)


class ChatMessageDao:
    """
    Data Access Object (DAO) for chat messages.
    """

    def createMessage(self, session: Session, message: ChatMessage) -> ChatMessage:
        try:
            session.add(message)
            session.flush()
            return message
        except Exception as e:
            logger.error(f"Error in ChatMessageDao.createMessage. Error Message: {e}")
            raise e

    def fetchMessagesByChatRoomId(self, session: Session, chat_room_id: UUID) -> List[ChatMessage]:
        """
        Fetch all messages of a room, oldest first (log order).
        """
        try:
            return (
                session.query(ChatMessage)
                .filter(ChatMessage.chat_room_id == chat_room_id)
                .order_by(asc(ChatMessage.position))
                .all()
            )
        except Exception as e:
            logger.error(f"Error in ChatMessageDao.fetchMessagesByChatRoomId. Error Message: {e}")
            raise e

    def markMessagesRead(self, session: Session, chat_room_id: UUID, reader_sender: str) -> int:
        """
        Mark as read every unread message of the room not sent by `reader_sender`.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        chat_room_id : UUID
            Room whose messages are updated.
        reader_sender : str
            Sender value of the reading side (`user` or `lawyer`).

        Returns
        -------
        int
            Number of messages flipped.
        """
        try:
            return (
                session.query(ChatMessage)
                .filter(
                    ChatMessage.chat_room_id == chat_room_id,
                    ChatMessage.is_read.is_(False),
                    ChatMessage.sender != reader_sender,
                )
                .update({ChatMessage.is_read: True}, synchronize_session=False)
            )
        except Exception as e:
            logger.error(f"Error in ChatMessageDao.markMessagesRead. Error Message: {e}")
            raise e

    def countUnread(self, session: Session, chat_room_id: UUID, reader_sender: str) -> int:
        try:
            return (
                session.query(ChatMessage)
                .filter(
                    ChatMessage.chat_room_id == chat_room_id,
                    ChatMessage.is_read.is_(False),
                    ChatMessage.sender != reader_sender,
                )
                .count()
            )
        except Exception as e:
            logger.error(f"Error in ChatMessageDao.countUnread. Error Message: {e}")
            raise e
