# app/chat/repository/chat_repository.py

from typing import Optional, List
from sqlalchemy.future import select
from sqlalchemy.orm import noload
from sqlalchemy.exc import SQLAlchemyError

from app.chat.entity.chat import Chat, ChatMessage
from app.chat.repository.sql_schema.chat import ChatModel, ChatMessageModel
from app.chat.service.service import IChatRepository
from app.core.errors import PersistenceError
from app.llm.entity.chat import utc_now
from pkg.db_util.postgres_conn import PostgresConnection
from pkg.log.logger import get_logger

logger = get_logger(__name__)


def _to_entity(chat: ChatModel, include_messages: bool = True) -> Chat:
    messages = []
    if include_messages:
        messages = [
            ChatMessage(role=m.role, content=m.content, model=m.model, created_at=m.created_at)
            for m in chat.messages
        ]
    return Chat(
        chat_id=chat.id,
        user_id=chat.user_id,
        title=chat.title,
        messages=messages,
        created_at=chat.created_at,
        updated_at=chat.updated_at,
    )


class ChatRepository(IChatRepository):
    """Handles all database interactions for saved chats and their messages."""

    def __init__(self, postgres: PostgresConnection):
        self.postgres = postgres
        self.logger = logger

    async def _find(self, session, user_id: str, chat_id: str) -> Optional[ChatModel]:
        result = await session.execute(
            select(ChatModel).where(ChatModel.id == chat_id, ChatModel.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def create_chat(self, user_id: str, title: str) -> Chat:
        try:
            async with self.postgres.get_session() as session:
                now = utc_now()
                chat = ChatModel(user_id=user_id, title=title, created_at=now, updated_at=now)
                session.add(chat)
                await session.commit()
                self.logger.info(f"Chat saved: {chat.id}")
                return Chat(chat_id=chat.id, user_id=user_id, title=title, created_at=now, updated_at=now)
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating chat: {e!s}")
            raise PersistenceError("Failed to create chat") from e

    async def list_chats(self, user_id: str) -> List[Chat]:
        try:
            async with self.postgres.get_session() as session:
                result = await session.execute(
                    select(ChatModel)
                    .options(noload(ChatModel.messages))
                    .where(ChatModel.user_id == user_id)
                    .order_by(ChatModel.updated_at.desc())
                )
                return [_to_entity(c, include_messages=False) for c in result.scalars().all()]
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing chats for user_id={user_id}: {e!s}")
            raise PersistenceError("Failed to list chats") from e

    async def get_chat(self, user_id: str, chat_id: str) -> Optional[Chat]:
        try:
            async with self.postgres.get_session() as session:
                chat = await self._find(session, user_id, chat_id)
                return _to_entity(chat) if chat else None
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching chat {chat_id}: {e!s}")
            raise PersistenceError("Failed to fetch chat") from e

    async def add_message(self, user_id: str, chat_id: str, message: ChatMessage,
                          title: Optional[str] = None) -> Optional[Chat]:
        try:
            async with self.postgres.get_session() as session:
                chat = await self._find(session, user_id, chat_id)
                if not chat:
                    return None
                chat.messages.append(
                    ChatMessageModel(
                        position=len(chat.messages),
                        role=message.role,
                        content=message.content,
                        model=message.model,
                        created_at=message.created_at,
                    )
                )
                if title:
                    chat.title = title
                chat.updated_at = utc_now()
                await session.commit()
                return _to_entity(chat)
        except SQLAlchemyError as e:
            self.logger.error(f"Error adding message to chat {chat_id}: {e!s}")
            raise PersistenceError("Failed to add message") from e

    async def update_title(self, user_id: str, chat_id: str, title: str) -> Optional[Chat]:
        try:
            async with self.postgres.get_session() as session:
                chat = await self._find(session, user_id, chat_id)
                if not chat:
                    return None
                chat.title = title
                chat.updated_at = utc_now()
                await session.commit()
                return _to_entity(chat)
        except SQLAlchemyError as e:
            self.logger.error(f"Error renaming chat {chat_id}: {e!s}")
            raise PersistenceError("Failed to update chat title") from e

    async def delete_chat(self, user_id: str, chat_id: str) -> bool:
        """Delete a chat and, by cascade, all its messages."""
        try:
            async with self.postgres.get_session() as session:
                chat = await self._find(session, user_id, chat_id)
                if not chat:
                    return False
                await session.delete(chat)
                await session.commit()
                self.logger.info(f"Deleted chat {chat_id}")
                return True
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting chat {chat_id}: {e!s}")
            raise PersistenceError("Failed to delete chat") from e
