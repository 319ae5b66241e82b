from abc import ABC, abstractmethod
from typing import Optional, List

from app.chat.entity.chat import Chat, ChatMessage
from app.core.errors import NotFoundError
from app.core.logger import get_logger
from app.llm.entity.chat import utc_now

logger = get_logger("ChatService")

TITLE_MAX_CHARS = 50
# Only cut back to a word boundary when it leaves a reasonably long title.
TITLE_MIN_WORD_CUT = 20
DEFAULT_CHAT_TITLE = "New Chat"


def generate_chat_title(first_message: str) -> str:
    """Short title from the first user message."""
    title = first_message[:TITLE_MAX_CHARS].strip()
    last_space = title.rfind(" ")
    if last_space > TITLE_MIN_WORD_CUT:
        title = title[:last_space]
    if len(first_message) > TITLE_MAX_CHARS:
        title += "..."
    return title or DEFAULT_CHAT_TITLE


class IChatRepository(ABC):
    @abstractmethod
    async def create_chat(self, user_id: str, title: str) -> Chat:
        pass

    @abstractmethod
    async def list_chats(self, user_id: str) -> List[Chat]:
        """Chats without messages, most recently updated first."""
        pass

    @abstractmethod
    async def get_chat(self, user_id: str, chat_id: str) -> Optional[Chat]:
        pass

    @abstractmethod
    async def add_message(self, user_id: str, chat_id: str, message: ChatMessage,
                          title: Optional[str] = None) -> Optional[Chat]:
        """Append a message; also replace the title when one is given."""
        pass

    @abstractmethod
    async def update_title(self, user_id: str, chat_id: str, title: str) -> Optional[Chat]:
        pass

    @abstractmethod
    async def delete_chat(self, user_id: str, chat_id: str) -> bool:
        pass


class ChatService:
    """Saved chat history, always scoped to the owning user."""

    def __init__(self, repository: IChatRepository):
        self.repository = repository

    async def create_chat(self, user_id: str, title: Optional[str] = None) -> Chat:
        title = title or f"{DEFAULT_CHAT_TITLE} - {utc_now().date().isoformat()}"
        chat = await self.repository.create_chat(user_id, title)
        logger.info(f"Chat created | chat_id={chat.chat_id} user_id={user_id}")
        return chat

    async def list_chats(self, user_id: str) -> List[Chat]:
        return await self.repository.list_chats(user_id)

    async def get_chat(self, user_id: str, chat_id: str) -> Chat:
        chat = await self.repository.get_chat(user_id, chat_id)
        if chat is None:
            raise NotFoundError("Chat not found")
        return chat

    async def add_message(self, user_id: str, chat_id: str, message: ChatMessage) -> Chat:
        chat = await self.get_chat(user_id, chat_id)
        title = None
        if not chat.messages and message.role == "user":
            title = generate_chat_title(message.content)
        updated = await self.repository.add_message(user_id, chat_id, message, title=title)
        if updated is None:
            raise NotFoundError("Chat not found")
        return updated

    async def update_title(self, user_id: str, chat_id: str, title: str) -> Chat:
        chat = await self.repository.update_title(user_id, chat_id, title)
        if chat is None:
            raise NotFoundError("Chat not found")
        return chat

    async def delete_chat(self, user_id: str, chat_id: str) -> None:
        if not await self.repository.delete_chat(user_id, chat_id):
            raise NotFoundError("Chat not found")
        logger.info(f"Chat deleted | chat_id={chat_id} user_id={user_id}")
