import asyncio
from typing import Dict, List, Optional
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.auth.api.routes import auth_router
from app.auth.service.auth_service import AuthService
from app.chat.api.route import chat_router
from app.chat.entity.chat import Chat, ChatMessage
from app.chat.service.service import ChatService, IChatRepository
from app.core.config import Settings
from app.core.errors import register_exception_handlers
from app.core.logger import get_logger
from app.export.api.route import export_router
from app.export.entity.export import ExportRecord
from app.export.service.export_service import ExportService, IExportRepository
from app.llm.api.route import llm_router
from app.llm.entity.chat import ComparisonRun, ProviderFamily, SamplingConfig, utc_now
from app.llm.service.catalog import ModelCatalog
from app.llm.service.comparison_service import ComparisonOrchestrator, IComparisonRepository
from app.llm.service.credentials import CredentialResolver
from app.llm.service.llm_service import LLMService
from app.llm.service.normalizer import chat_response
from app.llm.service.router_service import ModelRouter
from app.user.entities.entity import User
from app.user.service.user_service import IUserRepository, UserService
from pkg.auth_token_client.client import TokenClient

API_KEY_FIELDS = (
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GEMINI_API_KEY",
    "GOOGLE_GEMMA_API_KEY",
    "MISTRAL_API_KEY",
    "COHERE_API_KEY",
)


def make_settings(**overrides) -> Settings:
    """Settings isolated from the process env and .env: every provider key unset unless given."""
    values = {name: None for name in API_KEY_FIELDS}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeProvider:
    """Stands in for a vendor adapter; records every call it receives."""

    def __init__(self, family: ProviderFamily, reply: str = "ok", delay: float = 0.0,
                 error: Optional[Exception] = None, tokens: Optional[int] = None):
        self.family = family
        self.reply = reply
        self.delay = delay
        self.error = error
        self.tokens = tokens
        self.calls: List[dict] = []

    @property
    def name(self) -> str:
        return self.family.value

    def is_enabled(self) -> bool:
        return True

    async def invoke(self, model_id, user_message, history=None, sampling=None):
        self.calls.append({
            "model_id": model_id,
            "user_message": user_message,
            "history": list(history or []),
            "sampling": sampling or SamplingConfig(),
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return chat_response(f"{self.reply} from {model_id}", model_id, self.tokens)


def fake_providers(**per_family) -> Dict[ProviderFamily, FakeProvider]:
    providers = {family: FakeProvider(family) for family in ProviderFamily}
    for name, provider in per_family.items():
        providers[ProviderFamily(name)] = provider
    return providers


class InMemoryComparisonRepository(IComparisonRepository):
    def __init__(self, fail: bool = False):
        self.runs: List[ComparisonRun] = []
        self.fail = fail

    async def save_comparison(self, run: ComparisonRun) -> str:
        if self.fail:
            raise RuntimeError("database unavailable")
        self.runs.append(run)
        return str(len(self.runs))

    async def list_comparisons(self, user_id: str, limit: int = 10) -> List[ComparisonRun]:
        mine = [r for r in self.runs if r.user_id == user_id]
        return list(reversed(mine))[:limit]


class InMemoryChatRepository(IChatRepository):
    def __init__(self):
        self.chats: Dict[str, Chat] = {}

    def _owned(self, user_id: str, chat_id: str) -> Optional[Chat]:
        chat = self.chats.get(chat_id)
        return chat if chat and chat.user_id == user_id else None

    async def create_chat(self, user_id: str, title: str) -> Chat:
        chat = Chat(chat_id=str(uuid4()), user_id=user_id, title=title)
        self.chats[chat.chat_id] = chat
        return chat.model_copy(deep=True)

    async def list_chats(self, user_id: str) -> List[Chat]:
        mine = [c for c in self.chats.values() if c.user_id == user_id]
        mine.sort(key=lambda c: c.updated_at, reverse=True)
        return [c.model_copy(update={"messages": []}) for c in mine]

    async def get_chat(self, user_id: str, chat_id: str) -> Optional[Chat]:
        chat = self._owned(user_id, chat_id)
        return chat.model_copy(deep=True) if chat else None

    async def add_message(self, user_id: str, chat_id: str, message: ChatMessage,
                          title: Optional[str] = None) -> Optional[Chat]:
        chat = self._owned(user_id, chat_id)
        if chat is None:
            return None
        chat.messages.append(message)
        if title:
            chat.title = title
        chat.updated_at = utc_now()
        return chat.model_copy(deep=True)

    async def update_title(self, user_id: str, chat_id: str, title: str) -> Optional[Chat]:
        chat = self._owned(user_id, chat_id)
        if chat is None:
            return None
        chat.title = title
        chat.updated_at = utc_now()
        return chat.model_copy(deep=True)

    async def delete_chat(self, user_id: str, chat_id: str) -> bool:
        if self._owned(user_id, chat_id) is None:
            return False
        del self.chats[chat_id]
        return True


class InMemoryExportRepository(IExportRepository):
    def __init__(self, fail: bool = False):
        self.records: List[ExportRecord] = []
        self.fail = fail

    async def save_export(self, record: ExportRecord) -> str:
        if self.fail:
            raise RuntimeError("database unavailable")
        self.records.append(record)
        return str(len(self.records))

    async def list_exports(self, user_id: str, limit: int = 20) -> List[ExportRecord]:
        mine = [r for r in self.records if r.user_id == user_id]
        return list(reversed(mine))[:limit]


class InMemoryUserRepository(IUserRepository):
    def __init__(self):
        self.users: Dict[str, User] = {}

    async def create_user(self, email: str, password_hash: str, name: str) -> User:
        user = User(email=email, password_hash=password_hash, name=name)
        self.users[user.id] = user
        return user

    async def get_user_by_email(self, email: str) -> User | None:
        return next((u for u in self.users.values() if u.email == email), None)

    async def get_user_by_id(self, user_id: str) -> User | None:
        return self.users.get(user_id)


@pytest.fixture
def providers():
    return fake_providers()


@pytest.fixture
def comparison_repo():
    return InMemoryComparisonRepository()


@pytest.fixture
def chat_repo():
    return InMemoryChatRepository()


@pytest.fixture
def export_repo():
    return InMemoryExportRepository()


@pytest.fixture
def llm_service(providers, comparison_repo):
    resolver = CredentialResolver(make_settings(OPENAI_API_KEY="sk-live-test", COHERE_API_KEY="co-test"))
    router = ModelRouter(providers)
    orchestrator = ComparisonOrchestrator(router, comparison_repo, max_concurrency=0)
    return LLMService(router, orchestrator, ModelCatalog(), resolver)


@pytest.fixture
def auth_service():
    logger = get_logger("tests")
    user_service = UserService(InMemoryUserRepository(), logger)
    return AuthService(user_service, TokenClient("test-secret", "test-refresh-secret"), logger)


@pytest.fixture
def chat_service(chat_repo):
    return ChatService(chat_repo)


@pytest.fixture
def app(llm_service, auth_service, chat_service, export_repo):
    """The service's routers and error handlers over in-memory collaborators."""
    application = FastAPI()
    register_exception_handlers(application)
    application.include_router(llm_router)
    application.include_router(chat_router)
    application.include_router(export_router)
    application.include_router(auth_router)
    application.state.llm_service = llm_service
    application.state.auth_service = auth_service
    application.state.chat_service = chat_service
    application.state.export_service = ExportService(chat_service, export_repo)
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    resp = client.post(
        "/auth/signup",
        json={"name": "Ada", "email": "ada@example.com", "password": "correct-horse"},
    )
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
