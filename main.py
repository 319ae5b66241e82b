from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from starlette.middleware.base import BaseHTTPMiddleware
import httpx
import uvicorn
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logger import get_logger
from app.llm.api.route import llm_router
from app.llm.service.catalog import ModelCatalog
from app.llm.service.comparison_service import ComparisonOrchestrator
from app.llm.service.credentials import CredentialResolver
from app.llm.service.llm_service import LLMService
from app.llm.service.router_service import ModelRouter, default_providers
from app.llm.repository.comparison_repository import ComparisonRepository
from app.chat.api.route import chat_router
from app.chat.repository.chat_repository import ChatRepository
from app.chat.service.service import ChatService
from app.export.api.route import export_router
from app.export.repository.export_repository import ExportRepository
from app.export.service.export_service import ExportService
from app.auth.api.routes import auth_router
from app.auth.service.auth_service import AuthService
from app.user.repository.user_repository import UserRepository
from app.user.service.user_service import UserService
from pkg.auth_token_client.client import TokenClient
from pkg.db_util.postgres_conn import PostgresConnection
from pkg.db_util.types import PostgresConfig
from dotenv import load_dotenv
import asyncio
import sys

# Load .env so settings pick up values from your .env file
load_dotenv()

logger = get_logger("multi-ai-chat")


def build_llm_service(http_client: httpx.AsyncClient, comparison_repo=None) -> LLMService:
    """Wire resolver, adapters, router, orchestrator and catalog."""
    resolver = CredentialResolver(settings)
    router = ModelRouter(default_providers(resolver, http_client, settings.REQUEST_TIMEOUT_MS))
    orchestrator = ComparisonOrchestrator(router, comparison_repo, settings.COMPARE_MAX_CONCURRENCY)
    return LLMService(router, orchestrator, ModelCatalog(), resolver)


async def connect_postgres() -> PostgresConnection:
    postgres_config = PostgresConfig(
        host=settings.POSTGRES_HOST.strip(),
        port=settings.POSTGRES_PORT,
        username=settings.POSTGRES_USER.strip(),
        password=settings.POSTGRES_PASSWORD.strip(),
        database=settings.POSTGRES_DB.strip(),
        pool_timeout=30,
    )
    postgres_conn = PostgresConnection(postgres_config, logger)
    logger.info("Initializing database engine with retry logic...")
    try:
        await asyncio.wait_for(postgres_conn.get_engine(max_retries=5, initial_delay=2.0), timeout=60.0)
    except asyncio.TimeoutError:
        logger.error("Database connection timed out after 60 seconds")
        raise ConnectionError("Database connection timeout - check network/credentials")
    logger.info("✓ Postgres engine initialized and cached during startup.")
    # Tables are created by scripts/create_tables.py
    logger.info("Tables needed: users, chats, chat_messages, comparisons, exports")
    return postgres_conn


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager - ensures startup completes before accepting requests"""
    logger.info(f"{settings.APP_NAME} starting up...")
    logger.info(f"Python: {sys.version}")

    # One pooled client for every upstream call; per-request timeout from settings.
    http_client = httpx.AsyncClient(timeout=settings.REQUEST_TIMEOUT_MS / 1000)
    app.state.http_client = http_client
    app.state.postgres_conn = None
    app.state.startup_error = None

    missing_vars = [
        name for name in ("POSTGRES_HOST", "POSTGRES_USER", "POSTGRES_PASSWORD")
        if not str(getattr(settings, name)).strip()
    ]
    if missing_vars:
        error_msg = f"Missing database environment variables: {', '.join(missing_vars)}"
        logger.warning(error_msg)
        logger.warning("Starting without persistence: /chat and /models only")
        app.state.startup_error = error_msg
        app.state.llm_service = build_llm_service(http_client)
    else:
        try:
            postgres_conn = await connect_postgres()
            token_client = TokenClient(settings.JWT_SUPER_SECRET, settings.JWT_REFRESH_SECRET)

            user_repo = UserRepository(postgres_conn.get_session, logger)
            user_service = UserService(user_repo, logger)
            chat_service = ChatService(ChatRepository(postgres_conn))

            # Expose on app.state for dependencies
            app.state.postgres_conn = postgres_conn
            app.state.user_service = user_service
            app.state.auth_service = AuthService(user_service, token_client, logger)
            app.state.chat_service = chat_service
            app.state.export_service = ExportService(chat_service, ExportRepository(postgres_conn))
            app.state.llm_service = build_llm_service(http_client, ComparisonRepository(postgres_conn))
        except Exception as e:
            logger.error(f"✗ Database wiring failed: {e}", exc_info=True)
            logger.error("Application will start in degraded mode - check logs above")
            app.state.startup_error = str(e)
            app.state.llm_service = build_llm_service(http_client)

    app.state.logger = logger
    app.state.startup_complete = True
    logger.info(f"✓ Startup complete | router={app.state.llm_service.router}")

    yield

    logger.info(f"{settings.APP_NAME} shutting down...")
    await http_client.aclose()
    if app.state.postgres_conn is not None:
        await app.state.postgres_conn.close_engine()


app = FastAPI(
    title=settings.APP_NAME,
    description="Multi-provider LLM chat and model comparison service",
    version="1.0.0",
    lifespan=lifespan
)


# Startup Check Middleware - ensures no requests processed before startup completes
class StartupCheckMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Allow health checks during startup
        if request.url.path in ["/health", "/", "/docs", "/openapi.json"]:
            return await call_next(request)

        if not getattr(request.app.state, "startup_complete", False):
            return JSONResponse(
                status_code=503,
                content={
                    "status": False,
                    "message": "Service is starting up. Please retry in a few seconds."
                }
            )

        return await call_next(request)


# Add middleware in correct order
app.add_middleware(StartupCheckMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # adjust in prod
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(llm_router)
app.include_router(chat_router)
app.include_router(export_router)
app.include_router(auth_router)


# Health Check Endpoint
@app.get("/health")
async def health():
    """Service status, including which providers have credentials."""
    if not getattr(app.state, "startup_complete", False):
        return JSONResponse(
            status_code=200,  # Return 200 for health checks during startup
            content={
                "status": "starting",
                "service": "multi-ai-chat",
                "message": "Application is still starting up...",
                "startup_complete": False
            }
        )

    llm_service = app.state.llm_service
    checks = {
        "database": "✓ connected" if app.state.postgres_conn else "✗ not_initialized",
        "auth_service": "✓ ready" if getattr(app.state, "auth_service", None) else "✗ not_ready",
        "providers": {
            provider.name: "enabled" if provider.is_enabled() else "disabled"
            for provider in llm_service.router.providers.values()
        },
    }
    return {
        "status": "ok" if app.state.postgres_conn else "degraded",
        "service": "multi-ai-chat",
        "message": app.state.startup_error,
        "checks": checks,
        "startup_complete": True
    }


@app.get("/")
async def root():
    """Root endpoint - simple check that app is running"""
    return {
        "service": "multi-ai-chat",
        "version": "1.0.0",
        "status": "running",
        "health_check": "/health"
    }


if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
