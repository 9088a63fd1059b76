from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from datetime import datetime
from typing import Optional
import logging

# Load environment variables as early as possible
load_dotenv()

from .config import Settings, settings as default_settings
from .database import build_engine, create_db_and_tables
from .exceptions import http_exception_handler, validation_exception_handler
from .middleware import (
    ErrorHandlingMiddleware,
    LoggingMiddleware,
    RequestSizeLimitMiddleware,
    SecurityMiddleware,
)
from .application.ports.image_repo import ImageRepository
from .application.services.assistant_service import AssistantService
from .infrastructure.persistence.memory.image_repository_memory import InMemoryImageRepository
from .infrastructure.persistence.sqlalchemy.repositories.image_repository_sql import SqlImageRepository
from .routers import assistant_router, images_router
from .schemas.common.common import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO),
    format=default_settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def build_image_repository(app_settings: Settings) -> ImageRepository:
    """Pick the record store once, at process start."""
    if app_settings.uses_memory_store:
        logger.info("Using in-memory image store")
        return InMemoryImageRepository()
    logger.info("Using database image store")
    return SqlImageRepository(build_engine(app_settings.DATABASE_URL, echo=app_settings.DEBUG))


def build_assistant(app_settings: Settings) -> AssistantService:
    text_provider = None
    image_provider = None
    if app_settings.GEMINI_API_KEY:
        try:
            from .infrastructure.ai.gemini_provider import GeminiProvider
            text_provider = GeminiProvider(app_settings.GEMINI_API_KEY, app_settings.GEMINI_MODEL)
        except Exception as e:
            logger.error(f"Error initializing Gemini provider: {e}")
    else:
        logger.warning("GEMINI_API_KEY not configured; assistant will use fallback replies")
    if app_settings.OPENAI_API_KEY:
        try:
            from .infrastructure.ai.openai_image_provider import OpenAIImageProvider
            image_provider = OpenAIImageProvider(app_settings.OPENAI_API_KEY, app_settings.OPENAI_IMAGE_MODEL)
        except Exception as e:
            logger.error(f"Error initializing OpenAI image provider: {e}")
    return AssistantService(text_provider=text_provider, image_provider=image_provider)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {app.state.settings.APP_NAME}...")
    app.state.db_init_ok = True
    repo = app.state.image_repo
    if isinstance(repo, SqlImageRepository):
        try:
            create_db_and_tables(repo.engine)
            logger.info("Database initialized successfully")
        except Exception:
            # Do not crash the app; report via health endpoint
            app.state.db_init_ok = False
            logger.exception("Database initialization failed")
    yield
    # Shutdown
    logger.info(f"Shutting down {app.state.settings.APP_NAME}...")


def create_app(app_settings: Optional[Settings] = None, image_repo: Optional[ImageRepository] = None,
               assistant: Optional[AssistantService] = None) -> FastAPI:
    app_settings = app_settings or default_settings
    app = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        debug=app_settings.DEBUG,
        lifespan=lifespan,
        docs_url=("/docs" if app_settings.DOCS_ENABLED else None),
        redoc_url=("/redoc" if app_settings.DOCS_ENABLED else None),
        openapi_url=("/openapi.json" if app_settings.DOCS_ENABLED else None)
    )
    app.state.settings = app_settings
    app.state.db_init_ok = True
    app.state.image_repo = image_repo if image_repo is not None else build_image_repository(app_settings)
    app.state.assistant = assistant if assistant is not None else build_assistant(app_settings)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_middleware(ErrorHandlingMiddleware, debug=app_settings.DEBUG)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=app_settings.MAX_REQUEST_SIZE)
    app.add_middleware(GZipMiddleware, minimum_size=app_settings.GZIP_MIN_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(images_router.router)
    app.include_router(assistant_router.router)

    @app.get("/health", response_model=HealthResponse)
    def health_check():
        return HealthResponse(
            status="healthy" if app.state.db_init_ok else "degraded",
            service=app_settings.APP_NAME,
            version=app_settings.APP_VERSION,
            storage="memory" if isinstance(app.state.image_repo, InMemoryImageRepository) else "database",
            assistant_available=app.state.assistant.available,
            timestamp=datetime.utcnow().isoformat(),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "gallery.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        workers=1,
        log_level=default_settings.LOG_LEVEL.lower()
    )
