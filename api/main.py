import logging
import sys
import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from api.shared.dtos import ErrorResponse
from api.shared.entities.registry import BaseEntity
from api.shared.exceptions import ChatAppException
from core.settings import SETTINGS
from di.container import ApplicationContainer as DependencyContainer

logger = logging.getLogger("chat")

UI_ORIGINS = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:8000",
    "http://localhost:8501",
]


def configure_logging() -> None:
    """Plain stdlib records to stdout; structlog events rendered on top of them."""
    logging.basicConfig(
        level=SETTINGS.APP.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    renderer = (
        structlog.processors.JSONRenderer()
        if SETTINGS.APP.JSON_LOGS
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class CustomFastAPI(FastAPI):
    container: DependencyContainer


@asynccontextmanager
async def lifespan(_app: CustomFastAPI):
    infrastructure = _app.container.infrastructure
    started = time.time()

    try:
        db_resource = infrastructure.database()
        await db_resource.init()
        await db_resource.create_schema(BaseEntity)
        logger.info(f"✅ Schema ready in {time.time() - started:.2f}s")

        await infrastructure.completion_client().init()
        logger.info(f"✅ Chat API started in {time.time() - started:.2f}s")
    except Exception as e:
        logger.exception(f"❌ Failed to start chat API: {e}")
        raise

    yield

    try:
        await infrastructure.completion_client().shutdown()
        await infrastructure.database().shutdown()
        logger.info("Chat API stopped")
    except Exception:
        logger.exception("Error during shutdown")


def _error(status_code: int, message: str, error_code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, error_code=error_code).model_dump(),
    )


def register_exception_handlers(_app: FastAPI) -> None:
    """Render every failure as ``{"error", "error_code"}``."""

    @_app.exception_handler(ChatAppException)
    async def chat_app_exception_handler(request: Request, exc: ChatAppException):
        log = logger.error if exc.status_code >= 500 else logger.info
        log(f"{exc.error_code} on {request.url.path}: {exc.message}")
        return _error(exc.status_code, exc.message, exc.error_code)

    @_app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail), "HTTP_ERROR")

    @_app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error(400, str(exc), "VALIDATION_ERROR")

    @_app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.url.path}")
        return _error(500, str(exc) or "Unknown error", "INTERNAL_ERROR")


def create_fastapi_app() -> CustomFastAPI:
    _app = CustomFastAPI(
        title="Spaces Chat API",
        description="Chat conversations persisted per space and answered by an LLM",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Wiring also covers the modules listed in the container's wiring_config
    _app.container = DependencyContainer()
    _app.container.wire(modules=[sys.modules[__name__]])
    _app.container.init_resources()

    _app.add_middleware(
        CORSMiddleware,
        allow_origins=UI_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from api.features.chat.router import router as chat_router
    from api.features.conversation.router import router as conversation_router

    _app.include_router(
        conversation_router, prefix="/api/v1/conversations", tags=["Conversations"]
    )
    _app.include_router(chat_router, prefix="/api/v1/chat", tags=["Chat"])
    register_exception_handlers(_app)

    @_app.get("/")
    async def root():
        return {"message": "Spaces Chat API is running", "status": "ok"}

    @_app.get("/health")
    async def health():
        return {"status": "ok"}

    @_app.get("/ready")
    async def ready():
        return {"status": "ok"}

    return _app


app = create_fastapi_app()
