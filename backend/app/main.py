import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings

# ─── Logging setup (console, plus file when LOG_DIR is writable) ───
_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

_handlers: list[logging.Handler] = [logging.StreamHandler()]
if settings.log_dir:
    _log_dir = Path(settings.log_dir)
    _log_dir.mkdir(parents=True, exist_ok=True)
    _handlers.append(
        RotatingFileHandler(
            _log_dir / "shop-search-context.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
    )

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=_handlers,
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from app.routers import context, enrich

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from app.database import async_session_factory, engine
    from app.services.cache_service import CacheService
    from app.services.llm_client import LLMClient
    from app.services.product_store import ProductStore

    app.state.llm_client = LLMClient.from_settings(settings)
    app.state.product_store = ProductStore(async_session_factory)
    app.state.cache = CacheService(settings.redis_url, enabled=settings.context_cache_enabled)

    if not settings.llm_configured:
        logger.warning("No completion API key configured — context extraction will return basic results")
    logger.info("Clients initialised")

    yield

    # Shutdown
    await app.state.cache.close()
    await app.state.llm_client.close()
    await engine.dispose()
    logger.info("Clients closed")


app = FastAPI(
    title="Shop Search Context",
    description="Search-context extraction and catalog keyword enrichment",
    version="0.1.0",
    lifespan=lifespan,
)


class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose accepted preflights answer 200 with an empty body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=200, headers=headers)


app.add_middleware(
    EmptyPreflightCORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    message = message.removeprefix("Value error, ")
    logger.info(f"Rejected request to {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"error": message})


app.include_router(context.router, prefix="/api", tags=["context"])
app.include_router(enrich.router, prefix="/api", tags=["enrich"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": settings.service_name}
