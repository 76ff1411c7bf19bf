import os
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from codenotes.config import Config, logger
from codenotes.data.repositories import init_db, redis_client
from codenotes.errors import register_exception_handlers
from codenotes.presentation.middleware.rate_limit import RateLimitMiddleware
from codenotes.presentation.routes import (
    maintenance_router,
    problem_router,
    topic_router,
    user_router,
)

API_VERSION = "v1"

request_logger = logger.getChild("request")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with a generated id, its status and duration."""

    async def dispatch(self, request: Request, call_next):
        request_id = uuid.uuid4().hex
        request.state.request_id = request_id
        label = f"{request.method} {request.url.path} [{request_id}]"
        client_host = request.client.host if request.client else "unknown"
        request_logger.info(f"{label} from {client_host}")

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            request_logger.error(f"{label} failed after {time.perf_counter() - started:.4f}s: {e}")
            raise
        request_logger.info(
            f"{label} -> {response.status_code} in {time.perf_counter() - started:.4f}s"
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    if os.environ.get("TESTING") == "True":
        logger.info("TESTING set, tables are managed by the test suite")
    else:
        try:
            await init_db()
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise
        logger.info(f"Database ready at {Config.DATABASE_URL}")
    yield
    await redis_client.close()
    logger.info("Server stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="CodeNotes API",
        description="Organize code snippets into topics and track favorite, saved and solved problems",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    if Config.RATE_LIMIT_ENABLED:
        app.add_middleware(
            RateLimitMiddleware,
            limit=Config.RATE_LIMIT_REQUESTS,
            window=Config.RATE_LIMIT_WINDOW,
        )

    register_exception_handlers(app)

    prefix = f"/api/{API_VERSION}"
    for router in (problem_router, topic_router, user_router, maintenance_router):
        app.include_router(router, prefix=prefix)

    logger.info(
        f"Application ready - API {API_VERSION}, "
        f"rate limiting {'on' if Config.RATE_LIMIT_ENABLED else 'off'}"
    )
    return app


app = create_app()
