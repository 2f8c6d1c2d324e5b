"""
ASGI entry point: builds the FastAPI app for the messaging server.

Run with ``uvicorn app.main:app``.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from app.api.v1 import auth, conversations, messages, users
from app.config import settings
from app.core.database import AsyncSessionLocal, engine
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.core.rate_limit import limiter

configure_logging()
logger = logging.getLogger(__name__)

# (router, prefix, OpenAPI tag)
ROUTERS = (
    (auth.router, "/v1/auth", "Authentication"),
    (conversations.router, "/v1/conversations", "Conversations"),
    (messages.router, "/v1", "Messages"),
    (users.router, "/v1/users", "Users"),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and release pooled database connections on shutdown."""
    logger.info("Messaging server starting (environment=%s)", settings.environment)
    yield
    logger.info("Messaging server shutting down")
    await engine.dispose()


app = FastAPI(
    title="Social DM Server",
    description="Direct messages, blocking and messaging privacy for a social app",
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# slowapi reads the limiter from app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router, prefix, tag in ROUTERS:
    app.include_router(router, prefix=prefix, tags=[tag])


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe; does not touch the database."""
    return {"status": "healthy", "environment": settings.environment}


@app.get("/health/ready", tags=["Health"])
async def readiness_check():
    """Readiness probe: 503 until the database answers ``SELECT 1``."""
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Readiness check failed: database unreachable")
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "checks": {"database": False}},
        )

    return {"status": "ready", "checks": {"database": True}}
