# Load environment variables FIRST, before any module imports that need them
from dotenv import load_dotenv
load_dotenv()

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from . import config
from . import db
from .logging_config import setup_logging
from .routes import limiter, notifications_router, orders_router, voice_router
from .services.notifications import ConnectionRegistry

# Configure logging at module load time
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema changes go through Alembic; this only creates missing tables
    db.init_db()
    logger.info("Voice order service started (NLU backend: %s)", config.NLU_BACKEND)
    yield
    logger.info("Voice order service stopping with %d open notification sockets", len(app.state.connections))


app = FastAPI(
    title="Voice Order API",
    description="Multilingual voice ordering with offline sync",
    version="1.0.0",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Health", "description": "Health check endpoints"},
        {"name": "Orders", "description": "Voice order creation and management"},
        {"name": "Voice", "description": "Dialogue-only voice command processing"},
        {"name": "Notifications", "description": "Order notifications"},
    ],
)


# ---------- Request ID Middleware ----------
# Adds a unique request ID to each request for debugging and log correlation


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds a unique request ID to each request.
    The ID is available in request.state.request_id and returned in X-Request-ID header.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(RequestIDMiddleware)

# Add rate limit exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# One registry per process; notification sockets register here
app.state.connections = ConnectionRegistry()

# CORS configuration
# In production, set CORS_ORIGINS environment variable to restrict allowed origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Health ----------


@app.get("/health", tags=["Health"])
def health() -> Dict[str, str]:
    """Health check endpoint. Returns ok if the service is running."""
    return {"status": "ok"}


# ---------- API v1 ----------

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(orders_router)
api_v1_router.include_router(voice_router)
api_v1_router.include_router(notifications_router)

app.include_router(api_v1_router)
