"""
Blog API — entry point.

Startup sequence:
  1. Configure OTel tracing (→ Jaeger via OTLP)
  2. Create tables if not present
  3. Initialise the S3 client (skipped when storage is not configured)
  4. Start the webhook HTTP client
  5. Expose Prometheus /metrics endpoint

Errors are returned as plain-text bodies: every HTTPException detail and
every request-validation failure is rendered as text/plain.
"""
import logging

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from prometheus_client import make_asgi_app
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.database import init_db
from app.telemetry import setup_tracing, instrument_app
from app.clients.storage_client import init_storage
from app.clients.webhook_client import webhook_client
from app.routers import comments, feeds, friends, storage, users

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

# Set up tracing before the app is created so all imports are instrumented
setup_tracing()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown of all external connections."""
    logger.info("Starting Blog API (env=%s)", settings.environment)

    await init_db()
    init_storage()                  # sync — boto3 is not async
    await webhook_client.start()

    logger.info("All services connected. API ready.")
    yield

    logger.info("Shutting down...")
    await webhook_client.stop()


app = FastAPI(
    title="Blog API",
    description="Personal blog: posts, comments, friend links and uploads.",
    version="1.0.0",
    lifespan=lifespan,
)


# ── Plain-text error contract ──────────────────────────────────────────────
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid input") if errors else "Invalid input"
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return PlainTextResponse(message, status_code=400)


# ── Routers ────────────────────────────────────────────────────────────────
app.include_router(feeds.router, prefix="/feed", tags=["Feeds"])
app.include_router(comments.router, tags=["Comments"])
app.include_router(friends.router, prefix="/friend", tags=["Friends"])
app.include_router(storage.router, prefix="/storage", tags=["Storage"])
app.include_router(users.router, prefix="/user", tags=["Users"])

# ── Prometheus metrics endpoint ────────────────────────────────────────────
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── OTel FastAPI instrumentation ──────────────────────────────────────────
instrument_app(app)


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok", "service": settings.service_name}
