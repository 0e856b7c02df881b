"""
Run Coach Relay API

FastAPI application linking Strava accounts, syncing runs and serving
AI coaching feedback.
"""

from contextlib import asynccontextmanager
import logging
import sys

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import AsyncOpenAI

from app.config import settings
from app.db.session import init_db, AsyncSessionLocal
from app.api.v1.router import api_router
from app.api.v1.routes import webhook
from app.features.coaching import OpenAICoach
from app.features.strava import StravaClient, StravaOAuth
from app.features.strava.sync import WebhookDispatcher
from app.features.users import SupabaseIdentityVerifier
from app.shared.exceptions import RelayError


# === Logging Setup ===
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)
logger = logging.getLogger(__name__)


# === Collaborators ===
def _build_collaborators(app: FastAPI) -> None:
    """Construct the Strava client, coach, verifier and webhook dispatcher."""
    strava_client = StravaClient(
        StravaOAuth(settings.strava_client_id, settings.strava_client_secret),
        per_page=settings.strava_activities_per_page,
    )
    app.state.strava_client = strava_client
    app.state.coach = OpenAICoach(
        AsyncOpenAI(api_key=settings.openai_api_key),
        model=settings.openai_model,
        temperature=settings.openai_temperature,
        chat_max_tokens=settings.openai_chat_max_tokens,
    )
    app.state.identity_verifier = SupabaseIdentityVerifier(
        settings.identity_url,
        settings.identity_api_key,
    )
    app.state.webhook_dispatcher = WebhookDispatcher(AsyncSessionLocal, strava_client)


# === Lifespan ===
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    logger.info("Starting Run Coach Relay API...")
    missing = settings.missing_required
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    await init_db()
    logger.info("Database initialized")

    _build_collaborators(app)

    yield

    # Shutdown
    await app.state.webhook_dispatcher.drain()
    logger.info("Shutting down...")


# === App Creation ===
app = FastAPI(
    title="Run Coach Relay API",
    description="Strava run sync with AI coaching feedback",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# === Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# === Error Handling ===
@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    """Render relay errors as {"error": message}; detail only in debug."""
    if settings.debug:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message} ({exc.detail})")
    else:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")

    content = {"error": exc.message}
    if settings.debug and exc.detail is not None:
        content["details"] = exc.detail
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Anything else is a 500 with the same body shape."""
    logger.exception(f"{request.method} {request.url.path} -> unhandled {type(exc).__name__}: {exc}")

    content = {"error": "Internal server error"}
    if settings.debug:
        content["details"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# === Routes ===
app.include_router(api_router, prefix="/api/v1")
app.include_router(webhook.router)


# === Health Check ===
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}
