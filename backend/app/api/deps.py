"""
FastAPI dependencies.

Collaborators (Strava client, coaching model, identity verifier, webhook
dispatcher) are built once in the app lifespan and stored on app.state;
these functions hand them to routes and assemble per-request services
around the request's DB session.
"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_async_db
from app.features.coaching import AnalysisGate, CoachingModel, ConversationService
from app.features.runs import AnalysisRepository, ConversationRepository, RunRepository
from app.features.strava import StravaClient
from app.features.strava.sync import StravaSyncService, WebhookDispatcher
from app.features.users import IdentityVerifier, UserProfileRepository
from app.shared.exceptions import AuthenticationError


# =============================================================================
# Collaborators
# =============================================================================

def get_strava_client(request: Request) -> StravaClient:
    return request.app.state.strava_client


def get_coach(request: Request) -> CoachingModel:
    return request.app.state.coach


def get_identity_verifier(request: Request) -> IdentityVerifier:
    return request.app.state.identity_verifier


def get_webhook_dispatcher(request: Request) -> WebhookDispatcher:
    return request.app.state.webhook_dispatcher


# =============================================================================
# Auth
# =============================================================================

async def get_current_user_id(
    authorization: Optional[str] = Header(default=None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> str:
    """Resolve the bearer token to a user id or reject with 401."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise AuthenticationError()

    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise AuthenticationError()
    return await verifier.verify(token)


# =============================================================================
# Services
# =============================================================================

def get_profile_repository(db: AsyncSession = Depends(get_async_db)) -> UserProfileRepository:
    return UserProfileRepository(db)


def get_sync_service(
    db: AsyncSession = Depends(get_async_db),
    strava: StravaClient = Depends(get_strava_client),
) -> StravaSyncService:
    return StravaSyncService(UserProfileRepository(db), strava, RunRepository(db))


def get_analysis_gate(
    db: AsyncSession = Depends(get_async_db),
    strava: StravaClient = Depends(get_strava_client),
    coach: CoachingModel = Depends(get_coach),
) -> AnalysisGate:
    return AnalysisGate(
        RunRepository(db),
        AnalysisRepository(db),
        UserProfileRepository(db),
        strava,
        coach,
    )


def get_conversation_service(
    db: AsyncSession = Depends(get_async_db),
    coach: CoachingModel = Depends(get_coach),
) -> ConversationService:
    return ConversationService(RunRepository(db), ConversationRepository(db), coach)
