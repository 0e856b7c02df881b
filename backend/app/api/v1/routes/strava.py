"""
Strava Routes

Endpoints for Strava integration:
- POST /strava/connect     - Exchange authorization code and store tokens
- GET  /strava/activities  - Full resync, returns all stored runs
"""

import logging

from fastapi import APIRouter, Depends

from app.api.deps import (
    get_current_user_id,
    get_profile_repository,
    get_strava_client,
    get_sync_service,
)
from app.features.runs import RunResponse
from app.features.strava import (
    AthleteSummary,
    ConnectRequest,
    ConnectResponse,
    StravaClient,
)
from app.features.strava.sync import StravaSyncService
from app.features.users import UserProfileRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/strava", tags=["Strava"])


@router.post("/connect", response_model=ConnectResponse)
async def connect_strava(
    request: ConnectRequest,
    user_id: str = Depends(get_current_user_id),
    strava: StravaClient = Depends(get_strava_client),
    profiles: UserProfileRepository = Depends(get_profile_repository),
):
    """
    Connect Strava account.

    Exchanges the authorization code and stores the tokens.
    """
    logger.info(f"Connecting Strava for user {user_id}")

    tokens = await strava.exchange_code(request.code)
    await profiles.save_connection(user_id, tokens)

    logger.info(f"Strava connected for athlete {tokens['athlete']['id']}")
    return ConnectResponse(athlete=AthleteSummary.from_token_response(tokens["athlete"]))


@router.get(
    "/activities",
    response_model=list[RunResponse],
    response_model_by_alias=True,
)
async def get_activities(
    user_id: str = Depends(get_current_user_id),
    service: StravaSyncService = Depends(get_sync_service),
):
    """
    Sync activities from Strava and return stored runs.

    Returns 401 when the stored token has expired (reconnect required).
    """
    runs = await service.sync_user_runs(user_id)
    logger.info(f"Retrieved {len(runs)} runs for user {user_id}")
    return runs
