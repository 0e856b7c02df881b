"""
Pydantic schemas for Strava connect and webhook payloads.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ConnectRequest(BaseModel):
    code: str = Field(..., min_length=1, description="Authorization code from Strava redirect")


class AthleteSummary(BaseModel):
    id: int
    username: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    profile: Optional[str] = None

    @classmethod
    def from_token_response(cls, athlete: dict) -> "AthleteSummary":
        return cls(
            id=athlete["id"],
            username=athlete.get("username"),
            firstname=athlete.get("firstname"),
            lastname=athlete.get("lastname"),
            profile=athlete.get("profile_medium"),
        )


class ConnectResponse(BaseModel):
    success: bool = True
    athlete: AthleteSummary


class WebhookEvent(BaseModel):
    """
    Strava push subscription event.

    https://developers.strava.com/docs/webhooks/
    """

    model_config = ConfigDict(extra="ignore")

    aspect_type: str
    object_type: str
    object_id: int
    owner_id: int
    subscription_id: Optional[int] = None
    event_time: Optional[int] = None
    updates: Optional[dict] = None
