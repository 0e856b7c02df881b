"""
Pydantic schemas for runs.

Field aliases keep the wire format the web client already speaks
(avgHR, elevation, analyzed).
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RunResponse(BaseModel):
    """Run as returned to the client, with its analysis flag."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    strava_activity_id: str
    name: Optional[str] = None
    date: datetime
    distance: Optional[int] = None
    duration: Optional[int] = None
    pace: Optional[float] = None
    avg_heart_rate: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("avg_heart_rate", "avgHR"),
        serialization_alias="avgHR",
    )
    cadence: Optional[int] = None
    elevation_gain: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("elevation_gain", "elevation"),
        serialization_alias="elevation",
    )
    analyzed: bool = False


class RunMetrics(BaseModel):
    """
    Run data posted by the client for analysis or chat.

    Only id and strava_activity_id are required; the remaining metrics
    feed the coaching prompt as-is.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: int
    strava_activity_id: str
    name: Optional[str] = None
    distance: Optional[float] = None
    duration: Optional[int] = None
    pace: Optional[float] = None
    avg_heart_rate: Optional[float] = Field(default=None, alias="avgHR")
    cadence: Optional[float] = None
    elevation_gain: Optional[float] = Field(default=None, alias="elevation")

    @property
    def needs_cadence(self) -> bool:
        return not self.cadence


def run_to_response(run, analyzed: bool) -> RunResponse:
    """Build the client shape from a stored Run and its analysis flag."""
    response = RunResponse.model_validate(run)
    response.analyzed = analyzed
    return response
