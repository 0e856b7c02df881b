"""
Analysis gate.

At most one coaching analysis per run:
1. A stored analysis is returned as a cache hit and the model is not called
2. Missing cadence is backfilled from Strava when possible (best effort)
3. The model is called once
4. The result is stored with a conditional insert; if a concurrent request
   stored one first, that one is returned instead
"""

import logging
from dataclasses import dataclass

from app.features.runs.models import Run, RunAnalysis
from app.features.runs.repository import AnalysisRepository, RunRepository
from app.features.runs.schemas import RunMetrics
from app.features.strava.client import StravaClient
from app.features.strava.transform import step_cadence
from app.features.users.repository import UserProfileRepository
from app.shared.exceptions import PersistenceError
from .ai import CoachingModel

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOutcome:
    analysis: RunAnalysis
    from_cache: bool


class AnalysisGate:
    """
    Cache-or-generate arbiter for run analyses.

    Usage:
        gate = AnalysisGate(
            RunRepository(db), AnalysisRepository(db),
            UserProfileRepository(db), strava_client, coach,
        )
        outcome = await gate.analyze(user_id, metrics)
    """

    def __init__(
        self,
        runs: RunRepository,
        analyses: AnalysisRepository,
        profiles: UserProfileRepository,
        strava: StravaClient,
        coach: CoachingModel,
    ):
        self.runs = runs
        self.analyses = analyses
        self.profiles = profiles
        self.strava = strava
        self.coach = coach

    async def analyze(self, user_id: str, metrics: RunMetrics) -> AnalysisOutcome:
        """
        Return the run's analysis, generating it on first request.

        Raises:
            NotFoundError: Run does not belong to the user
            AIError: Model failed or returned malformed output
            PersistenceError: Store read/write failed
        """
        logger.info(f"Analyzing run {metrics.id} for user {user_id}")

        run = await self.runs.get_run(metrics.id, user_id)
        run_id = run.id

        existing = await self.analyses.get_for_run(run_id)
        if existing:
            logger.info(f"Returning cached analysis for run {run_id}")
            return AnalysisOutcome(existing, from_cache=True)

        if metrics.needs_cadence:
            metrics = await self._backfill_cadence(user_id, run, metrics)

        result = await self.coach.analyze_run(metrics)

        saved = await self.analyses.insert_if_absent(
            run_id=run_id,
            user_id=user_id,
            summary=result.summary,
            insights=[i.model_dump() for i in result.insights],
            recommendations=[r.model_dump() for r in result.recommendations],
        )
        if saved is None:
            # Lost the race to a concurrent request; return the stored one
            winner = await self.analyses.get_for_run(run_id)
            if winner is None:
                raise PersistenceError("Failed to save analysis", detail="Conflicting analysis vanished")
            logger.info(f"Analysis for run {run_id} was stored concurrently, returning it")
            return AnalysisOutcome(winner, from_cache=True)

        logger.info(f"Saved analysis for run {run_id}")
        return AnalysisOutcome(saved, from_cache=False)

    async def _backfill_cadence(self, user_id: str, run: Run, metrics: RunMetrics) -> RunMetrics:
        """Fetch cadence from Strava and store it. Failures leave metrics unchanged."""
        run_id = run.id
        logger.info(f"Fetching cadence from Strava for run {run_id}")
        try:
            profile = await self.profiles.get_profile(user_id)
            if profile.is_token_expired():
                logger.warning(f"Skipping cadence backfill for run {run_id}: token expired")
                return metrics

            activity = await self.strava.get_activity(profile.access_token, run.strava_activity_id)
            cadence = step_cadence(activity.get("average_cadence"))
            if not cadence:
                return metrics

            await self.runs.update_run(run, {"cadence": cadence})
            logger.info(f"Updated cadence for run {run_id}: {cadence} spm")
            return metrics.model_copy(update={"cadence": cadence})
        except Exception as e:
            logger.warning(f"Failed to fetch cadence for run {run_id}: {e}")
            return metrics
