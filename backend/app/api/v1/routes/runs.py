"""
Run analysis endpoints.

- POST /runs/analyze - Coaching analysis for a run (cached after first call)
"""

import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_analysis_gate, get_current_user_id
from app.features.coaching import AnalysisGate, AnalysisResponse, AnalyzeRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/runs", tags=["Runs"])


@router.post("/analyze", response_model=AnalysisResponse, response_model_by_alias=True)
async def analyze_run(
    request: AnalyzeRequest,
    user_id: str = Depends(get_current_user_id),
    gate: AnalysisGate = Depends(get_analysis_gate),
):
    """Analyze a run with AI, returning the stored analysis when one exists."""
    outcome = await gate.analyze(user_id, request.run_data)
    analysis = outcome.analysis

    return AnalysisResponse(
        id=analysis.id,
        summary=analysis.summary,
        insights=analysis.insights or [],
        recommendations=analysis.recommendations or [],
        from_cache=outcome.from_cache,
    )
