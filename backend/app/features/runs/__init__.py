"""
Run store module.

Usage:
    from app.features.runs import Run, RunRepository

Models:
- Run: Strava running activity mapped locally
- RunAnalysis: Coaching analysis (at most one per run)
- Conversation: Chat history about a run

Repositories:
- RunRepository: upsert, list with analysis flag, partial update, delete
- AnalysisRepository: lookup and conditional insert
- ConversationRepository: append-only message history
"""

from .models import Run, RunAnalysis, Conversation
from .schemas import RunResponse, RunMetrics, run_to_response
from .repository import RunRepository, AnalysisRepository, ConversationRepository

__all__ = [
    # Models
    "Run",
    "RunAnalysis",
    "Conversation",
    # Schemas
    "RunResponse",
    "RunMetrics",
    "run_to_response",
    # Repositories
    "RunRepository",
    "AnalysisRepository",
    "ConversationRepository",
]
