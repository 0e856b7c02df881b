"""
AI coaching module.

Usage:
    from app.features.coaching import AnalysisGate, ConversationService, OpenAICoach

Components:
- OpenAICoach: coaching model capability (analysis + chat)
- AnalysisGate: one analysis per run, cache hit or generate
- ConversationService: chat turns appended per (user, run)
"""

from .ai import CoachingModel, OpenAICoach
from .gate import AnalysisGate, AnalysisOutcome
from .conversation import ConversationService
from .schemas import (
    AnalysisResult,
    AnalysisResponse,
    AnalyzeRequest,
    ChatRequest,
    ChatResponse,
    Insight,
    Recommendation,
)

__all__ = [
    "CoachingModel",
    "OpenAICoach",
    "AnalysisGate",
    "AnalysisOutcome",
    "ConversationService",
    "AnalysisResult",
    "AnalysisResponse",
    "AnalyzeRequest",
    "ChatRequest",
    "ChatResponse",
    "Insight",
    "Recommendation",
]
