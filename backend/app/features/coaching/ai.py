"""
Coaching model capability.

Given run metrics, return structured coaching feedback or a chat answer.
One attempt per call: failures and malformed output raise AIError and
are never retried or repaired.
"""

import logging
from typing import Optional, Protocol

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from app.features.runs.schemas import RunMetrics
from app.shared.exceptions import AIError
from .prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    CHAT_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_chat_prompt,
)
from .schemas import AnalysisResult

logger = logging.getLogger(__name__)


class CoachingModel(Protocol):
    async def analyze_run(self, run: RunMetrics) -> AnalysisResult:
        ...

    async def chat(self, question: str, run: RunMetrics) -> str:
        ...


class OpenAICoach:
    """
    OpenAI chat-completions backed coach.

    Usage:
        coach = OpenAICoach(AsyncOpenAI(api_key=settings.openai_api_key), model="gpt-4")
        result = await coach.analyze_run(metrics)
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-4",
        temperature: float = 0.7,
        chat_max_tokens: int = 300,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.chat_max_tokens = chat_max_tokens

    async def _complete(
        self,
        system: str,
        prompt: str,
        max_tokens: Optional[int] = None,
    ) -> str:
        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
        }
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        try:
            response = await self.client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise AIError("Failed to generate coaching response", detail=str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise AIError("Failed to generate coaching response", detail="Empty completion")
        return content

    async def analyze_run(self, run: RunMetrics) -> AnalysisResult:
        """
        Generate a structured analysis.

        Raises:
            AIError: Request failed or content is not {summary, insights, recommendations}
        """
        content = await self._complete(ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt(run))
        try:
            return AnalysisResult.model_validate_json(content)
        except ValidationError as e:
            logger.error(f"OpenAI analysis for run {run.id} is not valid JSON: {e}")
            raise AIError("Failed to analyze run", detail=str(e)) from e

    async def chat(self, question: str, run: RunMetrics) -> str:
        """
        Answer a question about a run.

        Raises:
            AIError: Request failed
        """
        return await self._complete(
            CHAT_SYSTEM_PROMPT,
            build_chat_prompt(question, run),
            max_tokens=self.chat_max_tokens,
        )
