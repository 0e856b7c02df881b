"""
Chat endpoint.

- POST /chat - Ask the coach about a run; the exchange is kept per run
"""

import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_conversation_service, get_current_user_id
from app.features.coaching import ChatRequest, ChatResponse, ConversationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
):
    answer = await service.chat(user_id, request.question, request.run_data)
    return ChatResponse(answer=answer)
