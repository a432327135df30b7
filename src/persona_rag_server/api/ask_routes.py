"""
Ask Route

Answers one question in the persona's voice.

Workflow
--------
1. Validate the question (400 if missing or not a string).
2. Retrieve context, compose the prompt, generate the answer.
3. Record the exchange in the speaker's history.

Embedding and generation failures are rendered by the global pipeline error
handler with the status carried by the error.
"""

from fastapi import APIRouter, Depends
from typing import Annotated

from .dependencies import get_assistant
from .models import AskRequest, AskResponse
from ..assistant import PersonaAssistant
from ..core.errors import InvalidRequest

router = APIRouter(tags=["ask"])


@router.post("/ask", response_model=AskResponse)
async def ask(
    req: AskRequest,
    assistant: Annotated[PersonaAssistant, Depends(get_assistant)],
) -> AskResponse:
    if not req.question or not isinstance(req.question, str):
        raise InvalidRequest("Invalid payload. Expected { question: string }.")

    result = await assistant.ask(
        req.question,
        speaker=req.speaker,
        history=req.history,
    )
    return AskResponse(answer=result.answer)
