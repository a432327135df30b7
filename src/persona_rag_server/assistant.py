"""
Persona Assistant Pipeline

One question, end to end:

    retrieve -> compose -> generate -> record history

Each step is sequential and only suspends on external I/O. Retrieval
degradation is logged and does not stop the request; embedding and
generation failures propagate to the caller, and nothing is written to the
history store for a failed exchange.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .api.models import PromptMessage
from .llm.client import LLMClient
from .profiles.loader import ProfileRegistry
from .prompts import compose, HISTORY_WINDOW
from .rag.retriever import RetrievalResult, Retriever
from .sessions.store import ConversationHistoryStore

logger = logging.getLogger("persona.assistant")


@dataclass
class AskResult:
    answer: str
    messages: List[PromptMessage] = field(default_factory=list)
    retrieval: RetrievalResult = field(default_factory=RetrievalResult)


class PersonaAssistant:
    def __init__(
        self,
        retriever: Retriever,
        llm: LLMClient,
        profiles: ProfileRegistry,
        history: ConversationHistoryStore,
        temperature: float = 0.5,
        history_window: int = HISTORY_WINDOW,
    ) -> None:
        self.retriever = retriever
        self.llm = llm
        self.profiles = profiles
        self.history = history
        self.temperature = temperature
        self.history_window = history_window

    async def ask(
        self,
        question: str,
        speaker: Optional[str] = None,
        history: Optional[Any] = None,
    ) -> AskResult:
        """
        Answer ``question`` in the persona's voice.

        Parameters
        ----------
        question : str
            The live user question.
        speaker : Optional[str]
            Team member key; unknown or missing keys resolve to ``general``.
        history : Optional[Any]
            Caller-supplied turns. When None, the stored history for the
            speaker is used instead.

        Raises
        ------
        EmbeddingFailure, GenerationFailure
        """
        retrieval = await self.retriever.retrieve(question)
        for warning in retrieval.warnings:
            logger.warning(
                "Retrieval degraded (%s), proceeding without context: %s",
                warning.stage,
                warning.message,
            )

        snapshot = self.profiles.snapshot
        if history is None:
            history = self.history.recent_for(speaker, self.history_window)

        messages = compose(
            snapshot.persona,
            snapshot.member(speaker),
            retrieval.context,
            history,
            question,
            fallback_name=self.profiles.persona_name,
            history_window=self.history_window,
        )

        answer = await self.llm.generate(
            [m.model_dump() for m in messages],
            temperature=self.temperature,
        )

        self.history.append_exchange(speaker, question, answer)
        return AskResult(answer=answer, messages=messages, retrieval=retrieval)
