"""
Conversation History Store

In-memory, per-speaker conversation history consumed by prompt assembly and
updated after each answered question.

Design choices
--------------
- In-memory only (no persistence across process restarts).
- One append-only turn list per speaker key, with an optional cap on how
  many turns are retained.
- Thread-safe access using a re-entrant lock.
- Copy-on-read semantics (callers cannot mutate internal state).
- Appends for the same speaker from concurrent requests are not ordered
  relative to each other.
"""

from __future__ import annotations

from typing import Dict, List, Optional
from threading import RLock

from ..api.models import ConversationTurn

GENERAL_SPEAKER = "general"


def _speaker_key(speaker: Optional[str]) -> str:
    return speaker or GENERAL_SPEAKER


class ConversationHistoryStore:
    """
    In-memory store mapping speaker keys to ordered ConversationTurn lists.
    """

    def __init__(self, max_turns_per_speaker: Optional[int] = None) -> None:
        """
        Parameters
        ----------
        max_turns_per_speaker : Optional[int]
            If provided, only the most recent N turns are retained per
            speaker. If None, history is unbounded.
        """
        self._store: Dict[str, List[ConversationTurn]] = {}
        self._lock = RLock()
        self._max_turns_per_speaker = max_turns_per_speaker

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def get_history(self, speaker: Optional[str]) -> List[ConversationTurn]:
        """
        Return a copy of the full retained history for a speaker.
        """
        with self._lock:
            return list(self._store.get(_speaker_key(speaker), []))

    def recent_for(self, speaker: Optional[str], n: int = 6) -> List[ConversationTurn]:
        """
        Return at most the last ``n`` turns, oldest first.
        """
        if n <= 0:
            return []
        with self._lock:
            return list(self._store.get(_speaker_key(speaker), [])[-n:])

    def append(self, speaker: Optional[str], turn: ConversationTurn) -> None:
        """
        Append one turn to the speaker's history.
        """
        self.extend(speaker, [turn])

    def extend(self, speaker: Optional[str], turns: List[ConversationTurn]) -> None:
        """
        Append turns in order, creating the speaker's history if needed.
        """
        if not turns:
            return

        key = _speaker_key(speaker)
        with self._lock:
            history = self._store.setdefault(key, [])
            history.extend(turns)

            if (
                self._max_turns_per_speaker is not None
                and self._max_turns_per_speaker > 0
            ):
                excess = len(history) - self._max_turns_per_speaker
                if excess > 0:
                    self._store[key] = history[excess:]

    def append_exchange(self, speaker: Optional[str], question: str, answer: str) -> None:
        """
        Record a completed exchange: the user turn, then the assistant turn.
        """
        self.extend(
            speaker,
            [
                ConversationTurn(role="user", content=question),
                ConversationTurn(role="assistant", content=answer),
            ],
        )

    def clear(self, speaker: Optional[str]) -> None:
        with self._lock:
            self._store.pop(_speaker_key(speaker), None)

    # ------------------------------------------------------------------
    # Utility operations
    # ------------------------------------------------------------------

    def clear_all(self) -> None:
        """
        Remove all speakers and their histories.
        """
        with self._lock:
            self._store.clear()

    def has_speaker(self, speaker: Optional[str]) -> bool:
        with self._lock:
            return _speaker_key(speaker) in self._store

    def __len__(self) -> int:
        """
        Return the number of speakers with history.
        """
        with self._lock:
            return len(self._store)


# Global singleton used by the application.
history_store = ConversationHistoryStore(max_turns_per_speaker=200)
