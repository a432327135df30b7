"""
API Models

Pydantic models for the conversation primitives shared by the pipeline and
for the HTTP request/response payloads.
"""

from __future__ import annotations

from typing import List, Optional, Any, Literal
from pydantic import BaseModel, Field, ConfigDict


# ---------------------------------------------------------------------
# Conversation Models
# ---------------------------------------------------------------------

class ConversationTurn(BaseModel):
    """
    One user or assistant turn of a speaker's conversation.
    """
    role: Literal["user", "assistant"]
    content: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class PromptMessage(BaseModel):
    """
    One entry of the message sequence sent to the generation model.
    """
    role: Literal["system", "user", "assistant"]
    content: str

    model_config = ConfigDict(extra="forbid", frozen=True)


# ---------------------------------------------------------------------
# Ask Models
# ---------------------------------------------------------------------

class AskRequest(BaseModel):
    """
    Question payload. ``question`` and ``history`` are validated by the
    route and the composer so malformed input maps to a 400 or is dropped.
    """
    question: Any = None
    speaker: Optional[str] = None
    history: Any = None


class AskResponse(BaseModel):
    answer: str

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Persona / Team Models
# ---------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    name: str
    vector_store: str


class PersonaPublic(BaseModel):
    """
    Safe persona fields for the UI.
    """
    name: Optional[str] = None
    display_name: Optional[str] = None
    emoji: Optional[str] = None
    greeting: Optional[str] = None


class TeamMemberSummary(BaseModel):
    key: str
    name: Optional[str] = None


class TeamListResponse(BaseModel):
    team: List[TeamMemberSummary] = Field(default_factory=list)


class TeamMemberPublic(BaseModel):
    key: str
    name: Optional[str] = None
    greeting_override: Optional[str] = None
