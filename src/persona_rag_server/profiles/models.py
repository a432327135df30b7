"""
Persona and Team Profile Models

Profiles are read from camelCase JSON files (``signaturePhrases``,
``easterEggs``, ``insiderInfo`` ...) and exposed with snake_case attributes.
Every nested section is optional; absent sections render nothing.
"""

from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProfileModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# ---------------------------------------------------------------------
# Persona
# ---------------------------------------------------------------------

class StyleProfile(ProfileModel):
    tone: Optional[str] = None
    register_: Optional[str] = Field(default=None, alias="register")
    signature_phrases: List[str] = Field(default_factory=list)
    do: List[str] = Field(default_factory=list)
    dont: List[str] = Field(default_factory=list)


class LocaleProfile(ProfileModel):
    region: Optional[str] = None
    language_preference: Optional[str] = None
    examples: List[str] = Field(default_factory=list)


class SmallTalkPolicy(ProfileModel):
    allow: bool = False
    examples: List[str] = Field(default_factory=list)


class EasterEgg(ProfileModel):
    trigger: str
    response: str


class Guardrails(ProfileModel):
    refuse_topics: List[str] = Field(default_factory=list)
    fallback: Optional[str] = None


class PromptDirectives(ProfileModel):
    formatting: Optional[str] = None
    code: Optional[str] = None


class PersonaProfile(ProfileModel):
    """
    Voice, style and guardrail descriptor for the assistant.
    """
    name: Optional[str] = None
    display_name: Optional[str] = None
    emoji: Optional[str] = None
    greeting: Optional[str] = None
    style: Optional[StyleProfile] = None
    locale: Optional[LocaleProfile] = None
    small_talk: Optional[SmallTalkPolicy] = None
    jokes: List[str] = Field(default_factory=list)
    memories: List[str] = Field(default_factory=list)
    easter_eggs: List[EasterEgg] = Field(default_factory=list)
    guardrails: Optional[Guardrails] = None
    prompt_directives: Optional[PromptDirectives] = None


# ---------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------

class StyleTweaks(ProfileModel):
    address: Optional[str] = None
    humor: Optional[str] = None


class InsiderInfo(ProfileModel):
    jokes: List[str] = Field(default_factory=list)
    preferences: List[str] = Field(default_factory=list)


class GuardrailsOverrides(ProfileModel):
    avoid_topics: List[str] = Field(default_factory=list)


class TeamMember(ProfileModel):
    """
    Optional per-speaker context override.
    """
    key: str = Field(..., min_length=1)
    name: Optional[str] = None
    nicknames: List[str] = Field(default_factory=list)
    role: Optional[str] = None
    style_tweaks: Optional[StyleTweaks] = None
    insider_info: Optional[InsiderInfo] = None
    shared_memories: List[str] = Field(default_factory=list)
    guardrails_overrides: Optional[GuardrailsOverrides] = None
    greeting_override: Optional[str] = None
