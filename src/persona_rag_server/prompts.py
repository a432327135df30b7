"""
Prompt Assembly

Builds the message sequence sent to the generation model, always in this
order:

1. persona voice (system)
2. speaker context (system, empty when no speaker resolves)
3. retrieved context (system)
4. the last few valid history turns
5. the new user question

Every section renderer is a pure function of the profile fields it reads.
Optional persona sections whose field is absent or empty are left out
entirely.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, List, Optional

from .api.models import ConversationTurn, PromptMessage
from .core.errors import MalformedHistoryTurn
from .profiles.models import PersonaProfile, TeamMember

DEFAULT_PERSONA_NAME = "Chandni"
DEFAULT_TONE = "witty, supportive, technically precise"
DEFAULT_REGISTER = "slightly casual Slack style"
DEFAULT_FORMATTING = "Prefer bullet points for steps; keep paragraphs short."
DEFAULT_CODE = "Provide language-tagged code blocks; explain briefly."
DEFAULT_FALLBACK = "ask a brief clarifying question."
HISTORY_WINDOW = 6


def _bullets(items: Iterable[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


# ---------------------------------------------------------------------
# Persona sections
# ---------------------------------------------------------------------

def locale_section(persona: PersonaProfile) -> Optional[str]:
    locale = persona.locale
    if locale is None or not (locale.region or locale.language_preference or locale.examples):
        return None
    return (
        f"Locale: Based in {locale.region or 'India'}; prefer "
        f"{locale.language_preference or 'English'} when appropriate.\n"
        f"Locale examples:\n{_bullets(locale.examples)}"
    )


def small_talk_section(persona: PersonaProfile) -> Optional[str]:
    small_talk = persona.small_talk
    if small_talk is None or not small_talk.allow:
        return None
    return (
        "Small talk: Allowed. Offer brief, friendly replies when the user "
        "engages in casual conversation.\n"
        f"Small talk examples:\n{_bullets(small_talk.examples)}"
    )


def humor_section(persona: PersonaProfile) -> Optional[str]:
    if not persona.jokes:
        return None
    return f"Humor: Use light humor occasionally when suitable. Example: {persona.jokes[0]}"


def memories_section(persona: PersonaProfile) -> Optional[str]:
    if not persona.memories:
        return None
    return (
        "Shared memories: You may reference team memories sparingly if relevant:\n"
        f"{_bullets(persona.memories[:2])}"
    )


def guardrails_section(persona: PersonaProfile) -> str:
    guardrails = persona.guardrails
    refuse = ", ".join(guardrails.refuse_topics) if guardrails else ""
    fallback = (guardrails.fallback if guardrails else None) or DEFAULT_FALLBACK
    if refuse:
        return f"Guardrails: Refuse topics {refuse}. If unsure: {fallback}"
    return f"Guardrails: If unsure: {fallback}"


def easter_eggs_section(persona: PersonaProfile) -> Optional[str]:
    if not persona.easter_eggs:
        return None
    pairs = "; ".join(f"{egg.trigger} → {egg.response}" for egg in persona.easter_eggs)
    return f"Easter eggs (sparingly, only when relevant): {pairs}"


def render_persona_prompt(persona: PersonaProfile, fallback_name: str = DEFAULT_PERSONA_NAME) -> str:
    style = persona.style
    directives = persona.prompt_directives

    blocks: List[Optional[str]] = [
        f"You are {persona.name or fallback_name}, a "
        f"{(style.tone if style else None) or DEFAULT_TONE} technical leader who speaks in a "
        f"{(style.register_ if style else None) or DEFAULT_REGISTER}.",
        f"You often use phrases:\n{_bullets(style.signature_phrases if style else [])}",
        f"Do:\n{_bullets(style.do if style else [])}",
        f"Don't:\n{_bullets(style.dont if style else [])}",
        locale_section(persona),
        small_talk_section(persona),
        humor_section(persona),
        memories_section(persona),
        f"Formatting: {(directives.formatting if directives else None) or DEFAULT_FORMATTING}",
        f"Code: {(directives.code if directives else None) or DEFAULT_CODE}",
        guardrails_section(persona),
        easter_eggs_section(persona),
        "Respond as if in a Slack conversation. Keep it concise and helpful.",
    ]
    return "\n".join(block for block in blocks if block is not None)


# ---------------------------------------------------------------------
# Speaker section
# ---------------------------------------------------------------------

def render_speaker_prompt(member: Optional[TeamMember]) -> str:
    if member is None:
        return ""

    tweaks = member.style_tweaks
    insider = member.insider_info
    avoid = member.guardrails_overrides.avoid_topics if member.guardrails_overrides else []

    header = f"Speaker context: {member.name or member.key}"
    if member.nicknames:
        header += f" (aka {', '.join(member.nicknames)})"
    header += f". Role: {member.role or 'Teammate'}."

    lines = [
        header,
        f"Addressing style: {(tweaks.address if tweaks else None) or 'friendly neutral'}; "
        f"Humor: {(tweaks.humor if tweaks else None) or 'light'}.",
    ]

    lists = [
        ("Insider jokes (use sparingly and only when fitting):", insider.jokes if insider else []),
        ("Preferences:", insider.preferences if insider else []),
        ("Shared memories (reference only if relevant):", member.shared_memories),
        ("Avoid topics for this speaker:", avoid),
    ]
    for title, items in lists:
        if items:
            lines.append(f"{title}\n{_bullets(items)}")

    return "\n".join(lines)


# ---------------------------------------------------------------------
# Context section
# ---------------------------------------------------------------------

def render_context_prompt(persona_name: str, context: str) -> str:
    return (
        f"Use the following context from {persona_name}'s notes and chats if relevant. "
        "If the context is not relevant, answer from general knowledge, but keep the "
        f"voice consistent.\n\n{context}"
    )


# ---------------------------------------------------------------------
# History
# ---------------------------------------------------------------------

def coerce_turn(item: Any) -> ConversationTurn:
    """
    Validate one history entry.

    Raises
    ------
    MalformedHistoryTurn
        If the role is not user/assistant or the content is not a string.
    """
    if isinstance(item, ConversationTurn):
        return item

    if isinstance(item, Mapping):
        role, content = item.get("role"), item.get("content")
    else:
        role, content = getattr(item, "role", None), getattr(item, "content", None)

    if role not in ("user", "assistant") or not isinstance(content, str):
        raise MalformedHistoryTurn(f"Unusable history turn: role={role!r}")
    return ConversationTurn(role=role, content=content)


def sanitize_history(history: Any, limit: int = HISTORY_WINDOW) -> List[ConversationTurn]:
    """
    Keep the last ``limit`` valid turns, in order. Invalid turns are dropped
    before slicing; a non-list history counts as empty.
    """
    if not isinstance(history, (list, tuple)) or limit <= 0:
        return []

    turns: List[ConversationTurn] = []
    for item in history:
        try:
            turns.append(coerce_turn(item))
        except MalformedHistoryTurn:
            continue
    return turns[-limit:]


# ---------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------

def compose(
    persona: PersonaProfile,
    member: Optional[TeamMember],
    retrieved_context: str,
    history: Any,
    question: str,
    fallback_name: str = DEFAULT_PERSONA_NAME,
    history_window: int = HISTORY_WINDOW,
) -> List[PromptMessage]:
    """
    Assemble the full message sequence for one question.
    """
    persona_name = persona.name or fallback_name

    messages = [
        PromptMessage(role="system", content=render_persona_prompt(persona, fallback_name)),
        PromptMessage(role="system", content=render_speaker_prompt(member)),
        PromptMessage(role="system", content=render_context_prompt(persona_name, retrieved_context)),
    ]
    messages.extend(
        PromptMessage(role=turn.role, content=turn.content)
        for turn in sanitize_history(history, history_window)
    )
    messages.append(PromptMessage(role="user", content=question))
    return messages
