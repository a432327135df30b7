"""
Persona and Team Profile Loading

Reads the persona profile and the team directory from JSON files and keeps
them as one immutable snapshot.

Snapshot Semantics
------------------
- A reload builds a complete new ProfileSnapshot and swaps the reference in
  one assignment; readers holding the old snapshot keep a consistent view.
- Nothing inside a snapshot is ever mutated.
- Loading problems never raise. They are returned as MalformedProfile values
  and the registry logs them: a bad persona file falls back to the built-in
  default, a bad team file is skipped.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from threading import RLock
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from .models import PersonaProfile, TeamMember
from ..core.errors import MalformedProfile

logger = logging.getLogger("persona.profiles")

GENERAL_KEY = "general"


# ---------------------------------------------------------------------
# Persona
# ---------------------------------------------------------------------

def default_persona(name: str) -> PersonaProfile:
    """Built-in persona used when no valid profile file exists."""
    return PersonaProfile.model_validate({
        "name": name,
        "displayName": f"{name}Bot",
        "emoji": "👩‍💻",
        "greeting": f"Hey! I’m {name}Bot. What’s up? 🙂",
        "style": {
            "tone": "witty, supportive, technically precise",
            "register": "slightly casual Slack style",
            "signaturePhrases": [
                "Hmm, I’d suggest…",
                "Okay, try this approach…",
                "Let’s sanity-check that assumption.",
            ],
            "do": [
                "be concise with bullets and steps",
                "include short code snippets when useful",
                "add a light emoji occasionally",
            ],
            "dont": [
                "overuse emojis",
                "be condescending",
                "hallucinate beyond provided context",
            ],
        },
        "easterEggs": [
            {"trigger": "on-call", "response": "coffee first ☕"},
            {"trigger": "hotfix", "response": "ship it, but add a follow-up ticket"},
            {"trigger": "monorepo", "response": "keep calm and enforce ownership"},
        ],
        "guardrails": {
            "refuseTopics": [
                "sensitive personal data",
                "company confidential outside approved context",
            ],
            "fallback": "When unsure, ask a brief clarifying question.",
        },
        "promptDirectives": {
            "formatting": "Prefer bullet points for steps; keep paragraphs short.",
            "code": "Provide language-tagged code blocks; explain briefly.",
        },
    })


def persona_path(persona_dir: str, persona_name: str) -> Path:
    return Path(persona_dir) / f"{persona_name.lower()}.json"


def load_persona(
    persona_dir: str,
    persona_name: str,
) -> Tuple[PersonaProfile, List[MalformedProfile]]:
    """
    Load ``{persona_dir}/{persona_name.lower()}.json``.

    Returns
    -------
    (PersonaProfile, warnings)
        The default persona and one warning when the file is missing or
        invalid.
    """
    path = persona_path(persona_dir, persona_name)
    try:
        raw = path.read_text(encoding="utf-8")
        return PersonaProfile.model_validate(json.loads(raw)), []
    except (OSError, ValueError, ValidationError) as exc:
        warning = MalformedProfile(
            f"Persona file not found or invalid at {path}. Using fallback. ({exc})"
        )
        return default_persona(persona_name), [warning]


# ---------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------

def load_team_directory(
    team_dir: str,
) -> Tuple[Dict[str, TeamMember], List[MalformedProfile]]:
    """
    Load every ``*.json`` file in ``team_dir`` into a key -> TeamMember map.

    The key is the file's ``key`` field, else the file stem. A missing
    directory yields an empty map without warnings.
    """
    members: Dict[str, TeamMember] = {}
    warnings: List[MalformedProfile] = []

    directory = Path(team_dir)
    if not directory.is_dir():
        return members, warnings

    for path in sorted(directory.glob("*.json")):
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("team file must contain a JSON object")
            data.setdefault("key", path.stem)
            member = TeamMember.model_validate(data)
        except (OSError, ValueError, ValidationError) as exc:
            warnings.append(MalformedProfile(f"Failed to parse team file {path.name}: {exc}"))
            continue
        members[member.key] = member

    return members, warnings


# ---------------------------------------------------------------------
# Snapshot Registry
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class ProfileSnapshot:
    persona: PersonaProfile
    team: Mapping[str, TeamMember] = field(default_factory=lambda: MappingProxyType({}))

    def member(self, key: Optional[str]) -> Optional[TeamMember]:
        """
        Resolve a speaker key, falling back to ``general``.
        """
        if key and key in self.team:
            return self.team[key]
        return self.team.get(GENERAL_KEY)


class ProfileRegistry:
    """
    Process-wide holder of the current ProfileSnapshot.
    """

    def __init__(self, persona_dir: str, team_dir: str, persona_name: str) -> None:
        self.persona_dir = persona_dir
        self.team_dir = team_dir
        self.persona_name = persona_name
        self._lock = RLock()
        self._snapshot: Optional[ProfileSnapshot] = None

    @property
    def snapshot(self) -> ProfileSnapshot:
        current = self._snapshot
        if current is None:
            current = self.reload()
        return current

    def _build_team(self) -> Mapping[str, TeamMember]:
        members, warnings = load_team_directory(self.team_dir)
        self._log(warnings)
        return MappingProxyType(members)

    def reload(self) -> ProfileSnapshot:
        """Rebuild persona and team from disk."""
        persona, warnings = load_persona(self.persona_dir, self.persona_name)
        self._log(warnings)
        snapshot = ProfileSnapshot(persona=persona, team=self._build_team())
        with self._lock:
            self._snapshot = snapshot
        return snapshot

    def reload_team(self) -> ProfileSnapshot:
        """Rebuild the team directory only, keeping the loaded persona."""
        team = self._build_team()
        with self._lock:
            persona = self.snapshot.persona
            snapshot = ProfileSnapshot(persona=persona, team=team)
            self._snapshot = snapshot
        return snapshot

    @staticmethod
    def _log(warnings: List[MalformedProfile]) -> None:
        for warning in warnings:
            logger.warning("%s", warning)
