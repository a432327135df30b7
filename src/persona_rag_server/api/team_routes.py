"""
Team Routes

Lists team members for the UI speaker picker and exposes one member's public
fields. Outside production the directory is reloaded from disk on every
listing so new team files show up without a restart.
"""

from fastapi import APIRouter, Depends
from typing import Annotated

from .dependencies import get_profile_registry
from .models import TeamListResponse, TeamMemberPublic, TeamMemberSummary
from ..config import settings
from ..core.errors import NotFound
from ..profiles.loader import ProfileRegistry

router = APIRouter(prefix="/team", tags=["team"])


@router.get("", response_model=TeamListResponse)
async def list_team(
    profiles: Annotated[ProfileRegistry, Depends(get_profile_registry)],
) -> TeamListResponse:
    if settings.environment != "production":
        snapshot = profiles.reload_team()
    else:
        snapshot = profiles.snapshot

    return TeamListResponse(
        team=[
            TeamMemberSummary(key=member.key, name=member.name)
            for member in snapshot.team.values()
        ]
    )


@router.get("/{key}", response_model=TeamMemberPublic)
async def get_team_member(
    key: str,
    profiles: Annotated[ProfileRegistry, Depends(get_profile_registry)],
) -> TeamMemberPublic:
    member = profiles.snapshot.member(key)
    if member is None:
        raise NotFound("Not found")
    return TeamMemberPublic(
        key=member.key,
        name=member.name,
        greeting_override=member.greeting_override,
    )
