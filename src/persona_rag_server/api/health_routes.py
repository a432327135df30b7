from fastapi import APIRouter, Depends
from typing import Annotated

from .dependencies import get_profile_registry, get_vector_store
from .models import HealthResponse, PersonaPublic
from ..config import settings
from ..profiles.loader import ProfileRegistry
from ..store import VectorStore

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(
    profiles: Annotated[ProfileRegistry, Depends(get_profile_registry)],
    store: Annotated[VectorStore, Depends(get_vector_store)],
) -> HealthResponse:
    persona = profiles.snapshot.persona
    return HealthResponse(
        name=persona.display_name or f"{settings.persona_name}Bot",
        vector_store=store.describe(),
    )


@router.get("/persona", response_model=PersonaPublic)
async def persona_info(
    profiles: Annotated[ProfileRegistry, Depends(get_profile_registry)],
) -> PersonaPublic:
    """Expose persona metadata (safe fields only)."""
    persona = profiles.snapshot.persona
    return PersonaPublic(
        name=persona.name,
        display_name=persona.display_name,
        emoji=persona.emoji,
        greeting=persona.greeting,
    )
