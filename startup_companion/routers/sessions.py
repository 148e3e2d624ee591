"""Session lookup and full four-category generation."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_orchestrator, get_store
from ..errors import ProfileNotFoundError
from ..orchestrator import GenerationOrchestrator
from ..schemas import BusinessProfile, GenerationReport, UserSession
from ..store import DocumentStore


router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("/{session_id}", response_model=UserSession)
async def fetch_session(session_id: str, store: DocumentStore = Depends(get_store)) -> UserSession:
    session = await store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"No session found with id '{session_id}'.")
    return session


@router.get("/{session_id}/profile", response_model=BusinessProfile)
async def fetch_profile(session_id: str, store: DocumentStore = Depends(get_store)) -> BusinessProfile:
    """Return the business profile collected for a session."""

    profile = await store.get_profile(session_id)
    if profile is None:
        raise HTTPException(status_code=404, detail=f"No business profile found for session '{session_id}'.")
    return profile


@router.post("/{session_id}/generate", response_model=GenerationReport)
async def generate_all(
    session_id: str,
    store: DocumentStore = Depends(get_store),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> GenerationReport:
    """Generate all four documents and wait until they settle or time out."""

    profile = await store.get_profile(session_id)
    if profile is None or not profile.user_id:
        raise HTTPException(status_code=404, detail=f"No business profile found for session '{session_id}'.")
    try:
        return await orchestrator.run(session_id, profile.user_id)
    except ProfileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
