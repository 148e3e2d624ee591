"""Mentor directory and service rating endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_store
from ..mentors import best_mentor, record_rating
from ..schemas import DocumentCategory, Mentor, RatingRequest, RatingResponse
from ..store import DocumentStore


router = APIRouter(tags=["mentors"])


@router.get("/mentors")
async def list_mentors(store: DocumentStore = Depends(get_store)) -> dict[str, list[Mentor]]:
    """Active mentors, best rated first."""

    return {"mentors": await store.list_mentors()}


@router.get("/mentors/{category}", response_model=Mentor)
async def mentor_for_category(category: DocumentCategory, store: DocumentStore = Depends(get_store)) -> Mentor:
    """Best-fit mentor for one document category."""

    mentor = best_mentor(category, await store.list_mentors())
    if mentor is None:
        raise HTTPException(status_code=404, detail=f"No active mentor for '{category.value}'.")
    return mentor


@router.post("/ratings", response_model=RatingResponse)
async def submit_rating(payload: RatingRequest, store: DocumentStore = Depends(get_store)) -> RatingResponse:
    """Store a rating; ratings of 3 or below come back with mentor matches."""

    rating, matches = await record_rating(
        store,
        session_id=payload.session_id,
        user_id=payload.user_id,
        rating=payload.rating,
        service_type=payload.service_type,
        feedback_reason=payload.feedback_reason,
    )
    return RatingResponse(rating=rating, mentors=matches)
