"""Conversational onboarding endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_store, get_wizard
from ..errors import SessionNotFoundError
from ..schemas import ChatMessage, StartSessionRequest, WizardMessageRequest, WizardReply
from ..store import DocumentStore
from ..wizard import Wizard


router = APIRouter(prefix="/wizard", tags=["wizard"])


@router.post("/sessions", response_model=WizardReply)
async def start_session(payload: StartSessionRequest, wizard: Wizard = Depends(get_wizard)) -> WizardReply:
    """Open a wizard session and return the welcome message."""

    return await wizard.start(payload.user_id)


@router.post("/sessions/{session_id}/messages", response_model=WizardReply)
async def post_message(
    session_id: str, payload: WizardMessageRequest, wizard: Wizard = Depends(get_wizard)
) -> WizardReply:
    """Advance the conversation with the user's next message."""

    try:
        return await wizard.handle(session_id, payload.content)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/sessions/{session_id}/messages", response_model=List[ChatMessage])
async def list_messages(session_id: str, store: DocumentStore = Depends(get_store)) -> List[ChatMessage]:
    """Return the chat transcript in send order."""

    return await store.list_messages(session_id)
