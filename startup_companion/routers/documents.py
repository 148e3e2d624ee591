"""Document generation and retrieval endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from ..dependencies import get_generator, get_storage, get_store
from ..errors import StorageError
from ..generator import DocumentGenerator
from ..log import get_logger
from ..schemas import (
    DocumentCategory,
    DocumentRequest,
    DocumentResponse,
    ErrorResponse,
    GeneratedDocument,
)
from ..storage import ObjectStorage
from ..store import DocumentStore

logger = get_logger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post(
    "/{category}",
    response_model=DocumentResponse,
    response_model_by_alias=True,
    responses={500: {"model": ErrorResponse}},
)
async def generate_document(
    category: DocumentCategory,
    payload: DocumentRequest,
    generator: DocumentGenerator = Depends(get_generator),
):
    """Generate (or regenerate) one category for a session."""

    await generator.mark_generating(category, payload.session_id, payload.user_id)
    result = await generator.generate(category, payload.session_id, payload.user_id, payload.business_profile)
    if result.error is not None:
        return JSONResponse(status_code=500, content=result.error)

    document = result.document
    return DocumentResponse(
        response=document.full_content,
        full_content=document.full_content,
        key_points=document.key_points,
        pdf_url=document.pdf_url,
        document_id=document.id,
        pdf_generation_status="success" if document.pdf_url else "failed",
        warning=result.warning,
    )


@router.get("/session/{session_id}", response_model=List[GeneratedDocument])
async def list_session_documents(session_id: str, store: DocumentStore = Depends(get_store)) -> List[GeneratedDocument]:
    """Return every document row for a session, dashboard order."""

    documents = await store.list_session_documents(session_id)
    return sorted(documents, key=lambda doc: doc.document_type.order)


@router.get("/user/{user_id}", response_model=List[GeneratedDocument])
async def list_user_documents(
    user_id: str, latest: bool = False, store: DocumentStore = Depends(get_store)
) -> List[GeneratedDocument]:
    """Return a user's document history, newest first."""

    if latest:
        newest = await store.latest_user_documents(user_id)
        return sorted(newest.values(), key=lambda doc: doc.document_type.order)
    return await store.list_user_documents(user_id)


@router.get("/item/{document_id}", response_model=GeneratedDocument)
async def fetch_document(document_id: str, store: DocumentStore = Depends(get_store)) -> GeneratedDocument:
    document = await store.get_document_by_id(document_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"No document found with id '{document_id}'.")
    return document


@router.delete("/item/{document_id}", response_model=GeneratedDocument)
async def delete_document(
    document_id: str,
    store: DocumentStore = Depends(get_store),
    storage: ObjectStorage = Depends(get_storage),
) -> GeneratedDocument:
    """Delete a document row and, best effort, its stored PDF."""

    document = await store.delete_document(document_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"No document found with id '{document_id}'.")
    if document.pdf_file_name:
        try:
            await storage.remove(document.pdf_file_name)
        except StorageError as exc:
            logger.warning("Document %s deleted but its PDF was not: %s", document_id, exc)
    return document
