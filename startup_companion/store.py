"""Persistence for profiles, documents, sessions, chat transcripts and ratings.

``InMemoryStore`` backs local development and tests; ``SupabaseStore`` talks
to the hosted Postgres tables. Both expose the same coroutine interface and
upsert on the same unique keys: ``session_id`` for profiles and
``(session_id, document_type)`` for documents.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

from .errors import PersistenceError
from .log import get_logger
from .schemas import (
    BusinessProfile,
    ChatMessage,
    DocumentCategory,
    GeneratedDocument,
    Mentor,
    ServiceRating,
    SessionStatus,
    UserSession,
    utcnow,
)

logger = get_logger(__name__)

T = TypeVar("T")

PROFILE_FIELDS = tuple(
    name for name in BusinessProfile.model_fields if name not in {"session_id", "user_id", "created_at", "updated_at"}
)


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == []


def merge_profile_fields(current: Mapping[str, Any], incoming: Mapping[str, Any]) -> Dict[str, Any]:
    """Overlay ``incoming`` on ``current``; blank incoming values never erase data."""

    merged = dict(current)
    for key, value in incoming.items():
        if key not in PROFILE_FIELDS or _is_blank(value):
            continue
        merged[key] = value
    return merged


def _mentor_sort_key(mentor: Mentor) -> Tuple[bool, float, int]:
    rating = mentor.average_rating
    return (rating is None, -(rating or 0.0), -mentor.total_consultations)


class DocumentStore(ABC):
    """Coroutine interface over the relational store."""

    @abstractmethod
    async def get_profile(self, session_id: str) -> Optional[BusinessProfile]: ...

    @abstractmethod
    async def upsert_profile(self, session_id: str, user_id: str, fields: Mapping[str, Any]) -> BusinessProfile: ...

    @abstractmethod
    async def get_document(self, session_id: str, category: DocumentCategory) -> Optional[GeneratedDocument]: ...

    @abstractmethod
    async def get_document_by_id(self, document_id: str) -> Optional[GeneratedDocument]: ...

    @abstractmethod
    async def list_session_documents(self, session_id: str) -> List[GeneratedDocument]: ...

    @abstractmethod
    async def list_user_documents(self, user_id: str) -> List[GeneratedDocument]: ...

    @abstractmethod
    async def upsert_document(self, document: GeneratedDocument) -> GeneratedDocument: ...

    @abstractmethod
    async def delete_document(self, document_id: str) -> Optional[GeneratedDocument]: ...

    @abstractmethod
    async def create_session(self, user_id: str, service_type: str = "chat_session") -> UserSession: ...

    @abstractmethod
    async def get_session(self, session_id: str) -> Optional[UserSession]: ...

    @abstractmethod
    async def update_session(
        self,
        session_id: str,
        *,
        status: SessionStatus | None = None,
        service_type: str | None = None,
    ) -> None: ...

    @abstractmethod
    async def append_message(self, message: ChatMessage) -> ChatMessage: ...

    @abstractmethod
    async def list_messages(self, session_id: str) -> List[ChatMessage]: ...

    @abstractmethod
    async def insert_rating(self, rating: ServiceRating) -> ServiceRating: ...

    @abstractmethod
    async def list_ratings(self, session_id: str) -> List[ServiceRating]: ...

    @abstractmethod
    async def list_mentors(self) -> List[Mentor]:
        """Return active mentors, best rated first."""

    async def latest_user_documents(self, user_id: str) -> Dict[DocumentCategory, GeneratedDocument]:
        """Return the newest document per category for ``user_id``."""

        latest: Dict[DocumentCategory, GeneratedDocument] = {}
        for document in await self.list_user_documents(user_id):
            latest.setdefault(document.document_type, document)
        return latest


class InMemoryStore(DocumentStore):
    """Dictionary-backed store that keeps per-session state in process."""

    def __init__(self, mentors: Iterable[Mentor] = ()) -> None:
        self._profiles: Dict[str, BusinessProfile] = {}
        self._documents: Dict[Tuple[str, DocumentCategory], GeneratedDocument] = {}
        self._sessions: Dict[str, UserSession] = {}
        self._messages: DefaultDict[str, List[ChatMessage]] = defaultdict(list)
        self._ratings: DefaultDict[str, List[ServiceRating]] = defaultdict(list)
        self._mentors: List[Mentor] = list(mentors)

    async def get_profile(self, session_id: str) -> Optional[BusinessProfile]:
        profile = self._profiles.get(session_id)
        return profile.model_copy(deep=True) if profile else None

    async def upsert_profile(self, session_id: str, user_id: str, fields: Mapping[str, Any]) -> BusinessProfile:
        existing = self._profiles.get(session_id)
        if existing is None:
            profile = BusinessProfile(
                session_id=session_id, user_id=user_id, **merge_profile_fields({}, fields)
            )
        else:
            merged = merge_profile_fields(existing.model_dump(), fields)
            merged["updated_at"] = utcnow()
            profile = BusinessProfile.model_validate(merged)
        self._profiles[session_id] = profile
        return profile.model_copy(deep=True)

    async def get_document(self, session_id: str, category: DocumentCategory) -> Optional[GeneratedDocument]:
        document = self._documents.get((session_id, DocumentCategory(category)))
        return document.model_copy(deep=True) if document else None

    async def get_document_by_id(self, document_id: str) -> Optional[GeneratedDocument]:
        for document in self._documents.values():
            if document.id == document_id:
                return document.model_copy(deep=True)
        return None

    async def list_session_documents(self, session_id: str) -> List[GeneratedDocument]:
        documents = [doc for (sid, _), doc in self._documents.items() if sid == session_id]
        return [doc.model_copy(deep=True) for doc in sorted(documents, key=lambda doc: doc.created_at)]

    async def list_user_documents(self, user_id: str) -> List[GeneratedDocument]:
        documents = [doc for doc in self._documents.values() if doc.user_id == user_id]
        documents.sort(key=lambda doc: doc.created_at, reverse=True)
        return [doc.model_copy(deep=True) for doc in documents]

    async def upsert_document(self, document: GeneratedDocument) -> GeneratedDocument:
        key = (document.session_id, document.document_type)
        stored = document.model_copy(deep=True)
        existing = self._documents.get(key)
        if existing is not None:
            stored.id = existing.id
            stored.created_at = existing.created_at
            stored.updated_at = utcnow()
        self._documents[key] = stored
        return stored.model_copy(deep=True)

    async def delete_document(self, document_id: str) -> Optional[GeneratedDocument]:
        for key, document in list(self._documents.items()):
            if document.id == document_id:
                del self._documents[key]
                return document
        return None

    async def create_session(self, user_id: str, service_type: str = "chat_session") -> UserSession:
        session = UserSession(user_id=user_id, service_type=service_type)
        self._sessions[session.id] = session
        return session.model_copy()

    async def get_session(self, session_id: str) -> Optional[UserSession]:
        session = self._sessions.get(session_id)
        return session.model_copy() if session else None

    async def update_session(
        self,
        session_id: str,
        *,
        status: SessionStatus | None = None,
        service_type: str | None = None,
    ) -> None:
        session = self._sessions.get(session_id)
        if session is None:
            raise PersistenceError(f"Unknown session '{session_id}'")
        now = utcnow()
        if status is not None:
            session.session_status = status
            if status is SessionStatus.COMPLETED:
                session.completed_at = now
        if service_type is not None:
            session.service_type = service_type
        session.updated_at = now

    async def append_message(self, message: ChatMessage) -> ChatMessage:
        self._messages[message.session_id].append(message)
        return message

    async def list_messages(self, session_id: str) -> List[ChatMessage]:
        return list(self._messages.get(session_id, []))

    async def insert_rating(self, rating: ServiceRating) -> ServiceRating:
        self._ratings[rating.session_id].append(rating)
        return rating

    async def list_ratings(self, session_id: str) -> List[ServiceRating]:
        return list(self._ratings.get(session_id, []))

    async def list_mentors(self) -> List[Mentor]:
        active = [m for m in self._mentors if m.availability_status == "active"]
        return [m.model_copy(deep=True) for m in sorted(active, key=_mentor_sort_key)]


class SupabaseStore(DocumentStore):
    """Store backed by Supabase tables through the synchronous client.

    Every query runs in a worker thread so the event loop keeps serving the
    other categories while one waits on the network.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    async def _run(self, operation: str, query: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(query)
        except Exception as exc:
            logger.error("Supabase %s failed: %s", operation, exc)
            raise PersistenceError(f"Database error during {operation}: {exc}") from exc

    def _table(self, name: str) -> Any:
        return self._client.table(name)

    async def get_profile(self, session_id: str) -> Optional[BusinessProfile]:
        response = await self._run(
            "profile lookup",
            lambda: self._table("business_profiles").select("*").eq("session_id", session_id).limit(1).execute(),
        )
        rows = response.data or []
        return BusinessProfile.model_validate(rows[0]) if rows else None

    async def upsert_profile(self, session_id: str, user_id: str, fields: Mapping[str, Any]) -> BusinessProfile:
        existing = await self.get_profile(session_id)
        if existing is None:
            payload = {"session_id": session_id, "user_id": user_id, **merge_profile_fields({}, fields)}
            response = await self._run(
                "profile insert", lambda: self._table("business_profiles").insert(payload).execute()
            )
        else:
            payload = merge_profile_fields({}, fields)
            payload["updated_at"] = utcnow().isoformat()
            response = await self._run(
                "profile update",
                lambda: self._table("business_profiles").update(payload).eq("session_id", session_id).execute(),
            )
        rows = response.data or []
        if not rows:
            raise PersistenceError(f"Profile upsert for session '{session_id}' returned no row")
        return BusinessProfile.model_validate(rows[0])

    async def get_document(self, session_id: str, category: DocumentCategory) -> Optional[GeneratedDocument]:
        response = await self._run(
            "document lookup",
            lambda: self._table("generated_documents")
            .select("*")
            .eq("session_id", session_id)
            .eq("document_type", DocumentCategory(category).value)
            .limit(1)
            .execute(),
        )
        rows = response.data or []
        return GeneratedDocument.model_validate(rows[0]) if rows else None

    async def get_document_by_id(self, document_id: str) -> Optional[GeneratedDocument]:
        response = await self._run(
            "document lookup",
            lambda: self._table("generated_documents").select("*").eq("id", document_id).limit(1).execute(),
        )
        rows = response.data or []
        return GeneratedDocument.model_validate(rows[0]) if rows else None

    async def list_session_documents(self, session_id: str) -> List[GeneratedDocument]:
        response = await self._run(
            "document listing",
            lambda: self._table("generated_documents")
            .select("*")
            .eq("session_id", session_id)
            .order("created_at")
            .execute(),
        )
        return [GeneratedDocument.model_validate(row) for row in response.data or []]

    async def list_user_documents(self, user_id: str) -> List[GeneratedDocument]:
        response = await self._run(
            "document listing",
            lambda: self._table("generated_documents")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute(),
        )
        return [GeneratedDocument.model_validate(row) for row in response.data or []]

    async def upsert_document(self, document: GeneratedDocument) -> GeneratedDocument:
        existing = await self.get_document(document.session_id, document.document_type)
        row = document.model_dump(mode="json", exclude={"id", "created_at", "updated_at"})
        if existing is not None:
            row["updated_at"] = utcnow().isoformat()
            response = await self._run(
                "document update",
                lambda: self._table("generated_documents").update(row).eq("id", existing.id).execute(),
            )
        else:
            row["id"] = document.id
            response = await self._run(
                "document insert", lambda: self._table("generated_documents").insert(row).execute()
            )
        rows = response.data or []
        if not rows:
            raise PersistenceError(
                f"Document upsert for {document.session_id}/{document.document_type.value} returned no row"
            )
        return GeneratedDocument.model_validate(rows[0])

    async def delete_document(self, document_id: str) -> Optional[GeneratedDocument]:
        existing = await self.get_document_by_id(document_id)
        if existing is None:
            return None
        await self._run(
            "document delete", lambda: self._table("generated_documents").delete().eq("id", document_id).execute()
        )
        return existing

    async def create_session(self, user_id: str, service_type: str = "chat_session") -> UserSession:
        session = UserSession(user_id=user_id, service_type=service_type)
        row = session.model_dump(mode="json", exclude={"completed_at"})
        response = await self._run("session insert", lambda: self._table("user_sessions").insert(row).execute())
        rows = response.data or []
        return UserSession.model_validate(rows[0]) if rows else session

    async def get_session(self, session_id: str) -> Optional[UserSession]:
        response = await self._run(
            "session lookup",
            lambda: self._table("user_sessions").select("*").eq("id", session_id).limit(1).execute(),
        )
        rows = response.data or []
        return UserSession.model_validate(rows[0]) if rows else None

    async def update_session(
        self,
        session_id: str,
        *,
        status: SessionStatus | None = None,
        service_type: str | None = None,
    ) -> None:
        now = utcnow().isoformat()
        update: Dict[str, Any] = {"updated_at": now}
        if status is not None:
            update["session_status"] = status.value
            if status is SessionStatus.COMPLETED:
                update["completed_at"] = now
        if service_type is not None:
            update["service_type"] = service_type
        await self._run(
            "session update", lambda: self._table("user_sessions").update(update).eq("id", session_id).execute()
        )

    async def append_message(self, message: ChatMessage) -> ChatMessage:
        row = message.model_dump(mode="json")
        await self._run("message insert", lambda: self._table("chat_messages").insert(row).execute())
        return message

    async def list_messages(self, session_id: str) -> List[ChatMessage]:
        response = await self._run(
            "message listing",
            lambda: self._table("chat_messages").select("*").eq("session_id", session_id).order("created_at").execute(),
        )
        return [ChatMessage.model_validate(row) for row in response.data or []]

    async def insert_rating(self, rating: ServiceRating) -> ServiceRating:
        row = rating.model_dump(mode="json")
        await self._run("rating insert", lambda: self._table("service_ratings").insert(row).execute())
        return rating

    async def list_ratings(self, session_id: str) -> List[ServiceRating]:
        response = await self._run(
            "rating listing",
            lambda: self._table("service_ratings").select("*").eq("session_id", session_id).execute(),
        )
        return [ServiceRating.model_validate(row) for row in response.data or []]

    async def list_mentors(self) -> List[Mentor]:
        response = await self._run(
            "mentor listing",
            lambda: self._table("mentors").select("*").eq("availability_status", "active").execute(),
        )
        mentors = [Mentor.model_validate(row) for row in response.data or []]
        return sorted(mentors, key=_mentor_sort_key)
