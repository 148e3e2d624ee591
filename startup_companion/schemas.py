"""Pydantic models and enums for the StartUP Companion API."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class DocumentCategory(str, Enum):
    """Enumerate the four generated document kinds."""

    REGISTRATION = "registration"
    BRANDING = "branding"
    COMPLIANCE = "compliance"
    HR = "hr"

    @property
    def order(self) -> int:
        """Return the display order used by the dashboard."""
        category_order = {
            DocumentCategory.REGISTRATION: 1,
            DocumentCategory.BRANDING: 2,
            DocumentCategory.COMPLIANCE: 3,
            DocumentCategory.HR: 4,
        }
        return category_order[self]


class GenerationStatus(str, Enum):
    """Lifecycle of a generated document row."""

    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not GenerationStatus.GENERATING


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class MessageType(str, Enum):
    USER = "user"
    AI = "ai"


class WizardStage(str, Enum):
    """Stages of the onboarding conversation."""

    INITIAL = "initial"
    QUESTIONING = "questioning"
    GENERATING = "generating"
    RATING = "rating"
    FEEDBACK = "feedback"
    COMPLETED = "completed"


SERVICE_TYPE = "confirmed_idea_flow"


class BusinessProfile(BaseModel):
    """One row per wizard session describing the prospective business."""

    model_config = ConfigDict(extra="ignore")

    session_id: str
    user_id: Optional[str] = None
    business_name: Optional[str] = None
    company_description: Optional[str] = None
    business_description: Optional[str] = None
    industry: Optional[str] = None
    business_type: Optional[str] = None
    entity_type: Optional[str] = None
    location: Optional[str] = None
    partners_info: List[Dict[str, Any]] = Field(default_factory=list)
    color_preference: Optional[str] = None
    style_preference: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("partners_info", mode="before")
    @classmethod
    def _coerce_partners(cls, value: Any) -> Any:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [{"info": value}]
        if isinstance(value, list):
            return [item if isinstance(item, dict) else {"info": str(item)} for item in value]
        return value


class GeneratedDocument(BaseModel):
    """One row per (session, category) pair."""

    id: str = Field(default_factory=new_id)
    user_id: str
    session_id: str
    document_type: DocumentCategory
    document_title: str
    key_points: List[str] = Field(default_factory=list)
    full_content: str = ""
    pdf_url: Optional[str] = None
    pdf_file_name: Optional[str] = None
    generation_status: GenerationStatus = GenerationStatus.GENERATING
    service_type: str = SERVICE_TYPE
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("key_points", mode="before")
    @classmethod
    def _decode_key_points(cls, value: Any) -> Any:
        """Older rows store key points as a JSON-encoded string."""

        if value is None:
            return []
        if isinstance(value, str):
            try:
                decoded = json.loads(value)
            except json.JSONDecodeError:
                return []
            return decoded if isinstance(decoded, list) else []
        return value

    @field_validator("full_content", mode="before")
    @classmethod
    def _default_content(cls, value: Any) -> Any:
        return "" if value is None else value


class UserSession(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    service_type: str = "chat_session"
    session_status: SessionStatus = SessionStatus.ACTIVE
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ChatMessage(BaseModel):
    id: str = Field(default_factory=new_id)
    session_id: str
    user_id: str
    message_type: MessageType
    content: str
    created_at: datetime = Field(default_factory=utcnow)


class Mentor(BaseModel):
    """Expert that can be offered after a low rating."""

    id: str = Field(default_factory=new_id)
    name: str
    email: str
    phone: Optional[str] = None
    specialization: List[str] = Field(default_factory=list)
    bio: str = ""
    average_rating: Optional[float] = None
    total_consultations: int = 0
    availability_status: str = "active"


class ServiceRating(BaseModel):
    """Append-only feedback event."""

    id: str = Field(default_factory=new_id)
    user_id: str
    session_id: str
    service_type: str = SERVICE_TYPE
    rating: int = Field(..., ge=1, le=5)
    feedback_reason: Optional[str] = None
    mentor_assigned: bool = False
    mentor_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


# ---------------------------------------------------------------------------
# HTTP payloads
# ---------------------------------------------------------------------------


class DocumentRequest(BaseModel):
    """Payload for generating a single category document."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., min_length=1, alias="sessionId")
    user_id: str = Field(..., min_length=1, alias="userId")
    business_profile: Optional[Dict[str, Any]] = Field(
        default=None,
        alias="businessProfile",
        description="Optional profile snapshot; loaded from the store when omitted.",
    )
    message: Optional[str] = Field(default=None, description="Legacy trigger text, ignored.")


class DocumentResponse(BaseModel):
    """Successful single-category generation result."""

    model_config = ConfigDict(populate_by_name=True)

    response: str
    full_content: str = Field(..., alias="fullContent")
    key_points: List[str] = Field(..., alias="keyPoints")
    pdf_url: Optional[str] = Field(default=None, alias="pdfUrl")
    document_id: Optional[str] = Field(default=None, alias="documentId")
    pdf_generation_status: str = Field(..., alias="pdfGenerationStatus")
    warning: Optional[str] = None


class ErrorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    error: str
    user_message: str = Field(..., alias="userMessage")
    details: str = ""


class GenerationReport(BaseModel):
    """Outcome of a full four-category generation run."""

    session_id: str
    statuses: Dict[DocumentCategory, GenerationStatus]
    all_terminal: bool
    timed_out: bool
    attempts: int

    @property
    def completed(self) -> List[DocumentCategory]:
        return [c for c, s in self.statuses.items() if s is GenerationStatus.COMPLETED]


class RatingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., min_length=1, alias="sessionId")
    user_id: str = Field(..., min_length=1, alias="userId")
    rating: int = Field(..., ge=1, le=5)
    service_type: str = Field(default=SERVICE_TYPE, alias="serviceType")
    feedback_reason: Optional[str] = Field(default=None, alias="feedbackReason")


class MentorMatch(BaseModel):
    category: DocumentCategory
    mentor: Mentor


class RatingResponse(BaseModel):
    rating: ServiceRating
    mentors: List[MentorMatch] = Field(default_factory=list)


class StartSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., min_length=1, alias="userId")


class WizardMessageRequest(BaseModel):
    content: str = Field(..., description="Raw user input for the current step.")


class WizardReply(BaseModel):
    """AI replies produced by one wizard step."""

    session_id: str
    stage: WizardStage
    question_index: int
    messages: List[str]
    documents: List[GeneratedDocument] = Field(default_factory=list)
    mentors: List[MentorMatch] = Field(default_factory=list)
    report: Optional[GenerationReport] = None
