"""Ratings and best-fit mentor matching."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from .log import get_logger
from .schemas import DocumentCategory, Mentor, MentorMatch, ServiceRating
from .store import DocumentStore

logger = get_logger(__name__)

LOW_RATING_THRESHOLD = 3

# Mentor specializations use service names rather than category slugs.
CATEGORY_SPECIALIZATIONS: Dict[DocumentCategory, str] = {
    DocumentCategory.REGISTRATION: "registration",
    DocumentCategory.BRANDING: "branding",
    DocumentCategory.COMPLIANCE: "compliance",
    DocumentCategory.HR: "hr_setup",
}


DEFAULT_MENTORS: Sequence[Mentor] = (
    Mentor(
        name="Rajesh Kumar",
        email="rajesh.kumar@startupadvisor.in",
        phone="+91-98765-43210",
        specialization=["registration", "compliance"],
        bio="CA with 15+ years of experience in company registration and legal compliance. "
        "Helped 500+ startups with incorporation and regulatory matters.",
        average_rating=4.9,
        total_consultations=520,
    ),
    Mentor(
        name="Priya Sharma",
        email="priya.sharma@businessguru.in",
        phone="+91-98765-43211",
        specialization=["idea_tuning", "branding"],
        bio="Business strategist and brand consultant. MBA from IIM-A with expertise in market "
        "validation and brand positioning for early-stage startups.",
        average_rating=4.8,
        total_consultations=310,
    ),
    Mentor(
        name="Amit Patel",
        email="amit.patel@financeexpert.in",
        phone="+91-98765-43212",
        specialization=["financial_planning", "compliance"],
        bio="Chartered Accountant specializing in startup finances, fundraising, and financial "
        "planning. 10+ years helping founders with cap tables and funding rounds.",
        average_rating=4.7,
        total_consultations=280,
    ),
    Mentor(
        name="Sneha Reddy",
        email="sneha.reddy@hrpro.in",
        phone="+91-98765-43213",
        specialization=["hr_setup", "compliance"],
        bio="HR consultant with expertise in building teams for startups. Helped 200+ companies "
        "with hiring, policy creation, and employee management.",
        average_rating=4.8,
        total_consultations=215,
    ),
    Mentor(
        name="Vikram Singh",
        email="vikram.singh@legaladvisor.in",
        phone="+91-98765-43214",
        specialization=["registration", "compliance", "branding"],
        bio="Corporate lawyer with deep expertise in business registration, IP protection, and "
        "legal compliance. LLB from NLU Delhi.",
        average_rating=4.6,
        total_consultations=190,
    ),
    Mentor(
        name="Ananya Iyer",
        email="ananya.iyer@businesscoach.in",
        phone="+91-98765-43215",
        specialization=["idea_tuning", "financial_planning"],
        bio="Serial entrepreneur and business coach. Founded 3 successful startups and now helps "
        "founders validate ideas and create sustainable business models.",
        average_rating=4.7,
        total_consultations=160,
    ),
)


def needs_mentor(rating: int) -> bool:
    return rating <= LOW_RATING_THRESHOLD


def best_mentor(category: DocumentCategory, mentors: Iterable[Mentor]) -> Optional[Mentor]:
    """Return the first active mentor specialising in ``category``.

    ``mentors`` is expected best-rated first, as the store returns them.
    """

    specialization = CATEGORY_SPECIALIZATIONS[DocumentCategory(category)]
    for mentor in mentors:
        if mentor.availability_status == "active" and specialization in mentor.specialization:
            return mentor
    return None


def match_mentors(mentors: Sequence[Mentor]) -> List[MentorMatch]:
    matches = []
    for category in DocumentCategory:
        mentor = best_mentor(category, mentors)
        if mentor is None:
            logger.warning("No active mentor for %s", category.value)
            continue
        matches.append(MentorMatch(category=category, mentor=mentor))
    return matches


async def record_rating(
    store: DocumentStore,
    *,
    session_id: str,
    user_id: str,
    rating: int,
    service_type: str,
    feedback_reason: str | None = None,
) -> tuple[ServiceRating, List[MentorMatch]]:
    """Append a rating; low ratings come back with one mentor per category."""

    matches: List[MentorMatch] = []
    if needs_mentor(rating):
        matches = match_mentors(await store.list_mentors())

    record = ServiceRating(
        user_id=user_id,
        session_id=session_id,
        service_type=service_type,
        rating=rating,
        feedback_reason=feedback_reason,
        mentor_assigned=bool(matches),
        mentor_id=matches[0].mentor.id if matches else None,
    )
    await store.insert_rating(record)
    return record, matches
