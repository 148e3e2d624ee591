"""Six-question onboarding conversation that ends in document generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import SessionNotFoundError
from .log import get_logger, log_with_context
from .mentors import needs_mentor, record_rating
from .orchestrator import GenerationOrchestrator
from .schemas import (
    SERVICE_TYPE,
    BusinessProfile,
    ChatMessage,
    DocumentCategory,
    GenerationReport,
    MentorMatch,
    MessageType,
    SessionStatus,
    WizardReply,
    WizardStage,
)
from .store import DocumentStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class Question:
    field: str
    prompt: str


QUESTIONS: List[Question] = [
    Question("business_name", "What is the company name or preferred company name?"),
    Question("company_description", "Please provide a brief description of the company or company website"),
    Question("location", "Which location will the business operate in?"),
    Question("partners_info", "Who will be the partners or directors? (How many and their roles?)"),
    Question("color_preference", "What color tone would you prefer for branding? (Earthy, Bright, Professional, etc.)"),
    Question(
        "style_preference",
        "What style would you prefer? (Conservative/Classic, Modern/Contemporary, Expressive/Bold)",
    ),
]

WELCOME_MESSAGE = (
    "Welcome to StartUP Companion! I'm here to help you launch your business.\n\n"
    "Please choose an option:\n\n"
    "1. Idea Tuning - My idea is not firmed up yet\n"
    "2. Confirmed Idea - I'm ready to get my business documents\n\n"
    "Just type the number (1 or 2) to get started!"
)
IDEA_TUNING_MESSAGE = (
    "Idea Tuning service will be available soon! This feature will help you refine and validate "
    'your business concept.\n\nFor now, if you have a confirmed idea, please type "2" to proceed '
    "with document generation."
)
CHOOSE_OPTION_MESSAGE = "Please type 1 for Idea Tuning or 2 for Confirmed Idea to proceed."
GENERATING_MESSAGE = (
    "Perfect! I have all the information I need.\n\n"
    "Processing your information and generating your business documents...\n\n"
    "This may take a few moments. Please wait."
)
STILL_GENERATING_MESSAGE = "Your documents are still being generated. Please wait a moment."
RATING_PROMPT = (
    "\U0001f389 All your business documents have been generated!\n\n"
    "You can view them in the document dashboard.\n\n"
    "How would you rate your experience?\n\n"
    "Please type a number from 1-5:\n\n"
    "1 ⭐ - Poor\n"
    "2 ⭐⭐ - Fair\n"
    "3 ⭐⭐⭐ - Good\n"
    "4 ⭐⭐⭐⭐ - Very Good\n"
    "5 ⭐⭐⭐⭐⭐ - Excellent"
)
INVALID_RATING_MESSAGE = "Please provide a valid rating between 1 and 5."
FEEDBACK_PROMPT = (
    "We're sorry to hear that. Could you briefly tell us what went wrong or what we could improve? "
    "Your feedback helps us serve you better."
)
FINAL_MESSAGE = (
    "All your documents are available in the dashboard. You can view or download them anytime. "
    "Thank you for using StartUP Companion!"
)
FEEDBACK_THANKS = (
    "Thank you for your feedback. Let us connect you with our expert mentors who can provide "
    "personalized guidance for each area of your business."
)
SESSION_COMPLETE_MESSAGE = "This session is complete. Start a new session to generate documents for another business."


def thank_you_message(rating: int) -> str:
    message = f"Thank you for your {rating}-star rating!"
    if rating >= 4:
        message += " \U0001f389 We're glad you had a great experience!"
    return message


def mentor_message(matches: List[MentorMatch]) -> str:
    lines = ["\U0001f4de Your Recommended Mentors"]
    for match in matches:
        mentor = match.mentor
        contact = mentor.email if not mentor.phone else f"{mentor.email}, {mentor.phone}"
        lines.append(
            f"- {match.category.value.capitalize()}: {mentor.name} ({', '.join(mentor.specialization)}) - {contact}"
        )
    return "\n".join(lines)


def parse_rating(content: str) -> Optional[int]:
    try:
        rating = int(content.strip())
    except ValueError:
        return None
    return rating if 1 <= rating <= 5 else None


def answer_fields(question: Question, answer: str) -> Dict[str, Any]:
    """Coerce a raw answer into the profile columns it fills."""

    text = str(answer).strip()
    if question.field == "partners_info":
        return {"partners_info": [{"info": text}]}
    return {question.field: text}


def answered_questions(profile: Optional[BusinessProfile]) -> int:
    """Count the leading questions whose answers are already stored."""

    if profile is None:
        return 0
    for index, question in enumerate(QUESTIONS):
        if not getattr(profile, question.field):
            return index
    return len(QUESTIONS)


@dataclass
class WizardState:
    """Where one session is in the conversation."""

    session_id: str
    user_id: str
    stage: WizardStage = WizardStage.INITIAL
    question_index: int = 0
    pending_rating: Optional[int] = None
    report: Optional[GenerationReport] = None


@dataclass
class WizardRegistry:
    """Holds the ``WizardState`` of every session still in progress."""

    states: Dict[str, WizardState] = field(default_factory=dict)

    def add(self, state: WizardState) -> WizardState:
        self.states[state.session_id] = state
        return state

    def find(self, session_id: str) -> Optional[WizardState]:
        return self.states.get(session_id)

    def discard(self, session_id: str) -> None:
        self.states.pop(session_id, None)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self.states


class Wizard:
    """Drive a session through questioning, generation, rating and feedback."""

    def __init__(
        self,
        store: DocumentStore,
        orchestrator: GenerationOrchestrator,
        registry: WizardRegistry | None = None,
    ) -> None:
        self.store = store
        self.orchestrator = orchestrator
        self.registry = registry if registry is not None else WizardRegistry()

    async def start(self, user_id: str) -> WizardReply:
        """Open a session and greet the user."""

        session = await self.store.create_session(user_id)
        state = self.registry.add(WizardState(session_id=session.id, user_id=user_id))
        log_with_context(logger, logging.INFO, "Wizard session started", session_id=session.id, user_id=user_id)
        return await self._reply(state, [WELCOME_MESSAGE])

    async def handle(self, session_id: str, content: str) -> WizardReply:
        """Record the user's message and advance the session by one step."""

        state = self.registry.find(session_id) or await self._resume(session_id)
        await self._save(state, MessageType.USER, content)

        if state.stage is WizardStage.INITIAL:
            return await self._choose_service(state, content)
        if state.stage is WizardStage.QUESTIONING:
            return await self._answer(state, content)
        if state.stage is WizardStage.GENERATING:
            return await self._reply(state, [STILL_GENERATING_MESSAGE])
        if state.stage is WizardStage.RATING:
            return await self._rate(state, content)
        if state.stage is WizardStage.FEEDBACK:
            return await self._feedback(state, content)
        return await self._reply(state, [SESSION_COMPLETE_MESSAGE])

    async def _resume(self, session_id: str) -> WizardState:
        """Rebuild the state of a session this process is not tracking.

        Completed sessions are answered without being registered again. An
        active session resumes at its first unanswered question, or at the
        rating step once every answer is stored.
        """

        session = await self.store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        state = WizardState(session_id=session.id, user_id=session.user_id)
        if session.session_status is not SessionStatus.ACTIVE:
            state.stage = WizardStage.COMPLETED
            return state

        if session.service_type == SERVICE_TYPE:
            state.question_index = answered_questions(await self.store.get_profile(session_id))
            if state.question_index < len(QUESTIONS):
                state.stage = WizardStage.QUESTIONING
            else:
                state.stage = WizardStage.RATING
        log_with_context(
            logger, logging.INFO, "Wizard session resumed", session_id=session_id, stage=state.stage.value
        )
        return self.registry.add(state)

    async def _choose_service(self, state: WizardState, content: str) -> WizardReply:
        choice = content.strip()
        if choice == "1":
            return await self._reply(state, [IDEA_TUNING_MESSAGE])
        if choice == "2":
            state.stage = WizardStage.QUESTIONING
            state.question_index = 0
            await self.store.update_session(state.session_id, service_type=SERVICE_TYPE)
            intro = (
                f"Great! I'll ask you {len(QUESTIONS)} quick questions to gather the information we need.\n\n"
                f"Question 1 of {len(QUESTIONS)}:\n{QUESTIONS[0].prompt}"
            )
            return await self._reply(state, [intro])
        return await self._reply(state, [CHOOSE_OPTION_MESSAGE])

    async def _answer(self, state: WizardState, content: str) -> WizardReply:
        question = QUESTIONS[state.question_index]
        # Persist before advancing so a failed write re-asks the same question.
        await self.store.upsert_profile(state.session_id, state.user_id, answer_fields(question, content))
        state.question_index += 1

        if state.question_index < len(QUESTIONS):
            prompt = QUESTIONS[state.question_index].prompt
            text = f"Got it!\n\nQuestion {state.question_index + 1} of {len(QUESTIONS)}:\n{prompt}"
            return await self._reply(state, [text])

        state.stage = WizardStage.GENERATING
        messages = [GENERATING_MESSAGE]
        await self._save(state, MessageType.AI, GENERATING_MESSAGE)
        try:
            state.report = await self.orchestrator.run(state.session_id, state.user_id)
        except Exception:
            state.stage = WizardStage.QUESTIONING
            state.question_index = len(QUESTIONS) - 1
            raise

        state.stage = WizardStage.RATING
        if state.report.timed_out:
            pending = [c.value for c, s in state.report.statuses.items() if not s.is_terminal]
            log_with_context(
                logger,
                logging.WARNING,
                "Continuing to rating with documents still generating",
                session_id=state.session_id,
                pending=",".join(pending),
            )
        await self._save(state, MessageType.AI, RATING_PROMPT)
        messages.append(RATING_PROMPT)
        documents = await self.store.list_session_documents(state.session_id)
        documents.sort(key=lambda doc: DocumentCategory(doc.document_type).order)
        return self._build_reply(state, messages, documents=documents)

    async def _rate(self, state: WizardState, content: str) -> WizardReply:
        rating = parse_rating(content)
        if rating is None:
            return await self._reply(state, [INVALID_RATING_MESSAGE])

        messages = [thank_you_message(rating)]
        if needs_mentor(rating):
            state.pending_rating = rating
            state.stage = WizardStage.FEEDBACK
            messages.append(FEEDBACK_PROMPT)
            return await self._reply(state, messages)

        await record_rating(
            self.store,
            session_id=state.session_id,
            user_id=state.user_id,
            rating=rating,
            service_type=SERVICE_TYPE,
        )
        messages.append(FINAL_MESSAGE)
        await self._complete(state)
        return await self._reply(state, messages)

    async def _feedback(self, state: WizardState, content: str) -> WizardReply:
        rating = state.pending_rating or 1
        _, matches = await record_rating(
            self.store,
            session_id=state.session_id,
            user_id=state.user_id,
            rating=rating,
            service_type=SERVICE_TYPE,
            feedback_reason=content.strip() or None,
        )
        state.pending_rating = None
        messages = [FEEDBACK_THANKS]
        if matches:
            messages.append(mentor_message(matches))
        await self._complete(state)
        for text in messages:
            await self._save(state, MessageType.AI, text)
        return self._build_reply(state, messages, mentors=matches)

    async def _complete(self, state: WizardState) -> None:
        state.stage = WizardStage.COMPLETED
        await self.store.update_session(state.session_id, status=SessionStatus.COMPLETED)
        self.registry.discard(state.session_id)

    async def _save(self, state: WizardState, kind: MessageType, content: str) -> None:
        await self.store.append_message(
            ChatMessage(session_id=state.session_id, user_id=state.user_id, message_type=kind, content=content)
        )

    async def _reply(self, state: WizardState, messages: List[str]) -> WizardReply:
        for text in messages:
            await self._save(state, MessageType.AI, text)
        return self._build_reply(state, messages)

    def _build_reply(self, state: WizardState, messages: List[str], **extra: Any) -> WizardReply:
        return WizardReply(
            session_id=state.session_id,
            stage=state.stage,
            question_index=state.question_index,
            messages=messages,
            report=state.report,
            **extra,
        )

