from __future__ import annotations

import pytest

from startup_companion.errors import SessionNotFoundError
from startup_companion.generator import DocumentGenerator
from startup_companion.orchestrator import GenerationOrchestrator
from startup_companion.schemas import BusinessProfile, MessageType, SessionStatus, WizardStage
from startup_companion.wizard import (
    CHOOSE_OPTION_MESSAGE,
    FEEDBACK_PROMPT,
    FINAL_MESSAGE,
    IDEA_TUNING_MESSAGE,
    INVALID_RATING_MESSAGE,
    QUESTIONS,
    RATING_PROMPT,
    WELCOME_MESSAGE,
    Wizard,
    WizardRegistry,
    answer_fields,
    answered_questions,
    parse_rating,
)

from conftest import TODAY

ANSWERS = [
    "Acme Foods",
    "Packaged millet snacks for offices",
    "Mumbai",
    "Two directors: CEO and COO",
    "Earthy",
    "Modern/Contemporary",
]


@pytest.fixture
def wizard(store, storage, completer) -> Wizard:
    generator = DocumentGenerator(store, storage, completer, today=lambda: TODAY)
    orchestrator = GenerationOrchestrator(generator, store, poll_interval=0.01, max_attempts=500)
    return Wizard(store, orchestrator, WizardRegistry())


async def _answer_everything(wizard: Wizard) -> tuple[str, object]:
    started = await wizard.start("u1")
    session_id = started.session_id
    await wizard.handle(session_id, "2")
    reply = None
    for answer in ANSWERS:
        reply = await wizard.handle(session_id, answer)
    return session_id, reply


@pytest.mark.asyncio
async def test_start_greets_and_registers_state(wizard, store) -> None:
    reply = await wizard.start("u1")

    assert reply.stage is WizardStage.INITIAL
    assert reply.messages == [WELCOME_MESSAGE]
    assert reply.session_id in wizard.registry
    assert (await store.get_session(reply.session_id)).user_id == "u1"


@pytest.mark.asyncio
async def test_option_one_and_unknown_input_stay_in_initial(wizard) -> None:
    session_id = (await wizard.start("u1")).session_id

    tuning = await wizard.handle(session_id, "1")
    other = await wizard.handle(session_id, "hello")

    assert tuning.messages == [IDEA_TUNING_MESSAGE]
    assert other.messages == [CHOOSE_OPTION_MESSAGE]
    assert other.stage is WizardStage.INITIAL


@pytest.mark.asyncio
async def test_option_two_asks_first_question(wizard, store) -> None:
    session_id = (await wizard.start("u1")).session_id

    reply = await wizard.handle(session_id, " 2 ")

    assert reply.stage is WizardStage.QUESTIONING
    assert reply.question_index == 0
    assert reply.messages[0].endswith(f"Question 1 of 6:\n{QUESTIONS[0].prompt}")
    assert (await store.get_session(session_id)).service_type == "confirmed_idea_flow"


@pytest.mark.asyncio
async def test_each_answer_is_persisted_before_advancing(wizard, store) -> None:
    session_id = (await wizard.start("u1")).session_id
    await wizard.handle(session_id, "2")

    reply = await wizard.handle(session_id, "Acme Foods")

    assert reply.question_index == 1
    assert reply.messages == [f"Got it!\n\nQuestion 2 of 6:\n{QUESTIONS[1].prompt}"]
    profile = await store.get_profile(session_id)
    assert profile.business_name == "Acme Foods"
    assert profile.user_id == "u1"


@pytest.mark.asyncio
async def test_last_answer_generates_documents_and_asks_for_rating(wizard, store) -> None:
    session_id, reply = await _answer_everything(wizard)

    assert reply.stage is WizardStage.RATING
    assert reply.messages[-1] == RATING_PROMPT
    assert reply.report.all_terminal
    assert [doc.document_type.value for doc in reply.documents] == ["registration", "branding", "compliance", "hr"]
    profile = await store.get_profile(session_id)
    assert profile.partners_info == [{"info": "Two directors: CEO and COO"}]
    assert profile.style_preference == "Modern/Contemporary"


@pytest.mark.asyncio
async def test_high_rating_completes_session(wizard, store) -> None:
    session_id, _ = await _answer_everything(wizard)

    invalid = await wizard.handle(session_id, "ten")
    reply = await wizard.handle(session_id, "5")

    assert invalid.messages == [INVALID_RATING_MESSAGE]
    assert reply.stage is WizardStage.COMPLETED
    assert reply.messages[0].startswith("Thank you for your 5-star rating!")
    assert reply.messages[-1] == FINAL_MESSAGE
    assert reply.mentors == []
    ratings = await store.list_ratings(session_id)
    assert [r.rating for r in ratings] == [5]
    assert (await store.get_session(session_id)).session_status is SessionStatus.COMPLETED


@pytest.mark.asyncio
async def test_low_rating_collects_feedback_then_offers_mentors(wizard, store) -> None:
    session_id, _ = await _answer_everything(wizard)

    asked = await wizard.handle(session_id, "2")
    reply = await wizard.handle(session_id, "The compliance guide was too generic")

    assert asked.stage is WizardStage.FEEDBACK
    assert asked.messages == ["Thank you for your 2-star rating!", FEEDBACK_PROMPT]
    assert reply.stage is WizardStage.COMPLETED
    assert len(reply.mentors) == 4
    assert "Sneha Reddy" in reply.messages[-1]
    ratings = await store.list_ratings(session_id)
    assert len(ratings) == 1
    assert ratings[0].rating == 2
    assert ratings[0].feedback_reason == "The compliance guide was too generic"
    assert ratings[0].mentor_assigned


@pytest.mark.asyncio
async def test_every_message_is_saved(wizard, store) -> None:
    session_id, _ = await _answer_everything(wizard)
    await wizard.handle(session_id, "4")

    transcript = await store.list_messages(session_id)
    user_messages = [m.content for m in transcript if m.message_type is MessageType.USER]
    ai_messages = [m.content for m in transcript if m.message_type is MessageType.AI]

    assert user_messages == ["2", *ANSWERS, "4"]
    assert ai_messages[0] == WELCOME_MESSAGE
    assert RATING_PROMPT in ai_messages
    assert ai_messages[-1] == FINAL_MESSAGE


@pytest.mark.asyncio
async def test_completed_session_only_acknowledges(wizard) -> None:
    session_id, _ = await _answer_everything(wizard)
    await wizard.handle(session_id, "5")

    reply = await wizard.handle(session_id, "hello again")

    assert reply.stage is WizardStage.COMPLETED
    assert "session is complete" in reply.messages[0]


@pytest.mark.asyncio
async def test_completed_sessions_leave_the_registry(wizard) -> None:
    for _ in range(3):
        session_id, _ = await _answer_everything(wizard)
        await wizard.handle(session_id, "5")
        assert session_id not in wizard.registry

    assert wizard.registry.states == {}


@pytest.mark.asyncio
async def test_session_resumes_at_next_question_after_restart(wizard, store) -> None:
    started = await wizard.start("u1")
    session_id = started.session_id
    await wizard.handle(session_id, "2")
    await wizard.handle(session_id, ANSWERS[0])
    await wizard.handle(session_id, ANSWERS[1])
    restarted = Wizard(store, wizard.orchestrator, WizardRegistry())

    reply = await restarted.handle(session_id, ANSWERS[2])

    assert reply.stage is WizardStage.QUESTIONING
    assert reply.question_index == 3
    assert reply.messages[0].endswith(QUESTIONS[3].prompt)
    assert (await store.get_profile(session_id)).location == "Mumbai"
    assert session_id in restarted.registry


@pytest.mark.asyncio
async def test_fully_answered_session_resumes_at_rating(wizard, store) -> None:
    session_id, _ = await _answer_everything(wizard)
    restarted = Wizard(store, wizard.orchestrator, WizardRegistry())

    reply = await restarted.handle(session_id, "5")

    assert reply.stage is WizardStage.COMPLETED
    assert [r.rating for r in await store.list_ratings(session_id)] == [5]


@pytest.mark.asyncio
async def test_completed_session_is_acknowledged_after_restart(wizard, store) -> None:
    session_id, _ = await _answer_everything(wizard)
    await wizard.handle(session_id, "5")
    restarted = Wizard(store, wizard.orchestrator, WizardRegistry())

    reply = await restarted.handle(session_id, "hello again")

    assert reply.stage is WizardStage.COMPLETED
    assert "session is complete" in reply.messages[0]
    assert session_id not in restarted.registry


@pytest.mark.asyncio
async def test_unknown_session_raises(wizard) -> None:
    with pytest.raises(SessionNotFoundError):
        await wizard.handle("missing", "2")


def test_answered_questions_stops_at_first_gap() -> None:
    assert answered_questions(None) == 0
    assert answered_questions(BusinessProfile(session_id="s1", business_name="Acme", location="Mumbai")) == 1


def test_partners_answer_becomes_a_record() -> None:
    assert answer_fields(QUESTIONS[3], "  Two founders ") == {"partners_info": [{"info": "Two founders"}]}
    assert answer_fields(QUESTIONS[0], "Acme") == {"business_name": "Acme"}


@pytest.mark.parametrize("raw, expected", [("1", 1), (" 5 ", 5), ("0", None), ("6", None), ("4.5", None), ("", None)])
def test_parse_rating(raw: str, expected) -> None:
    assert parse_rating(raw) == expected
