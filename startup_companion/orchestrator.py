"""Fan out the four generators and wait for their rows to become terminal."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Set

from .errors import CompanionError, ProfileNotFoundError
from .generator import DocumentGenerator
from .log import get_logger, log_with_context
from .schemas import BusinessProfile, DocumentCategory, GenerationReport, GenerationStatus
from .store import DocumentStore

logger = get_logger(__name__)

REQUIRED_PROFILE_FIELDS = (
    "business_name",
    "company_description",
    "location",
    "partners_info",
    "color_preference",
    "style_preference",
)

SleepFn = Callable[[float], Awaitable[None]]


def missing_profile_fields(profile: BusinessProfile) -> List[str]:
    return [name for name in REQUIRED_PROFILE_FIELDS if not getattr(profile, name)]


class GenerationOrchestrator:
    """Launch every category concurrently, then poll the store until done.

    The poll loop is the convergence barrier: it returns as soon as all four
    rows are terminal, or after ``max_attempts`` reads. Generators still in
    flight at that point keep running and write their own terminal row.
    """

    def __init__(
        self,
        generator: DocumentGenerator,
        store: DocumentStore,
        *,
        poll_interval: float = 2.0,
        max_attempts: int = 30,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.generator = generator
        self.store = store
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self._sleep = sleep
        self._pending: Set[asyncio.Task] = set()

    async def run(self, session_id: str, user_id: str) -> GenerationReport:
        profile = await self.store.get_profile(session_id)
        if profile is None:
            raise ProfileNotFoundError(session_id)

        missing = missing_profile_fields(profile)
        if missing:
            log_with_context(
                logger,
                logging.WARNING,
                "Business profile missing fields, generating anyway",
                session_id=session_id,
                missing=",".join(missing),
            )

        await asyncio.gather(
            *(self.generator.mark_generating(category, session_id, user_id) for category in DocumentCategory)
        )

        for category in DocumentCategory:
            self._launch(category, session_id, user_id, profile)

        return await self.wait_for_terminal(session_id)

    def _launch(self, category: DocumentCategory, session_id: str, user_id: str, profile: BusinessProfile) -> None:
        task = asyncio.create_task(
            self.generator.generate(category, session_id, user_id, profile),
            name=f"generate-{category.value}-{session_id}",
        )
        self._pending.add(task)
        task.add_done_callback(self._settled)

    def _settled(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("%s raised: %s", task.get_name(), exc, exc_info=exc)

    async def drain(self) -> None:
        """Wait for generators still running from earlier calls."""

        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def wait_for_terminal(self, session_id: str) -> GenerationReport:
        statuses: Dict[DocumentCategory, GenerationStatus] = {
            category: GenerationStatus.GENERATING for category in DocumentCategory
        }
        for attempt in range(1, self.max_attempts + 1):
            statuses.update(await self._observe(session_id))
            if all(status.is_terminal for status in statuses.values()):
                return GenerationReport(
                    session_id=session_id,
                    statuses=statuses,
                    all_terminal=True,
                    timed_out=False,
                    attempts=attempt,
                )
            if attempt < self.max_attempts:
                await self._sleep(self.poll_interval)

        log_with_context(
            logger,
            logging.WARNING,
            "Generation poll timed out, proceeding with terminal rows only",
            session_id=session_id,
            statuses=",".join(f"{c.value}:{s.value}" for c, s in statuses.items()),
        )
        return GenerationReport(
            session_id=session_id,
            statuses=statuses,
            all_terminal=False,
            timed_out=True,
            attempts=self.max_attempts,
        )

    async def _observe(self, session_id: str) -> Dict[DocumentCategory, GenerationStatus]:
        """Read the current rows; a slow or failing read observes nothing new."""

        try:
            documents = await asyncio.wait_for(
                self.store.list_session_documents(session_id), timeout=max(self.poll_interval, 0.01)
            )
        except asyncio.TimeoutError:
            logger.warning("Status read for %s timed out", session_id)
            return {}
        except CompanionError as exc:
            logger.warning("Status read for %s failed: %s", session_id, exc)
            return {}
        return {doc.document_type: doc.generation_status for doc in documents}
