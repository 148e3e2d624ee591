"""Single-category document generation: prompt, key points, PDF, upsert."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Mapping

from .categories import CategoryConfig, get_category
from .errors import UPSTREAM_USER_MESSAGE, StorageError, to_error_payload
from .keypoints import extract_key_points
from .llm import CompletionClient, PromptSpec
from .log import get_logger, log_with_context
from .pdf import render_pdf
from .schemas import BusinessProfile, DocumentCategory, GeneratedDocument, GenerationStatus
from .storage import PDF_CONTENT_TYPE, ObjectStorage, pdf_object_key
from .store import DocumentStore

logger = get_logger(__name__)

MIN_CONTENT_LENGTH = 100
PDF_WARNING = "Document saved successfully but PDF generation failed. You can view the content online."


@dataclass
class GenerationResult:
    """Terminal row plus what the HTTP layer needs to answer the caller."""

    document: GeneratedDocument
    warning: str | None = None
    error: Dict[str, str] | None = None

    @property
    def succeeded(self) -> bool:
        return self.document.generation_status is GenerationStatus.COMPLETED


def coerce_profile(session_id: str, profile: BusinessProfile | Mapping[str, Any] | None) -> BusinessProfile:
    """Normalise a snapshot (or nothing) into a ``BusinessProfile``."""

    if isinstance(profile, BusinessProfile):
        return profile
    data = dict(profile or {})
    if not data.get("partners_info") and data.get("directors_partners"):
        data["partners_info"] = data["directors_partners"]
    data["session_id"] = session_id
    return BusinessProfile.model_validate(data)


def build_context(profile: BusinessProfile, config: CategoryConfig) -> str:
    """Interpolate profile fields into the user message; every field has a default."""

    defaults = config.field_defaults
    partners = profile.partners_info or []
    lines = [
        "Business Information:",
        f"- Company Name: {profile.business_name or defaults.get('business_name', 'Company')}",
        f"- Description: {profile.company_description or profile.business_description or 'Not provided'}",
        f"- Industry: {profile.industry or profile.business_type or 'General'}",
        f"- Business Type: {profile.business_type or 'General'}",
        f"- Entity Type: {profile.entity_type or 'To be determined'}",
        f"- Location: {profile.location or 'India'}",
        f"- Partners/Directors: {json.dumps(partners, ensure_ascii=False)}",
        f"- Number of Owners: {len(partners) or 1}",
        f"- Color Preference: {profile.color_preference or defaults.get('color_preference', 'Not specified')}",
        f"- Style Preference: {profile.style_preference or defaults.get('style_preference', 'Not specified')}",
        "",
        config.closing,
    ]
    return "\n".join(lines)


class DocumentGenerator:
    """One parametrized generator for every category in the configuration table."""

    def __init__(
        self,
        store: DocumentStore,
        storage: ObjectStorage,
        completer: CompletionClient,
        *,
        model: str = "openai/gpt-4o-mini",
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.storage = storage
        self.completer = completer
        self.model = model
        self._today = today

    async def mark_generating(self, category: DocumentCategory, session_id: str, user_id: str) -> GeneratedDocument:
        """Write the ``generating`` placeholder readers see while the call runs."""

        config = get_category(category)
        placeholder = GeneratedDocument(
            user_id=user_id,
            session_id=session_id,
            document_type=config.category,
            document_title=config.title,
            generation_status=GenerationStatus.GENERATING,
        )
        return await self.store.upsert_document(placeholder)

    async def generate(
        self,
        category: DocumentCategory,
        session_id: str,
        user_id: str,
        profile: BusinessProfile | Mapping[str, Any] | None = None,
    ) -> GenerationResult:
        """Produce a terminal ``GeneratedDocument`` row for ``category``.

        Failures while loading the profile or calling the model become a
        ``failed`` row with an error payload. A PDF failure only drops the
        PDF reference. A store failure while saving raises ``PersistenceError``.
        """

        config = get_category(category)
        try:
            snapshot = await self._resolve_profile(session_id, profile)
            context = build_context(snapshot, config)
            content = await self.completer.complete(
                PromptSpec(
                    system_prompt=config.prompt,
                    user_prompt=context,
                    model=self.model,
                    temperature=config.temperature,
                    max_tokens=config.max_tokens,
                )
            )
        except Exception as exc:
            log_with_context(
                logger,
                logging.ERROR,
                f"{config.title} generation failed: {exc}",
                session_id=session_id,
                category=config.category.value,
                error_type=type(exc).__name__,
            )
            return await self._fail(config, session_id, user_id, to_error_payload(exc, config.title))

        if len(content.strip()) <= MIN_CONTENT_LENGTH:
            log_with_context(
                logger,
                logging.WARNING,
                f"{config.title} content too short ({len(content.strip())} chars)",
                session_id=session_id,
                category=config.category.value,
            )
            payload = {
                "error": "Generated content too short",
                "userMessage": UPSTREAM_USER_MESSAGE,
                "details": f"Received {len(content.strip())} characters",
            }
            return await self._fail(config, session_id, user_id, payload)

        key_points = extract_key_points(content, config.rules, config.fallbacks)
        business_name = snapshot.business_name or "Your Business"
        pdf_url, pdf_file_name = await self._store_pdf(config, user_id, content, business_name)

        document = GeneratedDocument(
            user_id=user_id,
            session_id=session_id,
            document_type=config.category,
            document_title=config.title,
            key_points=key_points,
            full_content=content,
            pdf_url=pdf_url,
            pdf_file_name=pdf_file_name,
            generation_status=GenerationStatus.COMPLETED,
        )
        saved = await self.store.upsert_document(document)
        log_with_context(
            logger,
            logging.INFO,
            f"{config.title} generated",
            session_id=session_id,
            category=config.category.value,
            chars=len(content),
            pdf=bool(pdf_url),
        )
        return GenerationResult(document=saved, warning=None if pdf_url else PDF_WARNING)

    async def _resolve_profile(
        self, session_id: str, profile: BusinessProfile | Mapping[str, Any] | None
    ) -> BusinessProfile:
        if profile is None:
            profile = await self.store.get_profile(session_id)
        return coerce_profile(session_id, profile)

    async def _store_pdf(
        self, config: CategoryConfig, user_id: str, content: str, business_name: str
    ) -> tuple[str | None, str | None]:
        today = self._today()
        key = pdf_object_key(user_id, config.category, today)
        try:
            data = await asyncio.to_thread(
                render_pdf,
                content,
                title=config.pdf_title,
                business_name=business_name,
                color=config.color,
                generated_on=today,
            )
        except Exception:
            logger.exception("PDF rendering failed for %s, saving without PDF", config.category.value)
            return None, None
        try:
            url = await self.storage.upload(key, data, PDF_CONTENT_TYPE)
        except StorageError as exc:
            logger.warning("PDF for %s not stored, saving without PDF: %s", config.category.value, exc)
            return None, None
        except Exception:
            logger.exception("PDF upload failed for %s, saving without PDF", config.category.value)
            return None, None
        return url, key

    async def _fail(
        self, config: CategoryConfig, session_id: str, user_id: str, error: Dict[str, str]
    ) -> GenerationResult:
        document = GeneratedDocument(
            user_id=user_id,
            session_id=session_id,
            document_type=config.category,
            document_title=config.title,
            generation_status=GenerationStatus.FAILED,
        )
        saved = await self.store.upsert_document(document)
        return GenerationResult(document=saved, error=error)
