"""Application factory for the StartUP Companion FastAPI backend."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .errors import PersistenceError, to_error_payload
from .generator import DocumentGenerator
from .llm import CompletionClient
from .log import get_logger
from .mentors import DEFAULT_MENTORS
from .orchestrator import GenerationOrchestrator
from .routers import documents, health, mentors, sessions, wizard
from .storage import InMemoryObjectStorage, ObjectStorage, SupabaseObjectStorage
from .store import DocumentStore, InMemoryStore, SupabaseStore
from .wizard import Wizard, WizardRegistry

logger = get_logger(__name__)


def _build_backends(settings: Settings) -> tuple[DocumentStore, ObjectStorage]:
    """Return Supabase backends when credentials exist, in-memory ones otherwise."""

    if not settings.has_supabase:
        logger.info("Supabase not configured, using in-memory store and storage")
        return InMemoryStore(mentors=DEFAULT_MENTORS), InMemoryObjectStorage()

    from supabase import create_client

    try:
        client = create_client(settings.supabase_url, settings.supabase_service_role_key)
    except Exception as exc:
        raise RuntimeError(f"Failed to initialize Supabase client: {exc}") from exc
    return SupabaseStore(client), SupabaseObjectStorage(client, settings.storage_bucket)


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content=to_error_payload(exc, "document"))


def create_app(
    settings: Settings | None = None,
    store: DocumentStore | None = None,
    storage: ObjectStorage | None = None,
    completer: CompletionClient | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application instance."""
    settings = settings or get_settings()
    app = FastAPI(
        title="StartUP Companion Backend",
        version="0.1.0",
        description="Business document generation backend for StartUP Companion.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_origin_regex=r"http://localhost:\d+$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if store is None or storage is None:
        default_store, default_storage = _build_backends(settings)
        store = store or default_store
        storage = storage or default_storage
    completer = completer or CompletionClient(settings)

    generator = DocumentGenerator(store, storage, completer, model=settings.openrouter_model)
    orchestrator = GenerationOrchestrator(
        generator,
        store,
        poll_interval=settings.poll_interval_seconds,
        max_attempts=settings.poll_max_attempts,
    )

    app.state.settings = settings
    app.state.backend = "supabase" if isinstance(store, SupabaseStore) else "memory"
    app.state.store = store
    app.state.storage = storage
    app.state.completer = completer
    app.state.generator = generator
    app.state.orchestrator = orchestrator
    app.state.wizard = Wizard(store, orchestrator, WizardRegistry())

    app.add_exception_handler(PersistenceError, persistence_error_handler)
    app.include_router(health.router)
    app.include_router(documents.router)
    app.include_router(sessions.router)
    app.include_router(wizard.router)
    app.include_router(mentors.router)
    return app


app = create_app()
