"""FastAPI dependencies that hand routers the collaborators on ``app.state``."""

from __future__ import annotations

from fastapi import Request

from .generator import DocumentGenerator
from .orchestrator import GenerationOrchestrator
from .storage import ObjectStorage
from .store import DocumentStore
from .wizard import Wizard


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_generator(request: Request) -> DocumentGenerator:
    return request.app.state.generator


def get_orchestrator(request: Request) -> GenerationOrchestrator:
    return request.app.state.orchestrator


def get_wizard(request: Request) -> Wizard:
    return request.app.state.wizard


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage
