"""Liveness endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request


router = APIRouter(tags=["health"])


@router.get("/health")
async def healthcheck(request: Request) -> dict[str, str]:
    """Simple health check endpoint."""

    return {
        "status": "ok",
        "store": request.app.state.backend,
        "completion": "configured" if request.app.state.settings.has_api_key else "missing_api_key",
    }
