"""Liveness endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request

from app.models.responses import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(request: Request) -> HealthResponse:
    settings = request.app.state.settings
    return HealthResponse(version=settings.app_version, service=settings.app_name)
