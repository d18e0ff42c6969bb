# src/forge_api/api/v1/endpoints/visitors.py
"""Visitor presence endpoints for the "users online" counter."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from forge_api.api.v1.dependencies import CacheDep, OptionalUserDep, SessionDep
from forge_api.schemas.visitor import Heartbeat, PeakStats, VisitorOverview, VisitorStats
from forge_api.services.visitors import VisitorService

router = APIRouter(prefix="/visitors", tags=["visitors"])


@router.post("/heartbeat", response_model=VisitorOverview)
async def heartbeat(
    payload: Heartbeat,
    current_user: OptionalUserDep,
    db: SessionDep,
    cache: CacheDep,
) -> dict[str, Any]:
    """Mark the session as active and return the live counters."""
    service = VisitorService(db, cache)
    service.track_visitor(payload.session_id, current_user.id if current_user else None)
    return {"current": service.current_stats(), "peak": service.peak_stats()}


@router.get("", response_model=VisitorOverview)
async def visitor_overview(db: SessionDep, cache: CacheDep) -> dict[str, Any]:
    service = VisitorService(db, cache)
    return {"current": service.current_stats(), "peak": service.peak_stats()}


@router.get("/current", response_model=VisitorStats)
async def current_visitors(db: SessionDep, cache: CacheDep) -> dict[str, int]:
    return VisitorService(db, cache).current_stats()


@router.get("/peak", response_model=PeakStats)
async def peak_visitors(db: SessionDep, cache: CacheDep) -> dict[str, Any]:
    return VisitorService(db, cache).peak_stats()
