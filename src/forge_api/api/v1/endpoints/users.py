# src/forge_api/api/v1/endpoints/users.py
"""User administration and ban endpoints for the Forge API."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query, status

from forge_api.api.v1.dependencies import (
    AdminUserDep,
    CacheDep,
    RequestContextDep,
    SessionDep,
    StaffUserDep,
    get_or_404,
)
from forge_api.models import Ban, Report, User, UserRole
from forge_api.schemas.common import Message, PageResponse
from forge_api.schemas.report import ReportResponse
from forge_api.schemas.user import (
    BanCreate,
    BanResponse,
    IpBanStatus,
    IpBanToggle,
    RoleUpdate,
    UserResponse,
)
from forge_api.services.bans import BanService
from forge_api.services.users import USERS_PAGE_SIZE, UserService

router = APIRouter(prefix="/users", tags=["users"])


def _user_response(user: User, bans: BanService) -> UserResponse:
    response = UserResponse.model_validate(user)
    response.is_banned = bans.is_banned(user)
    return response


@router.get("", response_model=PageResponse[UserResponse])
async def list_users(
    _: AdminUserDep,
    db: SessionDep,
    cache: CacheDep,
    search: str | None = Query(None, description="Match against name or email"),
    role: UserRole | None = Query(None),
    banned_only: bool = Query(False),
    page: int = Query(1, ge=1),
    per_page: int = Query(USERS_PAGE_SIZE, ge=1, le=100),
) -> dict[str, Any]:
    result = UserService(db, cache).list_users(
        search=search, role=role, banned_only=banned_only, page=page, per_page=per_page
    )
    bans = BanService(db)
    return {
        "items": [_user_response(user, bans) for user in result.items],
        "total": result.total,
        "page": result.page,
        "per_page": result.per_page,
        "pages": result.pages,
    }


@router.get("/ban-durations", response_model=dict[str, str])
async def ban_durations(_: StaffUserDep) -> dict[str, str]:
    """Ban durations offered in the ban form."""
    return BanService.duration_options()


@router.get("/ip-bans/{ip}", response_model=IpBanStatus)
async def ip_ban_status(ip: str, _: AdminUserDep, db: SessionDep) -> dict[str, Any]:
    return {"ip": ip, "banned": BanService(db).is_ip_banned(ip)}


@router.post("/ip-bans/toggle", response_model=IpBanStatus)
async def toggle_ip_ban(
    payload: IpBanToggle,
    current_user: AdminUserDep,
    db: SessionDep,
    context: RequestContextDep,
) -> dict[str, Any]:
    """Ban the address, or lift its ban if one is active."""
    banned = BanService(db, context).toggle_ip_ban(payload.ip, current_user, payload.reason)
    return {"ip": payload.ip, "banned": banned}


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, _: AdminUserDep, db: SessionDep) -> UserResponse:
    return _user_response(get_or_404(db, User, user_id), BanService(db))


@router.put("/{user_id}/role", response_model=UserResponse)
async def update_role(
    user_id: int,
    payload: RoleUpdate,
    current_user: AdminUserDep,
    db: SessionDep,
    cache: CacheDep,
) -> UserResponse:
    user = get_or_404(db, User, user_id)
    UserService(db, cache).assign_role(user, payload.role, current_user)
    return _user_response(user, BanService(db))


@router.get("/{user_id}/ban", response_model=BanResponse | None)
async def get_active_ban(user_id: int, _: StaffUserDep, db: SessionDep) -> Ban | None:
    """The user's current ban, or null."""
    return BanService(db).active_ban(get_or_404(db, User, user_id))


@router.post("/{user_id}/ban", response_model=BanResponse, status_code=status.HTTP_201_CREATED)
async def ban_user(
    user_id: int,
    payload: BanCreate,
    current_user: AdminUserDep,
    db: SessionDep,
    context: RequestContextDep,
) -> Ban:
    """Ban a user, optionally linking the ban to a report and resolving it."""
    user = get_or_404(db, User, user_id)
    report = get_or_404(db, Report, payload.report_id) if payload.report_id is not None else None
    return BanService(db, context).ban_user(
        user, payload.duration, payload.reason, current_user, report=report
    )


@router.delete("/{user_id}/ban", response_model=Message)
async def unban_user(
    user_id: int,
    current_user: AdminUserDep,
    db: SessionDep,
    context: RequestContextDep,
    reason: str | None = Query(None, max_length=1000, description="Moderator note"),
) -> dict[str, str]:
    user = get_or_404(db, User, user_id)
    removed = BanService(db, context).unban_user(user, current_user, reason=reason)
    return {"detail": f"Lifted {removed} ban(s)"}


@router.get("/{user_id}/available-reports", response_model=list[ReportResponse])
async def available_reports(user_id: int, _: AdminUserDep, db: SessionDep) -> list[Report]:
    """Pending reports a ban of this user could be linked to."""
    return BanService(db).available_reports(get_or_404(db, User, user_id))
