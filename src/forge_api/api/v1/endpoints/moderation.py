# src/forge_api/api/v1/endpoints/moderation.py
"""Content moderation and moderation log endpoints for the Forge API."""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status

from forge_api.api.v1.dependencies import (
    CurrentUserDep,
    RequestContextDep,
    SessionDep,
    StaffUserDep,
    get_or_404,
)
from forge_api.models import (
    Addon,
    AddonVersion,
    Comment,
    Mod,
    ModVersion,
    TrackingEvent,
    TrackingEventType,
    User,
)
from forge_api.schemas.common import Message
from forge_api.schemas.moderation import (
    ContentState,
    ModerationActionResponse,
    ModerationLogResponse,
    ModerationRequest,
    PublishRequest,
)
from forge_api.schemas.tracking import EventTypeOption
from forge_api.schemas.user import UserSummary
from forge_api.services.moderation import ContentModerationService
from forge_api.services.moderation_log import ACTIONS_PAGE_SIZE, ModerationLogService

router = APIRouter(prefix="/moderation", tags=["moderation"])

_MOD_ACTIONS = ("publish", "unpublish", "feature", "unfeature", "disable", "enable", "delete")
_ADDON_ACTIONS = ("publish", "unpublish", "disable", "enable")
_VERSION_ACTIONS = ("publish", "unpublish", "disable", "enable")
_COMMENT_ACTIONS = {
    "soft-delete": "soft_delete_comment",
    "restore": "restore_comment",
    "pin": "pin_comment",
    "unpin": "unpin_comment",
    "mark-spam": "mark_comment_spam",
    "mark-clean": "mark_comment_clean",
}


def _content_state(target: Any, event: TrackingEvent) -> dict[str, Any]:
    spam_status = getattr(target, "spam_status", None)
    return {
        "type": target.morph_type,
        "id": target.id,
        "disabled": getattr(target, "disabled", None),
        "featured": getattr(target, "featured", None),
        "published_at": getattr(target, "published_at", None),
        "deleted_at": getattr(target, "deleted_at", None),
        "pinned_at": getattr(target, "pinned_at", None),
        "spam_status": spam_status.value if spam_status is not None else None,
        "tracking_event_id": event.id,
        "is_moderation_action": event.is_moderation_action,
    }


def _ensure_action(action: str, allowed: Any) -> None:
    if action not in allowed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown action: {action}",
        )


def _run(
    service: ContentModerationService,
    method: str,
    target: Any,
    actor: User,
    payload: PublishRequest,
) -> TrackingEvent:
    if method.startswith("publish_"):
        return getattr(service, method)(target, actor, payload.published_at, reason=payload.reason)
    return getattr(service, method)(target, actor, reason=payload.reason)


@router.post("/mods/{mod_id}/{action}", response_model=ContentState)
async def moderate_mod(
    mod_id: int,
    action: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    context: RequestContextDep,
    payload: PublishRequest | None = None,
) -> dict[str, Any]:
    """Publish, unpublish, feature, unfeature, disable, enable or delete a mod."""
    _ensure_action(action, _MOD_ACTIONS)
    mod = get_or_404(db, Mod, mod_id)
    service = ContentModerationService(db, context)
    event = _run(service, f"{action}_mod", mod, current_user, payload or PublishRequest())
    return _content_state(mod, event)


@router.post("/addons/{addon_id}/{action}", response_model=ContentState)
async def moderate_addon(
    addon_id: int,
    action: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    context: RequestContextDep,
    payload: PublishRequest | None = None,
) -> dict[str, Any]:
    _ensure_action(action, _ADDON_ACTIONS)
    addon = get_or_404(db, Addon, addon_id)
    service = ContentModerationService(db, context)
    event = _run(service, f"{action}_addon", addon, current_user, payload or PublishRequest())
    return _content_state(addon, event)


@router.post("/mod-versions/{version_id}/{action}", response_model=ContentState)
async def moderate_mod_version(
    version_id: int,
    action: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    context: RequestContextDep,
    payload: PublishRequest | None = None,
) -> dict[str, Any]:
    _ensure_action(action, _VERSION_ACTIONS)
    version = get_or_404(db, ModVersion, version_id)
    service = ContentModerationService(db, context)
    event = _run(service, f"{action}_version", version, current_user, payload or PublishRequest())
    return _content_state(version, event)


@router.post("/addon-versions/{version_id}/{action}", response_model=ContentState)
async def moderate_addon_version(
    version_id: int,
    action: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    context: RequestContextDep,
    payload: PublishRequest | None = None,
) -> dict[str, Any]:
    _ensure_action(action, _VERSION_ACTIONS)
    version = get_or_404(db, AddonVersion, version_id)
    service = ContentModerationService(db, context)
    event = _run(service, f"{action}_version", version, current_user, payload or PublishRequest())
    return _content_state(version, event)


@router.post("/comments/{comment_id}/{action}", response_model=ContentState)
async def moderate_comment(
    comment_id: int,
    action: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    context: RequestContextDep,
    payload: ModerationRequest | None = None,
) -> dict[str, Any]:
    """Soft delete, restore, pin, unpin or change the spam status of a comment."""
    _ensure_action(action, _COMMENT_ACTIONS)
    comment = get_or_404(db, Comment, comment_id)
    service = ContentModerationService(db, context)
    reason = payload.reason if payload is not None else None
    event = getattr(service, _COMMENT_ACTIONS[action])(comment, current_user, reason=reason)
    return _content_state(comment, event)


@router.delete("/comments/{comment_id}", response_model=Message)
async def hard_delete_comment(
    comment_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    context: RequestContextDep,
    reason: str | None = Query(None, max_length=1000),
) -> dict[str, str]:
    """Permanently delete a comment and its replies. Administrators only."""
    comment = get_or_404(db, Comment, comment_id)
    ContentModerationService(db, context).hard_delete_comment(comment, current_user, reason=reason)
    return {"detail": "Comment permanently deleted"}


@router.get("/actions", response_model=ModerationLogResponse)
async def list_moderation_actions(
    _: StaffUserDep,
    db: SessionDep,
    search: str | None = Query(None, description="Search reasons and event details"),
    event_type: TrackingEventType | None = Query(None),
    moderator_id: int | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    report_linked_only: bool = Query(False),
    page: int = Query(1, ge=1),
    per_page: int = Query(ACTIONS_PAGE_SIZE, ge=1, le=100),
) -> dict[str, Any]:
    """The moderation log, newest first."""
    if event_type is not None and not event_type.is_moderation_type:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{event_type.value} is not a moderation action",
        )
    service = ModerationLogService(db)
    filters = {
        "search": search,
        "event_type": event_type,
        "moderator_id": moderator_id,
        "date_from": date_from,
        "date_to": date_to,
        "report_linked_only": report_linked_only,
    }
    result = service.list_actions(**filters, page=page, per_page=per_page)
    return {
        "items": [ModerationActionResponse.model_validate(event) for event in result.items],
        "total": result.total,
        "page": result.page,
        "per_page": result.per_page,
        "pages": result.pages,
        "filters": service.active_filters(**filters),
    }


@router.get("/actions/moderators", response_model=list[UserSummary])
async def list_log_moderators(_: StaffUserDep, db: SessionDep) -> list[User]:
    return ModerationLogService(db).moderators()


@router.get("/event-types", response_model=list[EventTypeOption])
async def list_moderation_event_types(_: StaffUserDep) -> list[EventTypeOption]:
    return [EventTypeOption.from_event_type(event_type) for event_type in TrackingEventType.moderation_actions()]
