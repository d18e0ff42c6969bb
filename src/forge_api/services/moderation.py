# src/forge_api/services/moderation.py
"""Moderation and owner actions on mods, addons, versions and comments."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from forge_api.db.time import utcnow
from forge_api.models import (
    Addon,
    AddonVersion,
    Comment,
    Mod,
    ModVersion,
    SpamStatus,
    TrackingEvent,
    TrackingEventType,
    User,
)
from forge_api.services import policies
from forge_api.services.errors import InvalidActionError
from forge_api.services.targets import find_target
from forge_api.services.tracking import RequestContext, TrackService, is_moderation_action

logger = logging.getLogger(__name__)

Version = ModVersion | AddonVersion

_VERSION_EVENTS: dict[type, dict[str, TrackingEventType]] = {
    ModVersion: {
        "publish": TrackingEventType.VERSION_PUBLISH,
        "unpublish": TrackingEventType.VERSION_UNPUBLISH,
        "disable": TrackingEventType.VERSION_DISABLE,
        "enable": TrackingEventType.VERSION_ENABLE,
    },
    AddonVersion: {
        "publish": TrackingEventType.ADDON_VERSION_PUBLISH,
        "unpublish": TrackingEventType.ADDON_VERSION_UNPUBLISH,
        "disable": TrackingEventType.ADDON_VERSION_DISABLE,
        "enable": TrackingEventType.ADDON_VERSION_ENABLE,
    },
}


class ContentModerationService:
    """Apply state changes to content and record them in the tracking ledger.

    Every change runs through :meth:`_apply`, which commits the change and
    its tracking event together. The event is flagged as a moderation action
    when a staff member acts on content they do not own; the moderator's
    reason is only stored in that case.
    """

    def __init__(self, db: Session, context: RequestContext | None = None) -> None:
        self.db = db
        self.context = context
        self.tracker = TrackService(db)

    def _apply(
        self,
        actor: User,
        target: Any,
        event_type: TrackingEventType,
        change: Callable[[], None],
        *,
        owner_ids: Iterable[int] | None = None,
        always: bool = False,
        reason: str | None = None,
    ) -> TrackingEvent:
        flagged = is_moderation_action(
            actor,
            target.author_ids() if owner_ids is None else owner_ids,
            always=always,
        )
        target_id = target.id
        with self.db.begin_nested():
            change()
            self.db.flush()
            event = self.tracker.record(
                event_type,
                target,
                actor=actor,
                context=self.context,
                is_moderation_action=flagged,
                reason=(reason or None) if flagged else None,
            )
        self.db.commit()
        logger.info(
            "User %s: %s on %s:%s (moderation=%s)",
            actor.id,
            event_type.value,
            target.morph_type,
            target_id,
            flagged,
        )
        return event

    # --- Mods ----------------------------------------------------------------------

    def publish_mod(
        self,
        mod: Mod,
        actor: User,
        published_at: datetime | None = None,
        reason: str | None = None,
    ) -> TrackingEvent:
        policies.authorize(policies.can_publish_mod(actor, mod))

        def change() -> None:
            mod.published_at = published_at or utcnow()

        return self._apply(actor, mod, TrackingEventType.MOD_PUBLISH, change, reason=reason)

    def unpublish_mod(self, mod: Mod, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_publish_mod(actor, mod))

        def change() -> None:
            mod.published_at = None

        return self._apply(actor, mod, TrackingEventType.MOD_UNPUBLISH, change, reason=reason)

    def feature_mod(self, mod: Mod, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_feature_mod(actor, mod))

        def change() -> None:
            mod.featured = True

        return self._apply(actor, mod, TrackingEventType.MOD_FEATURE, change, always=True, reason=reason)

    def unfeature_mod(self, mod: Mod, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_feature_mod(actor, mod))

        def change() -> None:
            mod.featured = False

        return self._apply(actor, mod, TrackingEventType.MOD_UNFEATURE, change, always=True, reason=reason)

    def disable_mod(self, mod: Mod, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_disable_mod(actor, mod))

        def change() -> None:
            mod.disabled = True

        return self._apply(actor, mod, TrackingEventType.MOD_DISABLE, change, reason=reason)

    def enable_mod(self, mod: Mod, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_disable_mod(actor, mod))

        def change() -> None:
            mod.disabled = False

        return self._apply(actor, mod, TrackingEventType.MOD_ENABLE, change, reason=reason)

    def delete_mod(self, mod: Mod, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_delete_mod(actor, mod))
        if mod.deleted_at is not None:
            raise InvalidActionError("This mod has already been deleted.")

        def change() -> None:
            mod.deleted_at = utcnow()

        return self._apply(actor, mod, TrackingEventType.MOD_DELETE, change, reason=reason)

    # --- Addons --------------------------------------------------------------------

    def publish_addon(
        self,
        addon: Addon,
        actor: User,
        published_at: datetime | None = None,
        reason: str | None = None,
    ) -> TrackingEvent:
        policies.authorize(policies.can_publish_addon(actor, addon))

        def change() -> None:
            addon.published_at = published_at or utcnow()

        return self._apply(actor, addon, TrackingEventType.ADDON_PUBLISH, change, reason=reason)

    def unpublish_addon(self, addon: Addon, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_publish_addon(actor, addon))

        def change() -> None:
            addon.published_at = None

        return self._apply(actor, addon, TrackingEventType.ADDON_UNPUBLISH, change, reason=reason)

    def disable_addon(self, addon: Addon, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_disable_addon(actor, addon))

        def change() -> None:
            addon.disabled = True

        return self._apply(actor, addon, TrackingEventType.ADDON_DISABLE, change, reason=reason)

    def enable_addon(self, addon: Addon, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_disable_addon(actor, addon))

        def change() -> None:
            addon.disabled = False

        return self._apply(actor, addon, TrackingEventType.ADDON_ENABLE, change, reason=reason)

    # --- Versions ------------------------------------------------------------------

    def publish_version(
        self,
        version: Version,
        actor: User,
        published_at: datetime | None = None,
        reason: str | None = None,
    ) -> TrackingEvent:
        policies.authorize(policies.can_publish_version(actor, version))

        def change() -> None:
            version.published_at = published_at or utcnow()

        event_type = _VERSION_EVENTS[type(version)]["publish"]
        return self._apply(actor, version, event_type, change, reason=reason)

    def unpublish_version(self, version: Version, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_publish_version(actor, version))

        def change() -> None:
            version.published_at = None

        event_type = _VERSION_EVENTS[type(version)]["unpublish"]
        return self._apply(actor, version, event_type, change, reason=reason)

    def disable_version(self, version: Version, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_disable_version(actor, version))

        def change() -> None:
            version.disabled = True

        event_type = _VERSION_EVENTS[type(version)]["disable"]
        return self._apply(actor, version, event_type, change, reason=reason)

    def enable_version(self, version: Version, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_disable_version(actor, version))

        def change() -> None:
            version.disabled = False

        event_type = _VERSION_EVENTS[type(version)]["enable"]
        return self._apply(actor, version, event_type, change, reason=reason)

    # --- Comments ------------------------------------------------------------------

    def soft_delete_comment(self, comment: Comment, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_soft_delete_comment(actor, comment))
        if comment.is_deleted():
            raise InvalidActionError("This comment has already been deleted.")

        def change() -> None:
            comment.deleted_at = utcnow()

        return self._apply(actor, comment, TrackingEventType.COMMENT_SOFT_DELETE, change, reason=reason)

    def restore_comment(self, comment: Comment, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_restore_comment(actor, comment))
        if not comment.is_deleted():
            raise InvalidActionError("This comment is not deleted.")

        def change() -> None:
            comment.deleted_at = None

        return self._apply(actor, comment, TrackingEventType.COMMENT_RESTORE, change, reason=reason)

    def _commentable_author_ids(self, comment: Comment) -> set[int]:
        commentable = find_target(self.db, comment.commentable_type, comment.commentable_id)
        if commentable is None:
            return set()
        if isinstance(commentable, User):
            return {commentable.id}
        return commentable.author_ids()

    def pin_comment(self, comment: Comment, actor: User, reason: str | None = None) -> TrackingEvent:
        if not comment.is_root():
            raise InvalidActionError("Only top-level comments can be pinned.")
        if comment.is_deleted():
            raise InvalidActionError("Deleted comments cannot be pinned.")
        policies.authorize(policies.can_pin_comment(self.db, actor, comment))

        def change() -> None:
            comment.pinned_at = utcnow()

        return self._apply(
            actor,
            comment,
            TrackingEventType.COMMENT_PIN,
            change,
            owner_ids=self._commentable_author_ids(comment),
            reason=reason,
        )

    def unpin_comment(self, comment: Comment, actor: User, reason: str | None = None) -> TrackingEvent:
        if not comment.is_pinned():
            raise InvalidActionError("This comment is not pinned.")
        policies.authorize(policies.can_pin_comment(self.db, actor, comment))

        def change() -> None:
            comment.pinned_at = None

        return self._apply(
            actor,
            comment,
            TrackingEventType.COMMENT_UNPIN,
            change,
            owner_ids=self._commentable_author_ids(comment),
            reason=reason,
        )

    def mark_comment_spam(self, comment: Comment, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_mark_comment_spam(actor, comment))

        def change() -> None:
            comment.spam_status = SpamStatus.SPAM

        return self._apply(actor, comment, TrackingEventType.COMMENT_MARK_SPAM, change, reason=reason)

    def mark_comment_clean(self, comment: Comment, actor: User, reason: str | None = None) -> TrackingEvent:
        policies.authorize(policies.can_mark_comment_spam(actor, comment))

        def change() -> None:
            comment.spam_status = SpamStatus.CLEAN

        return self._apply(actor, comment, TrackingEventType.COMMENT_MARK_CLEAN, change, reason=reason)

    def hard_delete_comment(self, comment: Comment, actor: User, reason: str | None = None) -> TrackingEvent:
        """Permanently remove a comment and its replies; the event keeps a snapshot."""
        policies.authorize(policies.can_hard_delete_comment(actor, comment))
        replies = self.db.query(Comment).filter(Comment.parent_id == comment.id).all()

        def change() -> None:
            for reply in replies:
                self.db.delete(reply)
            # Replies first; there is no ORM relationship to order the deletes.
            self.db.flush()
            self.db.delete(comment)

        return self._apply(actor, comment, TrackingEventType.COMMENT_HARD_DELETE, change, reason=reason)

    # --- Report centre -------------------------------------------------------------

    def report_action(
        self,
        action: str,
        target: Any,
        actor: User,
    ) -> tuple[TrackingEventType, Callable[[], None]]:
        """Authorize a report centre content action and return its event and change.

        The caller records the event through the report-action ledger.
        """
        if action in ("disable_mod", "enable_mod") and isinstance(target, Mod):
            policies.authorize(policies.can_disable_mod(actor, target))
            disable = action == "disable_mod"
            event_type = TrackingEventType.MOD_DISABLE if disable else TrackingEventType.MOD_ENABLE

            def toggle_mod() -> None:
                target.disabled = disable

            return event_type, toggle_mod

        if action in ("disable_addon", "enable_addon") and isinstance(target, Addon):
            policies.authorize(policies.can_disable_addon(actor, target))
            disable = action == "disable_addon"
            event_type = TrackingEventType.ADDON_DISABLE if disable else TrackingEventType.ADDON_ENABLE

            def toggle_addon() -> None:
                target.disabled = disable

            return event_type, toggle_addon

        if action == "delete_comment" and isinstance(target, Comment):
            policies.authorize(policies.can_soft_delete_comment(actor, target))
            if target.is_deleted():
                raise InvalidActionError("This comment has already been deleted.")

            def soft_delete() -> None:
                target.deleted_at = utcnow()

            return TrackingEventType.COMMENT_SOFT_DELETE, soft_delete

        if action == "restore_comment" and isinstance(target, Comment):
            policies.authorize(policies.can_restore_comment(actor, target))
            if not target.is_deleted():
                raise InvalidActionError("This comment is not deleted.")

            def restore() -> None:
                target.deleted_at = None

            return TrackingEventType.COMMENT_RESTORE, restore

        raise InvalidActionError(f"Action {action} does not apply to this target.")
