# src/forge_api/services/policies.py
"""Authorization rules for staff and owner actions."""

from __future__ import annotations

from sqlalchemy.orm import Session

from forge_api.models import Addon, AddonVersion, Comment, Mod, ModVersion, User
from forge_api.services.errors import PermissionDeniedError
from forge_api.services.targets import find_target


def authorize(allowed: bool, message: str = "This action is unauthorized.") -> None:
    """Raise :class:`PermissionDeniedError` unless ``allowed``."""
    if not allowed:
        raise PermissionDeniedError(message)


def is_staff(user: User | None) -> bool:
    return user is not None and user.is_mod_or_admin()


def is_admin(user: User | None) -> bool:
    return user is not None and user.is_admin()


# Mods

def can_publish_mod(user: User, mod: Mod) -> bool:
    return user.id in mod.author_ids()


def can_feature_mod(user: User, mod: Mod) -> bool:
    return user.is_admin()


def can_disable_mod(user: User, mod: Mod) -> bool:
    return user.is_mod_or_admin()


def can_delete_mod(user: User, mod: Mod) -> bool:
    return user.is_admin() or mod.owner_id == user.id


# Addons and versions

def can_publish_addon(user: User, addon: Addon) -> bool:
    return addon.owner_id == user.id


def can_disable_addon(user: User, addon: Addon) -> bool:
    return user.is_mod_or_admin()


def can_publish_version(user: User, version: ModVersion | AddonVersion) -> bool:
    return user.id in version.author_ids()


def can_disable_version(user: User, version: ModVersion | AddonVersion) -> bool:
    return user.is_mod_or_admin()


# Comments

def can_soft_delete_comment(user: User, comment: Comment) -> bool:
    return user.is_mod_or_admin()


def can_restore_comment(user: User, comment: Comment) -> bool:
    return user.is_mod_or_admin()


def can_pin_comment(db: Session, user: User, comment: Comment) -> bool:
    """Staff, or an author of the content the comment sits on."""
    if user.is_mod_or_admin():
        return True
    commentable = find_target(db, comment.commentable_type, comment.commentable_id)
    if commentable is None:
        return False
    if isinstance(commentable, User):
        return commentable.id == user.id
    return user.id in commentable.author_ids()


def can_mark_comment_spam(user: User, comment: Comment) -> bool:
    return user.is_mod_or_admin()


def can_hard_delete_comment(user: User, comment: Comment) -> bool:
    return user.is_admin()


# Users

def can_ban_user(actor: User, target: User) -> bool:
    return actor.is_admin() and not target.is_admin() and actor.id != target.id


def can_unban_user(actor: User, target: User) -> bool:
    return actor.is_admin()
