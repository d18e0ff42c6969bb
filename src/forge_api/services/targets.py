# src/forge_api/services/targets.py
"""Lookup helpers for polymorphic (type, id) references."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from forge_api.models import MORPH_MAP, REPORTABLE_TYPES, Addon, Comment, Mod, User
from forge_api.services.errors import InvalidActionError, NotFoundError


def resolve_target(db: Session, target_type: str, target_id: int) -> Any:
    """Load the model behind a morph reference.

    Raises:
        InvalidActionError: If the morph key is unknown.
        NotFoundError: If no row exists for the id.
    """
    model = MORPH_MAP.get(target_type)
    if model is None:
        raise InvalidActionError(f"Unknown target type: {target_type}")
    target = db.get(model, target_id)
    if target is None:
        raise NotFoundError(f"{target_type} {target_id} not found")
    return target


def resolve_reportable(db: Session, target_type: str, target_id: int) -> Any:
    """Like :func:`resolve_target` but only for types users may report."""
    if target_type not in REPORTABLE_TYPES:
        raise InvalidActionError(f"{target_type} cannot be reported")
    return resolve_target(db, target_type, target_id)


def find_target(db: Session, target_type: str | None, target_id: int | None) -> Any | None:
    """Like :func:`resolve_target` but returns None for missing or unknown targets."""
    if target_type is None or target_id is None:
        return None
    model = MORPH_MAP.get(target_type)
    if model is None:
        return None
    return db.get(model, target_id)


def responsible_user(target: Any) -> User | None:
    """The account accountable for a target: the user, owner or comment author."""
    if isinstance(target, User):
        return target
    if isinstance(target, (Mod, Addon)):
        return target.owner
    if isinstance(target, Comment):
        return target.user
    return None
