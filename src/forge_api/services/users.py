# src/forge_api/services/users.py
"""User listing and role management for administrators."""

from __future__ import annotations

import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from forge_api.db.time import utcnow
from forge_api.models import Ban, User, UserRole
from forge_api.services import policies
from forge_api.services.cache import Cache, get_cache
from forge_api.services.pagination import LIKE_ESCAPE, Page, contains, paginate
from forge_api.services.reports import MODERATOR_IDS_CACHE_KEY

logger = logging.getLogger(__name__)

USERS_PAGE_SIZE = 20


class UserService:
    """Service for administrators managing accounts."""

    def __init__(self, db: Session, cache: Cache | None = None) -> None:
        self.db = db
        self.cache = cache if cache is not None else get_cache()

    def list_users(
        self,
        *,
        search: str | None = None,
        role: UserRole | None = None,
        banned_only: bool = False,
        page: int = 1,
        per_page: int = USERS_PAGE_SIZE,
    ) -> Page[User]:
        query = self.db.query(User)
        if search:
            needle = contains(search)
            query = query.filter(
                or_(
                    User.name.ilike(needle, escape=LIKE_ESCAPE),
                    User.email.ilike(needle, escape=LIKE_ESCAPE),
                )
            )
        if role is not None:
            query = query.filter(User.role == role)
        if banned_only:
            query = query.filter(
                User.bans.any(or_(Ban.expired_at.is_(None), Ban.expired_at > utcnow()))
            )
        query = query.order_by(User.name, User.id)
        return paginate(query, page, per_page)

    def assign_role(self, user: User, role: UserRole, actor: User) -> User:
        """Change ``user``'s role; administrators cannot demote themselves."""
        policies.authorize(actor.is_admin(), "Only administrators can change roles.")
        policies.authorize(
            not (user.id == actor.id and role != UserRole.ADMINISTRATOR),
            "You cannot remove your own administrator role.",
        )
        previous = user.role
        user.role = role
        self.db.commit()
        self.db.refresh(user)
        self.cache.delete(MODERATOR_IDS_CACHE_KEY)
        logger.info("User %s role changed from %s to %s by %s", user.id, previous, role, actor.id)
        return user
