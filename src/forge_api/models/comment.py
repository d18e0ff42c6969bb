# src/forge_api/models/comment.py
"""SQLAlchemy model for comments left on mods, addons and profiles."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forge_api.db.session import Base
from forge_api.db.time import utcnow
from forge_api.models.enums import SpamStatus
from forge_api.models.user import User

SNIPPET_LENGTH = 100


class Comment(Base):
    """A comment attached to a polymorphic commentable target.

    Staff deletion is soft: ``deleted_at`` is set and the row is kept so it
    can be restored or inspected from the report centre.
    """

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # Morph key of the commentable ("mod", "addon", "user").
    commentable_type: Mapped[str] = mapped_column(String(32), nullable=False)
    commentable_id: Mapped[int] = mapped_column(Integer, nullable=False)
    # Root comments have parent_id = NULL.
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    spam_status: Mapped[SpamStatus] = mapped_column(
        Enum(SpamStatus, native_enum=False, length=16, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SpamStatus.PENDING,
    )
    pinned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    user: Mapped[User | None] = relationship("User")

    morph_type = "comment"

    @property
    def owner_id(self) -> int | None:
        return self.user_id

    def is_root(self) -> bool:
        return self.parent_id is None

    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def is_pinned(self) -> bool:
        return self.pinned_at is not None

    def author_ids(self) -> set[int]:
        return {self.user_id} if self.user_id is not None else set()

    def tracking_snapshot(self) -> dict[str, object]:
        return {
            "comment_body": self.body[:SNIPPET_LENGTH],
            "commentable_type": self.commentable_type,
            "commentable_id": self.commentable_id,
        }

    def tracking_url(self) -> str:
        return f"/{self.commentable_type.replace('_', '-')}/{self.commentable_id}#comment-{self.id}"

    def tracking_context(self) -> str | None:
        return self.body[:SNIPPET_LENGTH]
