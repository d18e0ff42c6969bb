# src/forge_api/models/user.py
"""SQLAlchemy models for user accounts and bans."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forge_api.db.session import Base
from forge_api.db.time import utcnow
from forge_api.models.enums import UserRole

MORPH_TYPE = "user"


class User(Base):
    """A registered account on the platform."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=32, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.USER,
    )
    email_verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    bans: Mapped[list[Ban]] = relationship(
        "Ban",
        back_populates="user",
        foreign_keys="Ban.user_id",
        cascade="all, delete-orphan",
    )

    morph_type = MORPH_TYPE

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMINISTRATOR

    def is_mod_or_admin(self) -> bool:
        return UserRole(self.role).is_staff

    def has_verified_email(self) -> bool:
        return self.email_verified_at is not None

    def tracking_snapshot(self) -> dict[str, object]:
        return {"user_name": self.name}

    def tracking_url(self) -> str:
        return f"/user/{self.id}"

    def tracking_context(self) -> str | None:
        return self.name


class Ban(Base):
    """Access restriction against a user account or an IP address.

    A ban is active while ``expired_at`` is null or in the future.
    """

    __tablename__ = "bans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Exactly one of user_id / ip is set.
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    ip: Mapped[str | None] = mapped_column(String(45), nullable=True, index=True)
    created_by_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    expired_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    user: Mapped[User | None] = relationship("User", back_populates="bans", foreign_keys=[user_id])
    created_by: Mapped[User | None] = relationship("User", foreign_keys=[created_by_id])

    @property
    def is_permanent(self) -> bool:
        return self.expired_at is None
