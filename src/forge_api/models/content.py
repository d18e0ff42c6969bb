# src/forge_api/models/content.py
"""SQLAlchemy models for mods, addons and their versions.

Only the columns the moderation and reporting flows depend on are modelled
here; listings, files and dependency metadata live elsewhere.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forge_api.db.session import Base
from forge_api.db.time import utcnow
from forge_api.models.user import User

mod_authors = Table(
    "mod_authors",
    Base.metadata,
    Column("mod_id", ForeignKey("mods.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Mod(Base):
    """A user-uploaded mod listing."""

    __tablename__ = "mods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    disabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    owner: Mapped[User | None] = relationship("User", foreign_keys=[owner_id])
    additional_authors: Mapped[list[User]] = relationship("User", secondary=mod_authors)
    versions: Mapped[list[ModVersion]] = relationship(
        "ModVersion",
        back_populates="mod",
        cascade="all, delete-orphan",
    )

    morph_type = "mod"

    def author_ids(self) -> set[int]:
        """Owner plus additional authors."""
        ids = {author.id for author in self.additional_authors}
        if self.owner_id is not None:
            ids.add(self.owner_id)
        return ids

    def tracking_snapshot(self) -> dict[str, object]:
        return {"mod_name": self.name, "mod_slug": self.slug}

    def tracking_url(self) -> str:
        return f"/mod/{self.id}/{self.slug}"

    def tracking_context(self) -> str | None:
        return self.name


class ModVersion(Base):
    """A released version of a mod."""

    __tablename__ = "mod_versions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    mod_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("mods.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version: Mapped[str] = mapped_column(String(64), nullable=False)
    disabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    mod: Mapped[Mod] = relationship("Mod", back_populates="versions")

    morph_type = "mod_version"

    @property
    def owner_id(self) -> int | None:
        return self.mod.owner_id if self.mod else None

    def author_ids(self) -> set[int]:
        return self.mod.author_ids() if self.mod else set()

    def tracking_snapshot(self) -> dict[str, object]:
        return {
            "version_name": self.version,
            "mod_name": self.mod.name if self.mod else None,
        }

    def tracking_url(self) -> str:
        if self.mod is None:
            return f"/mod-version/{self.id}"
        return f"{self.mod.tracking_url()}#versions"

    def tracking_context(self) -> str | None:
        if self.mod is None:
            return self.version
        return f"{self.mod.name} {self.version}"


class Addon(Base):
    """An addon package attached to a parent mod."""

    __tablename__ = "addons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    mod_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("mods.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    owner_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    disabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    mod: Mapped[Mod | None] = relationship("Mod")
    owner: Mapped[User | None] = relationship("User", foreign_keys=[owner_id])
    versions: Mapped[list[AddonVersion]] = relationship(
        "AddonVersion",
        back_populates="addon",
        cascade="all, delete-orphan",
    )

    morph_type = "addon"

    def author_ids(self) -> set[int]:
        return {self.owner_id} if self.owner_id is not None else set()

    def tracking_snapshot(self) -> dict[str, object]:
        return {"addon_name": self.name, "mod_name": self.mod.name if self.mod else None}

    def tracking_url(self) -> str:
        return f"/addon/{self.id}/{self.slug}"

    def tracking_context(self) -> str | None:
        return self.name


class AddonVersion(Base):
    """A released version of an addon."""

    __tablename__ = "addon_versions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    addon_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("addons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version: Mapped[str] = mapped_column(String(64), nullable=False)
    disabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    addon: Mapped[Addon] = relationship("Addon", back_populates="versions")

    morph_type = "addon_version"

    @property
    def owner_id(self) -> int | None:
        return self.addon.owner_id if self.addon else None

    def author_ids(self) -> set[int]:
        return self.addon.author_ids() if self.addon else set()

    def tracking_snapshot(self) -> dict[str, object]:
        return {
            "version_name": self.version,
            "addon_name": self.addon.name if self.addon else None,
        }

    def tracking_url(self) -> str:
        if self.addon is None:
            return f"/addon-version/{self.id}"
        return f"{self.addon.tracking_url()}#versions"

    def tracking_context(self) -> str | None:
        if self.addon is None:
            return self.version
        return f"{self.addon.name} {self.version}"
