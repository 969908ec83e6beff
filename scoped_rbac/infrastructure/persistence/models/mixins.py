"""
Column mixins shared by the RBAC tables.

    class Location(EntityModel, Base): ...          # id + timestamps
    class Role(CuidMixin, ActorAuditMixin, Base): ...  # id + timestamps + actors
"""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from scoped_rbac.shared.utils.generators import generate_cuid


class CuidMixin:
    """String primary key filled with a CUID on insert"""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TimestampMixin:
    """created_at / updated_at maintained by the database"""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
        )


class ActorAuditMixin(TimestampMixin):
    """
    Timestamps plus the users who created and last changed the row.

    Both actor columns are nullable: seeded system roles have no author.
    """

    @declared_attr
    def created_by(cls) -> Mapped[str | None]:
        return mapped_column(String, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)

    @declared_attr
    def updated_by(cls) -> Mapped[str | None]:
        return mapped_column(String, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)


class EntityModel(CuidMixin, TimestampMixin):
    """CUID key and timestamps; the default for reference tables"""
