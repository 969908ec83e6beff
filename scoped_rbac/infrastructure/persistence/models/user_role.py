from datetime import datetime

from sqlalchemy import (Boolean, DateTime, ForeignKey, Index, String, Text,
                        text)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scoped_rbac.domain.entities import AssignmentWindow
from scoped_rbac.infrastructure.persistence.database import Base
from scoped_rbac.infrastructure.persistence.models.location import Location
from scoped_rbac.infrastructure.persistence.models.mixins import EntityModel
from scoped_rbac.infrastructure.persistence.models.project import Project
from scoped_rbac.infrastructure.persistence.models.role import Role
from scoped_rbac.shared.utils.datetime import utc_now

# Uniqueness is only enforced for project-bound rows (see DESIGN.md)
_PROJECT_BOUND = text("project_id IS NOT NULL")


class UserRole(EntityModel, Base):
    """
    Time-bounded binding of a user to a role at a location and optional project.

    Revocation flips ``is_active`` and stamps ``revoked_at`` / ``revoked_by``;
    rows are never deleted so the history stays auditable.
    """

    __tablename__ = "user_role"

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role_id: Mapped[str] = mapped_column(
        String, ForeignKey("role.id"), nullable=False, index=True
    )
    location_id: Mapped[str] = mapped_column(
        String, ForeignKey("location.id"), nullable=False, index=True
    )
    project_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("project.id"), nullable=True, index=True
    )

    # Validity window
    start_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=utc_now
    )
    end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Assignment metadata
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_by: Mapped[str] = mapped_column(
        String, ForeignKey("user.id"), nullable=False
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    revoked_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("user.id", ondelete="SET NULL"), nullable=True
    )

    role: Mapped[Role] = relationship(Role, lazy="joined")
    location: Mapped[Location] = relationship(Location, lazy="joined")
    project: Mapped[Project | None] = relationship(Project, lazy="joined")

    __table_args__ = (
        Index(
            "uq_user_role_context",
            "user_id",
            "role_id",
            "location_id",
            "project_id",
            unique=True,
            postgresql_where=_PROJECT_BOUND,
            sqlite_where=_PROJECT_BOUND,
        ),
        Index("ix_user_role_user_active", "user_id", "is_active"),
        Index("ix_user_role_role_active", "role_id", "is_active"),
        Index("ix_user_role_location_active", "location_id", "is_active"),
    )

    @property
    def window(self) -> AssignmentWindow:
        return AssignmentWindow(
            is_active=self.is_active, start_date=self.start_date, end_date=self.end_date
        )

    def is_currently_active(self, now: datetime | None = None) -> bool:
        return self.window.is_current(now)
