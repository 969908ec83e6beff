from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scoped_rbac.infrastructure.persistence.database import Base
from scoped_rbac.infrastructure.persistence.models.mixins import EntityModel


class Project(EntityModel, Base):
    """Project run at a single location"""

    __tablename__ = "project"

    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location_id: Mapped[str] = mapped_column(
        String, ForeignKey("location.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
