from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from scoped_rbac.infrastructure.persistence.database import Base
from scoped_rbac.infrastructure.persistence.models.mixins import EntityModel


class Location(EntityModel, Base):
    """
    Physical site or branch. Every role assignment is bound to one.
    """

    __tablename__ = "location"

    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
