from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from scoped_rbac.infrastructure.persistence.database import Base
from scoped_rbac.infrastructure.persistence.models.mixins import EntityModel


class User(EntityModel, Base):
    """
    Application user.

    Credentials live behind the authentication boundary; this table only
    carries what role assignment needs.
    """

    __tablename__ = "user"

    username: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    location_id: Mapped[str] = mapped_column(
        String, ForeignKey("location.id"), nullable=False, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
