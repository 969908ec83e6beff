from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from scoped_rbac.infrastructure.persistence.database import Base
from scoped_rbac.infrastructure.persistence.models.mixins import (
    ActorAuditMixin, CuidMixin)


class MenuItem(CuidMixin, ActorAuditMixin, Base):
    """
    Navigation entry shown to users according to their roles and permissions.

    Items form a tree through ``parent_id``. ``roles`` holds role ids and
    ``permissions`` a list of ``{"module": "settings.roles", "action": "read"}``
    requirements; matching either one is enough to see the item, and an item
    with neither is visible to every authenticated user.
    """

    __tablename__ = "menu_item"

    title: Mapped[str] = mapped_column(String(50), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True)
    path: Mapped[str | None] = mapped_column(String(200), nullable=True)
    component: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Access requirements
    roles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    permissions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    auth_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    guest_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Display
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_in_sidebar: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_in_topbar: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_in_user_menu: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    divider: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    class_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    parent_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("menu_item.id"), nullable=True, index=True
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
