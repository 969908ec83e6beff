from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scoped_rbac.infrastructure.persistence.models.menu_item import MenuItem
from scoped_rbac.infrastructure.persistence.repositories.base import BaseRepository


class MenuItemRepository(BaseRepository[MenuItem]):
    """Repository for navigation menu items"""

    def __init__(self, db: AsyncSession):
        super().__init__(db, MenuItem)

    async def list_active(self) -> list[MenuItem]:
        """Every active item, flat, in display order"""
        result = await self.db.execute(
            select(MenuItem)
            .where(MenuItem.is_active.is_(True))
            .order_by(MenuItem.sort_order, MenuItem.title)
        )
        return list(result.scalars().all())

    async def find_sibling_by_path(
        self, path: str, parent_id: str | None, exclude_id: str | None = None
    ) -> MenuItem | None:
        """Active item under the same parent (or at the root) using ``path``"""
        query = select(MenuItem).where(
            MenuItem.path == path,
            MenuItem.is_active.is_(True),
            MenuItem.parent_id.is_(None) if parent_id is None else MenuItem.parent_id == parent_id,
        )
        if exclude_id:
            query = query.where(MenuItem.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def count_children(self, item_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(MenuItem).where(MenuItem.parent_id == item_id)
        )
        return result.scalar_one()

    async def count_all(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(MenuItem))
        return result.scalar_one()
