from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scoped_rbac.infrastructure.persistence.models.role import Role
from scoped_rbac.infrastructure.persistence.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """Repository for Role lookups"""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Role)

    async def get_by_name(self, name: str) -> Role | None:
        """Get role by its globally unique name"""
        result = await self.db.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def list_roles(
        self, skip: int = 0, limit: int = 100, include_inactive: bool = False
    ) -> list[Role]:
        """Get roles in display order"""
        query = select(Role)

        if not include_inactive:
            query = query.where(Role.is_active.is_(True))

        query = query.order_by(Role.sort_order, Role.name).offset(skip).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_active(self) -> list[Role]:
        """Every active role in display order, unpaginated"""
        result = await self.db.execute(
            select(Role).where(Role.is_active.is_(True)).order_by(Role.sort_order, Role.name)
        )
        return list(result.scalars().all())

    async def get_system_roles(self) -> list[Role]:
        result = await self.db.execute(
            select(Role).where(Role.is_system.is_(True)).order_by(Role.sort_order)
        )
        return list(result.scalars().all())
