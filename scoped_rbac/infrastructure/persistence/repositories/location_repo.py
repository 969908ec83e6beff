from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scoped_rbac.infrastructure.persistence.models.location import Location
from scoped_rbac.infrastructure.persistence.repositories.base import BaseRepository


class LocationRepository(BaseRepository[Location]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Location)

    async def get_by_code(self, code: str) -> Location | None:
        """Location codes are stored upper-cased"""
        result = await self.db.execute(
            select(Location).where(Location.code == code.strip().upper())
        )
        return result.scalar_one_or_none()
