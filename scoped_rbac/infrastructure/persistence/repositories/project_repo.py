from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scoped_rbac.infrastructure.persistence.models.project import Project
from scoped_rbac.infrastructure.persistence.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Project)

    async def get_by_location(self, location_id: str, include_inactive: bool = False) -> list[Project]:
        query = select(Project).where(Project.location_id == location_id)
        if not include_inactive:
            query = query.where(Project.is_active.is_(True))
        result = await self.db.execute(query.order_by(Project.code))
        return list(result.scalars().all())
