from datetime import datetime

from sqlalchemy import ColumnElement, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from scoped_rbac.infrastructure.persistence.models.user_role import UserRole
from scoped_rbac.infrastructure.persistence.repositories.base import BaseRepository


def _project_clause(project_id: str | None) -> ColumnElement[bool]:
    """
    Project-inclusion rule for context queries.

    With a project: assignments bound to that project plus project-less
    (location-wide) ones. Without a project: project-less ones only.
    """
    if project_id:
        return or_(UserRole.project_id == project_id, UserRole.project_id.is_(None))
    return UserRole.project_id.is_(None)


def _current_clause(now: datetime) -> ColumnElement[bool]:
    """Active flag set and ``now`` inside the optional [start_date, end_date] window"""
    return and_(
        UserRole.is_active.is_(True),
        or_(UserRole.start_date.is_(None), UserRole.start_date <= now),
        or_(UserRole.end_date.is_(None), UserRole.end_date >= now),
    )


class UserRoleRepository(BaseRepository[UserRole]):
    """Repository for role assignments. Rows are revoked, never deleted."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, UserRole)

    def _context_conditions(
        self, user_id: str, location_id: str, project_id: str | None, now: datetime
    ) -> list[ColumnElement[bool]]:
        return [
            UserRole.user_id == user_id,
            UserRole.location_id == location_id,
            _current_clause(now),
            _project_clause(project_id),
        ]

    async def find_active_assignment(
        self, user_id: str, role_id: str, location_id: str, project_id: str | None
    ) -> UserRole | None:
        """Active assignment for the exact (user, role, location, project) tuple"""
        project_match = (
            UserRole.project_id == project_id if project_id else UserRole.project_id.is_(None)
        )
        result = await self.db.execute(
            select(UserRole)
            .where(
                UserRole.user_id == user_id,
                UserRole.role_id == role_id,
                UserRole.location_id == location_id,
                project_match,
                UserRole.is_active.is_(True),
            )
            .limit(1)
        )
        return result.scalars().first()

    async def find_current(
        self, user_id: str, location_id: str, project_id: str | None, now: datetime
    ) -> list[UserRole]:
        """Currently active assignments of a user in a location/project context"""
        result = await self.db.execute(
            select(UserRole).where(*self._context_conditions(user_id, location_id, project_id, now))
        )
        return list(result.scalars().all())

    async def exists_current(
        self,
        user_id: str,
        role_id: str,
        location_id: str,
        project_id: str | None,
        now: datetime,
    ) -> bool:
        result = await self.db.execute(
            select(func.count())
            .select_from(UserRole)
            .where(
                UserRole.role_id == role_id,
                *self._context_conditions(user_id, location_id, project_id, now),
            )
        )
        return (result.scalar() or 0) > 0

    async def exists_current_anywhere(self, user_id: str, role_id: str, now: datetime) -> bool:
        """Currently active assignment of the role to the user in any location or project"""
        result = await self.db.execute(
            select(func.count())
            .select_from(UserRole)
            .where(
                UserRole.user_id == user_id,
                UserRole.role_id == role_id,
                _current_clause(now),
            )
        )
        return (result.scalar() or 0) > 0

    async def count_for_role(self, role_id: str) -> int:
        """Number of assignments (active or revoked) referencing a role"""
        result = await self.db.execute(
            select(func.count()).select_from(UserRole).where(UserRole.role_id == role_id)
        )
        return result.scalar() or 0

    async def list_for_user(
        self, user_id: str, include_inactive: bool = False
    ) -> list[UserRole]:
        query = select(UserRole).where(UserRole.user_id == user_id)
        if not include_inactive:
            query = query.where(UserRole.is_active.is_(True))
        result = await self.db.execute(query.order_by(UserRole.created_at))
        return list(result.scalars().all())
