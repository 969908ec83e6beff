"""
Assignment ledger: creation, revocation and contextual lookup of user roles.

Integrity checks (referenced entities exist, project belongs to the
location, no duplicate active tuple) are explicit steps of ``assign_role``.
"""

from collections.abc import Callable
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from scoped_rbac.application.interfaces.repositories import (
    ILocationRepository, IProjectRepository, IRoleRepository, IUserRepository,
    IUserRoleRepository)
from scoped_rbac.domain.entities import AssignmentWindow
from scoped_rbac.domain.exceptions import (ConflictException,
                                           NotFoundException,
                                           ReferentialIntegrityException,
                                           ValidationException)
from scoped_rbac.infrastructure.persistence.models.user_role import UserRole
from scoped_rbac.shared.telemetry.logging import get_logger
from scoped_rbac.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)


class AssignmentLedger:
    """Time-bounded, context-scoped bindings of users to roles"""

    def __init__(
        self,
        user_repo: IUserRepository,
        role_repo: IRoleRepository,
        location_repo: ILocationRepository,
        project_repo: IProjectRepository,
        user_role_repo: IUserRoleRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.user_repo = user_repo
        self.role_repo = role_repo
        self.location_repo = location_repo
        self.project_repo = project_repo
        self.user_role_repo = user_role_repo
        self.clock = clock

    async def assign_role(
        self,
        user_id: str,
        role_id: str,
        location_id: str,
        project_id: str | None,
        assigned_by: str,
        *,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        notes: str | None = None,
    ) -> UserRole:
        """
        Bind a user to a role at a location and optional project.

        Raises:
            NotFoundException: user, role, location or project does not exist
            ReferentialIntegrityException: project belongs to another location
            ValidationException: end_date is earlier than start_date
            ConflictException: an active assignment for the same tuple exists
        """
        await self._require_references(user_id, role_id, location_id, project_id)

        # Stored as UTC: SQLite keeps only the wall-clock fields of a datetime
        window = AssignmentWindow(
            is_active=True,
            start_date=ensure_utc(start_date) if start_date else self._now(),
            end_date=ensure_utc(end_date) if end_date else None,
        )
        try:
            window.validate()
        except ValueError as e:
            raise ValidationException(str(e), field="end_date") from e

        existing = await self.user_role_repo.find_active_assignment(
            user_id, role_id, location_id, project_id
        )
        if existing:
            raise ConflictException(
                "User already has this role in the given context",
                {
                    "user_id": user_id,
                    "role_id": role_id,
                    "location_id": location_id,
                    "project_id": project_id,
                },
            )

        assignment = UserRole(
            user_id=user_id,
            role_id=role_id,
            location_id=location_id,
            project_id=project_id or None,
            start_date=window.start_date,
            end_date=window.end_date,
            is_active=True,
            notes=notes or "",
            assigned_by=assigned_by,
        )
        try:
            created = await self.user_role_repo.create(assignment)
        except IntegrityError as e:
            # Concurrent assign of the same project-bound tuple lost the race on the unique index
            raise ConflictException(
                "Role assignment violates the uniqueness constraint",
                {"user_id": user_id, "role_id": role_id, "project_id": project_id},
            ) from e

        logger.info(
            "Assigned role %s to user %s at location %s (project=%s) by %s",
            role_id,
            user_id,
            location_id,
            project_id,
            assigned_by,
        )
        return created

    async def revoke_role(
        self,
        user_id: str,
        role_id: str,
        location_id: str,
        project_id: str | None,
        revoked_by: str,
    ) -> UserRole:
        """
        Deactivate the active assignment for the exact tuple. The row is kept.

        Raises:
            NotFoundException: no active assignment matches
        """
        assignment = await self.user_role_repo.find_active_assignment(
            user_id, role_id, location_id, project_id
        )
        if not assignment:
            raise NotFoundException(
                "UserRole", f"{user_id}/{role_id}/{location_id}/{project_id or '-'}"
            )

        assignment.is_active = False
        assignment.revoked_at = self._now()
        assignment.revoked_by = revoked_by
        updated = await self.user_role_repo.update(assignment)

        logger.info(
            "Revoked role %s from user %s at location %s (project=%s) by %s",
            role_id,
            user_id,
            location_id,
            project_id,
            revoked_by,
        )
        return updated

    async def get_user_roles(
        self, user_id: str, location_id: str, project_id: str | None = None
    ) -> list[UserRole]:
        """
        Currently active assignments of a user in a context, role loaded.

        With a project, location-wide (project-less) assignments are included.
        Several assignments may carry the same role.
        """
        return await self.user_role_repo.find_current(
            user_id, location_id, project_id, self._now()
        )

    async def has_role(
        self,
        user_id: str,
        role_name: str,
        location_id: str,
        project_id: str | None = None,
    ) -> bool:
        """Whether the user currently holds the named role in the context"""
        role = await self.role_repo.get_by_name(role_name)
        if not role:
            return False

        return await self.user_role_repo.exists_current(
            user_id, role.id, location_id, project_id, self._now()
        )

    async def holds_role_anywhere(self, user_id: str, role_id: str) -> bool:
        """Whether the user currently holds the role in any location or project"""
        return await self.user_role_repo.exists_current_anywhere(user_id, role_id, self._now())

    async def list_assignments(
        self, user_id: str, include_inactive: bool = False
    ) -> list[UserRole]:
        """All assignments of a user regardless of context"""
        if not await self.user_repo.get_by_id(user_id):
            raise NotFoundException("User", user_id)
        return await self.user_role_repo.list_for_user(user_id, include_inactive)

    def _now(self) -> datetime:
        return ensure_utc(self.clock())

    async def _require_references(
        self,
        user_id: str,
        role_id: str,
        location_id: str,
        project_id: str | None,
    ) -> None:
        if not await self.user_repo.get_by_id(user_id):
            raise NotFoundException("User", user_id)
        if not await self.role_repo.get_by_id(role_id):
            raise NotFoundException("Role", role_id)
        if not await self.location_repo.get_by_id(location_id):
            raise NotFoundException("Location", location_id)

        if project_id:
            project = await self.project_repo.get_by_id(project_id)
            if not project:
                raise NotFoundException("Project", project_id)
            if project.location_id != location_id:
                raise ReferentialIntegrityException(project_id, location_id)
