"""Test the RBAC repositories"""

from datetime import timedelta

import pytest

from scoped_rbac.infrastructure.persistence.models.user_role import UserRole
from scoped_rbac.infrastructure.persistence.repositories import (
    LocationRepository, ProjectRepository, RoleRepository, UserRepository,
    UserRoleRepository)
from scoped_rbac.shared.utils.datetime import utc_now


@pytest.fixture
async def user_role_repo(test_db):
    """User role repository fixture"""
    return UserRoleRepository(test_db)


@pytest.mark.asyncio
async def test_lookup_by_natural_keys(test_db, test_user, location):
    """Codes and emails are matched case-insensitively the way they are stored"""
    users = UserRepository(test_db)
    locations = LocationRepository(test_db)

    assert (await users.get_by_email("TEST@example.com")).id == test_user.id
    assert (await users.get_by_username("testuser")).id == test_user.id
    assert (await locations.get_by_code(" l1 ")).id == location.id
    assert await locations.get_by_code("nope") is None


@pytest.mark.asyncio
async def test_projects_by_location_skip_inactive(test_db, location, project, second_project, foreign_project):
    second_project.is_active = False
    await test_db.commit()

    projects = await ProjectRepository(test_db).get_by_location(location.id)
    everything = await ProjectRepository(test_db).get_by_location(location.id, include_inactive=True)

    assert [p.id for p in projects] == [project.id]
    assert [p.id for p in everything] == [project.id, second_project.id]


@pytest.mark.asyncio
async def test_system_roles(test_db, editor_role, admin_role):
    system_roles = await RoleRepository(test_db).get_system_roles()

    assert [r.id for r in system_roles] == [admin_role.id]


@pytest.mark.asyncio
async def test_current_window_query(
    test_db, user_role_repo, test_user, admin_user, editor_role, location, project
):
    """
    GIVEN an open-ended assignment starting yesterday
    WHEN the context query runs before, inside and after its window
    THEN it is only returned from its start onwards.
    """
    now = utc_now()
    test_db.add(
        UserRole(
            user_id=test_user.id,
            role_id=editor_role.id,
            location_id=location.id,
            start_date=now - timedelta(days=1),
            assigned_by=admin_user.id,
        )
    )
    await test_db.commit()

    before = await user_role_repo.find_current(test_user.id, location.id, None, now - timedelta(days=2))
    inside = await user_role_repo.find_current(test_user.id, location.id, project.id, now)

    assert before == []
    assert [a.role_id for a in inside] == [editor_role.id]
    assert await user_role_repo.exists_current(
        test_user.id, editor_role.id, location.id, project.id, now
    )
    assert await user_role_repo.exists_current_anywhere(test_user.id, editor_role.id, now)
    assert await user_role_repo.count_for_role(editor_role.id) == 1


@pytest.mark.asyncio
async def test_find_active_assignment_matches_project_exactly(
    test_db, user_role_repo, test_user, admin_user, editor_role, location, project
):
    test_db.add(
        UserRole(
            user_id=test_user.id,
            role_id=editor_role.id,
            location_id=location.id,
            project_id=project.id,
            assigned_by=admin_user.id,
        )
    )
    await test_db.commit()

    assert await user_role_repo.find_active_assignment(
        test_user.id, editor_role.id, location.id, project.id
    )
    assert await user_role_repo.find_active_assignment(
        test_user.id, editor_role.id, location.id, None
    ) is None


@pytest.mark.asyncio
async def test_user_role_model_window(test_user, admin_user, editor_role, location):
    assignment = UserRole(
        user_id=test_user.id,
        role_id=editor_role.id,
        location_id=location.id,
        start_date=utc_now() - timedelta(days=1),
        end_date=utc_now() - timedelta(hours=1),
        is_active=True,
        assigned_by=admin_user.id,
    )

    assert assignment.is_currently_active() is False
    assert assignment.is_currently_active(utc_now() - timedelta(hours=2)) is True


@pytest.mark.asyncio
async def test_list_active_skips_inactive(test_db, registry, editor_role, admin_role):
    retired = await registry.create_role("Retired")
    await registry.update_role(retired.id, is_active=False)

    roles = await RoleRepository(test_db).list_active()

    assert {r.name for r in roles} == {editor_role.name, admin_role.name}
