"""Tests for menu item storage and the per-user menu tree"""

import pytest

from scoped_rbac.domain.exceptions import (ConflictException,
                                           NotFoundException,
                                           ValidationException)


@pytest.fixture
async def editor_in_l1(ledger, test_user, admin_user, editor_role, location):
    return await ledger.assign_role(test_user.id, editor_role.id, location.id, None, admin_user.id)


class TestUserHasAccess:
    @pytest.mark.asyncio
    async def test_open_item(self, menu_service, test_user, location):
        item = await menu_service.create_item("Dashboard", "/dashboard")

        assert await menu_service.user_has_access(item, test_user.id, location.id) is True
        assert await menu_service.user_has_access(item, None, None) is False

    @pytest.mark.asyncio
    async def test_guest_only(self, menu_service, test_user, location):
        item = await menu_service.create_item("Login", "/login", guest_only=True)

        assert await menu_service.user_has_access(item, None, None) is True
        assert await menu_service.user_has_access(item, test_user.id, location.id) is False

    @pytest.mark.asyncio
    async def test_public_item_without_requirements(self, menu_service):
        item = await menu_service.create_item("Help", "/help", auth_required=False)

        assert await menu_service.user_has_access(item, None, None) is True

    @pytest.mark.asyncio
    async def test_role_gate_follows_context(
        self, menu_service, test_user, editor_role, location, second_location, editor_in_l1
    ):
        """
        GIVEN an item restricted to the Editor role
        WHEN a user holding Editor only at L1 asks for it
        THEN it is visible at L1 and hidden at L2.
        """
        item = await menu_service.create_item("Docs", "/docs", roles=[editor_role.id])

        assert await menu_service.user_has_access(item, test_user.id, location.id) is True
        assert await menu_service.user_has_access(item, test_user.id, second_location.id) is False

    @pytest.mark.asyncio
    async def test_permission_gate(self, menu_service, test_user, location, editor_in_l1):
        readable = await menu_service.create_item(
            "Docs", "/docs", permissions=[{"module": "documents", "action": "read"}]
        )
        restricted = await menu_service.create_item(
            "Users", "/users", permissions=[{"module": "settings.users", "action": "read"}]
        )

        assert await menu_service.user_has_access(readable, test_user.id, location.id) is True
        assert await menu_service.user_has_access(restricted, test_user.id, location.id) is False

    @pytest.mark.asyncio
    async def test_any_requirement_is_enough(
        self, menu_service, test_user, admin_role, location, editor_in_l1
    ):
        item = await menu_service.create_item(
            "Mixed",
            "/mixed",
            roles=[admin_role.id],
            permissions=[{"module": "documents", "action": "update"}],
        )

        assert await menu_service.user_has_access(item, test_user.id, location.id) is True


class TestGetMenuForUser:
    @pytest.mark.asyncio
    async def test_parent_takes_first_visible_child_path(
        self, menu_service, test_user, location, editor_in_l1
    ):
        """
        GIVEN a pathless parent whose first child is hidden
        WHEN the menu is built
        THEN the parent links to its first visible child.
        """
        parent = await menu_service.create_item("Settings", None, sort_order=1)
        await menu_service.create_item(
            "Users",
            "/settings/users",
            parent_id=parent.id,
            sort_order=1,
            permissions=[{"module": "settings.users", "action": "read"}],
        )
        await menu_service.create_item(
            "Roles",
            "/settings/roles",
            parent_id=parent.id,
            sort_order=2,
            permissions=[{"module": "settings.roles", "action": "read"}],
        )

        menu = await menu_service.get_menu_for_user(test_user.id, location.id)

        assert len(menu) == 1
        assert menu[0].path == "/settings/roles"
        assert [child.title for child in menu[0].children] == ["Roles"]

    @pytest.mark.asyncio
    async def test_pathless_nodes_without_visible_children_dropped(
        self, menu_service, test_user, location
    ):
        empty_parent = await menu_service.create_item("Admin", None)
        await menu_service.create_item(
            "Users",
            "/admin/users",
            parent_id=empty_parent.id,
            permissions=[{"module": "settings.users", "action": "read"}],
        )
        await menu_service.create_item("Separator", None, divider=True)
        await menu_service.create_item("Home", "/home")

        menu = await menu_service.get_menu_for_user(test_user.id, location.id)

        assert [node.title for node in menu] == ["Home"]

    @pytest.mark.asyncio
    async def test_fallback_path_from_grandchild(self, menu_service, test_user, location):
        top = await menu_service.create_item("Reports", None)
        middle = await menu_service.create_item("Monthly", None, parent_id=top.id)
        await menu_service.create_item("Sales", "/reports/monthly/sales", parent_id=middle.id)

        menu = await menu_service.get_menu_for_user(test_user.id, location.id)

        assert menu[0].path == "/reports/monthly/sales"
        assert menu[0].children[0].path == "/reports/monthly/sales"

    @pytest.mark.asyncio
    async def test_order_and_inactive_items(self, menu_service, test_user, location):
        await menu_service.create_item("Second", "/second", sort_order=2)
        await menu_service.create_item("First", "/first", sort_order=1)
        hidden = await menu_service.create_item("Hidden", None, sort_order=0)
        await menu_service.create_item("Orphaned", "/orphaned", parent_id=hidden.id)
        await menu_service.update_item(hidden.id, is_active=False)

        menu = await menu_service.get_menu_for_user(test_user.id, location.id)

        assert [node.title for node in menu] == ["First", "Second"]

    @pytest.mark.asyncio
    async def test_admin_sees_permission_gated_items(
        self, menu_service, ledger, admin_user, admin_role, location, second_location
    ):
        await ledger.assign_role(admin_user.id, admin_role.id, location.id, None, admin_user.id)
        await menu_service.create_item(
            "Users", "/users", permissions=[{"module": "settings.users", "action": "delete"}]
        )

        menu = await menu_service.get_menu_for_user(admin_user.id, second_location.id)

        assert [node.path for node in menu] == ["/users"]

    @pytest.mark.asyncio
    async def test_anonymous_menu(self, menu_service):
        await menu_service.create_item("Login", "/login", guest_only=True)
        await menu_service.create_item("Dashboard", "/dashboard")

        menu = await menu_service.get_menu_for_user(None, None)

        assert [node.path for node in menu] == ["/login"]


class TestCreateItem:
    @pytest.mark.asyncio
    async def test_create_normalizes(self, menu_service, editor_role, admin_user):
        item = await menu_service.create_item(
            "  Docs ",
            "/docs",
            roles=[editor_role.id, editor_role.id],
            permissions=[{"module": "documents", "action": "read"}],
            icon="description",
            created_by=admin_user.id,
        )

        assert item.id
        assert item.title == "Docs"
        assert item.roles == [editor_role.id]
        assert item.permissions == [{"module": "documents", "action": "read"}]
        assert item.show_in_sidebar is True
        assert item.auth_required is True
        assert item.created_by == admin_user.id

    @pytest.mark.asyncio
    async def test_duplicate_path_among_siblings(self, menu_service):
        parent = await menu_service.create_item("Settings", None)
        await menu_service.create_item("Users", "/users", parent_id=parent.id)
        await menu_service.create_item("Users", "/users")

        with pytest.raises(ConflictException):
            await menu_service.create_item("Users again", "/users", parent_id=parent.id)
        with pytest.raises(ConflictException):
            await menu_service.create_item("Users again", "/users")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs, resource",
        [
            ({"parent_id": "missing-item"}, "MenuItem"),
            ({"roles": ["missing-role"]}, "Role"),
        ],
    )
    async def test_missing_reference(self, menu_service, kwargs, resource):
        with pytest.raises(NotFoundException) as exc_info:
            await menu_service.create_item("Docs", "/docs", **kwargs)

        assert exc_info.value.details["resource_type"] == resource

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "title, kwargs",
        [
            ("   ", {}),
            ("x" * 51, {}),
            ("Docs", {"permissions": [{"module": "documents", "action": "publish"}]}),
            ("Docs", {"permissions": [{"module": "", "action": "read"}]}),
            ("Docs", {"colour": "red"}),
        ],
        ids=["blank-title", "long-title", "bad-action", "no-module", "unknown-field"],
    )
    async def test_invalid_input(self, menu_service, title, kwargs):
        with pytest.raises(ValidationException):
            await menu_service.create_item(title, "/docs", **kwargs)


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_cannot_nest_under_descendant(self, menu_service):
        top = await menu_service.create_item("Top", None)
        child = await menu_service.create_item("Child", None, parent_id=top.id)
        grandchild = await menu_service.create_item("Leaf", "/leaf", parent_id=child.id)

        with pytest.raises(ValidationException):
            await menu_service.update_item(top.id, parent_id=grandchild.id)
        with pytest.raises(ValidationException):
            await menu_service.update_item(top.id, parent_id=top.id)

    @pytest.mark.asyncio
    async def test_move_checks_path_at_destination(self, menu_service):
        parent = await menu_service.create_item("Settings", None)
        await menu_service.create_item("Users", "/users", parent_id=parent.id)
        root_users = await menu_service.create_item("Users", "/users")

        with pytest.raises(ConflictException):
            await menu_service.update_item(root_users.id, parent_id=parent.id)

        moved = await menu_service.update_item(root_users.id, path="/people", parent_id=parent.id)
        assert moved.parent_id == parent.id

        back = await menu_service.update_item(moved.id, move_to_root=True)
        assert back.parent_id is None

    @pytest.mark.asyncio
    async def test_delete_refuses_parent(self, menu_service):
        parent = await menu_service.create_item("Settings", None)
        child = await menu_service.create_item("Users", "/users", parent_id=parent.id)

        with pytest.raises(ConflictException):
            await menu_service.delete_item(parent.id)

        await menu_service.delete_item(child.id)
        await menu_service.delete_item(parent.id)

        with pytest.raises(NotFoundException):
            await menu_service.get_item(parent.id)
