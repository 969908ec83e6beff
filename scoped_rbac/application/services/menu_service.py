"""
Navigation menu: storage of menu items and the per-user visible tree.

An item is visible when the user holds one of its roles in the request's
context or passes one of its permission requirements. The tree handed to
clients carries display fields only; access requirements stay server-side.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from scoped_rbac.application.interfaces.repositories import (
    IMenuItemRepository, IRoleRepository)
from scoped_rbac.application.services.assignment_ledger import AssignmentLedger
from scoped_rbac.application.services.authorization_service import AuthorizationService
from scoped_rbac.domain.enums import CrudAction
from scoped_rbac.domain.exceptions import (ConflictException,
                                           NotFoundException,
                                           ValidationException)
from scoped_rbac.infrastructure.persistence.models.menu_item import MenuItem
from scoped_rbac.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

MAX_TITLE_LENGTH = 50

# Keyword fields accepted by create_item and update_item
_DISPLAY_FIELDS = (
    "icon",
    "component",
    "auth_required",
    "guest_only",
    "enabled",
    "show_in_sidebar",
    "show_in_topbar",
    "show_in_user_menu",
    "divider",
    "class_name",
    "sort_order",
    "is_active",
)


@dataclass
class MenuNode:
    """One visible entry of a user's menu tree"""

    id: str
    title: str
    path: str | None
    icon: str | None = None
    component: str | None = None
    enabled: bool = True
    show_in_sidebar: bool = True
    show_in_topbar: bool = False
    show_in_user_menu: bool = False
    divider: bool = False
    class_name: str | None = None
    sort_order: int = 0
    children: list["MenuNode"] = field(default_factory=list)

    @classmethod
    def from_item(cls, item: MenuItem) -> "MenuNode":
        return cls(
            id=item.id,
            title=item.title,
            path=item.path,
            icon=item.icon,
            component=item.component,
            enabled=item.enabled,
            show_in_sidebar=item.show_in_sidebar,
            show_in_topbar=item.show_in_topbar,
            show_in_user_menu=item.show_in_user_menu,
            divider=item.divider,
            class_name=item.class_name,
            sort_order=item.sort_order,
        )


def _clean_title(title: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationException("Menu title is required", field="title")
    if len(cleaned) > MAX_TITLE_LENGTH:
        raise ValidationException(
            f"Menu title must be at most {MAX_TITLE_LENGTH} characters", field="title"
        )
    return cleaned


def _clean_permissions(permissions: Iterable[Mapping[str, Any]] | None) -> list[dict[str, str]]:
    cleaned: list[dict[str, str]] = []
    for requirement in permissions or []:
        module = str(requirement.get("module") or "").strip()
        action = requirement.get("action")
        if isinstance(action, CrudAction):
            action = action.value
        if not module:
            raise ValidationException("Menu permission needs a module", field="permissions")
        if action not in CrudAction.values():
            raise ValidationException(
                f"Invalid action '{action}' for module '{module}'", field="permissions"
            )
        cleaned.append({"module": module, "action": action})
    return cleaned


class MenuService:
    """Menu item CRUD plus the access-filtered tree for a user"""

    def __init__(
        self,
        menu_repo: IMenuItemRepository,
        role_repo: IRoleRepository,
        ledger: AssignmentLedger,
        authz_service: AuthorizationService,
    ):
        self.menu_repo = menu_repo
        self.role_repo = role_repo
        self.ledger = ledger
        self.authz_service = authz_service

    async def user_has_access(
        self,
        item: MenuItem,
        user_id: str | None,
        location_id: str | None,
        project_id: str | None = None,
        role_ids: set[str] | None = None,
    ) -> bool:
        """
        Whether ``item`` is visible to the user in the context.

        ``user_id`` None means an anonymous visitor. ``role_ids`` may carry the
        user's current role ids when the caller already resolved them.
        """
        if user_id is None:
            if item.guest_only:
                return True
            if item.auth_required:
                return False
            return not item.roles and not item.permissions

        if item.guest_only:
            return False
        if not item.roles and not item.permissions:
            return True
        if location_id is None:
            return False

        if item.roles:
            if role_ids is None:
                role_ids = await self._current_role_ids(user_id, location_id, project_id)
            if role_ids.intersection(item.roles):
                return True

        for requirement in item.permissions:
            if await self.authz_service.has_permission(
                user_id, requirement["module"], requirement["action"], location_id, project_id
            ):
                return True
        return False

    async def get_menu_for_user(
        self,
        user_id: str | None,
        location_id: str | None,
        project_id: str | None = None,
    ) -> list[MenuNode]:
        """
        Build the tree of active items the user may see, in display order.

        A parent without a path takes the path of its first visible
        descendant; items left without a path are dropped.
        """
        items = await self.menu_repo.list_active()
        by_parent: dict[str | None, list[MenuItem]] = defaultdict(list)
        for item in items:
            by_parent[item.parent_id].append(item)

        role_ids: set[str] = set()
        if user_id is not None and location_id is not None:
            role_ids = await self._current_role_ids(user_id, location_id, project_id)

        async def build(parent_id: str | None, seen: frozenset[str]) -> list[MenuNode]:
            nodes: list[MenuNode] = []
            for item in by_parent.get(parent_id, []):
                if item.id in seen:
                    continue
                if not await self.user_has_access(
                    item, user_id, location_id, project_id, role_ids
                ):
                    continue

                node = MenuNode.from_item(item)
                node.children = await build(item.id, seen | {item.id})
                if not node.path:
                    if not node.children:
                        continue
                    node.path = node.children[0].path
                nodes.append(node)
            return nodes

        return await build(None, frozenset())

    async def list_items(self) -> list[MenuItem]:
        return await self.menu_repo.list_active()

    async def get_item(self, item_id: str) -> MenuItem:
        item = await self.menu_repo.get_by_id(item_id)
        if not item:
            raise NotFoundException("MenuItem", item_id)
        return item

    async def create_item(
        self,
        title: str,
        path: str | None = None,
        *,
        parent_id: str | None = None,
        roles: Iterable[str] | None = None,
        permissions: Iterable[Mapping[str, Any]] | None = None,
        created_by: str | None = None,
        **display: Any,
    ) -> MenuItem:
        """
        Create a menu item.

        Raises:
            ValidationException: blank title, unknown display field or bad permission
            NotFoundException: unknown parent or role id
            ConflictException: an active sibling already uses the path
        """
        title = _clean_title(title)
        unknown = set(display) - set(_DISPLAY_FIELDS)
        if unknown:
            raise ValidationException(f"Unknown menu fields: {sorted(unknown)}")

        if parent_id is not None:
            await self.get_item(parent_id)
        role_list = await self._existing_roles(roles)
        if path:
            await self._check_path_free(path, parent_id)

        item = MenuItem(
            title=title,
            path=path or None,
            parent_id=parent_id,
            roles=role_list,
            permissions=_clean_permissions(permissions),
            created_by=created_by,
            updated_by=created_by,
            **display,
        )
        created = await self.menu_repo.create(item)
        logger.info("Created menu item %s (%s)", created.title, created.id)
        return created

    async def update_item(
        self,
        item_id: str,
        *,
        title: str | None = None,
        path: str | None = None,
        parent_id: str | None = None,
        move_to_root: bool = False,
        roles: Iterable[str] | None = None,
        permissions: Iterable[Mapping[str, Any]] | None = None,
        updated_by: str | None = None,
        **display: Any,
    ) -> MenuItem:
        """
        Update the given fields of an item. Omitted (None) fields are kept;
        ``move_to_root`` clears the parent.

        Raises:
            NotFoundException: unknown item, parent or role id
            ValidationException: circular parent chain or bad field
            ConflictException: an active sibling already uses the path
        """
        item = await self.get_item(item_id)
        unknown = set(display) - set(_DISPLAY_FIELDS)
        if unknown:
            raise ValidationException(f"Unknown menu fields: {sorted(unknown)}")

        if move_to_root:
            new_parent = None
        else:
            new_parent = parent_id if parent_id is not None else item.parent_id
        if new_parent != item.parent_id and new_parent is not None:
            await self._check_not_descendant(item.id, new_parent)

        new_path = path if path is not None else item.path
        if new_path and (new_path != item.path or new_parent != item.parent_id):
            await self._check_path_free(new_path, new_parent, exclude_id=item.id)

        if title is not None:
            item.title = _clean_title(title)
        if path is not None:
            item.path = path or None
        item.parent_id = new_parent
        if roles is not None:
            item.roles = await self._existing_roles(roles)
        if permissions is not None:
            item.permissions = _clean_permissions(permissions)
        for name, value in display.items():
            if value is not None:
                setattr(item, name, value)
        item.updated_by = updated_by

        updated = await self.menu_repo.update(item)
        logger.info("Updated menu item %s (%s)", updated.title, updated.id)
        return updated

    async def delete_item(self, item_id: str) -> None:
        """
        Raises:
            NotFoundException: unknown item
            ConflictException: the item still has children
        """
        item = await self.get_item(item_id)
        children = await self.menu_repo.count_children(item.id)
        if children:
            raise ConflictException(
                f"Menu item has {children} child item(s)",
                {"menu_item_id": item.id, "children": children},
            )
        await self.menu_repo.delete(item)
        logger.info("Deleted menu item %s (%s)", item.title, item.id)

    async def _current_role_ids(
        self, user_id: str, location_id: str, project_id: str | None
    ) -> set[str]:
        assignments = await self.ledger.get_user_roles(user_id, location_id, project_id)
        return {assignment.role_id for assignment in assignments}

    async def _existing_roles(self, roles: Iterable[str] | None) -> list[str]:
        role_ids = list(dict.fromkeys(roles or []))
        for role_id in role_ids:
            if not await self.role_repo.get_by_id(role_id):
                raise NotFoundException("Role", role_id)
        return role_ids

    async def _check_path_free(
        self, path: str, parent_id: str | None, exclude_id: str | None = None
    ) -> None:
        if await self.menu_repo.find_sibling_by_path(path, parent_id, exclude_id):
            raise ConflictException(
                f"A sibling menu item already uses path {path}",
                {"path": path, "parent_id": parent_id},
            )

    async def _check_not_descendant(self, item_id: str, new_parent_id: str) -> None:
        """Walk up from the new parent; reaching the item itself means a cycle"""
        current: str | None = new_parent_id
        visited: set[str] = set()
        while current is not None and current not in visited:
            if current == item_id:
                raise ValidationException(
                    "A menu item cannot be nested under itself or its descendants",
                    field="parent_id",
                )
            visited.add(current)
            parent = await self.get_item(current)
            current = parent.parent_id
