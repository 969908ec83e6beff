"""
Permission grid value object.

A role's permissions are a tree of at most two levels: a module either maps
directly to the set of allowed CRUD actions (``documents: [read, update]``) or
groups sub-modules that do (``settings: {roles: [read]}``). The tree is
modelled as a tagged union of ``Terminal`` and ``Nested`` nodes so that lookup
never depends on walking arbitrary attributes.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Union

from scoped_rbac.domain.enums import CrudAction
from scoped_rbac.domain.exceptions import ValidationException

MAX_DEPTH = 2
PATH_SEPARATOR = "."


@dataclass(frozen=True)
class Terminal:
    """Leaf node: the ordered set of actions allowed on a module."""

    actions: tuple[CrudAction, ...] = ()

    def __contains__(self, action: object) -> bool:
        return action in self.actions


@dataclass(frozen=True)
class Nested:
    """Inner node: sub-modules keyed by name."""

    children: Mapping[str, "PermissionNode"]


PermissionNode = Union[Terminal, Nested]


@dataclass(frozen=True)
class PermissionGrid:
    """Immutable CRUD permission tree for one role"""

    root: Nested

    @classmethod
    def empty(cls) -> "PermissionGrid":
        return cls(Nested(MappingProxyType({})))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "PermissionGrid":
        """
        Build a grid from its stored document form.

        Raises:
            ValidationException: on unknown actions, empty or dotted module
                names, leaves that are neither lists nor mappings, or nesting
                deeper than two levels.
        """
        if data is None:
            return cls.empty()
        if not isinstance(data, Mapping):
            raise ValidationException("Permission grid must be a mapping", field="permissions")
        return cls(_parse_nested(data, depth=1, prefix=""))

    def allows(self, module_path: str, action: CrudAction | str) -> bool:
        """
        Check whether ``action`` is granted on ``module_path``.

        The path is walked one segment at a time. A missing segment, a path
        that stops on a nested node, or a path that runs past a terminal node
        all deny.
        """
        try:
            wanted = CrudAction(action)
        except ValueError:
            return False

        node: PermissionNode = self.root
        for segment in module_path.split(PATH_SEPARATOR):
            if not isinstance(node, Nested):
                return False
            child = node.children.get(segment)
            if child is None:
                return False
            node = child

        return isinstance(node, Terminal) and wanted in node

    def actions_for(self, module_path: str) -> tuple[CrudAction, ...] | None:
        """Return the terminal action set at ``module_path`` or None if there is none."""
        node: PermissionNode = self.root
        for segment in module_path.split(PATH_SEPARATOR):
            if not isinstance(node, Nested) or segment not in node.children:
                return None
            node = node.children[segment]
        return node.actions if isinstance(node, Terminal) else None

    def module_paths(self) -> list[str]:
        """All terminal module paths in declaration order."""
        return list(_walk(self.root, ""))

    def to_dict(self) -> dict[str, Any]:
        return _dump(self.root)


def _parse_nested(data: Mapping[str, Any], depth: int, prefix: str) -> Nested:
    children: dict[str, PermissionNode] = {}
    for name, value in data.items():
        if not isinstance(name, str) or not name or PATH_SEPARATOR in name:
            raise ValidationException(
                f"Invalid module name {name!r} in permission grid", field=prefix or "permissions"
            )
        path = f"{prefix}{PATH_SEPARATOR}{name}" if prefix else name
        children[name] = _parse_node(value, depth, path)
    return Nested(MappingProxyType(children))


def _parse_node(value: Any, depth: int, path: str) -> PermissionNode:
    if isinstance(value, Mapping):
        if depth >= MAX_DEPTH:
            raise ValidationException(
                f"Permission grid nesting deeper than {MAX_DEPTH} levels at '{path}'",
                field=path,
            )
        return _parse_nested(value, depth + 1, path)
    if isinstance(value, (list, tuple, set, frozenset)):
        return Terminal(_parse_actions(value, path))
    raise ValidationException(
        f"Permission grid entry '{path}' must be a list of actions or a mapping",
        field=path,
    )


def _parse_actions(values: Iterable[Any], path: str) -> tuple[CrudAction, ...]:
    actions: list[CrudAction] = []
    for raw in values:
        try:
            action = CrudAction(raw)
        except ValueError:
            raise ValidationException(
                f"Unknown action {raw!r} at '{path}'; expected one of {CrudAction.values()}",
                field=path,
            ) from None
        if action not in actions:
            actions.append(action)
    return tuple(actions)


def _walk(node: Nested, prefix: str) -> Iterator[str]:
    for name, child in node.children.items():
        path = f"{prefix}{PATH_SEPARATOR}{name}" if prefix else name
        if isinstance(child, Terminal):
            yield path
        else:
            yield from _walk(child, path)


def _dump(node: Nested) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for name, child in node.children.items():
        if isinstance(child, Terminal):
            result[name] = [action.value for action in child.actions]
        else:
            result[name] = _dump(child)
    return result
