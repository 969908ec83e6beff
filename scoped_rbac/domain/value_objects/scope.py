"""Role scope value object and the scope resolver predicates."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RoleScope:
    """
    Locations and projects a role is declared to apply to.

    ``all_locations`` / ``all_projects`` make the role apply regardless of
    the corresponding id set.
    """

    locations: frozenset[str] = field(default_factory=frozenset)
    projects: frozenset[str] = field(default_factory=frozenset)
    all_locations: bool = False
    all_projects: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "RoleScope":
        if not data:
            return cls()
        return cls(
            locations=frozenset(str(loc) for loc in data.get("locations") or ()),
            projects=frozenset(str(proj) for proj in data.get("projects") or ()),
            all_locations=bool(data.get("all_locations", False)),
            all_projects=bool(data.get("all_projects", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "locations": sorted(self.locations),
            "projects": sorted(self.projects),
            "all_locations": self.all_locations,
            "all_projects": self.all_projects,
        }

    def applies_to_location(self, location_id: str) -> bool:
        return applies_to_location(self, location_id)

    def applies_to_project(self, project_id: str) -> bool:
        return applies_to_project(self, project_id)


def applies_to_location(scope: RoleScope, location_id: str) -> bool:
    """True if the scope covers every location or lists this one"""
    if scope.all_locations:
        return True
    return str(location_id) in scope.locations


def applies_to_project(scope: RoleScope, project_id: str) -> bool:
    """True if the scope covers every project or lists this one"""
    if scope.all_projects:
        return True
    return str(project_id) in scope.projects
