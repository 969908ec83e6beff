from scoped_rbac.domain.value_objects import (RoleScope, applies_to_location,
                                              applies_to_project)


def test_explicit_sets():
    """A scope listing L1 and P1 applies to exactly those ids"""
    scope = RoleScope.from_dict({"locations": ["L1"], "projects": ["P1"]})

    assert applies_to_location(scope, "L1") is True
    assert applies_to_location(scope, "L2") is False
    assert applies_to_project(scope, "P1") is True
    assert applies_to_project(scope, "P2") is False


def test_all_flags_cover_everything():
    scope = RoleScope(all_locations=True, all_projects=True)

    assert scope.applies_to_location("anywhere") is True
    assert scope.applies_to_project("anything") is True


def test_flags_are_independent():
    scope = RoleScope(locations=frozenset({"L1"}), all_projects=True)

    assert scope.applies_to_location("L2") is False
    assert scope.applies_to_project("P9") is True


def test_empty_scope_applies_nowhere():
    scope = RoleScope.from_dict(None)

    assert scope.applies_to_location("L1") is False
    assert scope.applies_to_project("P1") is False


def test_round_trip_document():
    data = {
        "locations": ["L2", "L1"],
        "projects": [],
        "all_locations": False,
        "all_projects": True,
    }

    assert RoleScope.from_dict(data).to_dict() == {
        "locations": ["L1", "L2"],
        "projects": [],
        "all_locations": False,
        "all_projects": True,
    }
