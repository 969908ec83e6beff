import pytest

from scoped_rbac.domain.enums import CrudAction
from scoped_rbac.domain.exceptions import ValidationException
from scoped_rbac.domain.value_objects import Nested, PermissionGrid, Terminal

EDITOR = {"documents": ["read", "update"], "settings": {"roles": ["read"], "users": []}}


@pytest.fixture
def grid() -> PermissionGrid:
    return PermissionGrid.from_dict(EDITOR)


class TestAllows:
    """Permission lookup along dotted module paths."""

    def test_terminal_membership(self, grid: PermissionGrid):
        """
        GIVEN a grid granting read/update on documents
        WHEN actions on documents are checked
        THEN only the listed actions are allowed.
        """
        assert grid.allows("documents", "read") is True
        assert grid.allows("documents", CrudAction.UPDATE) is True
        assert grid.allows("documents", "delete") is False
        assert grid.allows("documents", "create") is False

    def test_nested_path(self, grid: PermissionGrid):
        assert grid.allows("settings.roles", "read") is True
        assert grid.allows("settings.roles", "update") is False

    def test_path_ending_on_nested_node_denies(self, grid: PermissionGrid):
        """
        GIVEN a grid where 'settings' groups sub-modules
        WHEN 'settings' itself is checked
        THEN the check is denied even though children grant actions.
        """
        assert grid.allows("settings", "read") is False

    def test_path_running_past_terminal_denies(self, grid: PermissionGrid):
        assert grid.allows("documents.drafts", "read") is False

    def test_missing_segment_denies(self, grid: PermissionGrid):
        assert grid.allows("benefits", "read") is False
        assert grid.allows("settings.menus", "read") is False

    def test_empty_action_set_denies_everything(self, grid: PermissionGrid):
        for action in CrudAction:
            assert grid.allows("settings.users", action) is False

    def test_unknown_action_denies(self, grid: PermissionGrid):
        assert grid.allows("documents", "approve") is False

    def test_empty_grid_denies(self):
        assert PermissionGrid.empty().allows("documents", "read") is False
        assert PermissionGrid.from_dict(None).allows("documents", "read") is False


class TestFromDict:
    """Parsing and validation of the stored grid document."""

    def test_builds_tagged_nodes(self, grid: PermissionGrid):
        documents = grid.root.children["documents"]
        settings = grid.root.children["settings"]

        assert isinstance(documents, Terminal)
        assert documents.actions == (CrudAction.READ, CrudAction.UPDATE)
        assert isinstance(settings, Nested)
        assert isinstance(settings.children["roles"], Terminal)

    def test_duplicate_actions_collapse_in_order(self):
        grid = PermissionGrid.from_dict({"documents": ["update", "read", "update"]})

        assert grid.actions_for("documents") == (CrudAction.UPDATE, CrudAction.READ)

    def test_unknown_action_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            PermissionGrid.from_dict({"documents": ["read", "approve"]})

        assert exc_info.value.error_code == "VALIDATION_ERROR"
        assert exc_info.value.details["field"] == "documents"

    def test_depth_beyond_two_rejected(self):
        with pytest.raises(ValidationException, match="deeper than 2"):
            PermissionGrid.from_dict({"settings": {"roles": {"admin": ["read"]}}})

    def test_scalar_leaf_rejected(self):
        with pytest.raises(ValidationException):
            PermissionGrid.from_dict({"documents": "read"})

    @pytest.mark.parametrize("name", ["", "settings.roles"])
    def test_invalid_module_name_rejected(self, name: str):
        with pytest.raises(ValidationException):
            PermissionGrid.from_dict({name: ["read"]})

    def test_non_mapping_rejected(self):
        with pytest.raises(ValidationException):
            PermissionGrid.from_dict(["documents"])  # type: ignore[arg-type]

    def test_grid_is_immutable(self, grid: PermissionGrid):
        with pytest.raises(TypeError):
            grid.root.children["benefits"] = Terminal((CrudAction.READ,))  # type: ignore[index]


class TestIntrospection:
    def test_to_dict_returns_stored_form(self, grid: PermissionGrid):
        assert grid.to_dict() == EDITOR

    def test_module_paths_lists_terminals(self, grid: PermissionGrid):
        assert grid.module_paths() == ["documents", "settings.roles", "settings.users"]

    def test_actions_for_non_terminal_is_none(self, grid: PermissionGrid):
        assert grid.actions_for("settings") is None
        assert grid.actions_for("missing") is None
        assert grid.actions_for("settings.users") == ()
