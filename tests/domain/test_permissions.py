"""Tests for the permission predicates."""
import pytest

from listly.domain import permissions
from listly.domain.roles import Role

VIEWER_AND_UP = {Role.VIEWER, Role.EDITOR, Role.ADMIN, Role.OWNER}
EDITOR_AND_UP = {Role.EDITOR, Role.ADMIN, Role.OWNER}
ADMIN_AND_UP = {Role.ADMIN, Role.OWNER}


@pytest.mark.parametrize("predicate, allowed", [
    (permissions.can_view, VIEWER_AND_UP),
    (permissions.can_view_items, VIEWER_AND_UP),
    (permissions.can_edit_items, EDITOR_AND_UP),
    (permissions.can_toggle_items, EDITOR_AND_UP),
    (permissions.can_delete_items, EDITOR_AND_UP),
    (permissions.can_view_collaborators, EDITOR_AND_UP),
    (permissions.can_edit_list_details, ADMIN_AND_UP),
    (permissions.can_delete_list, ADMIN_AND_UP),
    (permissions.can_manage_collaborators, ADMIN_AND_UP),
    (permissions.can_change_roles, ADMIN_AND_UP),
    (permissions.is_owner, {Role.OWNER}),
    (permissions.can_leave, {Role.VIEWER, Role.EDITOR, Role.ADMIN}),
])
def test_predicate_truth_table(predicate, allowed):
    """Each predicate allows exactly the expected roles."""
    for role in Role:
        assert predicate(role) == (role in allowed), f"{predicate.__name__}({role.value})"


def test_predicates_are_monotonic():
    """Raising a role never removes a permission, except leaving as owner."""
    ordered = [Role.NO_ACCESS, Role.VIEWER, Role.EDITOR, Role.ADMIN, Role.OWNER]
    monotonic = [
        permissions.can_view, permissions.can_edit_items, permissions.can_delete_list,
        permissions.can_manage_collaborators,
    ]
    for predicate in monotonic:
        results = [predicate(role) for role in ordered]
        assert results == sorted(results)
