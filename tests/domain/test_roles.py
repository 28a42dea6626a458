"""Tests for the role hierarchy."""
import itertools

import pytest

from listly.domain.errors import ValidationError
from listly.domain.roles import (
    Role, ROLE_HIERARCHY, COLLABORATOR_ROLES, compare, meets, parse_collaborator_role
)


def test_hierarchy_order():
    """Test the fixed order of roles."""
    assert ROLE_HIERARCHY == (
        Role.NO_ACCESS, Role.VIEWER, Role.EDITOR, Role.ADMIN, Role.OWNER
    )
    assert compare(Role.VIEWER, Role.EDITOR) == -1
    assert compare(Role.OWNER, Role.ADMIN) == 1
    assert compare(Role.EDITOR, Role.EDITOR) == 0


def test_compare_is_total_and_antisymmetric():
    """Every pair of roles is ordered one way only."""
    for a, b in itertools.product(ROLE_HIERARCHY, repeat=2):
        assert compare(a, b) == -compare(b, a)
        assert (compare(a, b) == 0) == (a is b)


def test_compare_is_transitive():
    for a, b, c in itertools.product(ROLE_HIERARCHY, repeat=3):
        if compare(a, b) <= 0 and compare(b, c) <= 0:
            assert compare(a, c) <= 0


def test_meets():
    """Test minimum-role checks."""
    assert meets(Role.OWNER, Role.ADMIN)
    assert meets(Role.EDITOR, Role.EDITOR)
    assert not meets(Role.VIEWER, Role.EDITOR)


def test_no_access_meets_nothing():
    for minimum in ROLE_HIERARCHY:
        assert not meets(Role.NO_ACCESS, minimum)


def test_parse_collaborator_role():
    """Test parsing assignable roles from names."""
    assert parse_collaborator_role("viewer") is Role.VIEWER
    assert parse_collaborator_role(" Admin ") is Role.ADMIN
    assert parse_collaborator_role(Role.EDITOR) is Role.EDITOR


@pytest.mark.parametrize("value", ["OWNER", Role.NO_ACCESS, "superuser", ""])
def test_parse_collaborator_role_rejects(value):
    """Owner, no-access and unknown names cannot be granted."""
    with pytest.raises(ValidationError):
        parse_collaborator_role(value)


def test_collaborator_roles():
    assert COLLABORATOR_ROLES == {Role.VIEWER, Role.EDITOR, Role.ADMIN}
