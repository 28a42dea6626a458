"""Ownership and collaboration roles for shared lists.

A user's relationship to a list is exactly one :class:`Role`. The roles are
totally ordered::

    NO_ACCESS < VIEWER < EDITOR < ADMIN < OWNER

``OWNER`` is derived from the list's ``owner_id`` and is never stored on a
collaborator row. ``NO_ACCESS`` stands for "no relationship at all" so
callers never juggle ``None`` in place of a role.
"""
from enum import Enum
from typing import Union

from listly.domain.errors import ValidationError


class Role(str, Enum):
    """A user's role on a single shopping list."""
    NO_ACCESS = "NO_ACCESS"
    VIEWER = "VIEWER"
    EDITOR = "EDITOR"
    ADMIN = "ADMIN"
    OWNER = "OWNER"


# Lowest to highest
ROLE_HIERARCHY = (
    Role.NO_ACCESS,
    Role.VIEWER,
    Role.EDITOR,
    Role.ADMIN,
    Role.OWNER,
)

_RANKS = {role: rank for rank, role in enumerate(ROLE_HIERARCHY)}

# Roles that may be stored on a collaborator row
COLLABORATOR_ROLES = frozenset({Role.VIEWER, Role.EDITOR, Role.ADMIN})


def compare(a: Role, b: Role) -> int:
    """
    Compare two roles in the hierarchy.

    Returns:
        -1 if ``a`` ranks below ``b``, 0 if equal, 1 if above
    """
    rank_a, rank_b = _RANKS[a], _RANKS[b]
    return (rank_a > rank_b) - (rank_a < rank_b)


def meets(role: Role, minimum: Role) -> bool:
    """
    Check whether ``role`` is at least ``minimum``.

    ``NO_ACCESS`` never meets anything, not even ``NO_ACCESS``.
    """
    if role is Role.NO_ACCESS:
        return False
    return compare(role, minimum) >= 0


def parse_collaborator_role(value: Union[Role, str]) -> Role:
    """
    Parse a role that may be granted to a collaborator.

    Args:
        value: A Role or its name (case-insensitive)

    Returns:
        The matching Role

    Raises:
        ValidationError: If the value is not VIEWER, EDITOR or ADMIN
    """
    if isinstance(value, Role):
        role = value
    else:
        try:
            role = Role(str(value).strip().upper())
        except ValueError:
            raise ValidationError(
                f"Invalid role: {value!r}",
                suggestions=[r.value for r in ROLE_HIERARCHY if r in COLLABORATOR_ROLES]
            ) from None

    if role not in COLLABORATOR_ROLES:
        raise ValidationError(f"Role {role.value} cannot be assigned to a collaborator")
    return role
