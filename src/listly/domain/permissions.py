"""Permission predicates for shared shopping lists.

Each predicate is a pure function of the caller's :class:`Role` on a list.
Every service consults these before writing; none of them compares role
names directly.
"""
from listly.domain.roles import Role, meets


def can_view(role: Role) -> bool:
    """Any relationship to the list allows viewing it."""
    return meets(role, Role.VIEWER)


def can_view_items(role: Role) -> bool:
    return meets(role, Role.VIEWER)


def can_edit_items(role: Role) -> bool:
    return meets(role, Role.EDITOR)


def can_toggle_items(role: Role) -> bool:
    return meets(role, Role.EDITOR)


def can_delete_items(role: Role) -> bool:
    return meets(role, Role.EDITOR)


def can_view_collaborators(role: Role) -> bool:
    return meets(role, Role.EDITOR)


def can_edit_list_details(role: Role) -> bool:
    """Name, budget and status changes."""
    return meets(role, Role.ADMIN)


def can_delete_list(role: Role) -> bool:
    """Deleting or archiving the list."""
    return meets(role, Role.ADMIN)


def can_manage_collaborators(role: Role) -> bool:
    return meets(role, Role.ADMIN)


def can_change_roles(role: Role) -> bool:
    return meets(role, Role.ADMIN)


def is_owner(role: Role) -> bool:
    return role is Role.OWNER


def can_leave(role: Role) -> bool:
    """Collaborators may leave; owners must delete or transfer instead."""
    return can_view(role) and not is_owner(role)
