"""Role resolution and authorization for shared lists."""
from typing import Callable, Tuple

from sqlalchemy import select, and_
from sqlalchemy.orm import Session

from listly.domain.errors import ForbiddenError, NotFoundError
from listly.domain.roles import Role
from listly.models import ShoppingList, ListCollaborator, ListItem
from listly.utils.logger import get_logger

Predicate = Callable[[Role], bool]


class AccessGuard:
    """
    Resolves a user's role on a list and enforces permission predicates.

    Roles are read from the database on every call; a share, removal or
    role change is visible to the very next check.
    """

    def __init__(self, session: Session):
        self.session = session
        self.logger = get_logger(self.__class__.__name__)

    def resolve_role(self, list_id: int, user_id: int) -> Role:
        """
        Get the user's role on a list.

        Ownership and the collaborator row are read in one statement.

        Args:
            list_id: ID of the list
            user_id: ID of the user

        Returns:
            OWNER, the collaborator's role, or NO_ACCESS (also for a
            list that does not exist)
        """
        row = self.session.execute(
            select(ShoppingList.owner_id, ListCollaborator.role)
            .outerjoin(
                ListCollaborator,
                and_(
                    ListCollaborator.list_id == ShoppingList.id,
                    ListCollaborator.user_id == user_id
                )
            )
            .where(ShoppingList.id == list_id)
        ).first()

        if row is None:
            return Role.NO_ACCESS

        owner_id, collaborator_role = row
        if owner_id == user_id:
            return Role.OWNER
        return collaborator_role or Role.NO_ACCESS

    def resolve_item_role(self, item_id: int, user_id: int) -> Role:
        """
        Get the user's role on an item's parent list.

        Raises:
            NotFoundError: If the item does not exist
        """
        return self._resolve_item(item_id, user_id)[1]

    def authorize_list(
        self,
        list_id: int,
        user_id: int,
        predicate: Predicate,
        resource: str = "List"
    ) -> Role:
        """
        Require that the user's role on a list satisfies a predicate.

        Args:
            list_id: ID of the list
            user_id: ID of the user
            predicate: Permission predicate to check
            resource: Name used in the NotFound message

        Returns:
            The user's role

        Raises:
            NotFoundError: If the user has no access (or the list is missing)
            ForbiddenError: If the user has access, but not enough
        """
        role = self.resolve_role(list_id, user_id)
        self._enforce(role, predicate, resource, list_id=list_id, user_id=user_id)
        return role

    def authorize_item(
        self,
        item_id: int,
        user_id: int,
        predicate: Predicate
    ) -> Tuple[ListItem, Role]:
        """
        Require that the user's role on an item's list satisfies a predicate.

        A missing item and an item on a list the user cannot see fail the
        same way.

        Returns:
            The item and the user's role on its list
        """
        item, role = self._resolve_item(item_id, user_id)
        self._enforce(role, predicate, "Item", item_id=item_id, user_id=user_id)
        return item, role

    def _resolve_item(self, item_id: int, user_id: int) -> Tuple[ListItem, Role]:
        item = self.session.get(ListItem, item_id)
        if item is None:
            raise NotFoundError("Item")
        return item, self.resolve_role(item.list_id, user_id)

    def _enforce(self, role: Role, predicate: Predicate, resource: str, **context) -> None:
        if role is Role.NO_ACCESS:
            self.logger.debug("No access", resource=resource, **context)
            raise NotFoundError(resource)

        if not predicate(role):
            self.logger.debug(
                "Permission denied",
                resource=resource,
                role=role.value,
                check=predicate.__name__,
                **context
            )
            raise ForbiddenError(
                f"Role {role.value} is not allowed to perform this action",
                metadata={"role": role.value}
            )
