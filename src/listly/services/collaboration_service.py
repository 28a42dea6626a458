"""List sharing service."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Union

from sqlalchemy import select, func

from listly.domain import permissions
from listly.domain.errors import ConflictError, NotFoundError, ValidationError
from listly.domain.roles import Role, parse_collaborator_role
from listly.models import ShoppingList, ListCollaborator, User
from .base_service import BaseService, Result


@dataclass
class SharedList:
    """A list shared with the current user."""
    list: ShoppingList
    role: Role
    joined_at: datetime


class CollaborationService(BaseService):
    """Service for sharing lists and managing collaborator roles."""

    def share(
        self,
        list_id: int,
        target_user_id: int,
        role: Union[Role, str, None] = None
    ) -> Result[ListCollaborator]:
        """
        Give another user access to a list.

        Args:
            list_id: ID of the list
            target_user_id: ID of the user to share with
            role: VIEWER, EDITOR or ADMIN (default: DEFAULT_COLLABORATOR_ROLE)

        Returns:
            Result containing the new collaborator row or error
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_manage_collaborators)
                granted = parse_collaborator_role(role or self.settings.DEFAULT_COLLABORATOR_ROLE)

                list_ = session.get(ShoppingList, list_id)
                if list_.owner_id == target_user_id:
                    raise ValidationError("Cannot share a list with its owner")

                if session.get(User, target_user_id) is None:
                    raise NotFoundError("User")

                if self._find(list_id, target_user_id) is not None:
                    raise ConflictError(
                        "List is already shared with this user",
                        suggestions=["Change the collaborator's role instead"]
                    )

                limit = self.settings.MAX_COLLABORATORS_PER_LIST
                current = session.execute(
                    select(func.count(ListCollaborator.id))
                    .where(ListCollaborator.list_id == list_id)
                ).scalar_one()
                if current >= limit:
                    raise ValidationError(f"Maximum limit reached ({limit} collaborators per list)")

                collaborator = ListCollaborator(
                    list_id=list_id,
                    user_id=target_user_id,
                    role=granted,
                    joined_at=self._get_now()
                )
                session.add(collaborator)
                session.flush()

                self._log_action(
                    "share",
                    list_id=list_id,
                    target_user_id=target_user_id,
                    role=granted.value
                )
                return Result.ok(collaborator)

        except Exception as e:
            return self._handle_error("share", e)

    def share_by_email(
        self,
        list_id: int,
        email: str,
        role: Union[Role, str, None] = None
    ) -> Result[ListCollaborator]:
        """Share a list with the user registered under an email address."""
        try:
            with self.transaction.transaction() as session:
                user_id = session.execute(
                    select(User.id).where(func.lower(User.email) == email.strip().lower())
                ).scalar_one_or_none()
                if user_id is None:
                    raise NotFoundError("User")

        except Exception as e:
            return self._handle_error("share_by_email", e)

        return self.share(list_id, user_id, role)

    def update_role(
        self,
        list_id: int,
        collaborator_user_id: int,
        role: Union[Role, str]
    ) -> Result[ListCollaborator]:
        """
        Change a collaborator's role.

        Args:
            list_id: ID of the list
            collaborator_user_id: ID of the collaborating user
            role: New role (VIEWER, EDITOR or ADMIN)

        Returns:
            Result containing the updated collaborator row or error
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_change_roles)
                new_role = parse_collaborator_role(role)

                collaborator = self._find(list_id, collaborator_user_id)
                if collaborator is None:
                    raise NotFoundError("Collaborator")

                previous = collaborator.role
                collaborator.role = new_role
                session.flush()

                self._log_action(
                    "update_role",
                    list_id=list_id,
                    target_user_id=collaborator_user_id,
                    previous_role=previous.value,
                    role=new_role.value
                )
                return Result.ok(collaborator)

        except Exception as e:
            return self._handle_error("update_role", e)

    def remove(self, list_id: int, collaborator_user_id: int) -> Result[int]:
        """
        Revoke a collaborator's access.

        Returns:
            Result containing the removed user's ID or error
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_manage_collaborators)

                collaborator = self._find(list_id, collaborator_user_id)
                if collaborator is None:
                    raise NotFoundError("Collaborator")

                session.delete(collaborator)
                session.flush()

                self._log_action("remove", list_id=list_id, target_user_id=collaborator_user_id)
                return Result.ok(collaborator_user_id)

        except Exception as e:
            return self._handle_error("remove", e)

    def leave(self, list_id: int) -> Result[int]:
        """
        Drop the current user's own access to a shared list.

        Owners cannot leave; they delete the list instead.

        Returns:
            Result containing the list ID or error
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_leave)

                session.delete(self._find(list_id, self.user_id))
                session.flush()

                self._log_action("leave", list_id=list_id)
                return Result.ok(list_id)

        except Exception as e:
            return self._handle_error("leave", e)

    def get_collaborators(self, list_id: int) -> Result[List[ListCollaborator]]:
        """Get a list's collaborators in the order they joined."""
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_view_collaborators)
                collaborators = session.execute(
                    select(ListCollaborator)
                    .where(ListCollaborator.list_id == list_id)
                    .order_by(ListCollaborator.joined_at, ListCollaborator.id)
                ).scalars().all()
                return Result.ok(list(collaborators))

        except Exception as e:
            return self._handle_error("get_collaborators", e)

    def get_shared_lists(self) -> Result[List[SharedList]]:
        """Get the lists other users have shared with the current user."""
        try:
            with self.transaction.transaction() as session:
                rows = session.execute(
                    select(ShoppingList, ListCollaborator.role, ListCollaborator.joined_at)
                    .join(ListCollaborator, ListCollaborator.list_id == ShoppingList.id)
                    .where(ListCollaborator.user_id == self.user_id)
                    .order_by(ListCollaborator.joined_at.desc(), ShoppingList.id.desc())
                ).all()
                return Result.ok([
                    SharedList(list=list_, role=role, joined_at=joined_at)
                    for list_, role, joined_at in rows
                ])

        except Exception as e:
            return self._handle_error("get_shared_lists", e)

    def _find(self, list_id: int, user_id: int) -> Optional[ListCollaborator]:
        return self.session.execute(
            select(ListCollaborator).where(
                ListCollaborator.list_id == list_id,
                ListCollaborator.user_id == user_id
            )
        ).scalar_one_or_none()
