"""List management service."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import select, func, or_

from listly.domain import permissions
from listly.domain.errors import ErrorCode, NotFoundError, ValidationError
from listly.domain.roles import Role
from listly.domain.types import ListInput
from listly.models import ShoppingList, ListStatus, ListItem, ListCollaborator
from .base_service import BaseService, Result


@dataclass
class ListSummary:
    """Summary of a shopping list as seen by the current user."""
    id: int
    name: str
    status: ListStatus
    is_template: bool
    role: Role
    item_count: int
    checked_count: int


@dataclass
class ListDetails:
    """A shopping list with aggregated metrics."""
    list: ShoppingList
    role: Role
    item_count: int
    checked_count: int
    estimated_total: Decimal
    collaborator_count: int


class ListService(BaseService):
    """Service for managing shopping lists and their lifecycle."""

    def create_list(
        self,
        name: str,
        budget: Optional[Decimal] = None,
        is_template: bool = False
    ) -> Result[ShoppingList]:
        """
        Create a new shopping list owned by the current user.

        Args:
            name: Name of the list
            budget: Optional budget
            is_template: Whether the list is a reusable template

        Returns:
            Result containing the created list or error
        """
        try:
            data = self._parse(ListInput, name=name, budget=budget, is_template=is_template)
            self._check_list_name(data.name)

            with self.transaction.transaction() as session:
                owned = session.execute(
                    select(func.count(ShoppingList.id))
                    .where(ShoppingList.owner_id == self.user_id)
                ).scalar_one()
                if owned >= self.settings.MAX_LISTS_PER_USER:
                    raise ValidationError(
                        f"Maximum limit reached ({self.settings.MAX_LISTS_PER_USER} lists)",
                        suggestions=["Archive or delete lists you no longer need"]
                    )

                list_ = ShoppingList(
                    name=data.name,
                    budget=data.budget,
                    is_template=data.is_template,
                    status=ListStatus.ACTIVE,
                    owner_id=self.user_id,
                    created_by=self.user_id
                )
                session.add(list_)
                session.flush()  # Get ID before commit

                self._log_action("create_list", list_id=list_.id, is_template=is_template)
                return Result.ok(list_)

        except Exception as e:
            return self._handle_error("create_list", e)

    def get_list(self, list_id: int) -> Result[ListDetails]:
        """
        Get a list with its metrics.

        Args:
            list_id: ID of the list

        Returns:
            Result containing list details or error
        """
        try:
            with self.transaction.transaction() as session:
                role = self.guard.authorize_list(list_id, self.user_id, permissions.can_view)
                list_ = session.get(ShoppingList, list_id)

                item_count, checked_count = session.execute(
                    select(
                        func.count(ListItem.id),
                        func.count(ListItem.id).filter(ListItem.is_checked == True)
                    ).where(ListItem.list_id == list_id)
                ).one()

                collaborator_count = session.execute(
                    select(func.count(ListCollaborator.id))
                    .where(ListCollaborator.list_id == list_id)
                ).scalar_one()

                details = ListDetails(
                    list=list_,
                    role=role,
                    item_count=item_count,
                    checked_count=checked_count,
                    estimated_total=self._unchecked_total(list_id),
                    collaborator_count=collaborator_count
                )
                return Result.ok(details)

        except Exception as e:
            return self._handle_error("get_list", e)

    def get_lists(
        self,
        status: Optional[ListStatus] = None,
        is_template: Optional[bool] = None,
        search: Optional[str] = None
    ) -> Result[List[ListSummary]]:
        """
        Get all lists the user owns or collaborates on.

        Args:
            status: Only lists with this status
            is_template: Only templates (True) or only regular lists (False)
            search: Case-insensitive substring of the list name

        Returns:
            Result containing list summaries, newest first
        """
        try:
            with self.transaction.transaction() as session:
                query = (
                    select(
                        ShoppingList,
                        ListCollaborator.role,
                        func.count(ListItem.id).label("item_count"),
                        func.count(ListItem.id)
                        .filter(ListItem.is_checked == True)
                        .label("checked_count")
                    )
                    .outerjoin(
                        ListCollaborator,
                        (ListCollaborator.list_id == ShoppingList.id)
                        & (ListCollaborator.user_id == self.user_id)
                    )
                    .outerjoin(ListItem, ListItem.list_id == ShoppingList.id)
                    .where(or_(
                        ShoppingList.owner_id == self.user_id,
                        ListCollaborator.id.is_not(None)
                    ))
                    .group_by(ShoppingList.id, ListCollaborator.role)
                    .order_by(ShoppingList.created_at.desc(), ShoppingList.id.desc())
                )

                if status is not None:
                    query = query.where(ShoppingList.status == status)
                if is_template is not None:
                    query = query.where(ShoppingList.is_template == is_template)
                if search:
                    query = query.where(ShoppingList.name.ilike(f"%{search}%"))

                summaries = [
                    ListSummary(
                        id=list_.id,
                        name=list_.name,
                        status=list_.status,
                        is_template=list_.is_template,
                        role=Role.OWNER if list_.owner_id == self.user_id else collaborator_role,
                        item_count=item_count,
                        checked_count=checked_count
                    )
                    for list_, collaborator_role, item_count, checked_count
                    in session.execute(query).all()
                ]
                return Result.ok(summaries)

        except Exception as e:
            return self._handle_error("get_lists", e)

    def update_list(
        self,
        list_id: int,
        name: Optional[str] = None,
        budget: Optional[Decimal] = None
    ) -> Result[ShoppingList]:
        """
        Update a list's name and/or budget.

        Args:
            list_id: ID of the list
            name: New name (optional)
            budget: New budget (optional)

        Returns:
            Result containing the updated list or error
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_edit_list_details)
                list_ = session.get(ShoppingList, list_id)

                data = self._parse(
                    ListInput,
                    name=name if name is not None else list_.name,
                    budget=budget if budget is not None else list_.budget
                )
                self._check_list_name(data.name)

                list_.name = data.name
                list_.budget = data.budget
                list_.updated_by = self.user_id
                session.flush()

                self._log_action("update_list", list_id=list_id)
                return Result.ok(list_)

        except Exception as e:
            return self._handle_error("update_list", e)

    def rename_list(self, list_id: int, new_name: str) -> Result[ShoppingList]:
        """Rename a list."""
        return self.update_list(list_id, name=new_name)

    def set_budget(self, list_id: int, budget: Decimal) -> Result[ShoppingList]:
        """Set or change a list's budget."""
        return self.update_list(list_id, budget=budget)

    def delete_list(self, list_id: int) -> Result[int]:
        """
        Delete a list together with its items and collaborator links.

        Args:
            list_id: ID of the list to delete

        Returns:
            Result containing the deleted list's ID or error
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_delete_list)
                list_ = session.get(ShoppingList, list_id)

                if self.settings.REQUIRE_EMPTY_LIST_ON_DELETE and list_.items:
                    raise ValidationError(
                        "Cannot delete a list that contains items",
                        code=ErrorCode.LIST_NOT_EMPTY,
                        suggestions=["Remove the items first", "Archive the list instead"]
                    )

                session.delete(list_)
                session.flush()

                self._log_action("delete_list", list_id=list_id)
                return Result.ok(list_id)

        except Exception as e:
            return self._handle_error("delete_list", e)

    def archive_list(self, list_id: int) -> Result[ShoppingList]:
        """Archive a list."""
        return self._set_status(
            "archive_list", list_id, ListStatus.ARCHIVED, permissions.can_delete_list
        )

    def complete_list(self, list_id: int) -> Result[ShoppingList]:
        """Mark a shopping trip as done."""
        return self._set_status(
            "complete_list", list_id, ListStatus.COMPLETED, permissions.can_toggle_items
        )

    def reactivate_list(self, list_id: int) -> Result[ShoppingList]:
        """Return a completed or archived list to active use."""
        return self._set_status(
            "reactivate_list", list_id, ListStatus.ACTIVE, permissions.can_edit_list_details
        )

    def duplicate_list(
        self,
        list_id: int,
        new_name: Optional[str] = None
    ) -> Result[ShoppingList]:
        """
        Copy a list and its items into a new list owned by the current user.

        Items are copied unchecked; collaborators are not copied. The new
        list and all of its items are written in one transaction.

        Args:
            list_id: ID of the list to copy
            new_name: Name of the copy (defaults to "<name> (Copy)")

        Returns:
            Result containing the new list or error
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_view)
                source = session.get(ShoppingList, list_id)
                copy = self._copy_list(source, new_name)

                self._log_action(
                    "duplicate_list",
                    source_list_id=list_id,
                    list_id=copy.id,
                    item_count=len(source.items)
                )
                return Result.ok(copy)

        except Exception as e:
            return self._handle_error("duplicate_list", e)

    def create_from_template(
        self,
        template_id: int,
        name: Optional[str] = None
    ) -> Result[ShoppingList]:
        """
        Start a new list from a template.

        Args:
            template_id: ID of a list flagged as template
            name: Name of the new list (defaults to "<template> (Copy)")

        Returns:
            Result containing the new list or error
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(
                    template_id, self.user_id, permissions.can_view, resource="Template"
                )
                template = session.get(ShoppingList, template_id)
                if not template.is_template:
                    raise NotFoundError("Template")

                copy = self._copy_list(template, name)

                self._log_action("create_from_template", template_id=template_id, list_id=copy.id)
                return Result.ok(copy)

        except Exception as e:
            return self._handle_error("create_from_template", e)

    def get_templates(self) -> Result[List[ShoppingList]]:
        """Get the user's own templates, by name."""
        try:
            with self.transaction.transaction() as session:
                templates = session.execute(
                    select(ShoppingList)
                    .where(
                        ShoppingList.owner_id == self.user_id,
                        ShoppingList.is_template == True
                    )
                    .order_by(ShoppingList.name)
                ).scalars().all()
                return Result.ok(list(templates))

        except Exception as e:
            return self._handle_error("get_templates", e)

    def _copy_list(self, source: ShoppingList, new_name: Optional[str]) -> ShoppingList:
        """Create the copy and its items; caller owns the transaction."""
        name = new_name or f"{source.name}{self.settings.COPY_NAME_SUFFIX}"
        data = self._parse(ListInput, name=name, budget=source.budget)
        self._check_list_name(data.name)

        copy = ShoppingList(
            name=data.name,
            budget=data.budget,
            status=ListStatus.ACTIVE,
            owner_id=self.user_id,
            created_by=self.user_id
        )
        self.session.add(copy)
        self.session.flush()

        for item in source.items:
            self.session.add(ListItem(
                list_id=copy.id,
                name=item.name,
                quantity=item.quantity,
                unit=item.unit,
                notes=item.notes,
                priority=item.priority,
                estimated_price=item.estimated_price,
                category_id=item.category_id,
                sort_order=item.sort_order,
                is_checked=False,
                created_by=self.user_id
            ))
        self.session.flush()
        return copy

    def _set_status(self, action, list_id, status, predicate) -> Result[ShoppingList]:
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, predicate)
                list_ = session.get(ShoppingList, list_id)

                list_.status = status
                list_.completed_at = self._get_now() if status == ListStatus.COMPLETED else None
                list_.updated_by = self.user_id
                session.flush()

                self._log_action(action, list_id=list_id, status=status.value)
                return Result.ok(list_)

        except Exception as e:
            return self._handle_error(action, e)

    def _unchecked_total(self, list_id: int) -> Decimal:
        total = self.session.execute(
            select(func.coalesce(func.sum(ListItem.estimated_price), 0))
            .where(ListItem.list_id == list_id, ListItem.is_checked == False)
        ).scalar_one()
        return Decimal(str(total)).quantize(Decimal("0.01"))
