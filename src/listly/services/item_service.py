"""Item management service."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, List, Dict, Any

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session

from listly.domain import permissions
from listly.domain.errors import NotFoundError, ValidationError
from listly.domain.types import ItemInput, ItemUpdate
from listly.models import ListItem, Category
from .base_service import BaseService, Result
from .categorizer import classify


@dataclass
class ItemCreateResult:
    """A created item and whether its category was guessed from its name."""
    item: ListItem
    auto_categorized: bool = False
    suggested_category: Optional[str] = None


def next_sort_order(session: Session, list_id: int) -> int:
    """
    Get the sort order for a new item at the end of a list.

    Always one past the current maximum, so freed positions are never
    reused.
    """
    current = session.execute(
        select(func.max(ListItem.sort_order)).where(ListItem.list_id == list_id)
    ).scalar_one()
    return (current or 0) + 1


def count_items(session: Session, list_id: int) -> int:
    """Count the items on a list."""
    return session.execute(
        select(func.count(ListItem.id)).where(ListItem.list_id == list_id)
    ).scalar_one()


class ItemService(BaseService):
    """Service for managing list items."""

    def create_item(
        self,
        list_id: int,
        name: str,
        quantity: Decimal = Decimal("1"),
        unit: Optional[str] = None,
        category_id: Optional[int] = None,
        estimated_price: Optional[Decimal] = None,
        notes: Optional[str] = None,
        priority: int = 0
    ) -> Result[ItemCreateResult]:
        """
        Add an item to a list.

        When no category is given the name is classified; a hit is applied
        and reported back as a suggestion.

        Args:
            list_id: ID of the list to add to
            name: Name of the item
            quantity: Item quantity (default: 1)
            unit: Unit of measurement
            category_id: Explicit category
            estimated_price: Expected price
            notes: Free-text notes
            priority: Priority, higher first

        Returns:
            Result containing the created item and categorization info
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_edit_items)

                data = self._parse(
                    ItemInput,
                    name=name,
                    quantity=quantity,
                    unit=unit,
                    category_id=category_id,
                    estimated_price=estimated_price,
                    notes=notes,
                    priority=priority
                )
                self._check_capacity(list_id, adding=1)

                created = self._add_item(list_id, data, next_sort_order(session, list_id))
                session.flush()

                self._log_action(
                    "create_item",
                    item_id=created.item.id,
                    list_id=list_id,
                    auto_categorized=created.auto_categorized
                )
                return Result.ok(created)

        except Exception as e:
            return self._handle_error("create_item", e)

    def create_items(
        self,
        list_id: int,
        items: List[Dict[str, Any]]
    ) -> Result[List[ItemCreateResult]]:
        """
        Add several items to a list in one transaction.

        Args:
            list_id: ID of the list to add to
            items: Item fields, as accepted by create_item

        Returns:
            Result containing one creation result per item, in input order
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_edit_items)

                parsed = [self._parse(ItemInput, **fields) for fields in items]
                self._check_capacity(list_id, adding=len(parsed))

                sort_order = next_sort_order(session, list_id)
                created = [
                    self._add_item(list_id, data, sort_order + offset)
                    for offset, data in enumerate(parsed)
                ]
                session.flush()

                self._log_action("create_items", list_id=list_id, item_count=len(created))
                return Result.ok(created)

        except Exception as e:
            return self._handle_error("create_items", e)

    def get_item(self, item_id: int) -> Result[ListItem]:
        """Get a single item."""
        try:
            with self.transaction.transaction():
                item, _ = self.guard.authorize_item(item_id, self.user_id, permissions.can_view_items)
                return Result.ok(item)

        except Exception as e:
            return self._handle_error("get_item", e)

    def get_items(self, list_id: int, include_checked: bool = True) -> Result[List[ListItem]]:
        """
        Get the items of a list, unchecked first, then in sort order.

        Args:
            list_id: ID of the list
            include_checked: Whether to include checked items (default: True)

        Returns:
            Result containing the items
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_view_items)

                query = select(ListItem).where(ListItem.list_id == list_id)
                if not include_checked:
                    query = query.where(ListItem.is_checked == False)
                query = query.order_by(ListItem.is_checked, ListItem.sort_order, ListItem.id)

                return Result.ok(list(session.execute(query).scalars().all()))

        except Exception as e:
            return self._handle_error("get_items", e)

    def update_item(self, item_id: int, **changes) -> Result[ListItem]:
        """
        Update an item's fields.

        Args:
            item_id: ID of the item to update
            **changes: Any of name, quantity, unit, category_id,
                estimated_price, notes, priority

        Returns:
            Result containing the updated item or error
        """
        try:
            with self.transaction.transaction() as session:
                item, _ = self.guard.authorize_item(item_id, self.user_id, permissions.can_edit_items)

                data = self._parse(ItemUpdate, **changes).model_dump(exclude_unset=True)
                if "name" in data:
                    self._check_name(data["name"])
                if data.get("category_id") is not None:
                    self._get_category(data["category_id"])

                for field, value in data.items():
                    setattr(item, field, value)
                item.updated_by = self.user_id
                session.flush()

                self._log_action("update_item", item_id=item_id, fields=sorted(data))
                return Result.ok(item)

        except Exception as e:
            return self._handle_error("update_item", e)

    def delete_item(self, item_id: int) -> Result[int]:
        """
        Remove an item from its list.

        Returns:
            Result containing the removed item's ID or error
        """
        try:
            with self.transaction.transaction() as session:
                item, _ = self.guard.authorize_item(item_id, self.user_id, permissions.can_delete_items)
                list_id = item.list_id
                session.delete(item)
                session.flush()

                self._log_action("delete_item", item_id=item_id, list_id=list_id)
                return Result.ok(item_id)

        except Exception as e:
            return self._handle_error("delete_item", e)

    def toggle_check(
        self,
        item_id: int,
        actual_price: Optional[Decimal] = None
    ) -> Result[ListItem]:
        """
        Flip an item's checked state.

        Checking stamps ``checked_at`` and, when an actual price is given,
        records it as the item's price; unchecking clears ``checked_at``.

        Args:
            item_id: ID of the item
            actual_price: Price paid, applied only when checking

        Returns:
            Result containing the updated item or error
        """
        try:
            with self.transaction.transaction() as session:
                item, _ = self.guard.authorize_item(item_id, self.user_id, permissions.can_toggle_items)
                self._flip(item, actual_price)
                session.flush()

                self._log_action("toggle_check", item_id=item_id, is_checked=item.is_checked)
                return Result.ok(item)

        except Exception as e:
            return self._handle_error("toggle_check", e)

    def check(self, item_id: int, actual_price: Optional[Decimal] = None) -> Result[ListItem]:
        """Check an item; already checked items are returned unchanged."""
        return self._set_checked(item_id, True, actual_price)

    def uncheck(self, item_id: int) -> Result[ListItem]:
        """Uncheck an item; unchecked items are returned unchanged."""
        return self._set_checked(item_id, False)

    def check_all(self, list_id: int) -> Result[int]:
        """
        Check every unchecked item on a list.

        Returns:
            Result containing the number of items checked
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_toggle_items)

                unchecked = session.execute(
                    select(ListItem)
                    .where(ListItem.list_id == list_id, ListItem.is_checked == False)
                ).scalars().all()

                now = self._get_now()
                for item in unchecked:
                    item.is_checked = True
                    item.checked_at = now
                    item.updated_by = self.user_id
                session.flush()

                self._log_action("check_all", list_id=list_id, item_count=len(unchecked))
                return Result.ok(len(unchecked))

        except Exception as e:
            return self._handle_error("check_all", e)

    def reorder(self, list_id: int, item_ids: List[int]) -> Result[List[int]]:
        """
        Set the order of a list's items.

        Each listed item gets its position in ``item_ids`` as its sort order.
        All updates are applied in one transaction.

        Args:
            list_id: ID of the list
            item_ids: Item IDs in their new order; all must be on the list

        Returns:
            Result containing the item IDs in their new order
        """
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_edit_items)

                if len(set(item_ids)) != len(item_ids):
                    raise ValidationError("Item IDs must not repeat")

                on_list = set(session.execute(
                    select(ListItem.id)
                    .where(ListItem.list_id == list_id, ListItem.id.in_(item_ids))
                ).scalars())
                foreign = [item_id for item_id in item_ids if item_id not in on_list]
                if foreign:
                    raise ValidationError(
                        "Some items do not belong to this list",
                        metadata={"item_ids": foreign}
                    )

                for position, item_id in enumerate(item_ids):
                    session.execute(
                        update(ListItem)
                        .where(ListItem.id == item_id)
                        .values(sort_order=position)
                    )

                self._log_action("reorder", list_id=list_id, item_count=len(item_ids))
                return Result.ok(list(item_ids))

        except Exception as e:
            return self._handle_error("reorder", e)

    def move_to_list(self, item_id: int, target_list_id: int) -> Result[ListItem]:
        """
        Move an item to another list.

        The caller must be able to edit items on both lists. The moved item
        is unchecked and placed at the end of the target list.

        Args:
            item_id: ID of the item
            target_list_id: ID of the destination list

        Returns:
            Result containing the moved item or error
        """
        try:
            with self.transaction.transaction() as session:
                item, _ = self.guard.authorize_item(item_id, self.user_id, permissions.can_edit_items)
                self.guard.authorize_list(target_list_id, self.user_id, permissions.can_edit_items)

                source_list_id = item.list_id
                if source_list_id == target_list_id:
                    raise ValidationError("Item is already on this list")
                self._check_capacity(target_list_id, adding=1)

                item.list_id = target_list_id
                item.is_checked = False
                item.checked_at = None
                item.sort_order = next_sort_order(session, target_list_id)
                item.updated_by = self.user_id
                session.flush()

                self._log_action(
                    "move_to_list",
                    item_id=item_id,
                    source_list_id=source_list_id,
                    target_list_id=target_list_id
                )
                return Result.ok(item)

        except Exception as e:
            return self._handle_error("move_to_list", e)

    def get_unchecked_count(self, list_id: int) -> Result[int]:
        """Count the items still to buy."""
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_view_items)
                count = session.execute(
                    select(func.count(ListItem.id))
                    .where(ListItem.list_id == list_id, ListItem.is_checked == False)
                ).scalar_one()
                return Result.ok(count)

        except Exception as e:
            return self._handle_error("get_unchecked_count", e)

    def get_estimated_total(self, list_id: int) -> Result[Decimal]:
        """Sum the estimated prices of the items still to buy."""
        try:
            with self.transaction.transaction() as session:
                self.guard.authorize_list(list_id, self.user_id, permissions.can_view_items)
                total = session.execute(
                    select(func.coalesce(func.sum(ListItem.estimated_price), 0))
                    .where(ListItem.list_id == list_id, ListItem.is_checked == False)
                ).scalar_one()
                return Result.ok(Decimal(str(total)).quantize(Decimal("0.01")))

        except Exception as e:
            return self._handle_error("get_estimated_total", e)

    def _set_checked(
        self,
        item_id: int,
        is_checked: bool,
        actual_price: Optional[Decimal] = None
    ) -> Result[ListItem]:
        action = "check" if is_checked else "uncheck"
        try:
            with self.transaction.transaction() as session:
                item, _ = self.guard.authorize_item(item_id, self.user_id, permissions.can_toggle_items)
                if item.is_checked != is_checked:
                    self._flip(item, actual_price)
                    session.flush()
                    self._log_action(action, item_id=item_id)
                return Result.ok(item)

        except Exception as e:
            return self._handle_error(action, e)

    def _flip(self, item: ListItem, actual_price: Optional[Decimal]) -> None:
        checking = not item.is_checked
        price = None
        if checking and actual_price is not None:
            price = self._parse(ItemUpdate, estimated_price=actual_price).estimated_price

        item.is_checked = checking
        item.checked_at = self._get_now() if checking else None
        if price is not None:
            item.estimated_price = price
        item.updated_by = self.user_id

    def _add_item(self, list_id: int, data: ItemInput, sort_order: int) -> ItemCreateResult:
        """Stage a new item; caller owns the transaction."""
        self._check_name(data.name)

        category_id = data.category_id
        auto_categorized = False
        suggested_category = None

        if category_id is not None:
            self._get_category(category_id)
        else:
            slug = classify(data.name)
            if slug:
                category = self.session.execute(
                    select(Category).where(Category.slug == slug)
                ).scalar_one_or_none()
                if category:
                    category_id = category.id
                    auto_categorized = True
                    suggested_category = category.name

        item = ListItem(
            list_id=list_id,
            name=data.name,
            quantity=data.quantity,
            unit=data.unit,
            category_id=category_id,
            estimated_price=data.estimated_price,
            notes=data.notes,
            priority=data.priority,
            sort_order=sort_order,
            is_checked=False,
            created_by=self.user_id
        )
        self.session.add(item)
        return ItemCreateResult(
            item=item,
            auto_categorized=auto_categorized,
            suggested_category=suggested_category
        )

    def _check_capacity(self, list_id: int, adding: int) -> None:
        limit = self.settings.MAX_ITEMS_PER_LIST
        if count_items(self.session, list_id) + adding > limit:
            raise ValidationError(
                f"Maximum limit reached ({limit} items per list)",
                suggestions=["Remove checked items", "Start a new list"]
            )

    def _check_name(self, name: str) -> None:
        if len(name) > self.settings.MAX_ITEM_NAME_LENGTH:
            raise ValidationError(
                f"Item name must be {self.settings.MAX_ITEM_NAME_LENGTH} characters or less"
            )

    def _get_category(self, category_id: int) -> Category:
        category = self.session.get(Category, category_id)
        if category is None:
            raise NotFoundError("Category")
        return category
