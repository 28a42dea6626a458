"""Category service."""
from typing import Optional, List

from sqlalchemy import select, update

from listly.domain.errors import ConflictError, NotFoundError, ValidationError
from listly.models import Category, Store, StoreCategory
from .base_service import BaseService, Result
from .categorizer import classify


class CategoryService(BaseService):
    """Service for item categories and per-store aisle order."""

    def get_defaults(self) -> Result[List[Category]]:
        """Get the default categories in aisle order."""
        try:
            with self.transaction.transaction() as session:
                categories = session.execute(
                    select(Category)
                    .where(Category.is_default == True)
                    .order_by(Category.sort_order, Category.id)
                ).scalars().all()
                return Result.ok(list(categories))

        except Exception as e:
            return self._handle_error("get_defaults", e)

    def get_by_slug(self, slug: str) -> Result[Category]:
        """Get a category by its slug."""
        try:
            with self.transaction.transaction():
                return Result.ok(self._find_by_slug(slug))

        except Exception as e:
            return self._handle_error("get_by_slug", e)

    def create(
        self,
        slug: str,
        name: str,
        icon: Optional[str] = None,
        color: Optional[str] = None,
        sort_order: int = 0
    ) -> Result[Category]:
        """
        Create a custom category.

        Args:
            slug: Unique identifier, stored lower-cased
            name: Display name
            icon: Optional icon
            color: Optional colour
            sort_order: Default aisle position

        Returns:
            Result containing the created category or error
        """
        try:
            slug = (slug or "").strip().lower()
            name = (name or "").strip()
            if not slug or not name:
                raise ValidationError("Category slug and name are required")

            with self.transaction.transaction() as session:
                exists = session.execute(
                    select(Category.id).where(Category.slug == slug)
                ).scalar_one_or_none()
                if exists is not None:
                    raise ConflictError(f"Category '{slug}' already exists")

                category = Category(
                    slug=slug,
                    name=name,
                    icon=icon,
                    color=color,
                    sort_order=sort_order,
                    is_default=False,
                    created_by=self.user_id
                )
                session.add(category)
                session.flush()

                self._log_action("create_category", category_id=category.id, slug=slug)
                return Result.ok(category)

        except Exception as e:
            return self._handle_error("create_category", e)

    def suggest_for_item(self, item_name: str) -> Result[Optional[Category]]:
        """
        Suggest a category for an item name.

        Returns:
            Result containing the matching category, or None when the name
            matches no keyword or the category has not been seeded
        """
        try:
            slug = classify(item_name)
            if slug is None:
                return Result.ok(None)

            with self.transaction.transaction() as session:
                category = session.execute(
                    select(Category).where(Category.slug == slug)
                ).scalar_one_or_none()
                return Result.ok(category)

        except Exception as e:
            return self._handle_error("suggest_for_item", e)

    def update_store_order(self, store_id: int, category_ids: List[int]) -> Result[List[int]]:
        """
        Set the aisle order of categories for a store.

        Existing positions are updated one row at a time and missing ones
        are added, all in one transaction.

        Args:
            store_id: ID of the store
            category_ids: Category IDs in aisle order

        Returns:
            Result containing the category IDs in their new order
        """
        try:
            with self.transaction.transaction() as session:
                if session.get(Store, store_id) is None:
                    raise NotFoundError("Store")
                if len(set(category_ids)) != len(category_ids):
                    raise ValidationError("Category IDs must not repeat")

                known = set(session.execute(
                    select(Category.id).where(Category.id.in_(category_ids))
                ).scalars())
                missing = [category_id for category_id in category_ids if category_id not in known]
                if missing:
                    raise NotFoundError("Category", metadata={"category_ids": missing})

                placed = set(session.execute(
                    select(StoreCategory.category_id).where(StoreCategory.store_id == store_id)
                ).scalars())

                for position, category_id in enumerate(category_ids):
                    if category_id in placed:
                        session.execute(
                            update(StoreCategory)
                            .where(
                                StoreCategory.store_id == store_id,
                                StoreCategory.category_id == category_id
                            )
                            .values(sort_order=position)
                        )
                    else:
                        session.add(StoreCategory(
                            store_id=store_id,
                            category_id=category_id,
                            sort_order=position
                        ))
                session.flush()

                self._log_action("update_store_order", store_id=store_id, category_count=len(category_ids))
                return Result.ok(list(category_ids))

        except Exception as e:
            return self._handle_error("update_store_order", e)

    def _find_by_slug(self, slug: str) -> Category:
        category = self.session.execute(
            select(Category).where(Category.slug == slug.strip().lower())
        ).scalar_one_or_none()
        if category is None:
            raise NotFoundError("Category")
        return category
