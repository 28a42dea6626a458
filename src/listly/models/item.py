"""ListItem model for Listly."""
from typing import Optional
from datetime import datetime
from decimal import Decimal
from sqlalchemy import String, ForeignKey, Integer, Boolean, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, TZDateTime


class ListItem(Base, TimestampMixin):
    """Model representing an item in a shopping list."""

    __tablename__ = "list_items"

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True)

    # Fields
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("1"), nullable=False)
    unit: Mapped[Optional[str]] = mapped_column(String(20))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    estimated_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    is_checked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    checked_at: Mapped[Optional[datetime]] = mapped_column(TZDateTime)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Foreign keys
    list_id: Mapped[int] = mapped_column(
        ForeignKey("shopping_lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL")
    )

    # Relationships
    list = relationship(
        "ShoppingList",
        back_populates="items"
    )

    category = relationship("Category")

    def __repr__(self) -> str:
        return f"<ListItem(id={self.id}, name='{self.name}', quantity={self.quantity})>"
