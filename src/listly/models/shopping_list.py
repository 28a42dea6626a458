"""ShoppingList model for Listly."""
import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import String, ForeignKey, Boolean, Numeric, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from .base import Base, TimestampMixin, TZDateTime


class ListStatus(str, enum.Enum):
    """Lifecycle status of a shopping list."""
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class ShoppingList(Base, TimestampMixin):
    """Model representing a shopping list."""

    __tablename__ = "shopping_lists"

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True)

    # Fields
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    budget: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    status: Mapped[ListStatus] = mapped_column(
        Enum(ListStatus, name="list_status"),
        default=ListStatus.ACTIVE,
        nullable=False
    )
    is_template: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(TZDateTime)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Relationships
    owner = relationship(
        "User",
        back_populates="lists",
        foreign_keys=[owner_id]
    )

    items = relationship(
        "ListItem",
        back_populates="list",
        cascade="all, delete-orphan",
        order_by="ListItem.sort_order"
    )

    collaborators = relationship(
        "ListCollaborator",
        back_populates="list",
        cascade="all, delete-orphan"
    )

    @validates("owner_id")
    def validate_owner_id(self, key: str, value: int) -> int:
        """Owner is fixed once the list exists."""
        if self.owner_id is not None and value != self.owner_id:
            raise ValueError("List owner cannot be changed")
        return value

    def __repr__(self) -> str:
        return f"<ShoppingList(id={self.id}, name='{self.name}', status={self.status})>"
