"""User model for Listly."""
from typing import Optional
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """Model representing an authenticated user."""

    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True)

    # Fields
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    name: Mapped[Optional[str]] = mapped_column(String(100))

    # Relationships
    lists = relationship(
        "ShoppingList",
        back_populates="owner",
        foreign_keys="ShoppingList.owner_id",
        cascade="all, delete-orphan"
    )

    collaborations = relationship(
        "ListCollaborator",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
