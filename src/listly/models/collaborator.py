"""ListCollaborator model for Listly."""
from datetime import datetime
from sqlalchemy import ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from listly.domain.roles import Role, COLLABORATOR_ROLES
from .base import Base, TZDateTime, utc_now


class ListCollaborator(Base):
    """A non-owner user's access to a shared list."""

    __tablename__ = "list_collaborators"

    # One row per (list, user)
    __table_args__ = (
        UniqueConstraint("list_id", "user_id", name="uq_collaborator_list_user"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True)

    # Fields
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="collaborator_role"),
        default=Role.EDITOR,
        nullable=False
    )
    joined_at: Mapped[datetime] = mapped_column(TZDateTime, default=utc_now, nullable=False)

    # Foreign keys
    list_id: Mapped[int] = mapped_column(
        ForeignKey("shopping_lists.id", ondelete="CASCADE"),
        nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Relationships
    list = relationship("ShoppingList", back_populates="collaborators")
    user = relationship("User", back_populates="collaborations")

    @validates("role")
    def validate_role(self, key: str, value: Role) -> Role:
        if value not in COLLABORATOR_ROLES:
            raise ValueError(f"Collaborators cannot hold role {value}")
        return value

    def __repr__(self) -> str:
        return (
            f"<ListCollaborator(list_id={self.list_id}, user_id={self.user_id}, "
            f"role={self.role})>"
        )
