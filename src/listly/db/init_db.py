"""Database initialization script."""
from sqlalchemy import select
from sqlalchemy.orm import Session

from listly.db.session import engine, session_scope
from listly.models import Base, Category
from listly.services.categorizer import CATEGORY_KEYWORDS, CATEGORY_NAMES
from listly.utils.logger import get_logger

logger = get_logger(__name__)


def seed_default_categories(session: Session) -> int:
    """
    Create any missing default categories.

    Args:
        session: Database session

    Returns:
        Number of categories created
    """
    existing = set(session.execute(select(Category.slug)).scalars())
    created = 0
    for position, slug in enumerate(CATEGORY_KEYWORDS):
        if slug in existing:
            continue
        session.add(Category(
            slug=slug,
            name=CATEGORY_NAMES[slug],
            sort_order=position,
            is_default=True
        ))
        created += 1
    session.flush()
    return created


def init_db():
    """Initialize the database with tables and default categories."""
    Base.metadata.create_all(engine)

    with session_scope() as session:
        created = seed_default_categories(session)
    logger.info("Database initialized", categories_created=created)


if __name__ == "__main__":
    init_db()
