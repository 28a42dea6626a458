"""Test configuration and fixtures for Listly."""
import sqlite3
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from listly.config.settings import ListlySettings
from listly.db.init_db import seed_default_categories
from listly.models import Base, User, ShoppingList, ListItem, ListCollaborator, ListStatus
from listly.domain.roles import Role
from listly.services import build_services


@pytest.fixture
def engine():
    """Create a fresh in-memory database for each test."""
    def _fk_pragma_on_connect(dbapi_con, con_record):
        if isinstance(dbapi_con, sqlite3.Connection):
            dbapi_con.execute('PRAGMA foreign_keys=ON')

    # One shared connection so every session sees the same database
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    event.listen(test_engine, 'connect', _fk_pragma_on_connect)

    Base.metadata.create_all(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session(engine):
    """Create a new database session for a test."""
    session = Session(engine)
    yield session
    session.close()


@pytest.fixture
def settings():
    """Settings with the default limits."""
    return ListlySettings()


@pytest.fixture
def categories(session):
    """Seed the default categories."""
    seed_default_categories(session)
    session.commit()


def _make_user(session, email: str, name: str) -> User:
    user = User(email=email, name=name)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def owner(session) -> User:
    """The user who owns the test list."""
    return _make_user(session, "alice@example.com", "Alice")


@pytest.fixture
def friend(session) -> User:
    """A second user, used as collaborator."""
    return _make_user(session, "bob@example.com", "Bob")


@pytest.fixture
def stranger(session) -> User:
    """A user with no relationship to the test list."""
    return _make_user(session, "carol@example.com", "Carol")


@pytest.fixture
def services(session, owner, settings, categories):
    """Services acting as the owner."""
    return build_services(session, owner.id, settings)


@pytest.fixture
def friend_services(session, friend, settings, categories):
    """Services acting as the friend."""
    return build_services(session, friend.id, settings)


@pytest.fixture
def stranger_services(session, stranger, settings, categories):
    """Services acting as the stranger."""
    return build_services(session, stranger.id, settings)


@pytest.fixture
def shopping_list(session, owner) -> ShoppingList:
    """Create a test shopping list owned by the owner."""
    list_ = ShoppingList(
        name="Weekly groceries",
        status=ListStatus.ACTIVE,
        owner_id=owner.id,
        created_by=owner.id,
    )
    session.add(list_)
    session.commit()
    session.refresh(list_)
    return list_


@pytest.fixture
def list_item(session, shopping_list) -> ListItem:
    """Create a test item on the shopping list."""
    item = ListItem(
        name="Bread",
        quantity=Decimal("2"),
        unit="loaf",
        estimated_price=Decimal("3.50"),
        sort_order=1,
        list_id=shopping_list.id,
        created_by=shopping_list.owner_id,
    )
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


@pytest.fixture
def share_with(session):
    """Add a collaborator row directly."""
    def _share(list_: ShoppingList, user: User, role: Role) -> ListCollaborator:
        collaborator = ListCollaborator(list_id=list_.id, user_id=user.id, role=role)
        session.add(collaborator)
        session.commit()
        return collaborator
    return _share
