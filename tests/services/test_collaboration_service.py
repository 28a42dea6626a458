"""Tests for list sharing."""
import pytest
from sqlalchemy.exc import IntegrityError

from listly.config.settings import ListlySettings
from listly.domain.errors import ErrorCode
from listly.domain.roles import Role
from listly.models import User, ListCollaborator
from listly.services.collaboration_service import CollaborationService


@pytest.fixture
def collaboration(services):
    return services.collaboration


def test_share(collaboration, shopping_list, friend):
    """Test sharing with the default role."""
    result = collaboration.share(shopping_list.id, friend.id)
    assert result.success
    assert result.data.user_id == friend.id
    assert result.data.role is Role.EDITOR
    assert result.data.joined_at is not None


def test_share_with_role_name(collaboration, shopping_list, friend):
    result = collaboration.share(shopping_list.id, friend.id, "viewer")
    assert result.success
    assert result.data.role is Role.VIEWER


@pytest.mark.parametrize("role", ["OWNER", "NO_ACCESS", "guest"])
def test_share_invalid_role(collaboration, shopping_list, friend, role):
    result = collaboration.share(shopping_list.id, friend.id, role)
    assert result.code == ErrorCode.VALIDATION_ERROR


def test_share_with_owner(collaboration, shopping_list, owner):
    """The owner never gets a collaborator row."""
    result = collaboration.share(shopping_list.id, owner.id)
    assert result.code == ErrorCode.VALIDATION_ERROR


def test_share_unknown_user(collaboration, shopping_list):
    assert collaboration.share(shopping_list.id, 9999).code == ErrorCode.NOT_FOUND


def test_share_twice(collaboration, shopping_list, friend):
    assert collaboration.share(shopping_list.id, friend.id).success
    result = collaboration.share(shopping_list.id, friend.id, Role.ADMIN)
    assert result.code == ErrorCode.CONFLICT
    assert len(result.suggestions) > 0


def test_share_limit(session, owner, shopping_list):
    service = CollaborationService(session, owner.id, ListlySettings(MAX_COLLABORATORS_PER_LIST=2))
    users = [User(email=f"user{n}@example.com") for n in range(3)]
    session.add_all(users)
    session.commit()

    assert service.share(shopping_list.id, users[0].id).success
    assert service.share(shopping_list.id, users[1].id).success
    result = service.share(shopping_list.id, users[2].id)
    assert result.code == ErrorCode.VALIDATION_ERROR


def test_share_requires_admin(friend_services, shopping_list, friend, stranger, share_with):
    share_with(shopping_list, friend, Role.EDITOR)
    result = friend_services.collaboration.share(shopping_list.id, stranger.id)
    assert result.code == ErrorCode.FORBIDDEN


def test_admin_can_share(friend_services, shopping_list, friend, stranger, share_with):
    share_with(shopping_list, friend, Role.ADMIN)
    assert friend_services.collaboration.share(shopping_list.id, stranger.id, Role.VIEWER).success


def test_share_by_email(collaboration, shopping_list, friend):
    result = collaboration.share_by_email(shopping_list.id, "  BOB@example.com ", Role.VIEWER)
    assert result.success
    assert result.data.user_id == friend.id

    result = collaboration.share_by_email(shopping_list.id, "nobody@example.com")
    assert result.code == ErrorCode.NOT_FOUND


def test_update_role(collaboration, friend_services, shopping_list, friend):
    """A role change applies to the collaborator's next request."""
    collaboration.share(shopping_list.id, friend.id, Role.VIEWER)
    assert friend_services.lists.rename_list(shopping_list.id, "Ours").code == ErrorCode.FORBIDDEN

    result = collaboration.update_role(shopping_list.id, friend.id, Role.ADMIN)
    assert result.success
    assert result.data.role is Role.ADMIN

    assert friend_services.lists.rename_list(shopping_list.id, "Ours").success


def test_update_role_errors(collaboration, shopping_list, friend, stranger):
    collaboration.share(shopping_list.id, friend.id)
    assert collaboration.update_role(shopping_list.id, friend.id, "OWNER").code == ErrorCode.VALIDATION_ERROR
    assert collaboration.update_role(shopping_list.id, stranger.id, "ADMIN").code == ErrorCode.NOT_FOUND


def test_remove(collaboration, friend_services, shopping_list, friend):
    collaboration.share(shopping_list.id, friend.id)

    result = collaboration.remove(shopping_list.id, friend.id)
    assert result.success
    assert result.data == friend.id
    assert friend_services.lists.get_list(shopping_list.id).code == ErrorCode.NOT_FOUND

    assert collaboration.remove(shopping_list.id, friend.id).code == ErrorCode.NOT_FOUND


def test_leave(collaboration, friend_services, shopping_list, friend):
    collaboration.share(shopping_list.id, friend.id, Role.VIEWER)

    result = friend_services.collaboration.leave(shopping_list.id)
    assert result.success
    assert friend_services.collaboration.get_shared_lists().data == []

    # Nothing left to leave
    assert friend_services.collaboration.leave(shopping_list.id).code == ErrorCode.NOT_FOUND


def test_owner_cannot_leave(collaboration, shopping_list):
    assert collaboration.leave(shopping_list.id).code == ErrorCode.FORBIDDEN


def test_get_collaborators(collaboration, friend_services, shopping_list, friend, stranger):
    collaboration.share(shopping_list.id, friend.id, Role.EDITOR)
    collaboration.share(shopping_list.id, stranger.id, Role.VIEWER)

    result = collaboration.get_collaborators(shopping_list.id)
    assert [(c.user_id, c.role) for c in result.data] == [
        (friend.id, Role.EDITOR), (stranger.id, Role.VIEWER)
    ]

    # Editors may see who else has access
    assert len(friend_services.collaboration.get_collaborators(shopping_list.id).data) == 2


def test_viewer_cannot_see_collaborators(collaboration, stranger_services, shopping_list, stranger):
    collaboration.share(shopping_list.id, stranger.id, Role.VIEWER)
    result = stranger_services.collaboration.get_collaborators(shopping_list.id)
    assert result.code == ErrorCode.FORBIDDEN


def test_get_shared_lists(collaboration, friend_services, shopping_list, friend):
    collaboration.share(shopping_list.id, friend.id, Role.VIEWER)
    friend_services.lists.create_list("Bob's list")

    result = friend_services.collaboration.get_shared_lists()
    assert result.success
    assert len(result.data) == 1
    shared = result.data[0]
    assert shared.list.id == shopping_list.id
    assert shared.role is Role.VIEWER


def test_collaborator_rows_are_unique(session, shopping_list, friend):
    """The database rejects a second row for the same user."""
    session.add(ListCollaborator(list_id=shopping_list.id, user_id=friend.id, role=Role.VIEWER))
    session.commit()
    session.add(ListCollaborator(list_id=shopping_list.id, user_id=friend.id, role=Role.ADMIN))
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()
