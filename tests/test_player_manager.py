import pytest

from core.exceptions import (
    EmailAlreadyRegistered,
    InvalidArgument,
    NotFound,
    PlayerNotFound,
)
from core.player_manager import PlayerManager


@pytest.fixture
def players(clock):
    return PlayerManager(clock)


def test_new_player_is_inactive(db, players):
    player = players.create_player(db, "Ada Lovelace", " Ada@Club.Test ", "12345678")

    assert player.is_active is False
    assert player.activated_at is None
    assert player.email == "ada@club.test"


def test_email_is_unique_case_insensitive(db, players):
    players.create_player(db, "Ada", "ada@club.test", "1")

    with pytest.raises(EmailAlreadyRegistered):
        players.create_player(db, "Ada Again", "ADA@club.test", "2")


def test_email_of_deleted_player_can_be_reused(db, players):
    old = players.create_player(db, "Ada", "ada@club.test", "1")
    players.soft_delete_player(db, old.id)

    new = players.create_player(db, "Ada", "ada@club.test", "1")
    assert new.id != old.id


@pytest.mark.parametrize("full_name,email,phone", [
    ("", "a@b.c", "1"),
    ("Ada", "", "1"),
    ("Ada", "not-an-email", "1"),
    ("Ada", "a@b.c", " "),
])
def test_required_fields(db, players, full_name, email, phone):
    with pytest.raises(InvalidArgument):
        players.create_player(db, full_name, email, phone)


def test_activate_keeps_first_activation_time(db, players, clock):
    player = players.create_player(db, "Ada", "ada@club.test", "1")

    activated = players.activate_player(db, player.id)
    first_time = activated.activated_at
    assert activated.is_active is True

    players.deactivate_player(db, player.id)
    clock.advance()
    again = players.activate_player(db, player.id)

    assert again.is_active is True
    assert again.activated_at == first_time


def test_update_player(db, players):
    ada = players.create_player(db, "Ada", "ada@club.test", "1")
    players.create_player(db, "Bob", "bob@club.test", "2")

    updated = players.update_player(db, ada.id, "Ada L.", "99", email="ADA.L@club.test")
    assert (updated.full_name, updated.phone, updated.email) == ("Ada L.", "99", "ada.l@club.test")

    with pytest.raises(EmailAlreadyRegistered):
        players.update_player(db, ada.id, "Ada", "1", email="bob@club.test")


def test_list_players_by_name_and_status(db, players):
    zed = players.create_player(db, "Zed", "zed@club.test", "1")
    amy = players.create_player(db, "Amy", "amy@club.test", "1")
    gone = players.create_player(db, "Gone", "gone@club.test", "1")
    players.activate_player(db, zed.id)
    players.soft_delete_player(db, gone.id)

    assert [p.full_name for p in players.list_players(db)] == ["Amy", "Zed"]
    assert [p.id for p in players.list_players(db, is_active=True)] == [zed.id]
    assert [p.id for p in players.list_players(db, is_active=False)] == [amy.id]


def test_resolve_player_id(db, players):
    ada = players.create_player(db, "Ada", "ada@club.test", "1")

    assert PlayerManager.resolve_player_id(db, "ADA@club.test") == ada.id

    with pytest.raises(NotFound, match="Player not found for the current user"):
        PlayerManager.resolve_player_id(db, "nobody@club.test")

    players.soft_delete_player(db, ada.id)
    with pytest.raises(NotFound):
        PlayerManager.resolve_player_id(db, "ada@club.test")


def test_unknown_player(db, players):
    with pytest.raises(PlayerNotFound):
        players.activate_player(db, "missing")
