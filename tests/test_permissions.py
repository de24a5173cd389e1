"""Tests for power level checks."""

import pytest

from matrix_mirror.errors import MalformedEventError
from matrix_mirror.permissions import Permissions, event_kind


@pytest.fixture
def permissions(room):
    return room.permissions


@pytest.fixture
def alice(users):
    return users.resolve("@alice:example.org")


@pytest.mark.parametrize(
    "event_type, kind",
    [("m.room.name", "name"), ("m.room.power_levels", "power_levels"), ("avatar", "avatar"), ("org.example.thing", "thing")],
)
def test_event_kind(event_type, kind):
    assert event_kind(event_type) == kind


def test_everything_denied_before_update(permissions: Permissions, alice, room):
    alice.set_power_level(room, 100)
    for action in ("ban", "kick", "invite", "redact"):
        assert not permissions.can(alice, action)
    assert not permissions.can_set(alice, "name")


def test_threshold_comparison(permissions: Permissions, alice, room):
    permissions.update({"ban": 50, "events": {}})

    assert not permissions.can(alice, "ban")  # unrecorded power is 0
    alice.set_power_level(room, 49)
    assert not permissions.can(alice, "ban")
    alice.set_power_level(room, 50)
    assert permissions.can(alice, "ban")
    alice.set_power_level(room, 10)
    assert not permissions.can(alice, "ban")


def test_negative_threshold_allows_everyone(permissions: Permissions, alice):
    permissions.update({"kick": -5})
    assert permissions.can(alice, "kick")


def test_update_replaces_tables(permissions: Permissions, alice, room):
    alice.set_power_level(room, 100)
    permissions.update({"ban": 50, "kick": 50, "events": {"m.room.name": 50, "m.room.avatar": 50}})
    permissions.update({"kick": 50, "events": {"m.room.topic": 50}})

    assert permissions.actions == {"kick": 50}
    assert permissions.events == {"topic": 50}
    assert not permissions.can(alice, "ban")
    assert not permissions.can_set(alice, "name")
    assert permissions.can_set(alice, "m.room.topic")


def test_event_thresholds(permissions: Permissions, alice, room):
    permissions.update(
        {
            "events": {
                "m.room.avatar": 50,
                "m.room.canonical_alias": 50,
                "m.room.history_visibility": 100,
                "m.room.name": 50,
                "m.room.power_levels": 100,
            }
        }
    )
    alice.set_power_level(room, 50)

    assert permissions.can_set(alice, "avatar")
    assert permissions.can_set(alice, "canonical_alias")
    assert permissions.can_set(alice, "m.room.name")
    assert not permissions.can_set(alice, "history_visibility")
    assert not permissions.can_set(alice, "power_levels")
    assert not permissions.can_set(alice, "m.room.topic")


def test_non_integer_thresholds_are_ignored(permissions: Permissions):
    permissions.update({"ban": None, "kick": "50", "events": {"m.room.name": None}})
    assert permissions.actions == {}
    assert permissions.events == {}


def test_power_is_per_room(rooms, alice):
    first = rooms.resolve("!first:example.org")
    second = rooms.resolve("!second:example.org")
    first.permissions.update({"ban": 50})
    second.permissions.update({"ban": 50})

    alice.set_power_level(first, 100)

    assert first.permissions.can(alice, "ban")
    assert not second.permissions.can(alice, "ban")


@pytest.mark.parametrize("events", [["m.room.name"], "m.room.name", 50])
def test_update_rejects_non_mapping_events(permissions: Permissions, events):
    permissions.update({"ban": 50, "events": {"m.room.name": 50}})

    with pytest.raises(MalformedEventError):
        permissions.update({"ban": 0, "events": events})

    assert permissions.actions == {"ban": 50}
    assert permissions.events == {"name": 50}
