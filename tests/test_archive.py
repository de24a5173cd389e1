"""Tests for the SQLAlchemy message archive."""

from datetime import datetime

import pytest

from matrix_mirror.archive import MessageArchive
from matrix_mirror.config import DatabaseConfig
from matrix_mirror.message import HTML_FORMAT, Message


@pytest.fixture
def make_archive(temp_dir):
    archives = []

    def _make(store_content: bool) -> MessageArchive:
        config = DatabaseConfig(type="sqlite", database=str(temp_dir / "archive.db"), store_content=store_content)
        archive = MessageArchive(config)
        archives.append(archive)
        return archive

    yield _make
    for archive in archives:
        archive.close()


@pytest.fixture
def alice(users):
    return users.resolve("@alice:example.org")


@pytest.mark.parametrize("store_content", [True, False])
def test_record_message(make_archive, room, alice, store_content):
    archive = make_archive(store_content)
    message = Message.from_content(alice, {"msgtype": "m.text", "body": "Test message content"}, 1700000000000)

    archive.record(room, message)

    (row,) = archive.messages()
    assert row.room_id == room.id
    assert row.sender == alice.id
    assert row.message_type == "text"
    assert row.content_length == len("Test message content")
    assert row.timestamp.replace(tzinfo=None) == datetime(2023, 11, 14, 22, 13, 20)
    if store_content:
        assert row.content == "Test message content"
    else:
        assert row.content is None
        assert row.formatted_content is None


def test_record_html_and_unknown_types(make_archive, room, alice):
    archive = make_archive(True)
    archive.record(room, Message.from_content(alice, {"msgtype": "m.text", "body": "hi", "format": HTML_FORMAT, "formatted_body": "<b>hi</b>"}, 1000))
    archive.record(room, Message.from_content(alice, {"msgtype": "m.image", "url": "mxc://x/y"}, 2000))

    html, image = archive.messages()
    assert html.message_type == "html"
    assert html.formatted_content == "<b>hi</b>"
    assert image.message_type is None
    assert image.content == ""
    assert image.content_length == 0


def test_messages_filtered_by_room(make_archive, rooms, alice):
    archive = make_archive(True)
    first = rooms.resolve("!first:example.org")
    second = rooms.resolve("!second:example.org")
    archive.record(second, Message.from_content(alice, {"msgtype": "m.text", "body": "b"}, 2000))
    archive.record(first, Message.from_content(alice, {"msgtype": "m.text", "body": "a"}, 1000))

    assert [m.content for m in archive.messages()] == ["a", "b"]
    assert [m.content for m in archive.messages(second.id)] == ["b"]


def test_archive_subscribed_to_room(make_archive, room, alice):
    archive = make_archive(True)
    room.on("message", archive.record)

    room.timeline.update({"events": [{"type": "m.room.message", "event_id": "$m", "sender": alice.id, "origin_server_ts": 5000, "content": {"msgtype": "m.notice", "body": "from sync"}}]})

    (row,) = archive.messages(room.id)
    assert row.content == "from sync"
    assert row.message_type == "notice"
