"""Common test fixtures for matrix-mirror tests."""

from pathlib import Path
from typing import List

import pytest
from pytest_mock import MockerFixture

from matrix_mirror.config import Settings
from matrix_mirror.events import EventDeduplicator
from matrix_mirror.rooms import Rooms
from matrix_mirror.users import Users

ENV_VARS = (
    "MATRIX_HOMESERVER",
    "MATRIX_USER",
    "MATRIX_PASSWORD",
    "MATRIX_ACCESS_TOKEN",
    "MATRIX_ROOM_IDS",
    "DATABASE_TYPE",
    "SQLITE_DB",
    "SQLITE_STORE_CONTENT",
    "POSTGRES_HOST",
    "POSTGRES_PORT",
    "POSTGRES_DB",
    "POSTGRES_USER",
    "POSTGRES_PASSWORD",
    "POSTGRES_STORE_CONTENT",
)


class Recorder:
    """Collects notifications from one or more emitters in order."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def listen(self, emitter, *names: str) -> "Recorder":
        for name in names:
            emitter.on(name, lambda *args, _name=name: self.calls.append((_name, *args)))
        return self

    def names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def of(self, name: str) -> List[tuple]:
        return [call[1:] for call in self.calls if call[0] == name]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep configuration from the developer's shell out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test files."""
    return tmp_path


@pytest.fixture
def test_settings(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Create test settings with mock values."""
    for key, value in {
        "MATRIX_HOMESERVER": "https://test.matrix.org",
        "MATRIX_USER": "@test:matrix.org",
        "MATRIX_PASSWORD": "test_password",
        "MATRIX_ROOM_IDS": "!test1:matrix.org,!test2:matrix.org",
    }.items():
        monkeypatch.setenv(key, value)

    settings = Settings()
    settings.logging.file_path = str(temp_dir / "test.log")
    settings.logging.level = "DEBUG"
    return settings


@pytest.fixture
def events() -> EventDeduplicator:
    return EventDeduplicator()


@pytest.fixture
def users() -> Users:
    return Users()


@pytest.fixture
def rooms(users: Users, events: EventDeduplicator) -> Rooms:
    return Rooms(users, events)


@pytest.fixture
def room(rooms: Rooms):
    return rooms.resolve("!room:example.org")


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def mock_nio_client(mocker: MockerFixture):
    """A nio AsyncClient with every coroutine method mocked."""
    from nio import AsyncClient

    return mocker.create_autospec(AsyncClient, instance=True)
