import asyncio
from typing import Optional

from .actions import RoomActions
from .archive import MessageArchive
from .config import Settings
from .emitter import Emitter
from .errors import ApiError
from .events import EventDeduplicator
from .logger import get_logger, setup_logging
from .message import Message
from .room import Room
from .rooms import Rooms
from .sync import SyncDriver
from .transport import MatrixTransport
from .users import Users

# Create logger for this module
logger = get_logger(__name__)


class MatrixMirror(Emitter):
    """One sync session: directories, driver, transport and actions.

    Notifications: ``room_added(room)``, ``room_message(room, message)`` and
    ``sync_error(error)``. Each mirror owns its own directories, so several
    sessions can run in one process.
    """

    def __init__(self, settings: Settings, transport: Optional[MatrixTransport] = None) -> None:
        self.settings: Settings = settings
        self.events = EventDeduplicator(settings.sync.processed_event_limit)
        self.users = Users()
        self.rooms = Rooms(self.users, self.events, settings.matrix.room_ids)
        self.transport = transport or MatrixTransport(settings.matrix)
        self.actions = RoomActions(self.transport.client)
        self.driver = SyncDriver(
            self.transport,
            self.rooms,
            timeout_ms=settings.sync.timeout_ms,
            error_delay=settings.sync.error_delay,
        )
        self.archive: Optional[MessageArchive] = None

        self.rooms.on("discovered", self._room_added)
        self.driver.on("sync_error", self._sync_error)

        if settings.database is not None:
            self.archive = MessageArchive(settings.database)
            self.on("room_message", self.archive.record)

    def _room_added(self, room: Room) -> None:
        room.on("message", self._room_message)
        self.emit("room_added", room)

    def _room_message(self, room: Room, message: Message) -> None:
        logger.debug(f"New message in {room.id} from {message.sender.id}: {message.body}")
        self.emit("room_message", room, message)

    def _sync_error(self, error: ApiError) -> None:
        self.emit("sync_error", error)

    async def start(self) -> None:
        """Log in and start the sync loop"""
        await self.transport.login()
        self.driver.start()

    async def stop(self) -> None:
        await self.driver.stop()

    async def run(self) -> None:
        """Main run loop"""
        await self.start()
        logger.info("Starting sync loop...")
        await self.driver.wait()

    async def close(self) -> None:
        await self.stop()
        await self.transport.close()
        if self.archive is not None:
            self.archive.close()


async def main() -> None:
    settings: Settings = Settings()

    # Set up logging before creating the mirror
    setup_logging(settings)
    logger.info("Starting Matrix mirror")

    mirror: MatrixMirror = MatrixMirror(settings)
    try:
        await mirror.run()
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        await mirror.close()


def run() -> None:
    """Console script entry point"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    run()
