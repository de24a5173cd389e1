import os
from typing import Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class MatrixConfig(BaseModel):
    homeserver: str
    user: str
    password: str = ""
    access_token: str = ""  # Takes precedence over password when set
    room_ids: list[str] = []  # Empty list means mirror every room


class SyncConfig(BaseModel):
    timeout_ms: int = 30000  # Server-side long-poll timeout
    error_delay: float = 5.0  # Seconds to wait before polling again after a failure
    processed_event_limit: Optional[int] = None  # None keeps every processed event ID


class DatabaseConfig(BaseModel):
    """Message archive database, PostgreSQL or SQLite."""

    type: str = "sqlite"  # Either 'postgresql' or 'sqlite'
    database: str  # Database name for PostgreSQL or file path for SQLite
    host: str = ""  # Only used for PostgreSQL
    port: int = 5432  # Only used for PostgreSQL
    user: str = ""  # Only used for PostgreSQL
    password: str = ""  # Only used for PostgreSQL
    store_content: bool = False  # Controls whether message bodies are archived

    @property
    def url(self) -> str:
        """Get the database connection URL."""
        if self.type == "sqlite":
            return f"sqlite:///{self.database}"
        elif self.type == "postgresql":
            return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"
        else:
            raise ValueError(f"Unsupported database type: {self.type}")


class LogConfig(BaseModel):
    file_path: str = "logs/matrix_mirror.log"  # Empty string disables the file handler
    max_size_mb: int = 10
    backup_count: int = 5
    level: str = "INFO"


def _flag(name: str) -> bool:
    return os.environ.get(name, "false").lower() == "true"


class Settings(BaseSettings):
    matrix: MatrixConfig
    sync: SyncConfig = SyncConfig()
    database: Optional[DatabaseConfig] = None  # Archive is disabled without one
    logging: LogConfig = LogConfig()

    class Config:
        env_nested_delimiter = "__"
        env_file = ".env"

    def __init__(self, **kwargs):
        # Parse room_ids from environment
        matrix_room_ids = []
        if "MATRIX_ROOM_IDS" in os.environ:
            room_ids = os.environ["MATRIX_ROOM_IDS"].strip()
            if room_ids:
                matrix_room_ids = [r.strip() for r in room_ids.split(",")]

        if "matrix" not in kwargs:
            kwargs["matrix"] = MatrixConfig(
                homeserver=os.environ.get("MATRIX_HOMESERVER", ""),
                user=os.environ.get("MATRIX_USER", ""),
                password=os.environ.get("MATRIX_PASSWORD", ""),
                access_token=os.environ.get("MATRIX_ACCESS_TOKEN", ""),
                room_ids=matrix_room_ids,
            )

        # The archive is only configured when a database type is given
        db_type = os.environ.get("DATABASE_TYPE")
        if "database" not in kwargs and db_type:
            if db_type == "postgresql":
                kwargs["database"] = DatabaseConfig(
                    type="postgresql",
                    host=os.environ.get("POSTGRES_HOST", "localhost"),
                    port=int(os.environ.get("POSTGRES_PORT", "5432")),
                    database=os.environ.get("POSTGRES_DB", ""),
                    user=os.environ.get("POSTGRES_USER", ""),
                    password=os.environ.get("POSTGRES_PASSWORD", ""),
                    store_content=_flag("POSTGRES_STORE_CONTENT"),
                )
            elif db_type == "sqlite":
                kwargs["database"] = DatabaseConfig(
                    type="sqlite",
                    database=os.environ.get("SQLITE_DB", "matrix_messages.db"),
                    store_content=_flag("SQLITE_STORE_CONTENT"),
                )
            else:
                raise ValueError(f"Unsupported database type: {db_type}")

        super().__init__(**kwargs)
