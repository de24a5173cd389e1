import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Library modules log through the package logger; stay silent unless configured
logging.getLogger("matrix_mirror").addHandler(logging.NullHandler())


def setup_logging(settings: "Settings") -> None:
    """Configure the root logger with a console handler and, if a path is set, a rotating file"""
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [console_handler]

    if settings.logging.file_path:
        log_path = Path(settings.logging.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=settings.logging.max_size_mb * 1024 * 1024,  # Convert MB to bytes
            backupCount=settings.logging.backup_count,
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.logging.level.upper()))

    # Replace whatever was configured before, closing old file handles
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()
    for handler in handlers:
        root_logger.addHandler(handler)

    # nio logs every request at INFO; keep it quieter than our own output
    logging.getLogger("nio").setLevel(max(root_logger.level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name"""
    return logging.getLogger(name)
