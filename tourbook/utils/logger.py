import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from tourbook.config import get_settings

ROOT_LOGGER_NAME = "tourbook"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUPS = 5


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(log_dir: str, debug: bool = False) -> logging.Logger:
    """Attach console, app.log and errors.log handlers to the ``tourbook`` logger.

    Calling it again replaces the handlers instead of stacking duplicates.
    """
    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    level = logging.DEBUG if debug else logging.INFO

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(console_handler)

    file_format = logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT)
    root.addHandler(_rotating_handler(logs_dir / "app.log", logging.INFO, file_format))
    root.addHandler(_rotating_handler(logs_dir / "errors.log", logging.ERROR, file_format))
    return root


_settings = get_settings()
logger = configure_logging(_settings.LOG_DIR, _settings.APP_DEBUG)


def get_logger(name: str = None) -> logging.Logger:
    """tourbook logger, or its ``name`` child (``tourbook.otp``, ``tourbook.sms``...)."""
    if name:
        return logger.getChild(name)
    return logger
