import logging
from logging.handlers import RotatingFileHandler
import os
from config import settings

# Client libraries that log every HTTP request or model load at INFO
NOISY_LOGGERS = ("httpx", "openai", "chromadb", "sentence_transformers", "aiosqlite")


def setup_logging():
    """
    Configures the search service logger once per process.

    File output rotates by size; console output is always on. Third-party
    client loggers are capped at WARNING.
    """
    logger = logging.getLogger(settings.LOGGER_NAME)

    if logger.hasHandlers():
        logger.handlers.clear()

    logger.setLevel(settings.LOG_LEVEL.upper())

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
    )

    try:
        log_dir = os.path.dirname(settings.LOG_FILE_PATH)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            settings.LOG_FILE_PATH,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        print(f"Error setting up file logger at {settings.LOG_FILE_PATH}: {e}")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info(
        f"Logging configured: level={settings.LOG_LEVEL.upper()}, file={settings.LOG_FILE_PATH}"
    )
