import os

from loguru import logger

from school_results.core.config import settings

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
LOGS_LEVELS = ["DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


def _resolve_log_dir(log_dir: str) -> str:
    if os.path.isabs(log_dir):
        return log_dir
    return os.path.join(BASE_DIR, log_dir)


def add_file_sinks(log_dir: str) -> str:
    """One rotating file per level; each file only receives its own level."""
    path = _resolve_log_dir(log_dir)
    os.makedirs(path, exist_ok=True)

    for level in LOGS_LEVELS:
        logger.add(
            os.path.join(path, f"{level.lower()}.log"),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {file}:{line} | {message}",
            level=level,
            rotation="50 MB",
            retention="7 days",
            compression="zip",
            enqueue=True,
            filter=lambda record, lvl=level: record["level"].name == lvl
        )
    return path


LOG_DIR = add_file_sinks(settings.LOG_DIR)
