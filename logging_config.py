import logging
import os
from logging.handlers import RotatingFileHandler

LOGS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs")
DEFAULT_LOG_FILE = "link_localizer.log"


def _resolve_level(level) -> int:
    """Accept either a logging constant or a level name such as "DEBUG"."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        return resolved
    return level


def _configured_level() -> int:
    """The [env] log_level from settings.toml, INFO if the file or key is missing."""
    from settings_service import SettingsService

    try:
        return _resolve_level(SettingsService().log_level)
    except (OSError, KeyError):
        return logging.INFO


def setup_logging(name="link_localizer", log_file=DEFAULT_LOG_FILE, level=None,
                  max_bytes=5*1024*1024, backup_count=3):
    """Set up a logger with a rotating file handler and a stream handler.

    Log files land in the project's ./logs/ directory unless an absolute
    path is provided (e.g. tests using tmpdir).

    Args:
        name: The name of the logger.
        log_file: The name of the log file.
        level: Logging constant or level name; defaults to log_level in settings.toml.
        max_bytes: The maximum size of the log file.
        backup_count: The number of backup log files.

    Returns:
        logger: The logger object.

    Example usage:
    from logging_config import setup_logging
    logger = setup_logging(__name__, log_file="link_rewriter.log")
    """
    logger = logging.getLogger(name)
    # Clear existing handlers to avoid duplicate logs
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter("%(asctime)s %(levelname)-8s "
                                    "[%(filename)s:%(lineno)d %(funcName)s()] "
                                    "%(message)s")

    os.makedirs(LOGS_DIR, exist_ok=True)
    if os.path.isabs(log_file):
        log_path = log_file
    else:
        log_file = os.path.basename(log_file)
        log_path = os.path.join(LOGS_DIR, log_file)

    file_handler = RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8')
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    logger.setLevel(_resolve_level(level) if level is not None else _configured_level())
    # Module loggers are dotted (services.link_rewriter); keep records out of
    # any handlers a host application attached to the parent loggers.
    logger.propagate = False
    return logger
