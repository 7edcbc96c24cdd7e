# funnel/core/logging_config.py
"""
Logging configuration for the funnel package.

The package itself only creates module loggers; the embedding application
calls `setup_logging()` once at startup.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


def setup_logging():
    """Configures the logging system"""
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_dir = Path(os.getenv("LOG_DIR", "logs"))

    # Make sure the log directory exists
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Console handler (attached once)
    if not any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # File handler (rotating, 5 MB per file, 5 files)
    log_file = log_dir / 'funnel.log'
    if not any(isinstance(h, RotatingFileHandler) and h.baseFilename == os.path.abspath(log_file) for h in root_logger.handlers):
        file_handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Tick-level chatter stays out of INFO logs
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("funnel.core.loading_sequencer").setLevel(
        logging.DEBUG if log_level == "DEBUG" else logging.INFO
    )

    return root_logger
