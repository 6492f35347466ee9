import logging
import os
from datetime import datetime
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = "stock_updater",
    level=logging.INFO,
    log_dir: Optional[str] = None,
) -> logging.Logger:
    """
    Setup a logger with a console handler and an optional dated file handler

    Args:
        name: Logger name; module loggers below it inherit the handlers
        level: Logging level (int or name such as "DEBUG")
        log_dir: Directory for the log file; no file handler when None

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        module_name = name.split(".")[-1]
        log_filepath = os.path.join(
            log_dir, f"{module_name}_{datetime.now().strftime('%Y%m%d')}.log"
        )
        file_handler = logging.FileHandler(log_filepath, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info("Logging to file: %s", log_filepath)

    return logger
