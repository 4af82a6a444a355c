import logging
import os
from logging.handlers import RotatingFileHandler

from app.platform.config import settings

# 1. Create the logs directory if it doesn't exist
log_dir = os.path.join(os.getcwd(), settings.LOG_DIR)
os.makedirs(log_dir, exist_ok=True)

# 2. Define the path to the log file
log_file_path = os.path.join(log_dir, "dga_compliance.log")


def get_logger(name: str) -> logging.Logger:
    """
    Creates a logger instance that writes to console AND a rotating file.
    Handlers are attached only once per logger name.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    file_handler = RotatingFileHandler(log_file_path, maxBytes=10_000_000, backupCount=5)
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.INFO)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger
