import logging
import os
from typing import Optional


def setup_logger(name: str = "xformer",
                 log_file: Optional[str] = None, level: Optional[int] = None) -> logging.Logger:
    if log_file is None:
        log_file = os.getenv("XFORMER_LOG_FILE") or None
    if level is None:
        level = logging.DEBUG if os.getenv("XFORMER_DEBUG") == "true" else logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s')

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
