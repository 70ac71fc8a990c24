import logging
import os
from datetime import datetime


def setup_logger(log_dir: str = ".smartpatch/logs",
                 level: int = logging.DEBUG) -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"smartpatch_{timestamp}.log")

    logger = logging.getLogger("smart_patch")
    logger.setLevel(level)

    # File handler: captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


def print_ok(message: str) -> None:
    print(f"  \033[32m✔\033[0m {message}")


def print_error(message: str) -> None:
    print(f"  \033[31m✘\033[0m {message}")
