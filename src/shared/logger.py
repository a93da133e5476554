"""Налаштування логування."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Налаштовує кореневий логер: stderr та, за потреби, файл.

    Args:
        level: Рівень логування (DEBUG, INFO, WARNING, ERROR).
        log_file: Додатковий файл для журналу (дописується).
    """
    numeric = getattr(logging, level.upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=numeric,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )
