"""Завантаження YAML конфігурацій."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from src.contracts.attachment import CASE_REFERENCE_NAME, User
from src.contracts.enums import ReferenceType

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/attachments.yaml"


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Зчитує YAML файл та повертає його вміст як dict.

    Args:
        path: Шлях до файлу.

    Returns:
        Вміст файлу як словник.

    Raises:
        FileNotFoundError: Якщо файл не знайдено.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    with p.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    log.debug("Loaded config %s (%d top-level keys)", p.name, len(data or {}))
    return data or {}


@dataclass(slots=True)
class AttachmentSettings:
    """Налаштування сховища та автора вкладень."""

    store_path: str = "data/attachments.jsonl"
    refresh: bool = False
    reference_name: str = CASE_REFERENCE_NAME
    reference_type: str = ReferenceType.CASES.value
    user: User = field(default_factory=User)
    log_level: str = "INFO"


def settings_from_dict(cfg: dict[str, Any]) -> AttachmentSettings:
    """Будує AttachmentSettings; відсутні ключі отримують значення за замовчуванням."""
    defaults = AttachmentSettings()
    store = cfg.get("store") or {}
    persistence = cfg.get("persistence") or {}
    reference = cfg.get("reference") or {}
    logging_cfg = cfg.get("logging") or {}

    return AttachmentSettings(
        store_path=str(store.get("path", defaults.store_path)),
        refresh=bool(persistence.get("refresh", defaults.refresh)),
        reference_name=str(reference.get("name", defaults.reference_name)),
        reference_type=str(reference.get("type", defaults.reference_type)),
        user=User.from_dict(cfg.get("user")) or defaults.user,
        log_level=str(logging_cfg.get("level", defaults.log_level)).upper(),
    )


def load_settings(path: str | Path = DEFAULT_CONFIG_PATH) -> AttachmentSettings:
    """Зчитує attachments.yaml та повертає AttachmentSettings."""
    settings = settings_from_dict(load_yaml(path))
    log.info("Settings loaded from %s (store=%s, refresh=%s)",
             path, settings.store_path, settings.refresh)
    return settings
