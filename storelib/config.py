"""Configuration helpers for the inventory store and its front ends.

Values come from environment variables, optionally primed from a ``.env``
file next to the entry point, so installers and tests can point the store at
a different data directory without touching application internals.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping
import os

from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_TEMPLATE_PATH = PACKAGE_DIR / "resources" / "inventory.json"
DEFAULT_DATA_DIRNAME = ".store-inventory"
DEFAULT_FILENAME = "inventory.json"


@dataclass(frozen=True)
class StoreConfig:
    """Strongly typed configuration for the inventory store."""

    data_dir: Path
    filename: str
    template_path: Path
    backup_on_load: bool = True
    log_level: str = "INFO"
    editor_host: str = "127.0.0.1"
    editor_port: int = 7890
    secret_key: str = "dev-change-me"
    allowed_origins: tuple[str, ...] = (
        "http://localhost",
        "http://127.0.0.1",
    )

    @property
    def inventory_path(self) -> Path:
        return self.data_dir / self.filename


def env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _coerce_origins(raw: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(raw, str):
        items = [piece.strip() for piece in raw.split(",")]
    else:
        items = [piece.strip() for piece in raw]
    return tuple(filter(None, items)) or (
        "http://localhost",
        "http://127.0.0.1",
    )


def load_store_config(base_dir: Path | str, env: Mapping[str, str] | None = None) -> StoreConfig:
    """Load store configuration from the given base directory and env mapping."""

    base_dir = Path(base_dir)
    load_dotenv(base_dir / ".env")
    env_map = dict(os.environ if env is None else env)

    raw_data_dir = env_map.get("INVENTORY_DATA_DIR", "").strip()
    data_dir = Path(raw_data_dir).expanduser() if raw_data_dir else Path.home() / DEFAULT_DATA_DIRNAME
    raw_template = env_map.get("INVENTORY_TEMPLATE_PATH", "").strip()
    template_path = Path(raw_template).expanduser() if raw_template else DEFAULT_TEMPLATE_PATH

    return StoreConfig(
        data_dir=data_dir,
        filename=env_map.get("INVENTORY_FILENAME", DEFAULT_FILENAME).strip() or DEFAULT_FILENAME,
        template_path=template_path,
        backup_on_load=env_bool(env_map.get("INVENTORY_BACKUP_ON_LOAD"), True),
        log_level=env_map.get("INVENTORY_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        editor_host=env_map.get("EDITOR_HOST", "127.0.0.1"),
        editor_port=int(env_map.get("EDITOR_PORT", "7890")),
        secret_key=env_map.get("SECRET_KEY", "dev-change-me"),
        allowed_origins=_coerce_origins(
            env_map.get("ALLOWED_ORIGINS", "http://localhost,http://127.0.0.1")
        ),
    )
