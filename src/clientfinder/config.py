"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DATA_ENV_VAR = "CLIENTFINDER_DATA"


def _get_default_data_path() -> Path:
    """Data file from the environment, falling back to ``data/clients.json``."""
    env_path = os.environ.get(DATA_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path("data/clients.json")


@dataclass(slots=True)
class AppConfig:
    data_path: Path | None = None
    page_size: int = 5
    per_page: int = 5
    host: str = "127.0.0.1"
    port: int = 9292
    request_limit: int = 60
    throttle_window: int = 60

    def __post_init__(self) -> None:
        if self.data_path is None:
            self.data_path = _get_default_data_path()

    def resolve_data_path(self, base_dir: Path | None = None) -> Path:
        if self.data_path is None:
            self.data_path = _get_default_data_path()
        if Path(self.data_path).is_absolute() or base_dir is None:
            return Path(self.data_path)
        return base_dir / self.data_path
