"""Ustawienia aplikacji ze zmiennych środowiskowych (+ opcjonalny plik .env).

Jeden obiekt `Settings` dla całej aplikacji; błędne wartości cofają się do domyślnych.
Zmienne środowiskowe mają pierwszeństwo przed plikiem .env z katalogu roboczego.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import dotenv_values, find_dotenv

from todos.ports.blob_store import DEFAULT_NAMESPACE

ENV_PREFIX = "TODOS"

BACKENDS = ("file", "sql", "memory")

Env = Mapping[str, str]


def _k(suffix: str) -> str:
    """Nazwa zmiennej z prefiksem projektu."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_env() -> dict[str, str]:
    file_values = dotenv_values(find_dotenv(usecwd=True))
    merged = {k: v for k, v in file_values.items() if v is not None}
    merged.update(os.environ)
    return merged


def _env(env: Env, name: str, default: str = "") -> str:
    v = env.get(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_choice(env: Env, name: str, choices: tuple[str, ...], default: str) -> str:
    raw = _env(env, name, default).lower()
    return raw if raw in choices else default


def _env_level(env: Env, name: str, default: str) -> str:
    raw = _env(env, name, default).upper()
    return raw if isinstance(logging.getLevelName(raw), int) else default


def _env_path(env: Env, name: str) -> Path | None:
    raw = _env(env, name)
    return Path(raw).expanduser() if raw else None


@dataclass(frozen=True, slots=True)
class Settings:
    backend: str
    data_dir: Path
    namespace: str
    db_url: str
    log_level: str
    log_file: Path | None

    @property
    def blob_path(self) -> Path:
        return self.data_dir / f"{self.namespace}.json"

    @staticmethod
    def from_env(env: Env | None = None) -> "Settings":
        env = _load_env() if env is None else env

        data_dir = _env_path(env, _k("DATA_DIR")) or Path(".local/todos")
        default_db = f"sqlite:///{data_dir / 'todos.sqlite3'}"

        return Settings(
            backend=_env_choice(env, _k("BACKEND"), BACKENDS, "file"),
            data_dir=data_dir,
            namespace=_env(env, _k("NAMESPACE"), DEFAULT_NAMESPACE),
            db_url=_env(env, _k("DB_URL"), default_db),
            log_level=_env_level(env, _k("LOG_LEVEL"), "WARNING"),
            log_file=_env_path(env, _k("LOG_FILE")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
