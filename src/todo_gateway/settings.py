from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'supabase' or 'memory'. Defaults to 'supabase' when
      SUPABASE_URL is set, otherwise 'memory'
    - SUPABASE_URL: Supabase project URL (e.g. https://xyz.supabase.co)
    - SUPABASE_KEY: Supabase API key used by the server
    - TODOS_TABLE: name of the todos table (default: 'todos')
    - LOG_LEVEL: root logging level (default: 'INFO')
    """

    persistence_backend: str
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    todos_table: str
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _get_optional_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    supabase_url = _get_optional_env("SUPABASE_URL")
    supabase_key = _get_optional_env("SUPABASE_KEY")

    default_backend = "supabase" if supabase_url else "memory"
    backend = _get_env("PERSISTENCE_BACKEND", default_backend).strip().lower()
    if backend not in {"memory", "supabase"}:
        # Fallback to memory if unsupported
        backend = "memory"

    table = _get_env("TODOS_TABLE", "todos").strip()
    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()

    return Settings(
        persistence_backend=backend,
        supabase_url=supabase_url,
        supabase_key=supabase_key,
        todos_table=table,
        log_level=log_level,
    )
