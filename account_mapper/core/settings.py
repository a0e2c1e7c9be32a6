from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from account_mapper.core.undo import DEFAULT_UNDO_DEPTH

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    storage_root: Path | None = None
    storage_max_bytes: int | None = None
    undo_depth: int = DEFAULT_UNDO_DEPTH
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @classmethod
    def from_env(cls) -> "Settings":
        env_root = os.getenv("MAPPING_STORAGE_ROOT")
        origins_env = os.getenv("API_CORS_ORIGINS", "")
        origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
        return cls(
            storage_root=Path(env_root).expanduser().resolve() if env_root else None,
            storage_max_bytes=_optional_int("MAPPING_STORAGE_MAX_BYTES"),
            undo_depth=_optional_int("MAPPING_UNDO_DEPTH") or DEFAULT_UNDO_DEPTH,
            cors_origins=origins or list(DEFAULT_CORS_ORIGINS),
        )
