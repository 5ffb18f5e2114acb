from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).resolve().parent
ROOT_DIR = PACKAGE_DIR.parent
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: Optional[str] = None) -> Optional[str]:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: Optional[int] = None) -> Optional[int]:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return int(v)


@dataclass(frozen=True)
class Settings:
    data_file: str
    currency: str
    log_level: str
    embedding_model: str
    recommendation_seed: Optional[int]


def load_settings() -> Settings:
    return Settings(
        data_file=_get_env(
            "BOOKSTORE_DATA_FILE", default=str(PACKAGE_DIR / "data" / "sample_books.json")
        ) or "",
        currency=_get_env("BOOKSTORE_CURRENCY", default="USD") or "USD",
        log_level=(_get_env("BOOKSTORE_LOG_LEVEL", "LOG_LEVEL", default="INFO") or "INFO").upper(),
        embedding_model=_get_env(
            "BOOKSTORE_EMBEDDING_MODEL", default="sentence-transformers/all-MiniLM-L6-v2"
        ) or "",
        recommendation_seed=_get_int("BOOKSTORE_RECOMMENDATION_SEED", default=None),
    )


settings = load_settings()
