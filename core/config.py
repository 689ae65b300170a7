from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv


DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"]
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @property
    def ai_enabled(self) -> bool:
        return bool(self.gemini_api_key)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    if environ is None:
        load_dotenv()
        environ = os.environ

    api_key = (environ.get("GEMINI_API_KEY") or environ.get("API_KEY") or "").strip() or None
    origins = [o.strip() for o in (environ.get("CORS_ORIGINS") or "").split(",") if o.strip()]
    return Settings(
        gemini_api_key=api_key,
        gemini_model=(environ.get("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL).strip(),
        log_level=(environ.get("LOG_LEVEL") or "INFO").strip().upper(),
        cors_origins=origins or list(DEFAULT_CORS_ORIGINS),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
