"""
Runtime settings, read from environment variables
"""
import os
from dataclasses import dataclass
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass
class Settings:
    log_level: str = "INFO"
    max_pages: int = 200
    max_page_chars: int = 200_000
    keep_line_breaks: bool = False
    page_policy: str = "last_page_wins"
    enable_model: bool = False
    debug_dump_dir: Optional[str] = None
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            max_pages=_env_int("MAX_PAGES", 200),
            max_page_chars=_env_int("MAX_PAGE_CHARS", 200_000),
            keep_line_breaks=_env_bool("PDF_LINE_BREAKS", False),
            page_policy=os.getenv("PAGE_POLICY", "last_page_wins"),
            enable_model=_env_bool("ENABLE_MODEL", False),
            debug_dump_dir=os.getenv("DEBUG_DUMP_DIR") or None,
            host=os.getenv("HOST", "127.0.0.1"),
            port=_env_int("PORT", 8000),
        )
