# textscan/config.py
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional

import dotenv

EXTRACTORS = ("rules", "llm")
SEQUENCE_STRATEGIES = ("timestamp", "random", "daily")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str) -> Optional[int]:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw.isdigit() else None


@dataclass
class Settings:
    extractor: str = "rules"
    fallback_to_rules: bool = True
    sequence_strategy: str = "timestamp"
    detail_year: Optional[int] = None
    db_path: str = "textscan.db"
    assign_sequence_on_save: bool = True
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    ocr_lang: str = "spa"
    max_pages: Optional[int] = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.extractor not in EXTRACTORS:
            raise ValueError(f"Unknown extractor: {self.extractor!r} (expected one of {', '.join(EXTRACTORS)})")
        if self.sequence_strategy not in SEQUENCE_STRATEGIES:
            raise ValueError(
                f"Unknown sequence strategy: {self.sequence_strategy!r} "
                f"(expected one of {', '.join(SEQUENCE_STRATEGIES)})"
            )

    @classmethod
    def from_env(cls) -> "Settings":
        # .env is optional; real environment variables win
        dotenv.load_dotenv()
        return cls(
            extractor=(os.getenv("TEXTSCAN_EXTRACTOR") or "rules").strip().lower(),
            fallback_to_rules=_env_flag("TEXTSCAN_FALLBACK", True),
            sequence_strategy=(os.getenv("TEXTSCAN_SEQUENCE") or "timestamp").strip().lower(),
            detail_year=_env_int("TEXTSCAN_DETAIL_YEAR"),
            db_path=os.getenv("TEXTSCAN_DB_PATH") or "textscan.db",
            assign_sequence_on_save=_env_flag("TEXTSCAN_ASSIGN_SEQUENCE", True),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_RECEIPT_MODEL") or "gpt-4o-mini",
            ocr_lang=os.getenv("OCR_LANG") or "spa",
            max_pages=_env_int("MAX_PAGES"),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )
