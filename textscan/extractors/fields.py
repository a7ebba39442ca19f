# textscan/extractors/fields.py
from __future__ import annotations
import logging
from typing import Iterable, Optional

from .candidates import PatternRule
from .patterns import (
    SEQUENCE_RULES, DOCUMENT_RULES, PHONE_RULES, IDENTIFICATION_RULES,
)

logger = logging.getLogger(__name__)


def first_match(rules: Iterable[PatternRule], text: str, field: str = "") -> Optional[str]:
    """Value captured by the highest priority rule that matches, else None."""
    for rule in sorted(rules, key=lambda r: r.priority):
        value = rule.search(text)
        if value is not None:
            logger.debug("%s: rule %r matched %r", field or "field", rule.name, value)
            return value
    return None


def extract_sequence_number(text: str) -> Optional[str]:
    return first_match(SEQUENCE_RULES, text or "", "sequence_number")


def extract_document_number(text: str) -> Optional[str]:
    return first_match(DOCUMENT_RULES, text or "", "document_number")


def extract_phone_number(text: str) -> Optional[str]:
    return first_match(PHONE_RULES, text or "", "recipient_phone")


def extract_identification(text: str) -> Optional[str]:
    return first_match(IDENTIFICATION_RULES, text or "", "recipient_identification")
