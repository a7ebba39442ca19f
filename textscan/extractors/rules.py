# textscan/extractors/rules.py
from __future__ import annotations
import logging
from typing import Any, Optional

from ..errors import InvalidInputError
from ..models import ExtractedFields, ReceiptRecord
from .assembler import build_report
from .fields import (
    extract_document_number, extract_identification,
    extract_phone_number, extract_sequence_number,
)
from .sequence import Clock, SequenceGenerator, SystemClock, TimestampSuffixGenerator
from .utils_amounts import extract_amounts

logger = logging.getLogger(__name__)


def ensure_text(raw_text: Any) -> str:
    if not isinstance(raw_text, str):
        raise InvalidInputError(
            f"El texto extraído debe ser una cadena, no {type(raw_text).__name__}"
        )
    return raw_text


def extract_fields(text: str) -> ExtractedFields:
    amounts = extract_amounts(text)
    return ExtractedFields(
        sequence_number=extract_sequence_number(text),
        document_number=extract_document_number(text),
        recipient_phone=extract_phone_number(text),
        recipient_identification=extract_identification(text),
        value=amounts.value,
        discount=amounts.discount,
        paid=amounts.paid,
    )


class RuleBasedExtractor:
    """Pattern-matching extractor. Pure apart from the clock and the sequence generator."""

    name = "rules"

    def __init__(self,
                 clock: Optional[Clock] = None,
                 sequence_generator: Optional[SequenceGenerator] = None,
                 detail_year: Optional[int] = None):
        self.clock = clock or SystemClock()
        self.sequence_generator = sequence_generator or TimestampSuffixGenerator(self.clock)
        self.detail_year = detail_year

    def extract(self, raw_text: Any) -> ReceiptRecord:
        text = ensure_text(raw_text)
        fields = extract_fields(text)
        missing = [k for k, v in fields.model_dump().items() if v is None]
        if missing:
            logger.debug("rules: defaults used for %s", ", ".join(missing))
        return build_report(
            fields,
            clock=self.clock,
            sequence_generator=self.sequence_generator,
            detail_year=self.detail_year,
        )
