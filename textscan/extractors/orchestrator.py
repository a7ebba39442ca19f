# textscan/extractors/orchestrator.py
from __future__ import annotations
import logging
from typing import Any, Optional, Protocol

from ..config import Settings
from ..errors import BackendUnavailableError, SchemaViolationError
from ..models import ReceiptRecord
from .rules import RuleBasedExtractor
from .sequence import Clock, SystemClock, build_sequence_generator

logger = logging.getLogger(__name__)


class Extractor(Protocol):
    name: str

    def extract(self, raw_text: Any) -> ReceiptRecord: ...


class FallbackExtractor:
    """
    Try the primary extractor; if its backend fails or answers outside the
    schema, use the fallback. Invalid input is not retried.
    """

    def __init__(self, primary: Extractor, fallback: Extractor):
        self.primary = primary
        self.fallback = fallback
        self.name = f"{primary.name}+{fallback.name}"

    def extract(self, raw_text: Any) -> ReceiptRecord:
        try:
            return self.primary.extract(raw_text)
        except (BackendUnavailableError, SchemaViolationError) as e:
            logger.warning("%s failed (%s), falling back to %s", self.primary.name, e, self.fallback.name)
            return self.fallback.extract(raw_text)


def build_extractor(settings: Settings,
                    store=None,
                    clock: Optional[Clock] = None,
                    client: Any = None) -> Extractor:
    clock = clock or SystemClock()
    generator = build_sequence_generator(settings.sequence_strategy, clock, store=store)
    rules = RuleBasedExtractor(clock=clock, sequence_generator=generator, detail_year=settings.detail_year)
    if settings.extractor == "rules":
        return rules

    from .llm import ModelBackedExtractor
    if client is None:
        import openai
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY no encontrada; necesaria para TEXTSCAN_EXTRACTOR=llm")
        client = openai.OpenAI(api_key=settings.openai_api_key)
    llm = ModelBackedExtractor(
        client,
        model=settings.openai_model,
        clock=clock,
        sequence_generator=generator,
        detail_year=settings.detail_year,
    )
    return FallbackExtractor(llm, rules) if settings.fallback_to_rules else llm
