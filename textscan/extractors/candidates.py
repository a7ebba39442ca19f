# textscan/extractors/candidates.py
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PatternRule:
    priority: int              # lower wins; rules of a field are tried in this order
    pattern: re.Pattern
    group: int = 1             # capture group holding the value
    name: str = ""             # shows up in debug logs

    def search(self, text: str) -> Optional[str]:
        m = self.pattern.search(text)
        return m.group(self.group) if m else None


@dataclass(frozen=True)
class AmountSummary:
    value: Optional[float] = None
    discount: Optional[float] = None
    paid: Optional[float] = None
    candidates: tuple = ()     # every amount seen, sorted descending
