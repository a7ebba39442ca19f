# textscan/extractors/utils_amounts.py
from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from .candidates import AmountSummary
from .patterns import AMOUNT_RULES

logger = logging.getLogger(__name__)


def _norm_amount(s: Optional[str]) -> Optional[float]:
    if not s:
        return None
    try:
        return float(s.strip())
    except ValueError:
        return None


def find_amount_candidates(text: str) -> List[float]:
    """
    Every amount matched by any family, family by family, in text order.
    Overlaps are kept: "Total: $500" yields 500 twice.
    """
    found: List[float] = []
    for rule in sorted(AMOUNT_RULES, key=lambda r: r.priority):
        for m in rule.pattern.finditer(text or ""):
            amount = _norm_amount(m.group(rule.group))
            if amount is not None and amount > 0:
                found.append(amount)
    return found


def reconcile_amounts(candidates: Sequence[float]) -> AmountSummary:
    """
    Largest amount is the receipt total; the gap to the second largest is
    the discount. No semantic role is inferred beyond rank.
    """
    ranked = sorted(candidates, reverse=True)  # stable: ties keep discovery order
    if not ranked:
        return AmountSummary()
    top = ranked[0]
    discount = None
    if len(ranked) > 1:
        discount = round(top - ranked[1], 2)
        logger.debug("amounts: %d candidates %s, discount %.2f", len(ranked), ranked, discount)
    return AmountSummary(value=top, discount=discount, paid=top, candidates=tuple(ranked))


def extract_amounts(text: str) -> AmountSummary:
    return reconcile_amounts(find_amount_candidates(text))
