# textscan/extractors/patterns.py
"""
Ordered pattern tables, one per field.

Order is a priority ranking: the first rule that matches wins, so rules must
stay in the order below. Matching is case-insensitive and has no word
boundaries (a "no" inside "telefono" is a sequence label too).
"""
from __future__ import annotations
import re
from typing import Tuple

from .candidates import PatternRule

PATTERNS_VERSION = "v1.1.0"

_I = re.IGNORECASE

# "Nº", "No.", "N°", "Numero"
_NUM_LABEL = r"(?:n[ºo°]|numero|no\.?)"
_PHONE = r"\d{3}[\s\-]?\d{3}[\s\-]?\d{4}"
_AMOUNT = r"\d+(?:\.\d{2})?"


def _rules(*specs: Tuple[str, str]) -> Tuple[PatternRule, ...]:
    return tuple(
        PatternRule(priority=i, pattern=re.compile(rx, _I), group=1, name=name)
        for i, (name, rx) in enumerate(specs)
    )


SEQUENCE_RULES = _rules(
    ("numero",     _NUM_LABEL + r"\s*:?\s*(\d+)"),
    ("secuencia",  r"(?:secuencia|seq)\s*:?\s*(\d+)"),
    ("referencia", r"(?:ref|referencia)\s*:?\s*(\d+)"),
)

DOCUMENT_RULES = _rules(
    ("comprobante",       r"comprobante\s*:?\s*(\d+)"),
    ("documento_numero",  r"(?:comprobante|documento|recibo)\s*" + _NUM_LABEL + r"?\s*:?\s*(\d+)"),
    ("doc_abrev",         r"(?:doc|comp)\s*:?\s*(\d+)"),
    # long bank voucher numbers
    ("voucher",           r"(?:comprobante|voucher|recibo)\s*:?\s*(\d{8,})"),
)

PHONE_RULES = _rules(
    ("telefono", r"(?:tel|telefono|phone|cel|celular)\s*:?\s*(" + _PHONE + r")"),
    ("bare",     r"(" + _PHONE + r")"),
)

# A bare 10-13 digit run comes last, so a RUC is only reached when no
# labelled cedula matched first. Kept as is on purpose.
IDENTIFICATION_RULES = _rules(
    ("cedula", r"(?:ci|cedula|identificacion|id)\s*:?\s*(\d{10})"),
    ("ruc",    r"ruc\s*:?\s*(\d{13})"),
    ("bare",   r"(\d{10,13})"),
)

# Amount families; every match of every family is a candidate.
AMOUNT_RULES = _rules(
    ("dollar_sign",   r"\$(" + _AMOUNT + r")"),
    ("currency_word", r"(" + _AMOUNT + r")\s*(?:usd|dolares?|dollars?)"),
    ("labelled",      r"(?:valor|monto|total|pago)\s*:?\s*\$?(" + _AMOUNT + r")"),
)
