# textscan/extractors/assembler.py
from __future__ import annotations
from typing import Optional

from ..models import (
    ExtractedFields, Footer, Issuer, LineItem, ReceiptRecord, Recipient, Totals,
)
from . import defaults as D
from .sequence import Clock, SequenceGenerator, resolve_identifiers


def _or(value, default):
    return default if value is None or value == "" else value


def build_report(fields: ExtractedFields,
                 *,
                 clock: Clock,
                 sequence_generator: SequenceGenerator,
                 detail_year: Optional[int] = None) -> ReceiptRecord:
    """
    Merge extracted values with the static comprobante block.

    Each field falls back to its own default independently. The record holds
    a single line item, and the totals mirror it.
    """
    now = clock.now()
    sequence, document = resolve_identifiers(
        fields.sequence_number, fields.document_number, sequence_generator
    )

    value = _or(fields.value, D.DEFAULT_AMOUNT)
    discount = _or(fields.discount, D.DEFAULT_DISCOUNT)
    paid = _or(fields.paid, value)

    item = LineItem(
        unit=D.ITEM_UNIT,
        detail=D.ITEM_DETAIL.format(month=D.month_name(now.month), year=detail_year or now.year),
        value=value,
        discount=discount,
        paid=paid,
    )
    return ReceiptRecord(
        title=D.TITLE,
        sequence_number=sequence,
        issuer=Issuer(**D.ISSUER),
        recipient=Recipient(
            name=D.RECIPIENT_NAME,
            phone=_or(fields.recipient_phone, D.RECIPIENT_PHONE),
            address=D.RECIPIENT_ADDRESS,
            identification=_or(fields.recipient_identification, D.RECIPIENT_IDENTIFICATION),
            collection_date=now.date().isoformat(),
        ),
        items=[item],
        footer=Footer(
            payment_method=D.PAYMENT_METHOD,
            document_number=document,
            related_info=D.RELATED_INFO,
        ),
        totals=Totals(subtotal=item.value, discounts=item.discount, total=item.paid),
    )
