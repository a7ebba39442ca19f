# textscan/extractors/defaults.py
from __future__ import annotations

TITLE = "Comprobante de pago"

ISSUER = {
    "name": "OLGER RODRIGO FLORES FLORES",
    "tax_id": "1703684785001",
    "address": "Real Audiencia",
    "phone": "0983502111",
}

RECIPIENT_NAME = "AMADA HORTENCIA CISNEROS BURBANO"
RECIPIENT_ADDRESS = "Calle Real Audiencia N-63-141 y Los Cedros"
RECIPIENT_PHONE = "099 480 6251"
RECIPIENT_IDENTIFICATION = "1707158364"

ITEM_UNIT = "Otro ingreso"
ITEM_DETAIL = "Arriendo de casa, mes de {month} {year}"

PAYMENT_METHOD = "Forma de pago en dólares, transferencia."
RELATED_INFO = "Banco Internacional Cta. Ahorros: 608032998."

DEFAULT_AMOUNT = 350.0
DEFAULT_DISCOUNT = 0.0

# es-ES month names, independent of the host locale
MONTHS_ES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


def month_name(month: int) -> str:
    return MONTHS_ES[month - 1]
