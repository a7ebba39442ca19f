# textscan/models.py
"""
Pydantic models for a payment receipt ("comprobante").

Attributes are English; aliases keep the Spanish keys used on the wire by the
front end and by the API (titulo, numeroSecuencia, emisor, ...).
"""
from __future__ import annotations
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Issuer(_Wire):
    name: str = Field(..., alias="nombre")
    tax_id: str = Field(..., alias="ruc")
    address: str = Field(..., alias="direccion")
    phone: str = Field(..., alias="telefono")


class Recipient(_Wire):
    name: str = Field(..., alias="nombre")
    phone: str = Field(..., alias="telefono")
    address: str = Field(..., alias="direccion")
    identification: str = Field(..., alias="identificacion")
    collection_date: str = Field(..., alias="fechaCobro", description="YYYY-MM-DD")


class LineItem(_Wire):
    unit: str = Field(..., alias="unidad")
    detail: str = Field(..., alias="detalle")
    value: float = Field(..., ge=0, alias="valor")
    discount: float = Field(..., ge=0, alias="descuento")
    paid: float = Field(..., ge=0, alias="pago")


class Footer(_Wire):
    payment_method: str = Field(..., alias="formaPago")
    document_number: str = Field(..., min_length=1, alias="documentoComprobante")
    related_info: str = Field(..., alias="informacionRelacionada")


class Totals(_Wire):
    subtotal: float = Field(..., ge=0)
    discounts: float = Field(..., ge=0, alias="descuentos")
    total: float = Field(..., ge=0)


class ReceiptRecord(_Wire):
    title: str = Field(..., alias="titulo")
    sequence_number: str = Field(..., min_length=1, alias="numeroSecuencia")
    issuer: Issuer = Field(..., alias="emisor")
    recipient: Recipient = Field(..., alias="receptor")
    items: List[LineItem] = Field(..., min_length=1)
    footer: Footer = Field(..., alias="pie")
    totals: Totals = Field(..., alias="totales")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class ExtractedFields(BaseModel):
    """
    Values read from the OCR text. None means "not found"; the assembler
    then applies the static default for that field.

    The descriptions double as instructions for the generative extractor,
    which is asked to fill exactly this model.
    """
    sequence_number: Optional[str] = Field(
        ...,
        description="Receipt sequence number written after 'Nº', 'No', 'Numero', "
                    "'Secuencia', 'Seq', 'Ref' or 'Referencia'. Digits only. null if absent.",
    )
    document_number: Optional[str] = Field(
        ...,
        description="Payment voucher number written after 'Comprobante', 'Documento', "
                    "'Recibo', 'Voucher', 'Doc' or 'Comp'. Digits only. null if absent.",
    )
    recipient_phone: Optional[str] = Field(
        ...,
        description="A 10 digit phone number (3-3-4 grouping), preferably one labelled "
                    "'Tel', 'Telefono', 'Phone', 'Cel' or 'Celular'. null if absent.",
    )
    recipient_identification: Optional[str] = Field(
        ...,
        description="Cedula (10 digits, labelled CI/Cedula/Identificacion/ID) or RUC "
                    "(13 digits, labelled RUC) of the payer. null if absent.",
    )
    value: Optional[float] = Field(
        ...,
        description="Largest monetary amount in the text (USD), taken as the receipt total. null if no amount.",
    )
    discount: Optional[float] = Field(
        ...,
        description="Largest amount minus the second largest amount. null if fewer than two amounts.",
    )
    paid: Optional[float] = Field(
        ...,
        description="Amount paid; equal to value. null if no amount.",
    )

    # kept out of the JSON schema sent to the model
    @field_validator("value", "discount", "paid")
    @classmethod
    def _non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("amounts cannot be negative")
        return v

    @classmethod
    def empty(cls) -> "ExtractedFields":
        return cls(
            sequence_number=None, document_number=None, recipient_phone=None,
            recipient_identification=None, value=None, discount=None, paid=None,
        )


class SavedComprobante(_Wire):
    id: int
    sequence_number: str = Field(..., alias="numeroSecuencia")
    data: ReceiptRecord = Field(..., alias="comprobanteData")
    created_at: datetime = Field(..., alias="fechaCreacion")
    ocr_text: str = Field("", alias="textoOcrOriginal")
    image_path: str = Field("", alias="imagenPath")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
