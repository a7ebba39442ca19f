# textscan/extractors/llm.py
"""
Model-backed extractor.

Same contract as RuleBasedExtractor (text in, ReceiptRecord out), but the
fields are read by an OpenAI structured-output call constrained by
ExtractedFields. Defaults and the sequence policy are applied afterwards by
the same assembler, so both variants produce identical records for identical
field values.

One call per extraction, no retry: BackendUnavailableError and
SchemaViolationError propagate to the caller.
"""
from __future__ import annotations
import logging
from typing import Any, Optional

import openai
from pydantic import ValidationError

from ..errors import BackendUnavailableError, SchemaViolationError
from ..models import ExtractedFields, ReceiptRecord
from .assembler import build_report
from .rules import ensure_text
from .sequence import Clock, SequenceGenerator, SystemClock, TimestampSuffixGenerator

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
MAX_CHARS_IN = 6000

SYSTEM_PROMPT = """
You read the OCR text of an Ecuadorian payment receipt ("comprobante de pago")
and fill a JSON object with the fields described in the response schema.

Rules:
- Copy numbers exactly as written, digits only. Never invent a value: use null.
- sequence_number: the number after Nº / No / Numero, else Secuencia / Seq,
  else Ref / Referencia. The first label found in that order wins.
- document_number: the number after "Comprobante:", else Comprobante /
  Documento / Recibo (optionally followed by Nº / No / Numero), else Doc / Comp,
  else a number of 8 or more digits after Comprobante / Voucher / Recibo.
- recipient_phone: a labelled phone (Tel, Telefono, Phone, Cel, Celular) first,
  otherwise any 3-3-4 digit group.
- recipient_identification: a 10 digit number labelled CI / Cedula /
  Identificacion / ID, else a 13 digit number labelled RUC, else any run of
  10 to 13 digits.
- Amounts: collect every amount written as $N, N USD / dolares / dollars, or
  after Valor / Monto / Total / Pago. value and paid are the largest amount.
  discount is the largest minus the second largest, null with a single amount.
""".strip()

USER_TMPL = "Texto OCR:\n----\n{doc}\n----"


class ModelBackedExtractor:
    name = "llm"

    def __init__(self,
                 client: Any,
                 model: str = DEFAULT_MODEL,
                 clock: Optional[Clock] = None,
                 sequence_generator: Optional[SequenceGenerator] = None,
                 detail_year: Optional[int] = None):
        self.client = client
        self.model = model
        self.clock = clock or SystemClock()
        self.sequence_generator = sequence_generator or TimestampSuffixGenerator(self.clock)
        self.detail_year = detail_year

    def request_fields(self, text: str) -> ExtractedFields:
        try:
            completion = self.client.chat.completions.parse(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": USER_TMPL.format(doc=text[:MAX_CHARS_IN])},
                ],
                response_format=ExtractedFields,
                temperature=0,
            )
        except ValidationError as e:
            raise SchemaViolationError(f"Respuesta fuera del esquema: {e}") from e
        except (openai.LengthFinishReasonError, openai.ContentFilterFinishReasonError) as e:
            raise SchemaViolationError(f"Respuesta incompleta del modelo: {e}") from e
        except openai.APIError as e:
            raise BackendUnavailableError(f"Servicio de IA no disponible: {e}") from e

        message = completion.choices[0].message
        if getattr(message, "refusal", None):
            raise SchemaViolationError(f"El modelo rechazó la solicitud: {message.refusal}")
        parsed = getattr(message, "parsed", None)
        if parsed is None:
            raise SchemaViolationError("El modelo no devolvió datos estructurados")
        if isinstance(parsed, ExtractedFields):
            return parsed
        try:
            return ExtractedFields.model_validate(parsed)
        except ValidationError as e:
            raise SchemaViolationError(f"Respuesta fuera del esquema: {e}") from e

    def extract(self, raw_text: Any) -> ReceiptRecord:
        text = ensure_text(raw_text)
        if text.strip():
            fields = self.request_fields(text)
            logger.info("llm: fields extracted with %s", self.model)
        else:
            fields = ExtractedFields.empty()
        return build_report(
            fields,
            clock=self.clock,
            sequence_generator=self.sequence_generator,
            detail_year=self.detail_year,
        )
