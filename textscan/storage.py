# textscan/storage.py
"""SQLite persistence for saved comprobantes and the per-day sequence counter."""
from __future__ import annotations
import logging
import sqlite3
from contextlib import closing, contextmanager
from datetime import date, datetime
from typing import Iterator, List, Optional, Tuple

from .errors import InvalidInputError, StorageError
from .extractors.sequence import (
    AtomicDailyCounterProvider, Clock, DatePrefixedGenerator, SystemClock,
)
from .models import (
    Footer, Issuer, LineItem, ReceiptRecord, Recipient, SavedComprobante, Totals,
)

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS comprobantes (
        id INTEGER PRIMARY KEY,
        sequence_number TEXT NOT NULL,
        title TEXT NOT NULL,
        issuer_name TEXT, issuer_tax_id TEXT, issuer_address TEXT, issuer_phone TEXT,
        recipient_name TEXT, recipient_phone TEXT, recipient_address TEXT,
        recipient_identification TEXT, collection_date TEXT,
        payment_method TEXT, document_number TEXT, related_info TEXT,
        subtotal REAL, discounts REAL, total REAL,
        ocr_text TEXT DEFAULT '', image_path TEXT DEFAULT '',
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS comprobante_items (
        id INTEGER PRIMARY KEY,
        comprobante_id INTEGER NOT NULL,
        unit TEXT, detail TEXT,
        value REAL, discount REAL, paid REAL,
        position INTEGER NOT NULL,
        FOREIGN KEY(comprobante_id) REFERENCES comprobantes(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS daily_sequences (
        day TEXT PRIMARY KEY,
        last_value INTEGER NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_items_comprobante ON comprobante_items(comprobante_id, position)",
    "CREATE INDEX IF NOT EXISTS idx_comprobantes_created ON comprobantes(created_at)",
)


class ComprobanteStore:
    def __init__(self, db_path: str, clock: Optional[Clock] = None):
        self.db_path = db_path
        self.clock = clock or SystemClock()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            with closing(sqlite3.connect(self.db_path)) as conn:
                conn.row_factory = sqlite3.Row
                with conn:
                    yield conn
        except sqlite3.Error as e:
            raise StorageError(f"Error de base de datos: {e}") from e

    def init(self) -> None:
        with self._connect() as conn:
            for stmt in _SCHEMA:
                conn.execute(stmt)

    def ping(self) -> bool:
        try:
            with self._connect() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except StorageError as e:
            logger.error("Database connection test failed: %s", e)
            return False

    def next_daily_counter(self, day: date) -> int:
        """Increment and return the counter of `day`; starts at 1."""
        with self._connect() as conn:
            rows = conn.execute(
                "INSERT INTO daily_sequences (day, last_value) VALUES (?, 1) "
                "ON CONFLICT(day) DO UPDATE SET last_value = last_value + 1 "
                "RETURNING last_value",
                (day.isoformat(),),
            ).fetchall()
        return int(rows[0][0])

    def save(self, record: ReceiptRecord,
             ocr_text: Optional[str] = None,
             image_path: Optional[str] = None,
             assign_sequence: bool = False) -> SavedComprobante:
        """
        Persist `record` with its items. With `assign_sequence` the stored
        number is replaced by the next YYYYMMDDNNN value of the day counter.
        """
        for label, value in (("ocr_text", ocr_text), ("image_path", image_path)):
            if value is not None and not isinstance(value, str):
                raise InvalidInputError(f"{label} debe ser texto")
        created_at = self.clock.now().replace(microsecond=0)
        if assign_sequence:
            number = DatePrefixedGenerator(self.clock, AtomicDailyCounterProvider(self))()
            record = record.model_copy(update={"sequence_number": number})
        with self._connect() as conn:
            cur = conn.execute(
                "INSERT INTO comprobantes ("
                "sequence_number, title, issuer_name, issuer_tax_id, issuer_address, issuer_phone, "
                "recipient_name, recipient_phone, recipient_address, recipient_identification, collection_date, "
                "payment_method, document_number, related_info, subtotal, discounts, total, "
                "ocr_text, image_path, created_at"
                ") VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.sequence_number, record.title,
                    record.issuer.name, record.issuer.tax_id, record.issuer.address, record.issuer.phone,
                    record.recipient.name, record.recipient.phone, record.recipient.address,
                    record.recipient.identification, record.recipient.collection_date,
                    record.footer.payment_method, record.footer.document_number, record.footer.related_info,
                    record.totals.subtotal, record.totals.discounts, record.totals.total,
                    ocr_text or "", image_path or "", created_at.isoformat(),
                ),
            )
            comprobante_id = cur.lastrowid
            conn.executemany(
                "INSERT INTO comprobante_items "
                "(comprobante_id, unit, detail, value, discount, paid, position) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                [
                    (comprobante_id, it.unit, it.detail, it.value, it.discount, it.paid, i + 1)
                    for i, it in enumerate(record.items)
                ],
            )
        logger.info("Comprobante %s saved with id %d", record.sequence_number, comprobante_id)
        return SavedComprobante(
            id=comprobante_id,
            sequence_number=record.sequence_number,
            data=record,
            created_at=created_at,
            ocr_text=ocr_text or "",
            image_path=image_path or "",
        )

    def get(self, comprobante_id: int) -> Optional[SavedComprobante]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM comprobantes WHERE id = ?", (comprobante_id,)).fetchone()
            if row is None:
                return None
            return self._hydrate(conn, row)

    def list(self, page: int = 1, limit: int = 10) -> Tuple[List[SavedComprobante], int]:
        page, limit = max(1, page), max(1, limit)
        with self._connect() as conn:
            total = conn.execute("SELECT COUNT(*) FROM comprobantes").fetchone()[0]
            rows = conn.execute(
                "SELECT * FROM comprobantes ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
                (limit, (page - 1) * limit),
            ).fetchall()
            return [self._hydrate(conn, r) for r in rows], int(total)

    def _hydrate(self, conn: sqlite3.Connection, row: sqlite3.Row) -> SavedComprobante:
        items = conn.execute(
            "SELECT * FROM comprobante_items WHERE comprobante_id = ? ORDER BY position",
            (row["id"],),
        ).fetchall()
        record = ReceiptRecord(
            title=row["title"],
            sequence_number=row["sequence_number"],
            issuer=Issuer(
                name=row["issuer_name"], tax_id=row["issuer_tax_id"],
                address=row["issuer_address"], phone=row["issuer_phone"],
            ),
            recipient=Recipient(
                name=row["recipient_name"], phone=row["recipient_phone"],
                address=row["recipient_address"], identification=row["recipient_identification"],
                collection_date=row["collection_date"],
            ),
            items=[
                LineItem(unit=i["unit"], detail=i["detail"], value=i["value"],
                         discount=i["discount"], paid=i["paid"])
                for i in items
            ],
            footer=Footer(
                payment_method=row["payment_method"], document_number=row["document_number"],
                related_info=row["related_info"],
            ),
            totals=Totals(subtotal=row["subtotal"], discounts=row["discounts"], total=row["total"]),
        )
        return SavedComprobante(
            id=row["id"],
            sequence_number=row["sequence_number"],
            data=record,
            created_at=datetime.fromisoformat(row["created_at"]),
            ocr_text=row["ocr_text"] or "",
            image_path=row["image_path"] or "",
        )
