"""Invoice identifiers: ``INV-YYYYMMDD-SEQ``.

The sequence restarts every business day and is handed out by an atomic
increment on ``invoice_counters``, so two concurrent requests can never read
the same "invoices so far today" count and mint the same identifier.  The
counter row takes part in the caller's transaction: if the invoice is rolled
back, so is the increment.
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from sqlalchemy import insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from salesdesk.app.core.dates import local_today
from salesdesk.app.models.invoice import InvoiceCounter

logger = logging.getLogger(__name__)

INVOICE_PREFIX = "INV"
SEQ_WIDTH = 3

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def format_invoice_id(day: date, sequence: int) -> str:
    """Return an identifier like ``INV-20261018-001``.

    The sequence is zero-padded to at least three digits and simply grows
    wider past 999.
    """
    if sequence < 1:
        raise ValueError("Invoice sequence starts at 1")
    return f"{INVOICE_PREFIX}-{day:%Y%m%d}-{sequence:0{SEQ_WIDTH}d}"


def _ensure_counter_row(db: Session, day_key: str) -> None:
    dialect = db.get_bind().dialect.name
    dialect_insert = _UPSERT_INSERTS.get(dialect)
    if dialect_insert is not None:
        stmt = (
            dialect_insert(InvoiceCounter)
            .values(day=day_key, last_seq=0)
            .on_conflict_do_nothing(index_elements=["day"])
        )
        db.execute(stmt)
        return

    # Generic fallback: lock the row if it exists, insert it otherwise.
    existing = db.execute(
        select(InvoiceCounter.day)
        .where(InvoiceCounter.day == day_key)
        .with_for_update()
    ).first()
    if existing is None:
        db.execute(insert(InvoiceCounter).values(day=day_key, last_seq=0))


def next_invoice_sequence(db: Session, day: date) -> int:
    """Atomically increment and return the counter for *day*."""
    day_key = f"{day:%Y%m%d}"
    _ensure_counter_row(db, day_key)
    seq = db.execute(
        update(InvoiceCounter)
        .where(InvoiceCounter.day == day_key)
        .values(last_seq=InvoiceCounter.last_seq + 1)
        .returning(InvoiceCounter.last_seq)
        .execution_options(synchronize_session=False)
    ).scalar_one()
    return int(seq)


def generate_invoice_id(db: Session, now: datetime | None = None) -> str:
    """Mint the next identifier for the business day containing *now*."""
    day = local_today(now)
    invoice_id = format_invoice_id(day, next_invoice_sequence(db, day))
    logger.debug("Reserved invoice id %s", invoice_id)
    return invoice_id
