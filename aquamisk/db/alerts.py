"""
Low stock notifications.

A part whose stock falls below the critical threshold must not block the
write that got it there. Instead, every flush that changes stock records the
affected parts; once the transaction commits the alerts are logged and made
available on the session through ``pop_stock_alerts``. A rollback discards
whatever was pending.
"""
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import event, inspect, select
from sqlalchemy.orm import Session

from aquamisk.core.config import settings
from aquamisk.core.logging import get_logger
from aquamisk.db.models import MaintenancePartUsage, PartInventoryItem

logger = get_logger(__name__)

PENDING_KEY = "pending_stock_alerts"
RAISED_KEY = "stock_alerts"
TOUCHED_KEY = "stock_touched_part_ids"
MAX_RAISED_ALERTS = 100


@dataclass(frozen=True)
class StockAlert:
    part_id: int
    part_name: str
    stock_quantity: int
    threshold: int

    @property
    def message(self) -> str:
        return (
            f"Stock level critically low for {self.part_name} "
            f"(part {self.part_id}): {self.stock_quantity} < {self.threshold}"
        )


def _low_stock_statement(part_ids: Iterable[int], threshold: int):
    return (
        select(PartInventoryItem.part_id, PartInventoryItem.part_name, PartInventoryItem.stock_quantity)
        .where(PartInventoryItem.part_id.in_(list(part_ids)))
        .where(PartInventoryItem.stock_quantity < threshold)
        .order_by(PartInventoryItem.part_id)
    )


def _emit(alert: StockAlert) -> None:
    logger.warning(
        "stock_level_critical",
        part_id=alert.part_id,
        part_name=alert.part_name,
        stock_quantity=alert.stock_quantity,
        threshold=alert.threshold,
    )


def check_stock_levels(db: Session, part_ids: Iterable[int], threshold: int | None = None) -> list[StockAlert]:
    """Check the given parts right now and emit an alert for each one below threshold.

    Used for writes that bypass the ORM unit of work (bulk upserts).
    """
    part_ids = set(part_ids)
    if not part_ids:
        return []
    threshold = settings.CRITICAL_STOCK_THRESHOLD if threshold is None else threshold

    alerts = [
        StockAlert(r.part_id, r.part_name, int(r.stock_quantity), threshold)
        for r in db.execute(_low_stock_statement(part_ids, threshold))
    ]
    for alert in alerts:
        _emit(alert)
    return alerts


def pop_stock_alerts(session: Session) -> list[StockAlert]:
    """Drain the alerts raised by the session's committed transactions."""
    return session.info.pop(RAISED_KEY, [])


def _stock_touched_part_ids(session: Session) -> set[int]:
    # runs before the flush: SQL-expression assignments are expired once flushed
    part_ids = set()
    for obj in session.new:
        if isinstance(obj, MaintenancePartUsage) and obj.part_id is not None:
            part_ids.add(obj.part_id)
    for obj in session.dirty:
        if isinstance(obj, PartInventoryItem):
            if inspect(obj).attrs.stock_quantity.history.has_changes():
                part_ids.add(obj.part_id)
    return part_ids


@event.listens_for(Session, "before_flush")
def _mark_stock_touched(session, flush_context, instances):
    part_ids = _stock_touched_part_ids(session)
    if part_ids:
        session.info.setdefault(TOUCHED_KEY, set()).update(part_ids)


@event.listens_for(Session, "after_flush")
def _collect_low_stock(session, flush_context):
    part_ids = session.info.pop(TOUCHED_KEY, None)
    if not part_ids:
        return

    threshold = settings.CRITICAL_STOCK_THRESHOLD
    pending = session.info.setdefault(PENDING_KEY, {})
    rows = session.connection().execute(_low_stock_statement(part_ids, threshold))
    low = {r.part_id: StockAlert(r.part_id, r.part_name, int(r.stock_quantity), threshold) for r in rows}

    # a later flush in the same transaction may have restocked a part
    for part_id in part_ids - low.keys():
        pending.pop(part_id, None)
    pending.update(low)


@event.listens_for(Session, "after_commit")
def _emit_pending_alerts(session):
    pending = session.info.pop(PENDING_KEY, None)
    if not pending:
        return
    raised = session.info.setdefault(RAISED_KEY, [])
    for alert in pending.values():
        _emit(alert)
        raised.append(alert)
    # only the most recent alerts are kept for sessions nobody drains
    del raised[:-MAX_RAISED_ALERTS]


@event.listens_for(Session, "after_rollback")
def _discard_pending_alerts(session):
    session.info.pop(PENDING_KEY, None)
    session.info.pop(TOUCHED_KEY, None)
