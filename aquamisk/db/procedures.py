"""
Write procedures and derived reads over the maintenance store.

Every write runs in a single transaction: on a constraint failure the
session is rolled back and a typed ``StoreError`` is raised, so no partial
effect is ever committed.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Iterator

from sqlalchemy import func, select
from sqlalchemy.engine import Row
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from aquamisk.core.errors import ForeignKeyViolation, InsufficientStock, NotFound, translate_integrity_error
from aquamisk.core.logging import get_logger
from aquamisk.db.alerts import StockAlert, pop_stock_alerts
from aquamisk.db.models import Customer, MaintenancePartUsage, MaintenanceRecord, PartInventoryItem

logger = get_logger(__name__)

CENTS = Decimal("0.01")


@dataclass
class PartUsageItem:
    part_id: int
    quantity: int
    part_cost: Decimal | None = None
    part_name: str | None = None


@dataclass
class PartUsageOutcome:
    usages: list[MaintenancePartUsage]
    alerts: list[StockAlert] = field(default_factory=list)


def commit_or_raise(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise translate_integrity_error(exc) from exc


def add_maintenance(
    db: Session,
    customer_code: int,
    recent_date: date | None,
    upcoming_date: date | None,
    comment: str | None = None,
    employee_mobile: str | None = None,
    maintenance_id: int | None = None,
) -> MaintenanceRecord:
    """Create one maintenance record for an existing customer.

    ``employee_mobile`` is optional; an empty string counts as no employee.
    The date ordering and both references are enforced by the schema.
    """
    record = MaintenanceRecord(
        maintenance_id=maintenance_id,
        customer_code=customer_code,
        recent_maintenance=recent_date,
        upcoming_maintenance=upcoming_date,
        comment=comment,
        recent_maintenance_employee=employee_mobile or None,
    )
    db.add(record)
    commit_or_raise(db)

    logger.info(
        "maintenance_added",
        maintenance_id=record.maintenance_id,
        customer_code=customer_code,
        upcoming=str(upcoming_date),
    )
    return record


def record_part_usage(db: Session, maintenance_id: int, items: Iterable[PartUsageItem]) -> PartUsageOutcome:
    """Insert the parts consumed on a visit; the database decrements stock per row.

    All rows go in with one flush. If any of them would take a part's stock
    below zero the whole batch is rejected with ``InsufficientStock``.
    """
    if db.get(MaintenanceRecord, maintenance_id) is None:
        raise NotFound(f"Maintenance record {maintenance_id} not found")

    usages = []
    for item in items:
        part = db.get(PartInventoryItem, item.part_id)
        if part is None:
            raise ForeignKeyViolation(f"Part {item.part_id} does not exist")
        usages.append(MaintenancePartUsage(
            maintenance_id=maintenance_id,
            part_id=part.part_id,
            part_name=item.part_name or part.part_name,
            quantity=item.quantity,
            part_cost=part.unit_price if item.part_cost is None else item.part_cost,
        ))

    if not usages:
        return PartUsageOutcome(usages=[])

    db.add_all(usages)
    try:
        commit_or_raise(db)
    except InsufficientStock:
        logger.info(
            "part_usage_rejected",
            maintenance_id=maintenance_id,
            parts=[u.part_id for u in usages],
            reason="insufficient_stock",
        )
        raise

    logger.info(
        "part_usage_recorded",
        maintenance_id=maintenance_id,
        rows=len(usages),
        quantity=sum(u.quantity for u in usages),
    )
    return PartUsageOutcome(usages=usages, alerts=pop_stock_alerts(db))


def average_maintenance_cost(db: Session, customer_code: int) -> Decimal | None:
    """Mean of quantity * part cost across the customer's part usages.

    Returns None when the customer has no usage rows.
    """
    stmt = (
        select(func.avg(MaintenancePartUsage.quantity * MaintenancePartUsage.part_cost))
        .select_from(MaintenancePartUsage)
        .join(MaintenanceRecord, MaintenanceRecord.maintenance_id == MaintenancePartUsage.maintenance_id)
        .where(MaintenanceRecord.customer_code == customer_code)
    )
    value = db.execute(stmt).scalar_one()
    if value is None:
        return None
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def month_bounds(today: date) -> tuple[date, date]:
    start = today.replace(day=1)
    end = (start + timedelta(days=32)).replace(day=1)
    return start, end


def customers_with_maintenance_this_month(db: Session, today: date | None = None) -> Iterator[Row]:
    """Yield (customer_code, customer_name, address) for each customer due this month."""
    start, end = month_bounds(today or date.today())
    stmt = (
        select(Customer.customer_code, Customer.customer_name, Customer.address)
        .join(MaintenanceRecord, MaintenanceRecord.customer_code == Customer.customer_code)
        .where(MaintenanceRecord.upcoming_maintenance >= start)
        .where(MaintenanceRecord.upcoming_maintenance < end)
        .distinct()
    )
    yield from db.execute(stmt)
