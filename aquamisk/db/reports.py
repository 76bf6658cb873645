"""Read-only business reports over inventory and maintenance."""
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from aquamisk.core.config import settings
from aquamisk.db.models import Customer, MaintenancePartUsage, MaintenanceRecord, PartInventoryItem


def low_stock_parts(db: Session, threshold: int | None = None):
    threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    stmt = (
        select(PartInventoryItem.part_id, PartInventoryItem.part_name, PartInventoryItem.stock_quantity)
        .where(PartInventoryItem.stock_quantity < threshold)
        .order_by(PartInventoryItem.stock_quantity.asc(), PartInventoryItem.part_id)
    )
    return db.execute(stmt).all()


def critical_stock_parts(db: Session):
    return low_stock_parts(db, threshold=settings.CRITICAL_STOCK_THRESHOLD)


def total_inventory_value(db: Session) -> Decimal:
    stmt = select(
        func.coalesce(func.sum(PartInventoryItem.stock_quantity * PartInventoryItem.unit_price), 0)
    )
    return Decimal(str(db.execute(stmt).scalar_one())).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def part_usage_totals(db: Session):
    total_used = func.sum(MaintenancePartUsage.quantity).label("total_used")
    stmt = (
        select(PartInventoryItem.part_id, PartInventoryItem.part_name, total_used)
        .select_from(MaintenancePartUsage)
        .join(PartInventoryItem, PartInventoryItem.part_id == MaintenancePartUsage.part_id)
        .group_by(PartInventoryItem.part_id, PartInventoryItem.part_name)
        .order_by(total_used.desc(), PartInventoryItem.part_id)
    )
    return db.execute(stmt).all()


def most_used_parts(db: Session, limit: int | None = None):
    usage_count = func.count(MaintenancePartUsage.usage_id).label("usage_count")
    stmt = (
        select(PartInventoryItem.part_id, PartInventoryItem.part_name, usage_count)
        .select_from(MaintenancePartUsage)
        .join(PartInventoryItem, PartInventoryItem.part_id == MaintenancePartUsage.part_id)
        .group_by(PartInventoryItem.part_id, PartInventoryItem.part_name)
        .order_by(usage_count.desc(), PartInventoryItem.part_id)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return db.execute(stmt).all()


def upcoming_maintenance_for_customer(db: Session, customer_name: str, today: date | None = None):
    today = today or date.today()
    stmt = (
        select(
            MaintenanceRecord.maintenance_id,
            Customer.customer_name,
            MaintenanceRecord.upcoming_maintenance,
            MaintenanceRecord.comment,
        )
        .join(Customer, Customer.customer_code == MaintenanceRecord.customer_code)
        .where(Customer.customer_name == customer_name)
        .where(MaintenanceRecord.upcoming_maintenance > today)
        .order_by(MaintenanceRecord.upcoming_maintenance)
    )
    return db.execute(stmt).all()


def inventory_summary(db: Session) -> dict:
    parts = db.execute(select(func.count()).select_from(PartInventoryItem)).scalar_one()

    low_stock_count = db.execute(
        select(func.count()).select_from(PartInventoryItem)
        .where(PartInventoryItem.stock_quantity < settings.LOW_STOCK_THRESHOLD)
    ).scalar_one()

    critical_count = db.execute(
        select(func.count()).select_from(PartInventoryItem)
        .where(PartInventoryItem.stock_quantity < settings.CRITICAL_STOCK_THRESHOLD)
    ).scalar_one()

    units_used = db.execute(
        select(func.coalesce(func.sum(MaintenancePartUsage.quantity), 0))
    ).scalar_one()

    return {
        "parts": int(parts),
        "total_inventory_value": total_inventory_value(db),
        "low_stock_parts": int(low_stock_count),
        "critical_stock_parts": int(critical_count),
        "units_used": int(units_used),
    }
