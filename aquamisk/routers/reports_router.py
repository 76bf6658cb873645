from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from aquamisk.core.config import settings
from aquamisk.db import reports
from aquamisk.db.session import get_db

router = APIRouter()

@router.get("/low-stock")
def get_low_stock(
    threshold: int = Query(default=settings.LOW_STOCK_THRESHOLD, ge=0),
    db: Session = Depends(get_db),
):
    rows = reports.low_stock_parts(db, threshold=threshold)
    return {
        "threshold": threshold,
        "parts": [
            {"part_id": r.part_id, "part_name": r.part_name, "stock_quantity": int(r.stock_quantity)}
            for r in rows
        ],
    }

@router.get("/inventory-value")
def get_inventory_value(db: Session = Depends(get_db)):
    return {"total_inventory_value": float(reports.total_inventory_value(db))}

@router.get("/part-usage")
def get_part_usage(db: Session = Depends(get_db)):
    return [
        {"part_id": r.part_id, "part_name": r.part_name, "total_used": int(r.total_used)}
        for r in reports.part_usage_totals(db)
    ]

@router.get("/most-used-parts")
def get_most_used_parts(
    limit: int | None = Query(default=None, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return [
        {"part_id": r.part_id, "part_name": r.part_name, "usage_count": int(r.usage_count)}
        for r in reports.most_used_parts(db, limit=limit)
    ]

@router.get("/upcoming-maintenance")
def get_upcoming_maintenance(
    customer_name: str = Query(..., min_length=1),
    today: date | None = Query(default=None),
    db: Session = Depends(get_db),
):
    rows = reports.upcoming_maintenance_for_customer(db, customer_name, today=today)
    return [
        {
            "maintenance_id": r.maintenance_id,
            "customer_name": r.customer_name,
            "upcoming_maintenance": r.upcoming_maintenance.isoformat(),
            "comment": r.comment,
        }
        for r in rows
    ]

@router.get("/summary")
def get_summary(db: Session = Depends(get_db)):
    summary = reports.inventory_summary(db)
    summary["total_inventory_value"] = float(summary["total_inventory_value"])
    return summary

@router.get("/stock-alerts")
def get_stock_alerts(db: Session = Depends(get_db)):
    threshold = settings.CRITICAL_STOCK_THRESHOLD
    alerts = []
    for r in reports.critical_stock_parts(db):
        alerts.append({
            "part_id": r.part_id,
            "part_name": r.part_name,
            "issue": f"Stock critically low ({r.stock_quantity} < {threshold})",
            "stock_quantity": int(r.stock_quantity),
            "action": "Restock part",
        })
    return {"threshold": threshold, "alerts": alerts}
