from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aquamisk.core.errors import NotFound
from aquamisk.db.models import MaintenanceRecord
from aquamisk.db.procedures import PartUsageItem, add_maintenance, record_part_usage
from aquamisk.db.session import get_db
from aquamisk.schemas import (
    MaintenanceCreate, MaintenanceOut, PartUsageCreate, PartUsageOut, PartUsageResult, StockAlertOut,
)

router = APIRouter()

@router.post("", response_model=MaintenanceOut, status_code=201)
def create_maintenance(payload: MaintenanceCreate, db: Session = Depends(get_db)):
    record = add_maintenance(
        db,
        customer_code=payload.customer_code,
        recent_date=payload.recent_date,
        upcoming_date=payload.upcoming_date,
        comment=payload.comment,
        employee_mobile=payload.employee_mobile,
        maintenance_id=payload.maintenance_id,
    )
    return MaintenanceOut.model_validate(record)

@router.get("/{maintenance_id}", response_model=MaintenanceOut)
def get_maintenance(maintenance_id: int, db: Session = Depends(get_db)):
    record = db.get(MaintenanceRecord, maintenance_id)
    if record is None:
        raise NotFound(f"Maintenance record {maintenance_id} not found")
    return MaintenanceOut.model_validate(record)

@router.post("/{maintenance_id}/parts", response_model=PartUsageResult, status_code=201)
def add_parts(maintenance_id: int, payload: PartUsageCreate, db: Session = Depends(get_db)):
    outcome = record_part_usage(
        db,
        maintenance_id,
        [PartUsageItem(part_id=i.part_id, quantity=i.quantity, part_cost=i.part_cost, part_name=i.part_name)
         for i in payload.items],
    )
    return PartUsageResult(
        usages=[PartUsageOut.model_validate(u) for u in outcome.usages],
        alerts=[StockAlertOut.model_validate(a) for a in outcome.alerts],
    )
