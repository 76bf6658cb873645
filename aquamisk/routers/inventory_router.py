from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from aquamisk.core.errors import NotFound
from aquamisk.core.logging import get_logger
from aquamisk.db.alerts import pop_stock_alerts
from aquamisk.db.models import PartInventoryItem
from aquamisk.db.procedures import commit_or_raise
from aquamisk.db.session import get_db
from aquamisk.schemas import PartCreate, PartOut, StockAlertOut, StockUpdate, StockUpdateResult

router = APIRouter()
logger = get_logger(__name__)

def _get_part(db: Session, part_id: int) -> PartInventoryItem:
    part = db.get(PartInventoryItem, part_id)
    if part is None:
        raise NotFound(f"Part {part_id} not found")
    return part

@router.post("", response_model=PartOut, status_code=201)
def create_part(payload: PartCreate, db: Session = Depends(get_db)):
    part = PartInventoryItem(**payload.model_dump())
    db.add(part)
    commit_or_raise(db)
    logger.info("part_created", part_id=part.part_id, stock_quantity=part.stock_quantity)
    return PartOut.model_validate(part)

@router.get("/{part_id}", response_model=PartOut)
def get_part(part_id: int, db: Session = Depends(get_db)):
    return PartOut.model_validate(_get_part(db, part_id))

@router.patch("/{part_id}/stock", response_model=StockUpdateResult)
def update_stock(part_id: int, payload: StockUpdate, db: Session = Depends(get_db)):
    part = _get_part(db, part_id)
    if payload.mode == "set":
        part.stock_quantity = payload.quantity
    else:
        part.stock_quantity = PartInventoryItem.stock_quantity + payload.quantity
    commit_or_raise(db)

    logger.info("stock_updated", part_id=part_id, mode=payload.mode, quantity=payload.quantity)
    return StockUpdateResult(
        part=PartOut.model_validate(part),
        alerts=[StockAlertOut.model_validate(a) for a in pop_stock_alerts(db)],
    )

@router.delete("/{part_id}", status_code=204)
def delete_part(part_id: int, db: Session = Depends(get_db)):
    db.delete(_get_part(db, part_id))
    commit_or_raise(db)
    logger.info("part_deleted", part_id=part_id)
    return Response(status_code=204)
