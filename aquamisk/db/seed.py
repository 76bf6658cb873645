"""Sample data set for a fresh store.

Run ``python -m aquamisk.db.seed`` to create the schema and load it.
"""
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from aquamisk.core.logging import get_logger
from aquamisk.db.models import Customer, Employee, MaintenanceRecord, MobileNumber, PartInventoryItem
from aquamisk.db.procedures import PartUsageItem, record_part_usage

logger = get_logger(__name__)

PARTS = [
    (1, "Membrane", 50, Decimal("300.00")),
    (2, "1st stage", 200, Decimal("50.00")),
    (3, "2nd stage", 100, Decimal("75.00")),
]

CUSTOMERS = [
    (1, "Sample Customer Tanta", "Tanta", date(2023, 1, 15)),
    (2, "Sample Customer Cairo", "Cairo", date(2023, 5, 20)),
]

MOBILE_NUMBERS = [
    (1, "01000000001"),
    (2, "01000000002"),
]

EMPLOYEES = [
    ("01100000001", "Technician One"),
    ("01100000002", "Technician Two"),
]

MAINTENANCE = [
    (1, date(2025, 1, 1), date(2025, 6, 1), "Regular service", "01100000001", 1),
    (2, date(2025, 3, 15), date(2025, 9, 15), "Regular service", "01100000002", 2),
]

# (maintenance_id, part_id, quantity, part_cost)
USAGES = [
    (1, 2, 2, Decimal("50.00")),
    (2, 1, 1, Decimal("3000.00")),
]


def seed_sample_data(db: Session) -> None:
    db.add_all(PartInventoryItem(part_id=i, part_name=n, stock_quantity=s, unit_price=p) for i, n, s, p in PARTS)
    db.add_all(Customer(customer_code=c, customer_name=n, address=a, install_date=d) for c, n, a, d in CUSTOMERS)
    db.add_all(MobileNumber(customer_code=c, mobile_number=m) for c, m in MOBILE_NUMBERS)
    db.add_all(Employee(employee_mobile=m, name=n) for m, n in EMPLOYEES)
    db.commit()

    db.add_all(
        MaintenanceRecord(
            maintenance_id=i, recent_maintenance=r, upcoming_maintenance=u,
            comment=c, recent_maintenance_employee=e, customer_code=cc,
        )
        for i, r, u, c, e, cc in MAINTENANCE
    )
    db.commit()

    for maintenance_id, part_id, quantity, cost in USAGES:
        record_part_usage(db, maintenance_id, [PartUsageItem(part_id=part_id, quantity=quantity, part_cost=cost)])

    logger.info("sample_data_loaded", parts=len(PARTS), customers=len(CUSTOMERS), maintenance=len(MAINTENANCE))


if __name__ == "__main__":
    from aquamisk.core.config import settings
    from aquamisk.core.logging import setup_logging
    from aquamisk.db.session import init_db

    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    init_db(sample_data=True)
