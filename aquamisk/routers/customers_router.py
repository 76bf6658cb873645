from datetime import date

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from aquamisk.core.errors import NotFound
from aquamisk.core.logging import get_logger
from aquamisk.db.models import Customer, Employee, MobileNumber
from aquamisk.db.procedures import average_maintenance_cost, commit_or_raise, customers_with_maintenance_this_month
from aquamisk.db.session import get_db
from aquamisk.schemas import (
    AverageCostOut, CustomerCreate, CustomerOut, CustomerSummary, EmployeeCreate, EmployeeOut, MobileNumberCreate,
)

router = APIRouter()
employees_router = APIRouter()
logger = get_logger(__name__)

def _get_customer(db: Session, customer_code: int) -> Customer:
    customer = db.get(Customer, customer_code)
    if customer is None:
        raise NotFound(f"Customer {customer_code} not found")
    return customer

def _customer_out(customer: Customer) -> CustomerOut:
    return CustomerOut(
        customer_code=customer.customer_code,
        customer_name=customer.customer_name,
        address=customer.address,
        install_date=customer.install_date,
        mobile_numbers=sorted(m.mobile_number for m in customer.mobile_numbers),
    )

@router.post("", response_model=CustomerOut, status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    customer = Customer(
        customer_code=payload.customer_code,
        customer_name=payload.customer_name,
        address=payload.address,
        install_date=payload.install_date,
        mobile_numbers=[MobileNumber(mobile_number=m) for m in payload.mobile_numbers],
    )
    db.add(customer)
    commit_or_raise(db)
    logger.info("customer_created", customer_code=customer.customer_code)
    return _customer_out(customer)

# declared before /{customer_code} so the literal path wins
@router.get("/maintenance-this-month", response_model=list[CustomerSummary])
def maintenance_this_month(today: date | None = Query(default=None), db: Session = Depends(get_db)):
    return [
        CustomerSummary(customer_code=r.customer_code, customer_name=r.customer_name, address=r.address)
        for r in customers_with_maintenance_this_month(db, today=today)
    ]

@router.get("/{customer_code}", response_model=CustomerOut)
def get_customer(customer_code: int, db: Session = Depends(get_db)):
    return _customer_out(_get_customer(db, customer_code))

@router.delete("/{customer_code}", status_code=204)
def delete_customer(customer_code: int, db: Session = Depends(get_db)):
    db.delete(_get_customer(db, customer_code))
    commit_or_raise(db)
    logger.info("customer_deleted", customer_code=customer_code)
    return Response(status_code=204)

@router.post("/{customer_code}/mobile-numbers", response_model=CustomerOut, status_code=201)
def add_mobile_number(customer_code: int, payload: MobileNumberCreate, db: Session = Depends(get_db)):
    db.add(MobileNumber(customer_code=customer_code, mobile_number=payload.mobile_number))
    commit_or_raise(db)
    return _customer_out(_get_customer(db, customer_code))

@router.get("/{customer_code}/average-maintenance-cost", response_model=AverageCostOut)
def get_average_maintenance_cost(customer_code: int, db: Session = Depends(get_db)):
    _get_customer(db, customer_code)
    avg = average_maintenance_cost(db, customer_code)
    return AverageCostOut(
        customer_code=customer_code,
        average_cost=None if avg is None else float(avg),
        has_data=avg is not None,
    )

@employees_router.post("", response_model=EmployeeOut, status_code=201)
def create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)):
    employee = Employee(employee_mobile=payload.employee_mobile, name=payload.name)
    db.add(employee)
    commit_or_raise(db)
    logger.info("employee_created", employee_mobile=employee.employee_mobile)
    return EmployeeOut.model_validate(employee)

@employees_router.delete("/{employee_mobile}", status_code=204)
def delete_employee(employee_mobile: str, db: Session = Depends(get_db)):
    employee = db.get(Employee, employee_mobile)
    if employee is None:
        raise NotFound(f"Employee {employee_mobile} not found")
    db.delete(employee)
    commit_or_raise(db)
    logger.info("employee_deleted", employee_mobile=employee_mobile)
    return Response(status_code=204)
