"""Pydantic models for API request/response validation."""
from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class MaintenanceCreate(BaseModel):
    customer_code: int
    recent_date: date
    upcoming_date: date
    comment: Optional[str] = None
    employee_mobile: Optional[str] = Field(default=None, max_length=15)
    maintenance_id: Optional[int] = None


class PartUsageIn(BaseModel):
    part_id: int
    quantity: int = Field(gt=0)
    part_cost: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    part_name: Optional[str] = Field(default=None, max_length=100)


class PartUsageCreate(BaseModel):
    items: list[PartUsageIn] = Field(min_length=1)


class PartUsageOut(ORMModel):
    usage_id: int
    maintenance_id: int
    part_id: int
    part_name: str
    quantity: int
    part_cost: float


class MaintenanceOut(ORMModel):
    maintenance_id: int
    customer_code: int
    recent_maintenance: Optional[date]
    upcoming_maintenance: Optional[date]
    comment: Optional[str]
    recent_maintenance_employee: Optional[str]
    part_usages: list[PartUsageOut] = []


class StockAlertOut(ORMModel):
    part_id: int
    part_name: str
    stock_quantity: int
    threshold: int
    message: str


class PartUsageResult(BaseModel):
    usages: list[PartUsageOut]
    alerts: list[StockAlertOut]


class AverageCostOut(BaseModel):
    customer_code: int
    average_cost: Optional[float]
    has_data: bool


class PartCreate(BaseModel):
    part_id: Optional[int] = None
    part_name: str = Field(max_length=100)
    stock_quantity: int = Field(ge=0)
    unit_price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)


class PartOut(ORMModel):
    part_id: int
    part_name: str
    stock_quantity: int
    unit_price: float


class StockUpdate(BaseModel):
    mode: Literal["set", "adjust"] = "adjust"
    quantity: int


class StockUpdateResult(BaseModel):
    part: PartOut
    alerts: list[StockAlertOut]


class CustomerCreate(BaseModel):
    customer_code: Optional[int] = None
    customer_name: str = Field(max_length=100)
    address: Optional[str] = Field(default=None, max_length=255)
    install_date: Optional[date] = None
    mobile_numbers: list[str] = []


class MobileNumberCreate(BaseModel):
    mobile_number: str = Field(min_length=1, max_length=15)


class CustomerOut(ORMModel):
    customer_code: int
    customer_name: str
    address: Optional[str]
    install_date: Optional[date]
    mobile_numbers: list[str] = []


class CustomerSummary(BaseModel):
    customer_code: int
    customer_name: str
    address: Optional[str]


class EmployeeCreate(BaseModel):
    employee_mobile: str = Field(min_length=1, max_length=15)
    name: str = Field(max_length=100)


class EmployeeOut(ORMModel):
    employee_mobile: str
    name: str
