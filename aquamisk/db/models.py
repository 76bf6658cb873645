from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import String, Integer, Numeric, Date, Text, ForeignKey, CheckConstraint, Index

class Base(DeclarativeBase):
    pass

class PartInventoryItem(Base):
    __tablename__ = "parts_inventory"
    part_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    part_name: Mapped[str] = mapped_column(String(100))
    stock_quantity: Mapped[int] = mapped_column(Integer)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    usages: Mapped[list["MaintenancePartUsage"]] = relationship(back_populates="part", passive_deletes="all")

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_parts_inventory_stock_non_negative"),
    )

class Customer(Base):
    __tablename__ = "customers"
    customer_code: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(100), index=True)
    address: Mapped[str | None] = mapped_column(String(255))
    install_date: Mapped[date | None] = mapped_column(Date)

    mobile_numbers: Mapped[list["MobileNumber"]] = relationship(
        back_populates="customer", cascade="all, delete-orphan", passive_deletes=True
    )
    # Customers with maintenance history cannot be deleted; let the database refuse it
    maintenance_records: Mapped[list["MaintenanceRecord"]] = relationship(
        back_populates="customer", passive_deletes="all"
    )

class MobileNumber(Base):
    __tablename__ = "mobile_numbers"
    customer_code: Mapped[int] = mapped_column(
        Integer, ForeignKey("customers.customer_code", ondelete="CASCADE"), primary_key=True
    )
    mobile_number: Mapped[str] = mapped_column(String(15), primary_key=True)

    customer: Mapped["Customer"] = relationship(back_populates="mobile_numbers")

class Employee(Base):
    __tablename__ = "employees"
    employee_mobile: Mapped[str] = mapped_column(String(15), primary_key=True)
    name: Mapped[str] = mapped_column(String(100))

    maintenance_records: Mapped[list["MaintenanceRecord"]] = relationship(
        back_populates="employee", passive_deletes=True
    )

class MaintenanceRecord(Base):
    __tablename__ = "maintenance"
    maintenance_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    recent_maintenance: Mapped[date | None] = mapped_column(Date)
    upcoming_maintenance: Mapped[date | None] = mapped_column(Date)
    comment: Mapped[str | None] = mapped_column(Text)
    recent_maintenance_employee: Mapped[str | None] = mapped_column(
        String(15), ForeignKey("employees.employee_mobile", ondelete="SET NULL")
    )
    customer_code: Mapped[int] = mapped_column(
        Integer, ForeignKey("customers.customer_code", ondelete="RESTRICT")
    )

    customer: Mapped["Customer"] = relationship(back_populates="maintenance_records")
    employee: Mapped[Optional["Employee"]] = relationship(back_populates="maintenance_records")
    part_usages: Mapped[list["MaintenancePartUsage"]] = relationship(
        back_populates="maintenance", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint(
            "upcoming_maintenance > recent_maintenance", name="ck_maintenance_upcoming_after_recent"
        ),
        Index("ix_maintenance_customer_code", "customer_code"),
        Index("ix_maintenance_upcoming_maintenance", "upcoming_maintenance"),
    )

class MaintenancePartUsage(Base):
    __tablename__ = "maintenance_parts"
    usage_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    maintenance_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("maintenance.maintenance_id", ondelete="CASCADE"), index=True
    )
    part_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("parts_inventory.part_id", ondelete="RESTRICT"), index=True
    )
    part_name: Mapped[str] = mapped_column(String(100))  # copy of the part name at time of use
    quantity: Mapped[int] = mapped_column(Integer)
    part_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    maintenance: Mapped["MaintenanceRecord"] = relationship(back_populates="part_usages")
    part: Mapped["PartInventoryItem"] = relationship(back_populates="usages")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_maintenance_parts_quantity_positive"),
    )
