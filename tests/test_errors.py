import pytest
from sqlalchemy.exc import IntegrityError

from aquamisk.core.errors import (
    CheckViolation,
    ConstraintViolation,
    ForeignKeyViolation,
    InsufficientStock,
    UniquenessConflict,
    translate_integrity_error,
)


def integrity_error(message):
    return IntegrityError("INSERT ...", {}, Exception(message))


@pytest.mark.parametrize(
    "message, expected",
    [
        ("FOREIGN KEY constraint failed", ForeignKeyViolation),
        ('insert or update on table "maintenance" violates foreign key constraint "maintenance_customer_code_fkey"',
         ForeignKeyViolation),
        ("UNIQUE constraint failed: employees.employee_mobile", UniquenessConflict),
        ('duplicate key value violates unique constraint "employees_pkey"', UniquenessConflict),
        ("CHECK constraint failed: ck_maintenance_upcoming_after_recent", CheckViolation),
        ("NOT NULL constraint failed: customers.customer_name", ConstraintViolation),
    ],
)
def test_translate_integrity_error(message, expected):
    error = translate_integrity_error(integrity_error(message))

    assert type(error) is expected


def test_stock_check_becomes_insufficient_stock():
    sqlite_error = translate_integrity_error(
        integrity_error("CHECK constraint failed: ck_parts_inventory_stock_non_negative")
    )
    postgres_error = translate_integrity_error(integrity_error(
        'new row for relation "parts_inventory" violates check constraint "ck_parts_inventory_stock_non_negative"'
    ))

    for error in (sqlite_error, postgres_error):
        assert isinstance(error, InsufficientStock)
        assert isinstance(error, CheckViolation)
        assert error.constraint == "ck_parts_inventory_stock_non_negative"
        assert error.status_code == 409


def test_check_violation_keeps_constraint_name():
    error = translate_integrity_error(integrity_error(
        'new row for relation "maintenance" violates check constraint "ck_maintenance_upcoming_after_recent"'
    ))

    assert error.constraint == "ck_maintenance_upcoming_after_recent"
    assert error.status_code == 422
