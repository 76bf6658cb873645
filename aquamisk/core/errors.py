"""Typed errors raised by the store's write and read paths."""
import re

from sqlalchemy.exc import IntegrityError

STOCK_CHECK_NAME = "ck_parts_inventory_stock_non_negative"


class StoreError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(StoreError):
    status_code = 404


class ConstraintViolation(StoreError):
    status_code = 409

    def __init__(self, message: str, constraint: str | None = None):
        super().__init__(message)
        self.constraint = constraint


class ForeignKeyViolation(ConstraintViolation):
    pass


class CheckViolation(ConstraintViolation):
    status_code = 422


class InsufficientStock(CheckViolation):
    status_code = 409


class UniquenessConflict(ConstraintViolation):
    pass


# sqlite: "CHECK constraint failed: ck_name"; postgres: 'violates check constraint "ck_name"'
_CHECK_NAME_RE = re.compile(r'check constraint(?: failed:|)\s*"?(\w+)"?', re.IGNORECASE)


def translate_integrity_error(exc: IntegrityError) -> ConstraintViolation:
    """Map a driver-level IntegrityError onto the store's error classes."""
    raw = str(exc.orig) if exc.orig is not None else str(exc)
    lowered = raw.lower()

    if "foreign key" in lowered:
        return ForeignKeyViolation(f"Referenced row does not exist: {raw}")

    if "check constraint" in lowered:
        match = _CHECK_NAME_RE.search(raw)
        name = match.group(1) if match else None
        if name == STOCK_CHECK_NAME:
            return InsufficientStock("Not enough stock to cover the requested quantity", constraint=name)
        return CheckViolation(f"Check constraint failed: {name or raw}", constraint=name)

    if "unique" in lowered or "duplicate key" in lowered:
        return UniquenessConflict(f"Row already exists: {raw}")

    return ConstraintViolation(raw)
