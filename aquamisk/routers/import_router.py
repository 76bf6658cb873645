from fastapi import APIRouter, Depends, UploadFile, File, HTTPException
from fastapi.responses import FileResponse
import pandas as pd
from pathlib import Path
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import uuid

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from aquamisk.core.config import settings
from aquamisk.core.logging import get_logger
from aquamisk.db.alerts import check_stock_levels
from aquamisk.db.models import PartInventoryItem, Customer, MobileNumber
from aquamisk.db.procedures import commit_or_raise
from aquamisk.db.session import get_db

router = APIRouter()
logger = get_logger(__name__)

REQUIRED_PARTS = {"part_id", "part_name", "stock_quantity", "unit_price"}
REQUIRED_CUSTOMERS = {"customer_code", "customer_name", "address", "install_date"}
REQUIRED_MOBILES = {"customer_code", "mobile_number"}

ERROR_DIR = Path(settings.ERROR_REPORT_DIR)

CENTS = Decimal("0.01")
# unit_price is NUMERIC(10, 2)
MAX_UNIT_PRICE = Decimal("100000000")

def read_csv(upload: UploadFile) -> pd.DataFrame:
    if not upload.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail=f"{upload.filename} must be a CSV")
    try:
        return pd.read_csv(upload.file, dtype=str, keep_default_na=False)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"{upload.filename}: could not read CSV: {e}")

def missing_cols(df: pd.DataFrame, required: set[str]) -> list[str]:
    return sorted(list(required - set(df.columns)))

def add_error(
    errors: list,
    *,
    file: str,
    row: int | None,
    field: str,
    code: str,
    message: str,
    value: str = "",
    suggestion: str = "",
):
    errors.append({
        "file": file,
        "row": row,
        "field": field,
        "code": code,
        "message": message,
        "value": value,
        "suggestion": suggestion,
    })

def parse_date(value: str):
    parsed = pd.to_datetime(value, errors="coerce", format="%Y-%m-%d")
    return None if pd.isna(parsed) else parsed.date()

def check_non_negative_int(errors, filename, csv_row, row, field):
    try:
        if int(row[field]) < 0:
            raise ValueError()
    except Exception:
        add_error(errors, file=filename, row=csv_row, field=field, code="BAD_INT",
                  message=f"{field} must be an integer >= 0", value=str(row.get(field, "")))

def parse_price(value: str) -> Decimal | None:
    """Return the price rounded to cents, or None if it is not a storable non-negative amount."""
    try:
        price = Decimal(value.strip())
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0 or price >= MAX_UNIT_PRICE:
        return None
    return price.quantize(CENTS, rounding=ROUND_HALF_UP)

def check_duplicate_keys(errors, filename, df, field):
    # ON CONFLICT cannot touch the same key twice in one statement
    keys = pd.to_numeric(df[field].str.strip(), errors="coerce")
    duplicated = keys.notna() & keys.duplicated(keep="first")
    for idx in df.index[duplicated]:
        add_error(errors, file=filename, row=int(idx) + 2, field=field, code="DUPLICATE_KEY",
                  message=f"{field} appears more than once in this file", value=str(df.at[idx, field]),
                  suggestion="Keep one row per key.")

def write_error_report(errors: list) -> str:
    report_id = uuid.uuid4().hex
    ERROR_DIR.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(errors).to_csv(ERROR_DIR / f"{report_id}.csv", index=False)
    return report_id

def failed_response(errors: list, summary: dict) -> dict:
    report_id = write_error_report(errors)
    logger.info("import_validation_failed", errors_count=len(errors), error_report_id=report_id)
    return {
        "ok": False,
        "summary": summary,
        "errors_count": len(errors),
        "error_report_id": report_id,
        "error_report_url": f"/import/error-report/{report_id}",
        "errors_preview": errors[:25],
    }

def collect_errors(parts: UploadFile, customers: UploadFile, mobiles: UploadFile,
                   df_p: pd.DataFrame, df_c: pd.DataFrame, df_m: pd.DataFrame) -> list[dict]:
    errors: list[dict] = []

    # 1) Required columns
    for upload, df, required in ((parts, df_p, REQUIRED_PARTS),
                                 (customers, df_c, REQUIRED_CUSTOMERS),
                                 (mobiles, df_m, REQUIRED_MOBILES)):
        missing = missing_cols(df, required)
        if missing:
            add_error(errors, file=upload.filename, row=None, field="*", code="MISSING_COLUMNS",
                      message="Missing required columns", value=",".join(missing),
                      suggestion="Add these columns to header.")

    # Stop early if missing columns
    if errors:
        return errors

    # 2) Row-level checks
    for idx, row in df_p.iterrows():
        csv_row = int(idx) + 2
        check_non_negative_int(errors, parts.filename, csv_row, row, "part_id")
        check_non_negative_int(errors, parts.filename, csv_row, row, "stock_quantity")
        if not row["part_name"].strip():
            add_error(errors, file=parts.filename, row=csv_row, field="part_name", code="REQUIRED",
                      message="part_name is required", suggestion="Provide a non-empty part_name.")
        if parse_price(row["unit_price"]) is None:
            add_error(errors, file=parts.filename, row=csv_row, field="unit_price", code="BAD_NUMBER",
                      message=f"unit_price must be a number >= 0 and below {MAX_UNIT_PRICE}",
                      value=str(row.get("unit_price", "")))
    check_duplicate_keys(errors, parts.filename, df_p, "part_id")

    for idx, row in df_c.iterrows():
        csv_row = int(idx) + 2
        check_non_negative_int(errors, customers.filename, csv_row, row, "customer_code")
        if not row["customer_name"].strip():
            add_error(errors, file=customers.filename, row=csv_row, field="customer_name", code="REQUIRED",
                      message="customer_name is required", suggestion="Provide a non-empty customer_name.")
        install_date = row["install_date"].strip()
        if install_date and parse_date(install_date) is None:
            add_error(errors, file=customers.filename, row=csv_row, field="install_date", code="BAD_DATE",
                      message="install_date must be YYYY-MM-DD", value=install_date,
                      suggestion="Use ISO like 2023-01-15.")
    check_duplicate_keys(errors, customers.filename, df_c, "customer_code")

    for idx, row in df_m.iterrows():
        csv_row = int(idx) + 2
        number = row["mobile_number"].strip()
        if not number or len(number) > 15:
            add_error(errors, file=mobiles.filename, row=csv_row, field="mobile_number", code="BAD_MOBILE",
                      message="mobile_number must be 1-15 characters", value=number)

    # 3) Cross-file customer checks
    customer_codes = set(df_c["customer_code"].astype(str).str.strip())
    for idx, row in df_m.iterrows():
        csv_row = int(idx) + 2
        code = str(row.get("customer_code", "")).strip()
        if code not in customer_codes:
            add_error(errors, file=mobiles.filename, row=csv_row, field="customer_code", code="UNKNOWN_CUSTOMER",
                      message="customer_code not found in customers file", value=code,
                      suggestion="Fix customer_code to match the customers file.")

    return errors

def dialect_insert(db: Session):
    name = db.get_bind().dialect.name
    if name == "postgresql":
        return postgresql.insert
    if name == "sqlite":
        return sqlite.insert
    raise HTTPException(status_code=501, detail=f"Import is not supported on {name}")

@router.get("/error-report/{report_id}")
def download_error_report(report_id: str):
    path = ERROR_DIR / f"{report_id}.csv"
    if not path.exists():
        raise HTTPException(status_code=404, detail="Error report not found")
    return FileResponse(path, media_type="text/csv", filename="import_error_report.csv")

@router.post("/validate")
async def validate_all(
    parts: UploadFile = File(...),
    customers: UploadFile = File(...),
    mobile_numbers: UploadFile = File(...),
):
    df_p = read_csv(parts)
    df_c = read_csv(customers)
    df_m = read_csv(mobile_numbers)
    summary = {"parts_rows": int(len(df_p)), "customers_rows": int(len(df_c)), "mobile_numbers_rows": int(len(df_m))}

    errors = collect_errors(parts, customers, mobile_numbers, df_p, df_c, df_m)
    if errors:
        return failed_response(errors, summary)

    return {
        "ok": True,
        "summary": summary,
        "errors_count": 0,
        "errors_preview": [],
    }

@router.post("/commit")
def commit_import(
    parts: UploadFile = File(...),
    customers: UploadFile = File(...),
    mobile_numbers: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    df_p = read_csv(parts)
    df_c = read_csv(customers)
    df_m = read_csv(mobile_numbers)

    if collect_errors(parts, customers, mobile_numbers, df_p, df_c, df_m):
        raise HTTPException(status_code=400, detail="Import files have errors. Run /import/validate first.")

    insert = dialect_insert(db)

    part_rows = [
        {
            "part_id": int(r["part_id"]),
            "part_name": r["part_name"].strip(),
            "stock_quantity": int(r["stock_quantity"]),
            "unit_price": parse_price(r["unit_price"]),
        }
        for r in df_p.to_dict(orient="records")
    ]
    customer_rows = [
        {
            "customer_code": int(r["customer_code"]),
            "customer_name": r["customer_name"].strip(),
            "address": r["address"].strip() or None,
            "install_date": parse_date(r["install_date"].strip()) if r["install_date"].strip() else None,
        }
        for r in df_c.to_dict(orient="records")
    ]
    mobile_rows = [
        {"customer_code": int(r["customer_code"]), "mobile_number": r["mobile_number"].strip()}
        for r in df_m.to_dict(orient="records")
    ]

    part_ids = [r["part_id"] for r in part_rows]
    # a new part's opening stock is not a drop, so only pre-existing parts can alert
    existing_part_ids = []
    if part_ids:
        existing_part_ids = list(db.execute(
            select(PartInventoryItem.part_id).where(PartInventoryItem.part_id.in_(part_ids))
        ).scalars())

    if part_rows:
        stmt = insert(PartInventoryItem).values(part_rows)
        db.execute(stmt.on_conflict_do_update(
            index_elements=[PartInventoryItem.part_id],
            set_={
                "part_name": stmt.excluded.part_name,
                "stock_quantity": stmt.excluded.stock_quantity,
                "unit_price": stmt.excluded.unit_price,
            },
        ))

    if customer_rows:
        stmt2 = insert(Customer).values(customer_rows)
        db.execute(stmt2.on_conflict_do_update(
            index_elements=[Customer.customer_code],
            set_={
                "customer_name": stmt2.excluded.customer_name,
                "address": stmt2.excluded.address,
                "install_date": stmt2.excluded.install_date,
            },
        ))

    if mobile_rows:
        stmt3 = insert(MobileNumber).values(mobile_rows).on_conflict_do_nothing(
            index_elements=[MobileNumber.customer_code, MobileNumber.mobile_number]
        )
        db.execute(stmt3)

    commit_or_raise(db)

    alerts = check_stock_levels(db, existing_part_ids)
    logger.info("import_committed", parts=len(part_rows), customers=len(customer_rows),
                mobile_numbers=len(mobile_rows), alerts=len(alerts))
    return {
        "ok": True,
        "saved": {
            "parts_upserted": len(part_rows),
            "customers_upserted": len(customer_rows),
            "mobile_numbers_attempted": len(mobile_rows),
        },
        "alerts": [{"part_id": a.part_id, "part_name": a.part_name, "stock_quantity": a.stock_quantity,
                    "message": a.message} for a in alerts],
        "note": "Mobile number duplicates (same customer_code+mobile_number) are skipped.",
    }
