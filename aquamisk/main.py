from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from aquamisk.core.config import settings
from aquamisk.core.errors import StoreError
from aquamisk.core.logging import get_logger, setup_logging
from aquamisk.routers.customers_router import router as customers_router, employees_router
from aquamisk.routers.import_router import router as import_router
from aquamisk.routers.inventory_router import router as inventory_router
from aquamisk.routers.maintenance_router import router as maintenance_router
from aquamisk.routers.reports_router import router as reports_router

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
logger = get_logger(__name__)

app = FastAPI(title="AquaMisk Maintenance & Inventory API v0")

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.info("request_rejected", path=request.url.path, error=type(exc).__name__, detail=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )

@app.get("/")
def root():
    return {"ok": True, "service": "aquamisk", "module": "maintenance-inventory"}

app.include_router(maintenance_router, prefix="/maintenance", tags=["maintenance"])
app.include_router(customers_router, prefix="/customers", tags=["customers"])
app.include_router(employees_router, prefix="/employees", tags=["employees"])
app.include_router(inventory_router, prefix="/parts", tags=["inventory"])
app.include_router(reports_router, prefix="/reports", tags=["reports"])
app.include_router(import_router, prefix="/import", tags=["import"])
