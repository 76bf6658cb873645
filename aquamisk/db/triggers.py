"""
Database-side triggers.

Stock consumption is applied by the database itself so that every row of a
multi-row insert into ``maintenance_parts`` decrements its part inside the
same statement. A decrement that would take stock below zero trips the
``parts_inventory`` CHECK constraint and aborts the whole insert.
"""
from sqlalchemy import DDL, event

from aquamisk.db.models import MaintenancePartUsage

SQLITE_UPDATE_STOCK_AFTER_USAGE = DDL(
    """
    CREATE TRIGGER IF NOT EXISTS update_stock_after_usage
    AFTER INSERT ON maintenance_parts
    FOR EACH ROW
    BEGIN
        UPDATE parts_inventory
        SET stock_quantity = stock_quantity - NEW.quantity
        WHERE part_id = NEW.part_id;
    END
    """
)

POSTGRES_UPDATE_STOCK_FUNCTION = DDL(
    """
    CREATE OR REPLACE FUNCTION update_stock_after_usage() RETURNS trigger AS $$
    BEGIN
        UPDATE parts_inventory
        SET stock_quantity = stock_quantity - NEW.quantity
        WHERE part_id = NEW.part_id;
        RETURN NEW;
    END;
    $$ LANGUAGE plpgsql
    """
)

POSTGRES_UPDATE_STOCK_AFTER_USAGE = DDL(
    """
    CREATE TRIGGER update_stock_after_usage
    AFTER INSERT ON maintenance_parts
    FOR EACH ROW EXECUTE FUNCTION update_stock_after_usage()
    """
)

usage_table = MaintenancePartUsage.__table__

event.listen(usage_table, "after_create", SQLITE_UPDATE_STOCK_AFTER_USAGE.execute_if(dialect="sqlite"))
event.listen(usage_table, "after_create", POSTGRES_UPDATE_STOCK_FUNCTION.execute_if(dialect="postgresql"))
event.listen(usage_table, "after_create", POSTGRES_UPDATE_STOCK_AFTER_USAGE.execute_if(dialect="postgresql"))
