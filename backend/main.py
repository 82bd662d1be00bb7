import os
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pymongo.database import Database
from pymongo.errors import PyMongoError

from database import get_db
from schemas import (
    Item as ItemSchema,
    ItemUpdate,
    Transaction as TransactionSchema,
    Expense as ExpenseSchema,
    Supplier as SupplierSchema,
    Godown as GodownSchema,
    SettingsUpdate,
)
from backend import inventory, reports, settings as app_settings
from backend.errors import InvalidArgument, MissingFields, StorageFailure
from backend.inventory import Clock, today_str
from backend.report_pdf import render_report_pdf

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Vegetable Inventory API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_clock() -> Clock:
    return today_str


DATE_QUERY = r"^\d{4}-\d{2}-\d{2}$"


# Error handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(e.get("type") == "missing" for e in errors):
        return await http_exception_handler(request, MissingFields())
    first = errors[0] if errors else {}
    loc = tuple(first.get("loc", ()))
    if loc == ("body", "type") and first.get("type") == "literal_error":
        return await http_exception_handler(
            request, InvalidArgument("Transaction type must be 'purchase' or 'sale'")
        )
    field = ".".join(str(part) for part in loc[1:]) or "request"
    return await http_exception_handler(
        request, InvalidArgument(f"Invalid value for {field}: {first.get('msg', 'invalid')}")
    )


@app.exception_handler(PyMongoError)
async def storage_exception_handler(request: Request, exc: PyMongoError):
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    return await http_exception_handler(request, StorageFailure())


# Health and test
@app.get("/")
def read_root():
    return {"message": "Vegetable Inventory Backend Running"}


@app.get("/test")
def test_database(db: Database = Depends(get_db)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": []
    }
    try:
        response["collections"] = db.list_collection_names()
        response["database"] = "✅ Connected"
        response["connection_status"] = "Connected"
    except PyMongoError as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


# Inventory Endpoints
@app.get("/api/inventory")
def list_items(
    category: Optional[str] = Query(default=None, description="potatoes, tomatoes, other or all"),
    search: Optional[str] = Query(default=None, description="Search by name"),
    db: Database = Depends(get_db),
):
    return inventory.list_items(db, category=category, search=search)


@app.post("/api/inventory", status_code=201)
def create_item(item: ItemSchema, db: Database = Depends(get_db), clock: Clock = Depends(get_clock)):
    return inventory.create_item(db, item, clock)


@app.get("/api/inventory/summary")
def inventory_summary(db: Database = Depends(get_db)):
    threshold = app_settings.get_settings(db).get("low_stock_threshold", 30)
    return inventory.inventory_overview(db, threshold)


@app.get("/api/inventory/{item_id}")
def get_item(item_id: str, db: Database = Depends(get_db)):
    return inventory.get_item(db, item_id)


@app.put("/api/inventory/{item_id}")
def update_item(item_id: str, item: ItemUpdate, db: Database = Depends(get_db), clock: Clock = Depends(get_clock)):
    return inventory.update_item(db, item_id, item, clock)


@app.delete("/api/inventory/{item_id}")
def delete_item(item_id: str, db: Database = Depends(get_db)):
    return inventory.delete_item(db, item_id)


# Transactions
@app.get("/api/transactions")
def list_transactions(
    item_id: Optional[str] = None,
    start_date: Optional[str] = Query(default=None, pattern=DATE_QUERY),
    end_date: Optional[str] = Query(default=None, pattern=DATE_QUERY),
    type: Optional[str] = Query(default=None, description="purchase or sale"),
    db: Database = Depends(get_db),
):
    return inventory.list_transactions(db, item_id=item_id, start_date=start_date, end_date=end_date, type=type)


@app.post("/api/transactions", status_code=201)
def record_transaction(tx: TransactionSchema, db: Database = Depends(get_db), clock: Clock = Depends(get_clock)):
    return inventory.record_transaction(db, tx, clock)


# Expenses
@app.get("/api/expenses")
def list_expenses(
    item_id: Optional[str] = None,
    start_date: Optional[str] = Query(default=None, pattern=DATE_QUERY),
    end_date: Optional[str] = Query(default=None, pattern=DATE_QUERY),
    db: Database = Depends(get_db),
):
    return inventory.list_expenses(db, item_id=item_id, start_date=start_date, end_date=end_date)


@app.post("/api/expenses", status_code=201)
def record_expense(expense: ExpenseSchema, db: Database = Depends(get_db), clock: Clock = Depends(get_clock)):
    return inventory.record_expense(db, expense, clock)


# Suppliers and godowns
@app.get("/api/suppliers")
def list_suppliers(db: Database = Depends(get_db)):
    return inventory.list_suppliers(db)


@app.post("/api/suppliers", status_code=201)
def create_supplier(supplier: SupplierSchema, db: Database = Depends(get_db)):
    return inventory.create_supplier(db, supplier)


@app.get("/api/godowns")
def list_godowns(db: Database = Depends(get_db)):
    return inventory.list_godowns(db)


@app.post("/api/godowns", status_code=201)
def create_godown(godown: GodownSchema, db: Database = Depends(get_db)):
    return inventory.create_godown(db, godown)


# Settings
@app.get("/api/settings")
def get_settings(db: Database = Depends(get_db)):
    return app_settings.get_settings(db)


@app.put("/api/settings")
def update_settings(update: SettingsUpdate, db: Database = Depends(get_db)):
    return app_settings.update_settings(db, update)


# Reports
@app.get("/api/reports")
def build_report(
    start_date: Optional[str] = Query(default=None, pattern=DATE_QUERY),
    end_date: Optional[str] = Query(default=None, pattern=DATE_QUERY),
    category: Optional[str] = None,
    item_id: Optional[str] = None,
    db: Database = Depends(get_db),
):
    return reports.build_report(db, start_date=start_date, end_date=end_date, category=category, item_id=item_id)


@app.get("/api/reports/pdf")
def report_pdf(
    start_date: Optional[str] = Query(default=None, pattern=DATE_QUERY),
    end_date: Optional[str] = Query(default=None, pattern=DATE_QUERY),
    category: Optional[str] = None,
    item_id: Optional[str] = None,
    db: Database = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    report = reports.build_report(db, start_date=start_date, end_date=end_date, category=category, item_id=item_id)
    current = app_settings.get_settings(db)
    today = clock()
    pdf = render_report_pdf(
        report,
        branding=current.get("report_settings"),
        currency=current.get("default_currency") or "INR",
        generated_on=today,
        period=(start_date, end_date) if start_date and end_date else None,
        suppliers=inventory.list_suppliers(db),
        godowns=inventory.list_godowns(db),
    )
    filename = f"inventory-report-{today}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
