"""
Item store, transaction and expense ledgers, supplier/godown directories.

Every function takes the MongoDB ``Database`` as its first argument. Dates are
``YYYY-MM-DD`` strings; where a date defaults to "today" the caller passes a
``clock`` callable returning that string.
"""
import re
import logging
from datetime import date
from typing import Callable, Dict, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from schemas import (
    Item as ItemSchema,
    ItemUpdate,
    Transaction as TransactionSchema,
    Expense as ExpenseSchema,
    Supplier as SupplierSchema,
    Godown as GodownSchema,
)
from backend.errors import InvalidArgument, NotFound, InsufficientStock

logger = logging.getLogger(__name__)

Clock = Callable[[], str]


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


# Helpers
def to_object_id(value: str, error=None) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if not ObjectId.is_valid(value):
        raise error or InvalidArgument("Invalid item ID")
    return ObjectId(value)


def item_ref(item_id: str) -> str:
    """Canonical form of an item reference as stored on ledger entries."""
    if ObjectId.is_valid(item_id):
        return str(ObjectId(item_id))
    return item_id


def to_str_id(doc):
    if not doc:
        return doc
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def date_range_query(start_date: Optional[str], end_date: Optional[str]) -> Dict:
    query = {}
    if start_date:
        query["$gte"] = start_date
    if end_date:
        query["$lte"] = end_date
    return query


# Items
def list_items(db: Database, category: Optional[str] = None, search: Optional[str] = None) -> List[dict]:
    query = {}
    if category and category != "all":
        query["category"] = category
    if search:
        query["name"] = {"$regex": re.escape(search), "$options": "i"}
    items = db["items"].find(query).sort("name", ASCENDING)
    return [to_str_id(i) for i in items]


def get_item(db: Database, item_id: str) -> dict:
    doc = db["items"].find_one({"_id": to_object_id(item_id)})
    if not doc:
        raise NotFound()
    return to_str_id(doc)


def create_item(db: Database, item: ItemSchema, clock: Clock = today_str) -> dict:
    data = item.model_dump()
    data["last_updated"] = clock()
    result = db["items"].insert_one(data)
    logger.info("Created item %s (%s)", result.inserted_id, data["name"])
    return to_str_id(db["items"].find_one({"_id": result.inserted_id}))


def update_item(db: Database, item_id: str, item: ItemUpdate, clock: Clock = today_str) -> dict:
    oid = to_object_id(item_id)
    # Only the keys the caller sent; everything else on the document is kept.
    data = item.model_dump(exclude_unset=True)
    data["last_updated"] = clock()
    res = db["items"].update_one({"_id": oid}, {"$set": data})
    if res.matched_count == 0:
        raise NotFound()
    return to_str_id(db["items"].find_one({"_id": oid}))


def delete_item(db: Database, item_id: str) -> dict:
    oid = to_object_id(item_id)
    res = db["items"].delete_one({"_id": oid})
    if res.deleted_count == 0:
        raise NotFound()
    # References are plain strings, so the cascade is done here.
    removed_tx = db["transactions"].delete_many({"item_id": str(oid)}).deleted_count
    removed_exp = db["expenses"].delete_many({"item_id": str(oid)}).deleted_count
    logger.info(
        "Deleted item %s with %d transactions and %d expenses", oid, removed_tx, removed_exp
    )
    return {"success": True}


def inventory_overview(db: Database, low_stock_threshold: float) -> dict:
    items = list_items(db)
    by_category = {"potatoes": 0, "tomatoes": 0, "other": 0}
    for item in items:
        category = item.get("category") or "other"
        by_category[category] = by_category.get(category, 0) + 1
    low_stock = [i for i in items if (i.get("quantity") or 0) < low_stock_threshold]
    return {
        "total_items": len(items),
        "total_quantity": sum(i.get("quantity") or 0 for i in items),
        "total_value": sum((i.get("quantity") or 0) * (i.get("price") or 0) for i in items),
        "by_category": by_category,
        "low_stock_threshold": low_stock_threshold,
        "low_stock": low_stock,
    }


# Transactions
def list_transactions(
    db: Database,
    item_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    type: Optional[str] = None,
) -> List[dict]:
    query = {}
    if item_id:
        query["item_id"] = item_ref(item_id)
    dates = date_range_query(start_date, end_date)
    if dates:
        query["date"] = dates
    if type in ("purchase", "sale"):
        query["type"] = type
    docs = db["transactions"].find(query).sort("date", DESCENDING)
    return [to_str_id(t) for t in docs]


def record_transaction(db: Database, tx: TransactionSchema, clock: Clock = today_str) -> dict:
    data = tx.model_dump()
    oid = to_object_id(data["item_id"])
    data["item_id"] = str(oid)
    if not data.get("date"):
        data["date"] = clock()
    # Stored once; later price edits on the item do not touch it.
    data["total_amount"] = data["quantity"] * data["price"]

    item = db["items"].find_one({"_id": oid})
    if not item:
        raise NotFound()
    if data["type"] == "sale" and (item.get("quantity") or 0) < data["quantity"]:
        logger.warning(
            "Rejected sale of %s from item %s: only %s on hand",
            data["quantity"], oid, item.get("quantity"),
        )
        raise InsufficientStock()

    result = db["transactions"].insert_one(data)

    change = data["quantity"] if data["type"] == "purchase" else -data["quantity"]
    res = db["items"].update_one(
        {"_id": oid},
        {"$inc": {"quantity": change}, "$set": {"last_updated": data["date"]}},
    )
    if res.matched_count == 0:
        logger.warning("Item %s vanished before transaction %s was applied", oid, result.inserted_id)
    logger.info("Recorded %s of %s for item %s", data["type"], data["quantity"], oid)

    return to_str_id(db["transactions"].find_one({"_id": result.inserted_id}))


# Expenses
def list_expenses(
    db: Database,
    item_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[dict]:
    query = {}
    if item_id:
        query["item_id"] = item_ref(item_id)
    dates = date_range_query(start_date, end_date)
    if dates:
        query["date"] = dates
    docs = db["expenses"].find(query).sort("date", DESCENDING)
    return [to_str_id(e) for e in docs]


def record_expense(db: Database, expense: ExpenseSchema, clock: Clock = today_str) -> dict:
    data = expense.model_dump()
    data["item_id"] = str(to_object_id(data["item_id"]))
    if not data.get("date"):
        data["date"] = clock()
    result = db["expenses"].insert_one(data)
    return to_str_id(db["expenses"].find_one({"_id": result.inserted_id}))


# Suppliers and godowns
def list_suppliers(db: Database) -> List[dict]:
    return [to_str_id(s) for s in db["suppliers"].find({})]


def create_supplier(db: Database, supplier: SupplierSchema) -> dict:
    data = supplier.model_dump(exclude_none=True)
    result = db["suppliers"].insert_one(data)
    return to_str_id(db["suppliers"].find_one({"_id": result.inserted_id}))


def list_godowns(db: Database) -> List[dict]:
    return [to_str_id(g) for g in db["godowns"].find({})]


def create_godown(db: Database, godown: GodownSchema) -> dict:
    data = godown.model_dump(exclude_none=True)
    result = db["godowns"].insert_one(data)
    return to_str_id(db["godowns"].find_one({"_id": result.inserted_id}))
