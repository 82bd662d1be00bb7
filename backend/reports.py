"""
Report building: joins items, transactions and expenses and computes totals.

Summaries treat missing or null numbers as 0 so a partially filled document
never breaks a report.
"""
from typing import Iterable, List, Optional

from pymongo import DESCENDING
from pymongo.database import Database

from backend.errors import NotFound
from backend.inventory import to_object_id, to_str_id, list_items


def _num(value) -> float:
    return value or 0


def sum_transactions(transactions: Iterable[dict], tx_type: str) -> float:
    return sum(_num(t.get("total_amount")) for t in transactions if t.get("type") == tx_type)


def sum_expenses(expenses: Iterable[dict]) -> float:
    return sum(_num(e.get("amount")) for e in expenses)


def ledger_totals(transactions: List[dict], expenses: List[dict]) -> dict:
    total_purchases = sum_transactions(transactions, "purchase")
    total_sales = sum_transactions(transactions, "sale")
    total_expenses = sum_expenses(expenses)
    return {
        "total_purchases": total_purchases,
        "total_sales": total_sales,
        "total_expenses": total_expenses,
        "profit": total_sales - total_purchases - total_expenses,
    }


def summarize_item(item: dict, transactions: List[dict], expenses: List[dict]) -> dict:
    quantity = _num(item.get("quantity"))
    summary = {
        "total_quantity": quantity,
        "total_value": quantity * _num(item.get("price")),
    }
    summary.update(ledger_totals(transactions, expenses))
    return summary


def summarize_inventory(items: List[dict], transactions: List[dict], expenses: List[dict]) -> dict:
    summary = {
        "total_items": len(items),
        "total_quantity": sum(_num(i.get("quantity")) for i in items),
        "total_value": sum(_num(i.get("quantity")) * _num(i.get("price")) for i in items),
    }
    summary.update(ledger_totals(transactions, expenses))
    return summary


def _report_query(start_date: Optional[str], end_date: Optional[str], item_id: Optional[str] = None) -> dict:
    query = {}
    if item_id:
        query["item_id"] = item_id
    # Reports only narrow by date when a full range is given.
    if start_date and end_date:
        query["date"] = {"$gte": start_date, "$lte": end_date}
    return query


def build_item_report(db: Database, item_id: str, start_date: Optional[str] = None, end_date: Optional[str] = None) -> dict:
    oid = to_object_id(item_id, NotFound())
    item = db["items"].find_one({"_id": oid})
    if not item:
        raise NotFound()
    query = _report_query(start_date, end_date, str(oid))
    transactions = [to_str_id(t) for t in db["transactions"].find(query).sort("date", DESCENDING)]
    expenses = [to_str_id(e) for e in db["expenses"].find(query).sort("date", DESCENDING)]
    item = to_str_id(item)
    return {
        "item": item,
        "transactions": transactions,
        "expenses": expenses,
        "summary": summarize_item(item, transactions, expenses),
    }


def build_report(
    db: Database,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    category: Optional[str] = None,
    item_id: Optional[str] = None,
) -> dict:
    if item_id:
        return build_item_report(db, item_id, start_date, end_date)

    items = list_items(db, category=category)
    # Category narrows the item list only; the ledgers are filtered by date alone.
    query = _report_query(start_date, end_date)
    transactions = [to_str_id(t) for t in db["transactions"].find(query)]
    expenses = [to_str_id(e) for e in db["expenses"].find(query)]
    return {
        "items": items,
        "transactions": transactions,
        "expenses": expenses,
        "summary": summarize_inventory(items, transactions, expenses),
    }
