# backend/report_pdf.py

from __future__ import annotations

import io
from datetime import date, datetime
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

UNKNOWN_ITEM = "Unknown Item"
DEFAULT_COMPANY = "Vegetable Inventory Management"

# --- Brand colors ---
GREEN = colors.HexColor("#4caf50")
DARK = colors.HexColor("#111827")
GRAY = colors.HexColor("#6b7280")
LOSS = colors.HexColor("#dc2626")


def _fmt_date(d):
    if not d:
        return "-"
    if isinstance(d, (datetime, date)):
        return d.strftime("%d/%m/%Y")
    return str(d)


def _money(v, currency="INR"):
    try:
        if v is None:
            return "-"
        return f"{currency} {float(v):,.2f}"
    except (TypeError, ValueError):
        return f"{currency} {v}"


def _qty(v, unit=""):
    v = v or 0
    text = f"{v:g}" if isinstance(v, (int, float)) else str(v)
    return f"{text} {unit}".strip()


def _title(s):
    return str(s or "-").capitalize()


def _items_by_id(items):
    return {str(i.get("_id")): i for i in items or []}


def _names_by_id(entries):
    return {str(e.get("_id")): e.get("name") for e in entries or [] if e.get("name")}


def _resolve(ref, names, fallback):
    if not ref:
        return fallback
    return names.get(str(ref)) or str(ref)


def inventory_rows(items, currency="INR", suppliers=None, godowns=None):
    supplier_names = _names_by_id(suppliers)
    godown_names = _names_by_id(godowns)
    rows = [["Name", "Category", "Supplier", "Location", "Quantity", f"Price ({currency})", f"Value ({currency})"]]
    for item in items:
        unit = item.get("unit") or ""
        quantity = item.get("quantity") or 0
        price = item.get("price") or 0
        rows.append([
            item.get("name") or "-",
            _title(item.get("category")),
            _resolve(item.get("supplier"), supplier_names, "N/A"),
            _resolve(item.get("godown"), godown_names, "N/A"),
            _qty(quantity, unit),
            f"{price:,.2f}/{unit}" if unit else f"{price:,.2f}",
            f"{quantity * price:,.2f}",
        ])
    return rows


def transaction_rows(transactions, items, currency="INR"):
    """Transaction table rows with item references resolved to names."""
    lookup = _items_by_id(items)
    rows = [["Date", "Item", "Type", "Quantity", f"Price ({currency})", f"Total ({currency})"]]
    for t in transactions:
        item = lookup.get(str(t.get("item_id")))
        unit = item.get("unit", "") if item else ""
        rows.append([
            t.get("date") or "-",
            (item.get("name") if item else None) or UNKNOWN_ITEM,
            _title(t.get("type")),
            _qty(t.get("quantity"), unit),
            f"{t.get('price') or 0:,.2f}",
            f"{t.get('total_amount') or 0:,.2f}",
        ])
    return rows


def expense_rows(expenses, items, currency="INR"):
    lookup = _items_by_id(items)
    rows = [["Date", "Item", "Description", f"Amount ({currency})"]]
    for e in expenses:
        item = lookup.get(str(e.get("item_id")))
        rows.append([
            e.get("date") or "-",
            (item.get("name") if item else None) or UNKNOWN_ITEM,
            e.get("description") or "-",
            f"{e.get('amount') or 0:,.2f}",
        ])
    return rows


def _table(rows):
    table = Table(rows, repeatRows=1, hAlign="LEFT")
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), GREEN),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#e5e7eb")),
        ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("PADDING", (0, 0), (-1, -1), 5),
    ]))
    return table


def _section(story, styles, heading, rows, empty_text):
    story.append(Paragraph(heading, styles["Heading2"]))
    if len(rows) == 1:
        story.append(Paragraph(empty_text, styles["Normal"]))
    else:
        story.append(_table(rows))
    story.append(Spacer(1, 6 * mm))


def _summary_block(summary, currency):
    profit = summary.get("profit") or 0
    cells = []
    if "total_items" in summary:
        cells.append(("Total Items", f"{summary.get('total_items') or 0}"))
    else:
        cells.append(("Total Quantity", _qty(summary.get("total_quantity"))))
    cells += [
        ("Total Value", _money(summary.get("total_value") or 0, currency)),
        ("Total Purchases", _money(summary.get("total_purchases") or 0, currency)),
        ("Total Sales", _money(summary.get("total_sales") or 0, currency)),
        ("Total Expenses", _money(summary.get("total_expenses") or 0, currency)),
        ("Profit/Loss", _money(profit, currency)),
    ]
    # 2 x 3 grid of label/value pairs
    rows = [
        [cells[i][0], cells[i][1], cells[i + 1][0], cells[i + 1][1]]
        for i in range(0, len(cells), 2)
    ]
    table = Table(rows, hAlign="LEFT", colWidths=[32 * mm, 50 * mm, 32 * mm, 50 * mm])
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTNAME", (2, 0), (2, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("TEXTCOLOR", (0, 0), (-1, -1), DARK),
        ("TEXTCOLOR", (3, -1), (3, -1), GREEN if profit >= 0 else LOSS),
    ]))
    return table


def _item_details(item, currency, styles, suppliers=None, godowns=None):
    unit = item.get("unit") or ""
    price = item.get("price") or 0
    lines = [
        ("Name", item.get("name") or "-"),
        ("Category", _title(item.get("category"))),
        ("Current Quantity", _qty(item.get("quantity"), unit)),
        ("Price", f"{_money(price, currency)}/{unit}" if unit else _money(price, currency)),
        ("Supplier", _resolve(item.get("supplier"), _names_by_id(suppliers), "Not specified")),
        ("Storage Location", _resolve(item.get("godown"), _names_by_id(godowns), "Not specified")),
        ("Bag Count", str(item.get("bag_count") or "Not specified")),
        ("Last Updated", item.get("last_updated") or "-"),
    ]
    return [Paragraph(f"<b>{label}:</b> {escape(str(value))}", styles["Normal"]) for label, value in lines]


def render_report_pdf(report, branding=None, currency="INR", generated_on=None, period=None,
                      suppliers=None, godowns=None) -> bytes:
    """
    Render a report (as returned by build_report) into PDF bytes.
    No DB access: item names come from the report itself, supplier and
    godown names from the lists passed in (unknown ids are printed as is).
    """
    branding = branding or {}
    company = branding.get("company_name") or DEFAULT_COMPANY
    address = branding.get("address") or ""
    contact = branding.get("contact") or ""
    gstin = branding.get("gstin") or ""
    generated_on = generated_on or date.today()

    buf = io.BytesIO()
    width, height = A4
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=14 * mm,
        rightMargin=14 * mm,
        topMargin=38 * mm,
        bottomMargin=16 * mm,
        title=f"{company} Report",
    )

    def draw_header(c, d):
        c.saveState()
        c.setFillColor(DARK)
        c.setFont("Helvetica-Bold", 16)
        c.drawCentredString(width / 2, height - 15 * mm, company)
        c.setFont("Helvetica", 9)
        c.setFillColor(GRAY)
        line_y = height - 21 * mm
        for text in (address, contact, f"GSTIN: {gstin}" if gstin else ""):
            if text:
                c.drawCentredString(width / 2, line_y, text[:110])
                line_y -= 5 * mm
        c.setStrokeColor(DARK)
        c.setLineWidth(0.5)
        c.line(14 * mm, height - 34 * mm, width - 14 * mm, height - 34 * mm)

        # --- Footer ---
        c.setFont("Helvetica", 8)
        c.drawString(14 * mm, 8 * mm, f"Generated: {_fmt_date(generated_on)}")
        c.drawRightString(width - 14 * mm, 8 * mm, f"Page {d.page}")
        c.restoreState()

    styles = getSampleStyleSheet()
    story = [Paragraph(f"Date: {_fmt_date(generated_on)}", styles["Normal"])]

    item = report.get("item")
    if item:
        items = [item]
        story.append(Paragraph(f"Vegetable Report: {escape(item.get('name') or '-')}", styles["Title"]))
    else:
        items = report.get("items") or []
        story.append(Paragraph("Inventory Report", styles["Title"]))
    if period:
        story.append(Paragraph(f"Period: {escape(period[0])} to {escape(period[1])}", styles["Normal"]))

    story.append(Paragraph("Summary", styles["Heading2"]))
    story.append(_summary_block(report.get("summary") or {}, currency))
    story.append(Spacer(1, 6 * mm))

    transactions = report.get("transactions") or []
    expenses = report.get("expenses") or []
    if item:
        story.append(Paragraph("Item Details", styles["Heading2"]))
        story.extend(_item_details(item, currency, styles, suppliers, godowns))
        story.append(Spacer(1, 6 * mm))
        _section(story, styles, "Transaction History", transaction_rows(transactions, items, currency),
                 "No transactions found for this item.")
        _section(story, styles, "Expense History", expense_rows(expenses, items, currency),
                 "No expenses found for this item.")
    else:
        _section(story, styles, "Inventory Items", inventory_rows(items, currency, suppliers, godowns),
                 "No inventory items found.")
        _section(story, styles, "Transactions", transaction_rows(transactions, items, currency),
                 "No transactions found in this period.")
        _section(story, styles, "Expenses", expense_rows(expenses, items, currency),
                 "No expenses found in this period.")

    doc.build(story, onFirstPage=draw_header, onLaterPages=draw_header)

    pdf = buf.getvalue()
    buf.close()
    return pdf
