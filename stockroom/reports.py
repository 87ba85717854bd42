from datetime import date
from typing import Optional

import pandas as pd

from . import settings
from .schemas import AlertStatus, InventoryItem, TransactionType

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

UNKNOWN = "Unknown"


def low_stock_report(store) -> pd.DataFrame:
    """Items at or below their low-stock threshold, in master-list order."""
    rows = [item.model_dump(by_alias=True) for item in store.get_low_stock_alerts()]
    return pd.DataFrame(rows, columns=settings.LOW_STOCK_COLUMNS)


def expiry_report(store) -> pd.DataFrame:
    """Items expiring within the alert window, soonest first."""
    rows = [
        {
            "name": alert.item.name,
            "type": alert.item.type,
            "department": alert.item.department,
            "daysLeft": alert.days_left,
            "status": alert.status.value,
            "expiryDays": alert.item.expiry_days,
            "currentStock": alert.item.current_stock,
        }
        for alert in store.get_expiry_alerts()
    ]
    return pd.DataFrame(rows, columns=settings.EXPIRY_COLUMNS)


def _transaction_report(
    store,
    transaction_type: TransactionType,
    columns: list[str],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> pd.DataFrame:
    items_by_id = {item.id: item for item in store.items}
    rows = []
    for trans in store.transactions:
        if trans.type != transaction_type:
            continue
        trans_date = trans.date.date()
        if date_from and trans_date < date_from:
            continue
        if date_to and trans_date > date_to:
            continue

        # Missing item: render as Unknown rather than dropping the movement.
        item = items_by_id.get(trans.item_id)
        rows.append(
            {
                "itemName": item.name if item else UNKNOWN,
                "itemType": item.type if item else UNKNOWN,
                "department": item.department if item else UNKNOWN,
                "quantity": trans.quantity,
                "picName": trans.pic_name or "",
                "date": trans_date.isoformat(),
                "notes": trans.notes or "",
            }
        )
    return pd.DataFrame(rows, columns=columns)


def stock_in_report(store, date_from: Optional[date] = None, date_to: Optional[date] = None) -> pd.DataFrame:
    return _transaction_report(
        store, TransactionType.IN, settings.STOCK_IN_COLUMNS, date_from, date_to
    )


def stock_out_report(store, date_from: Optional[date] = None, date_to: Optional[date] = None) -> pd.DataFrame:
    return _transaction_report(
        store, TransactionType.OUT, settings.STOCK_OUT_COLUMNS, date_from, date_to
    )


def item_label(item: InventoryItem) -> str:
    """Plain-text shelf label: name, type, department, unit price and barcode."""
    return "\n".join(
        [
            item.name,
            f"Type: {item.type}",
            f"Dept: {item.department}",
            f"Price: {settings.CURRENCY} {item.price_per_piece:.2f}",
            f"||||| {item.barcode} |||||",
        ]
    )


# --- Dashboard Summaries ---


def key_metrics(store) -> dict:
    expiry_alerts = store.get_expiry_alerts()
    return {
        "totalItems": len(store.items),
        "totalStock": sum(item.current_stock for item in store.items),
        "totalValue": round(
            sum(item.current_stock * item.price_per_piece for item in store.items), 2
        ),
        "criticalAlerts": sum(1 for a in expiry_alerts if a.status == AlertStatus.CRITICAL),
        "expiringItems": len(expiry_alerts),
        "lowStockItems": len(store.get_low_stock_alerts()),
    }


def monthly_movements(store, year: int) -> pd.DataFrame:
    """Units moved in and out per calendar month of `year`. Always 12 rows, Jan..Dec."""
    df = pd.DataFrame(
        [
            {"month": t.date.month, "type": t.type.value, "quantity": t.quantity}
            for t in store.transactions
            if t.date.year == year
        ],
        columns=["month", "type", "quantity"],
    )

    totals = (
        df.groupby(["month", "type"])["quantity"].sum().unstack(fill_value=0)
        if not df.empty
        else pd.DataFrame()
    )
    totals = totals.reindex(
        index=range(1, 13), columns=[TransactionType.IN.value, TransactionType.OUT.value], fill_value=0
    )

    return pd.DataFrame(
        {
            "month": MONTH_NAMES,
            "stockIn": totals[TransactionType.IN.value].astype(int).tolist(),
            "stockOut": totals[TransactionType.OUT.value].astype(int).tolist(),
        }
    )


def spending_by_department(store) -> pd.DataFrame:
    """
    Value of stock taken out per department (quantity x current unit price).
    Departments are matched to items by name; those with nothing spent are left out.
    """
    outs = pd.DataFrame(
        [
            {"itemId": t.item_id, "quantity": t.quantity}
            for t in store.transactions
            if t.type == TransactionType.OUT
        ],
        columns=["itemId", "quantity"],
    )
    items = pd.DataFrame(
        [
            {"itemId": i.id, "department": i.department, "pricePerPiece": i.price_per_piece}
            for i in store.items
        ],
        columns=["itemId", "department", "pricePerPiece"],
    )

    merged = pd.merge(outs, items, on="itemId", how="inner")
    merged["value"] = merged["quantity"] * merged["pricePerPiece"]
    spend = merged.groupby("department")["value"].sum().to_dict()

    rows = [
        {"name": dept.name, "value": round(float(spend.get(dept.name, 0)), 2)}
        for dept in store.departments
    ]
    rows = [row for row in rows if row["value"] > 0]
    return pd.DataFrame(rows, columns=["name", "value"])
