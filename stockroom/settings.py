import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
# Use Path objects for robust, OS-agnostic path handling.
DATA_DIR = BASE_DIR / os.getenv("DATA_DIR", "data")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")

# --- Storage Keys ---
# One persisted collection per key; each is overwritten in full on change.
ITEMS_KEY = "items"
TRANSACTIONS_KEY = "transactions"
ITEM_TYPES_KEY = "item-types"
DEPARTMENTS_KEY = "departments"

# --- Alert Thresholds ---
EXPIRY_WINDOW_DAYS = int(os.getenv("EXPIRY_WINDOW_DAYS", "60"))
CRITICAL_DAYS = int(os.getenv("CRITICAL_DAYS", "10"))
WARNING_DAYS = int(os.getenv("WARNING_DAYS", "30"))

# --- Labels ---
CURRENCY = os.getenv("CURRENCY", "RM")

# --- Seed Data ---
# Used only when nothing has been persisted yet for these collections.
DEFAULT_ITEM_TYPES = [
    {"id": "1", "name": "Stationery"},
    {"id": "2", "name": "Cleaning Supplies"},
    {"id": "3", "name": "Food & Beverages"},
]

DEFAULT_DEPARTMENTS = [
    {"id": "1", "name": "Admin"},
    {"id": "2", "name": "IT"},
    {"id": "3", "name": "HR"},
]

# Column order for the CSV reports, kept in one place so every export agrees.
LOW_STOCK_COLUMNS = [
    "name",
    "type",
    "department",
    "currentStock",
    "lowStockAlert",
    "pricePerPiece",
]
EXPIRY_COLUMNS = [
    "name",
    "type",
    "department",
    "daysLeft",
    "status",
    "expiryDays",
    "currentStock",
]
STOCK_IN_COLUMNS = ["itemName", "itemType", "department", "quantity", "date", "notes"]
STOCK_OUT_COLUMNS = [
    "itemName",
    "itemType",
    "department",
    "quantity",
    "picName",
    "date",
    "notes",
]
