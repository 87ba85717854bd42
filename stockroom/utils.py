import math
import uuid
from datetime import datetime, timedelta, timezone


def now() -> datetime:
    """Current time as a timezone-aware UTC datetime. The store's default clock."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treats naive datetimes as UTC so stored and computed times always compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_id() -> str:
    return uuid.uuid4().hex


def generate_barcode() -> str:
    """
    Returns a 12-character upper-case hex code, short enough to print on a
    label and scan back. Callers still check it against existing barcodes.
    """
    return uuid.uuid4().hex[:12].upper()


def days_until(target: datetime, reference: datetime) -> int:
    """Whole days from reference to target, rounded up. Negative once target has passed."""
    return math.ceil((target - reference) / timedelta(days=1))


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")
