from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .utils import ensure_aware


class TransactionType(str, Enum):
    IN = "in"
    OUT = "out"


class AlertStatus(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    NORMAL = "normal"


class ItemDraft(BaseModel):
    """
    Everything needed to register a new consumable. The store fills in the
    identity (id, barcode) and the timestamps.

    Field aliases are the persisted/exported column names, so a record read
    back from storage or a CSV row validates without renaming.
    """

    name: str = Field(..., min_length=1)
    type: str
    department: str
    has_expiry: bool = Field(default=False, alias="hasExpiry")
    expiry_days: Optional[int] = Field(default=None, gt=0, alias="expiryDays")
    image: Optional[str] = None
    price_per_piece: float = Field(..., ge=0, alias="pricePerPiece")
    current_stock: int = Field(..., ge=0, alias="currentStock")
    low_stock_alert: int = Field(..., ge=0, alias="lowStockAlert")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _expiry_days_only_with_expiry(self):
        if self.has_expiry and self.expiry_days is None:
            raise ValueError("expiryDays is required when hasExpiry is true")
        if not self.has_expiry and self.expiry_days is not None:
            raise ValueError("expiryDays is only allowed when hasExpiry is true")
        return self


class InventoryItem(ItemDraft):
    """A registered consumable, as held by the store and persisted."""

    id: str
    barcode: str
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def _timezone_aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class TransactionDraft(BaseModel):
    item_id: str = Field(..., alias="itemId")
    type: TransactionType
    # Strict: "5", 5.0 and True are all rejected rather than coerced.
    quantity: int = Field(..., gt=0, strict=True)
    pic_name: Optional[str] = Field(default=None, alias="picName")
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _pic_required_for_stock_out(self):
        if self.type == TransactionType.OUT and not (self.pic_name or "").strip():
            raise ValueError("picName is required for stock out")
        if self.type == TransactionType.IN:
            self.pic_name = None
        return self


class StockTransaction(BaseModel):
    """An append-only record of one stock movement."""

    id: str
    item_id: str = Field(..., alias="itemId")
    type: TransactionType
    quantity: int = Field(..., gt=0)
    pic_name: Optional[str] = Field(default=None, alias="picName")
    date: datetime
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("date")
    @classmethod
    def _timezone_aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class ItemType(BaseModel):
    id: str
    name: str


class Department(BaseModel):
    id: str
    name: str


class ExpiryAlert(BaseModel):
    item: InventoryItem
    days_left: int = Field(..., alias="daysLeft")
    status: AlertStatus

    model_config = ConfigDict(populate_by_name=True)
