import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from . import settings, utils
from .exceptions import (
    InsufficientStock,
    InvalidInput,
    InvalidQuantity,
    ItemNotFound,
)
from .schemas import (
    AlertStatus,
    Department,
    ExpiryAlert,
    InventoryItem,
    ItemDraft,
    ItemType,
    StockTransaction,
    TransactionDraft,
    TransactionType,
)

logger = logging.getLogger(__name__)

# Fields update_item never changes, whatever the caller passes.
IMMUTABLE_ITEM_FIELDS = {"id", "barcode", "created_at", "createdAt"}


def _validation_message(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'item'}: {err['msg']}"
        for err in error.errors()
    )


def expiry_status(days_left: int) -> AlertStatus:
    if days_left <= settings.CRITICAL_DAYS:
        return AlertStatus.CRITICAL
    if days_left <= settings.WARNING_DAYS:
        return AlertStatus.WARNING
    return AlertStatus.NORMAL


class InventoryStore:
    """
    Owns the four inventory collections and is the only thing that changes them.

    State is loaded from `storage` once, at construction. After every mutation
    the affected collections are written back in full. A failed write is logged
    and does not undo the in-memory change; memory is the source of truth for
    the rest of the run.

    `clock` returns the current time and exists so tests can pin it.
    """

    def __init__(self, storage, clock: Callable[[], datetime] = utils.now):
        self.storage = storage
        self.clock = clock

        self.items: list[InventoryItem] = self._load(settings.ITEMS_KEY, InventoryItem, [])
        self.transactions: list[StockTransaction] = self._load(
            settings.TRANSACTIONS_KEY, StockTransaction, []
        )
        self.item_types: list[ItemType] = self._load(
            settings.ITEM_TYPES_KEY, ItemType, settings.DEFAULT_ITEM_TYPES
        )
        self.departments: list[Department] = self._load(
            settings.DEPARTMENTS_KEY, Department, settings.DEFAULT_DEPARTMENTS
        )
        logger.debug(
            f"Loaded {len(self.items)} items, {len(self.transactions)} transactions, "
            f"{len(self.item_types)} types, {len(self.departments)} departments."
        )

    # --- Persistence ---

    def _load(self, key: str, model: type[BaseModel], default: list[dict]) -> list:
        records = self.storage.load(key)
        if records is None:
            records = default
        try:
            return [model.model_validate(record) for record in records]
        except ValidationError as e:
            logger.error(f"❌ Saved '{key}' does not match the schema.")
            logger.error(e)
            raise InvalidInput(f"Saved '{key}' is invalid: {_validation_message(e)}") from e

    def _persist(self, key: str, collection: list[BaseModel]):
        records = [record.model_dump(mode="json", by_alias=True) for record in collection]
        try:
            saved = self.storage.save(key, records)
        except Exception as e:
            logger.error(f"❌ Storage raised while saving '{key}'. Reason: {e}")
            saved = False
        if not saved:
            logger.error(f"❌ Could not persist '{key}'; keeping the in-memory change.")

    # --- Items ---

    def _new_barcode(self) -> str:
        taken = {item.barcode for item in self.items}
        barcode = utils.generate_barcode()
        while barcode in taken:
            barcode = utils.generate_barcode()
        return barcode

    def get_item(self, item_id: str) -> Optional[InventoryItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def add_item(self, draft: ItemDraft | Mapping[str, Any]) -> InventoryItem:
        """Registers a new item with a fresh id, barcode and timestamps, and returns it."""
        try:
            if not isinstance(draft, ItemDraft):
                draft = ItemDraft.model_validate(draft)
            timestamp = self.clock()
            item = InventoryItem(
                # An existing InventoryItem is a valid draft; copy only the draft fields.
                **draft.model_dump(include=set(ItemDraft.model_fields)),
                id=utils.generate_id(),
                barcode=self._new_barcode(),
                created_at=timestamp,
                updated_at=timestamp,
            )
        except ValidationError as e:
            raise InvalidInput(_validation_message(e)) from e

        self.items = [*self.items, item]
        self._persist(settings.ITEMS_KEY, self.items)
        logger.info(f"Added item '{item.name}' (barcode {item.barcode}).")
        return item

    def update_item(self, item_id: str, **changes) -> Optional[InventoryItem]:
        """
        Applies field edits to an item and bumps its updatedAt.

        Unknown ids are ignored (returns None). Changes may use either the
        Python field names or the camelCase aliases; id, barcode and createdAt
        are never touched. Turning hasExpiry off also clears expiryDays.
        """
        current = self.get_item(item_id)
        if current is None:
            logger.warning(f"⚠️ update_item: no item with id {item_id}, nothing changed.")
            return None

        ignored = IMMUTABLE_ITEM_FIELDS.intersection(changes)
        if ignored:
            logger.warning(f"⚠️ update_item: ignoring read-only fields {sorted(ignored)}.")
        changes = {k: v for k, v in changes.items() if k not in IMMUTABLE_ITEM_FIELDS}

        data = current.model_dump()
        by_alias = {
            info.alias: name for name, info in InventoryItem.model_fields.items() if info.alias
        }
        for key, value in changes.items():
            data[by_alias.get(key, key)] = value
        data["updated_at"] = self.clock()

        try:
            # Coerce hasExpiry first ("false", 0, ...) so the expiryDays clearing sees a real bool.
            data["has_expiry"] = TypeAdapter(bool).validate_python(data["has_expiry"])
            expiry_days_given = "expiry_days" in changes or "expiryDays" in changes
            if not data["has_expiry"] and not expiry_days_given:
                data["expiry_days"] = None
            updated = InventoryItem.model_validate(data)
        except ValidationError as e:
            raise InvalidInput(_validation_message(e)) from e

        self.items = [updated if item.id == item_id else item for item in self.items]
        self._persist(settings.ITEMS_KEY, self.items)
        return updated

    def delete_item(self, item_id: str):
        """Removes an item together with every transaction that references it."""
        if self.get_item(item_id) is None:
            raise ItemNotFound(item_id)

        remaining_items = [item for item in self.items if item.id != item_id]
        remaining_transactions = [t for t in self.transactions if t.item_id != item_id]
        removed = len(self.transactions) - len(remaining_transactions)

        # Swap both collections in together so no half-deleted state is visible.
        self.items, self.transactions = remaining_items, remaining_transactions
        self._persist(settings.ITEMS_KEY, self.items)
        self._persist(settings.TRANSACTIONS_KEY, self.transactions)
        logger.info(f"Deleted item {item_id} and {removed} related transaction(s).")

    def find_item_by_barcode(self, code: str) -> Optional[InventoryItem]:
        code = code.strip()
        return next((item for item in self.items if item.barcode == code), None)

    # --- Transactions ---

    def transactions_for(self, item_id: str) -> list[StockTransaction]:
        return [t for t in self.transactions if t.item_id == item_id]

    def add_transaction(self, draft: TransactionDraft | Mapping[str, Any]) -> StockTransaction:
        """
        Records a stock in/out and moves the item's stock by the same amount.

        Raises InvalidQuantity for a quantity that is not a positive int,
        InvalidInput for other malformed drafts (including a stock out without
        a PIC), ItemNotFound for an unknown item and InsufficientStock when a
        stock out exceeds what is on hand. Nothing changes when it raises.
        """
        if not isinstance(draft, TransactionDraft):
            try:
                draft = TransactionDraft.model_validate(draft)
            except ValidationError as e:
                quantity_errors = [
                    err
                    for err in e.errors()
                    if err["loc"][:1] == ("quantity",) and err["type"] != "missing"
                ]
                if quantity_errors:
                    raise InvalidQuantity(quantity_errors[0].get("input")) from e
                raise InvalidInput(_validation_message(e)) from e

        item = self.get_item(draft.item_id)
        if item is None:
            raise ItemNotFound(draft.item_id)

        if draft.type == TransactionType.OUT:
            if draft.quantity > item.current_stock:
                raise InsufficientStock(available=item.current_stock, requested=draft.quantity)
            new_stock = item.current_stock - draft.quantity
        else:
            new_stock = item.current_stock + draft.quantity

        timestamp = self.clock()
        transaction = StockTransaction(
            id=utils.generate_id(),
            item_id=draft.item_id,
            type=draft.type,
            quantity=draft.quantity,
            pic_name=draft.pic_name,
            date=timestamp,
            notes=draft.notes,
        )
        updated_item = item.model_copy(
            update={"current_stock": new_stock, "updated_at": timestamp}
        )

        self.transactions = [*self.transactions, transaction]
        self.items = [updated_item if i.id == item.id else i for i in self.items]
        self._persist(settings.TRANSACTIONS_KEY, self.transactions)
        self._persist(settings.ITEMS_KEY, self.items)
        logger.info(
            f"Stock {draft.type.value}: {draft.quantity} x '{item.name}' "
            f"({item.current_stock} -> {new_stock})."
        )
        return transaction

    # --- Alerts ---

    def get_expiry_alerts(self) -> list[ExpiryAlert]:
        """
        Items with an expiry that fall due within the expiry window, soonest first.
        Already-expired items are included with a negative daysLeft.
        """
        current_time = self.clock()
        alerts = []
        for item in self.items:
            if not item.has_expiry or not item.expiry_days:
                continue
            expiry_date = item.updated_at + timedelta(days=item.expiry_days)
            days_left = utils.days_until(expiry_date, current_time)
            if days_left <= settings.EXPIRY_WINDOW_DAYS:
                alerts.append(
                    ExpiryAlert(item=item, days_left=days_left, status=expiry_status(days_left))
                )
        # sorted() is stable, so ties keep item order.
        return sorted(alerts, key=lambda alert: alert.days_left)

    def get_low_stock_alerts(self) -> list[InventoryItem]:
        return [item for item in self.items if item.current_stock <= item.low_stock_alert]

    # --- Item types & departments ---

    @staticmethod
    def _clean_name(name: str, label: str) -> str:
        name = (name or "").strip()
        if not name:
            raise InvalidInput(f"{label} name is required")
        return name

    def add_type(self, name: str) -> ItemType:
        item_type = ItemType(id=utils.generate_id(), name=self._clean_name(name, "Type"))
        self.item_types = [*self.item_types, item_type]
        self._persist(settings.ITEM_TYPES_KEY, self.item_types)
        return item_type

    def edit_type(self, type_id: str, name: str) -> Optional[ItemType]:
        name = self._clean_name(name, "Type")
        match = next((t for t in self.item_types if t.id == type_id), None)
        if match is None:
            return None
        renamed = match.model_copy(update={"name": name})
        self.item_types = [renamed if t.id == type_id else t for t in self.item_types]
        self._persist(settings.ITEM_TYPES_KEY, self.item_types)
        return renamed

    def delete_type(self, type_id: str) -> bool:
        remaining = [t for t in self.item_types if t.id != type_id]
        if len(remaining) == len(self.item_types):
            return False
        self.item_types = remaining
        self._persist(settings.ITEM_TYPES_KEY, self.item_types)
        return True

    def add_department(self, name: str) -> Department:
        department = Department(id=utils.generate_id(), name=self._clean_name(name, "Department"))
        self.departments = [*self.departments, department]
        self._persist(settings.DEPARTMENTS_KEY, self.departments)
        return department

    def edit_department(self, department_id: str, name: str) -> Optional[Department]:
        name = self._clean_name(name, "Department")
        match = next((d for d in self.departments if d.id == department_id), None)
        if match is None:
            return None
        renamed = match.model_copy(update={"name": name})
        self.departments = [renamed if d.id == department_id else d for d in self.departments]
        self._persist(settings.DEPARTMENTS_KEY, self.departments)
        return renamed

    def delete_department(self, department_id: str) -> bool:
        remaining = [d for d in self.departments if d.id != department_id]
        if len(remaining) == len(self.departments):
            return False
        self.departments = remaining
        self._persist(settings.DEPARTMENTS_KEY, self.departments)
        return True
