class InventoryError(Exception):
    """Base class for every error the inventory store raises."""


class InvalidInput(InventoryError):
    """A create or edit request is missing required fields or has malformed values."""


class ItemNotFound(InventoryError):
    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class InvalidQuantity(InventoryError):
    def __init__(self, quantity):
        self.quantity = quantity
        super().__init__(f"Quantity must be a positive whole number, got {quantity!r}")


class InsufficientStock(InventoryError):
    """Raised when a stock out asks for more than is on hand. Carries the available amount."""

    def __init__(self, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock: requested {requested}, only {available} available"
        )
