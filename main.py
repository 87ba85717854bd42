from stockroom import data_handler, reports, settings
from stockroom.logger import setup_logger
from stockroom.storage import JsonFileStorage
from stockroom.store import InventoryStore

logger = setup_logger("stockroom")


def run_process():
    """Loads the saved inventory, logs today's alerts, writes the CSV reports and posts the digest."""
    logger.info("--- Starting Daily Stock Report Process ---")
    store = InventoryStore(JsonFileStorage(settings.DATA_DIR))

    # 1. Summary
    metrics = reports.key_metrics(store)
    logger.info(
        f"{metrics['totalItems']} items, {metrics['totalStock']} units on hand, "
        f"stock value {settings.CURRENCY} {metrics['totalValue']:.2f}"
    )

    # 2. Alerts
    low_stock = store.get_low_stock_alerts()
    logger.info(f"\n--- Low Stock ({len(low_stock)}) ---")
    for item in low_stock:
        logger.info(f"{item.name}: {item.current_stock} left (alert at {item.low_stock_alert})")

    expiry_alerts = store.get_expiry_alerts()
    logger.info(f"\n--- Expiring Soon ({len(expiry_alerts)}) ---")
    for alert in expiry_alerts:
        logger.info(f"[{alert.status.value.upper()}] {alert.item.name}: {alert.days_left} day(s) left")

    # 3. Save outputs and post to webhook
    data_handler.save_outputs(store)
    data_handler.post_to_webhook(store)

    logger.info("\n--- Process Finished Successfully ---")


if __name__ == "__main__":
    run_process()
