import logging
from pathlib import Path
from typing import Optional

import pandas as pd
import requests

from . import reports, settings, utils

logger = logging.getLogger(__name__)

REPORT_BUILDERS = {
    "low-stock-report": reports.low_stock_report,
    "expiry-report": reports.expiry_report,
    "stock-in-report": reports.stock_in_report,
    "stock-out-report": reports.stock_out_report,
}


def save_report(df: pd.DataFrame, report_name: str, output_dir: Optional[Path] = None) -> Path:
    """Saves one report DataFrame to a dated CSV file and returns its path."""
    output_dir = Path(output_dir or settings.OUTPUT_DIR)
    output_dir.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = output_dir / f"{report_name}_{date_suffix}.csv"
    df.to_csv(csv_path, index=False)
    logger.info(f"✅ {report_name} saved to: {csv_path} ({len(df)} rows)")
    return csv_path


def save_outputs(store, output_dir: Optional[Path] = None) -> dict[str, Path]:
    """Builds every CSV report from the store's current state and writes them to disk."""
    return {
        name: save_report(builder(store), name, output_dir)
        for name, builder in REPORT_BUILDERS.items()
    }


def build_alert_payload(store) -> dict:
    return {
        "metrics": reports.key_metrics(store),
        "lowStock": reports.low_stock_report(store).to_dict("records"),
        "expiry": reports.expiry_report(store).to_dict("records"),
        "generatedAt": store.clock().isoformat(),
    }


def post_to_webhook(store, webhook_url: Optional[str] = None) -> bool:
    """
    Posts the current low-stock and expiry alerts to the webhook.
    Returns True on success; failures are logged, never raised.
    """
    webhook_url = webhook_url or settings.WEBHOOK_URL
    if not webhook_url:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting alert digest to webhook: {webhook_url}")
    payload = build_alert_payload(store)

    try:
        response = requests.post(webhook_url, json=payload, timeout=15)
        response.raise_for_status()
        logger.info("✅ Alert digest successfully posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False
