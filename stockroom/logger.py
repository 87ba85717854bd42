import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from . import settings


def setup_logger(
    name: str = "stockroom",
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Configures the "stockroom" logger for an entry point: terse console output plus a
    rotating file (logs/stockroom.log). Modules below it just call logging.getLogger(__name__)
    and inherit these handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Calling this twice (e.g. re-running main in one process) must not duplicate output
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    log_dir = Path(log_dir or settings.BASE_DIR / "logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_dir / f"{name}.log", maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"  # 5 MB
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)

    return logger
