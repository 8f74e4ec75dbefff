"""Logging setup and structured logging for external capability calls."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure root logging for the application.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a rotating log file; console only when None
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        # Rotate after 10MB, keep 5 backups
        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)

    # Quiet third-party HTTP loggers
    for noisy in ("httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.info(f"Logging configured at {level} level")


class StructuredGatewayLogger:
    """Structured logger for embedding and generation calls."""

    def log_call(
        self,
        capability: str,
        model: str,
        outcome: str,
        latency_ms: float,
        input_chars: int,
        error_reason: str | None = None,
    ) -> None:
        """Log one external capability call with structured data."""
        log_data: dict[str, Any] = {
            "capability": capability,
            "model": model,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "input_chars": input_chars,
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Gateway call: {capability} ({model}) - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
