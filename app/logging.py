# app/logging.py
import logging
import os
from typing import Any, Optional


def configure_logging(level: Optional[str] = None):
    logging.basicConfig(
        level=level or os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _fmt_fields(fields: dict) -> str:
    return " ".join(f"{k}={v}" for k, v in fields.items() if v is not None)


def log_operation(logger: logging.Logger, op: str, path: str, **fields: Any):
    logger.info("volume_op %s %s %s", op, path, _fmt_fields(fields))


def log_failure(logger: logging.Logger, method: str, path: str, status: int, message: str):
    # Client errors are routine; only server-side failures are errors
    log = logger.error if status >= 500 else logger.warning
    log("request_error method=%s path=%s status=%d error=%s", method, path, status, message)
