from __future__ import annotations

import json
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _handler(path: Path, level: int) -> RotatingFileHandler:
    fh = RotatingFileHandler(path, maxBytes=2_000_000, backupCount=5, encoding="utf-8")
    fh.setFormatter(JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    fh.setLevel(level)
    return fh


AREA_LOGS = (
    ("shopkeeper.api", "api.log"),
    ("shopkeeper.sales", "sales.log"),
    ("shopkeeper.reports", "reports.log"),
    ("shopkeeper.auth", "auth.log"),
    ("shopkeeper.shop", "shop.log"),
    ("shopkeeper.storefront", "storefront.log"),
)


def _has_file_handler(logger: logging.Logger, path: Path) -> bool:
    target = os.path.abspath(path)
    return any(getattr(h, "baseFilename", None) == target for h in logger.handlers)


def setup_logging(logs_dir: Path, level: int = logging.INFO) -> None:
    logs_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        root.addHandler(_handler(logs_dir / "app.log", logging.INFO))
        root.addHandler(_handler(logs_dir / "errors.log", logging.ERROR))

    # Per-area files; records still propagate to app.log.
    for name, filename in AREA_LOGS:
        area = logging.getLogger(name)
        area.setLevel(level)
        if not _has_file_handler(area, logs_dir / filename):
            area.addHandler(_handler(logs_dir / filename, logging.INFO))
