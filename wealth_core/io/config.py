from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from wealth_core.domain.models import AppConfig

DATA_PATH_ENV = "WEALTH_DATA_PATH"
LOG_LEVEL_ENV = "WEALTH_LOG_LEVEL"


def default_data_path() -> Path:
    return Path.home() / ".wealth_ledger.json"


def load_app_config(path: Optional[str | Path] = None) -> AppConfig:
    """
    Read optional JSON settings, then apply environment overrides.
    Every key may be omitted.
    """
    data: Dict[str, Any] = _read_json(path) if path else {}

    data_path = os.environ.get(DATA_PATH_ENV) or data.get("data_path") or default_data_path()
    window = data.get("evolution_window")
    log_level = os.environ.get(LOG_LEVEL_ENV) or data.get("log_level", "WARNING")
    return AppConfig(
        data_path=Path(data_path).expanduser(),
        evolution_window=int(window) if window is not None else None,
        log_level=str(log_level).upper(),
    )


def _read_json(path: str | Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
