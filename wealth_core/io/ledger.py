from __future__ import annotations

import json
import logging
from pathlib import Path

from wealth_core.domain.models import LedgerSnapshot
from wealth_core.io.document import parse_document, snapshot_to_document
from wealth_core.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


def load_ledger(json_path: str | Path) -> LedgerSnapshot:
    path = Path(json_path)
    if not path.exists():
        raise FileNotFoundError(path)

    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    snapshot = parse_document(data)
    logger.info("loaded %d months from %s", len(snapshot.records), path)
    return snapshot


def load_store(json_path: str | Path, missing_ok: bool = True) -> LedgerStore:
    """Hydrate a store from disk; an absent file gives an empty store when ``missing_ok``."""
    path = Path(json_path)
    if not path.exists() and missing_ok:
        logger.info("no ledger at %s, starting empty", path)
        return LedgerStore()
    return LedgerStore.from_snapshot(load_ledger(path))


def save_ledger(json_path: str | Path, snapshot: LedgerSnapshot) -> Path:
    path = Path(json_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(snapshot_to_document(snapshot), f, indent=2)
    logger.info("saved %d months to %s", len(snapshot.records), path)
    return path
