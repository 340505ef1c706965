from wealth_core.io.ledger import load_ledger, load_store, save_ledger  # noqa: F401
from wealth_core.io.config import load_app_config  # noqa: F401
from wealth_core.io.document import (  # noqa: F401
    MalformedDocumentError,
    parse_document,
    snapshot_to_document,
)
from wealth_core.io.export import export_csv, export_table  # noqa: F401

__all__ = [
    "load_ledger",
    "load_store",
    "save_ledger",
    "load_app_config",
    "MalformedDocumentError",
    "parse_document",
    "snapshot_to_document",
    "export_csv",
    "export_table",
]
