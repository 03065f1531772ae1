"""Domain layer for statementflow application."""

import importlib

# Services import the database layer, which imports domain.entities; resolve
# them lazily so importing either package first works.
_EXPORTS = {
    "AccountService": "statementflow.domain.account",
    "CategorizationEngine": "statementflow.domain.categorization",
    "CategorizationResult": "statementflow.domain.categorization",
    "CategoryService": "statementflow.domain.category",
    "IngestionService": "statementflow.domain.ingestion",
    "TransactionService": "statementflow.domain.transaction",
    "TransferDetector": "statementflow.domain.transfers",
    "find_transfer_pairs": "statementflow.domain.transfers",
    "normalize_for_import": "statementflow.domain.ingestion",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name):
    if name in _EXPORTS:
        return getattr(importlib.import_module(_EXPORTS[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
