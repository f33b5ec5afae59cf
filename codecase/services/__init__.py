from codecase.services.content_loader import ContentCatalog, load_catalog, load_catalog_from_dir
from codecase.services.hints import evaluate_conditions
from codecase.services.ledger import UnknownUnlockError, UnlockLedger
from codecase.services.scoring import compute_level, finalize_score
from codecase.services.validation import CaseValidator, validate

__all__ = [
    "CaseValidator",
    "ContentCatalog",
    "UnknownUnlockError",
    "UnlockLedger",
    "compute_level",
    "evaluate_conditions",
    "finalize_score",
    "load_catalog",
    "load_catalog_from_dir",
    "validate",
]
