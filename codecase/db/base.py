"""SQLAlchemy declarative base and model imports for Alembic."""
from codecase.db.session import Base

# Import all models so Alembic and create_all can see them
from codecase.models.completion import CaseCompletion  # noqa: F401
from codecase.models.hint_unlock import HintUnlock  # noqa: F401
from codecase.models.player import Player  # noqa: F401

__all__ = ["Base", "Player", "HintUnlock", "CaseCompletion"]
