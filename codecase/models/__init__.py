from codecase.models.player import Player
from codecase.models.hint_unlock import HintUnlock
from codecase.models.completion import CaseCompletion

__all__ = ["Player", "HintUnlock", "CaseCompletion"]
