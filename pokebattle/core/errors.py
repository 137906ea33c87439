"""
Error classes for clearer exception sources.
"""
from __future__ import annotations

class PokeBattleError(Exception):
    pass

class PreconditionError(PokeBattleError):
    """An engine call the presentation layer should have prevented."""
    def __init__(self, reason: str, detail: str = ""):
        super().__init__(f"{reason}: {detail}" if detail else reason)
        self.reason = reason
        self.detail = detail

class DistributionError(PokeBattleError):
    def __init__(self, total: float, detail: str = "weights do not add up to one"):
        super().__init__(f"{detail} (total={total:.6f})")
        self.total = total

class DataLoadError(PokeBattleError):
    def __init__(self, path: str, detail: str):
        super().__init__(f"Failed to load {path}: {detail}")
        self.path = path
        self.detail = detail

class ValidationError(PokeBattleError):
    pass
