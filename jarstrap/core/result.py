"""
Stage results.

Every pipeline stage reports back with a StageResult instead of raising:
either success (no payload) or failure with a human-readable message.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class StageResult:
    """Outcome of a single stage."""
    ok: bool
    message: Optional[str] = None

    @classmethod
    def success(cls) -> "StageResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, message: str) -> "StageResult":
        return cls(ok=False, message=message)

    def then(self, action: Callable[[], "StageResult"]) -> "StageResult":
        """Run the next action only if this result is a success."""
        if not self.ok:
            return self
        return action()

    def __bool__(self) -> bool:
        return self.ok
