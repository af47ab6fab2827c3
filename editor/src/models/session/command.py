"""Command results returned by every state-mutating session operation."""

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class CommandResult:
    """Outcome of one session command.

    affected lists the layer ids whose processed pixels are now stale.
    EditorSession.commit() dirties exactly those layers, so no other code
    path needs to touch a layer's dirty flag.
    """
    accepted: bool = True
    affected: List[str] = field(default_factory=list)
    reason: str = ''
    value: Any = None  # e.g. new layer id or effect instance id
    debounce_ms: Optional[int] = None  # Reprocess after quiescence instead of next frame

    def __bool__(self):
        return self.accepted

    @classmethod
    def rejected(cls, reason: str) -> 'CommandResult':
        return cls(accepted=False, reason=reason)
