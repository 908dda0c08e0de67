"""Session configuration for :class:`polling.receiver.BlockingUpdateReceiver`."""

from __future__ import annotations

import dataclasses
from typing import Iterable, Optional

from sdk.models import UpdateType

# Bounds the Bot API accepts for ``getUpdates.limit``.
MIN_LIMIT = 1
MAX_LIMIT = 100


@dataclasses.dataclass(frozen=True, slots=True)
class ReceiverOptions:
    """Immutable polling options, read once when an iteration starts.

    Attributes:
        offset: Identifier of the first update to be returned.
        limit: Maximum batch size (1-100); ``None`` lets the server decide.
        allowed_updates: Update types to receive; ``None`` means all types.
        drop_pending_updates: Skip updates queued before the session starts.
    """

    offset: int = 0
    limit: Optional[int] = None
    allowed_updates: Optional[tuple[UpdateType, ...]] = None
    drop_pending_updates: bool = False

    def __post_init__(self) -> None:
        if self.limit is not None and not MIN_LIMIT <= self.limit <= MAX_LIMIT:
            raise ValueError(f"limit must be between {MIN_LIMIT} and {MAX_LIMIT}, got {self.limit}")
        if self.allowed_updates is not None:
            object.__setattr__(self, "allowed_updates", tuple(UpdateType(u) for u in self.allowed_updates))

    @classmethod
    def from_env(cls) -> "ReceiverOptions":
        """Build options from the values resolved in :mod:`config`."""
        import config

        allowed: Optional[Iterable[UpdateType]] = config.ALLOWED_UPDATES
        return cls(
            allowed_updates=tuple(allowed) if allowed is not None else None,
            drop_pending_updates=config.DROP_PENDING_UPDATES,
        )
