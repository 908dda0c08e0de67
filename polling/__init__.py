"""Long-polling update receiving — the receiver, its options and cancellation.

This package may import from ``sdk/`` and ``core/`` only.
"""

from polling.cancellation import CancellationSignal
from polling.options import ReceiverOptions
from polling.receiver import BlockingUpdateReceiver, PollingErrorHandler, UpdateEnumerator

__all__ = [
    "BlockingUpdateReceiver",
    "UpdateEnumerator",
    "ReceiverOptions",
    "CancellationSignal",
    "PollingErrorHandler",
]
