"""
Address allocation: session prefixes and monotonic PID sequences.

The prefix separates independent runs of the same application (hot reload,
replayed sessions); it is not a secret. Sequence numbers start above the
configured offset and are never handed out twice, even after a kill.
"""
from __future__ import annotations

import random
import string
from typing import Optional

from .schema import PID, KernelState

PREFIX_ALPHABET = string.ascii_letters + string.digits

# Sequence 0 is never allocated; spawned_by=0 means "spawned by the host".
NULL_SEQUENCE = 0


def generate_session_prefix(
    length: int = 16,
    alphabet: str = PREFIX_ALPHABET,
    rng: Optional[random.Random] = None,
) -> str:
    rng = rng or random.Random()
    return "".join(rng.choice(alphabet) for _ in range(length))


def new_pid(
    state: KernelState,
    spawned_by: int = NULL_SEQUENCE,
    is_singleton: bool = False,
) -> PID:
    """Advance the counter on ``state`` and return the fresh address."""
    state.last_sequence += 1
    return PID(
        session_prefix=state.session_prefix,
        sequence=state.last_sequence,
        spawned_by=spawned_by,
        is_singleton=is_singleton,
    )
