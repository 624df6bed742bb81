"""
Host Runtime: a minimal synchronous driver for a Kernel.

Real hosts (a UI event loop, an asyncio service) own effects and
subscriptions themselves. This one runs effects through a plain callable and
queues their completions, which is enough for scripts, demos and tests, and
makes the cross-dispatch boundary explicit: every completion is its own
top-level dispatch call, taken from a FIFO queue.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Callable, Deque, List, Optional

import structlog

from .engine import Kernel
from .schema import AddressedEffect, AddressedSubscription, KernelState, SystemMessage

logger = structlog.get_logger()

# Receives effect.request for addressed effects, the raw descriptor otherwise.
# Returning None means "no completion".
EffectHandler = Callable[[Any], Optional[Any]]


class HostRuntime:
    def __init__(self, kernel: Kernel, effect_handler: Optional[EffectHandler] = None) -> None:
        self.kernel = kernel
        self._effect_handler = effect_handler
        self._queue: Deque[SystemMessage] = deque()
        self.state: Optional[KernelState] = None
        self.dispatch_count = 0

    def start(self) -> KernelState:
        self.state, first_message = self.kernel.initialize()
        self.post(first_message)
        self.run_until_idle()
        return self.state

    def post(self, message: SystemMessage) -> None:
        """Queue a top-level message for a later dispatch call."""
        self._queue.append(message)

    def deliver(self, subscription: AddressedSubscription, event: Any) -> None:
        self.post(subscription.notify(event))

    def pending(self) -> int:
        return len(self._queue)

    def step(self) -> bool:
        """Dispatch one queued message. Returns False if the queue was empty."""
        if not self._queue:
            return False
        if self.state is None:
            raise RuntimeError("HostRuntime.start() must be called first")

        message = self._queue.popleft()
        self.state, effects = self.kernel.dispatch(message, self.state)
        self.dispatch_count += 1
        for descriptor in effects:
            self._run_effect(descriptor)
        return True

    def run_until_idle(self, max_steps: int = 10_000) -> int:
        """Drain the queue; returns the number of dispatch calls made."""
        steps = 0
        while steps < max_steps and self.step():
            steps += 1
        if self._queue:
            logger.warning("host queue not drained", pending=len(self._queue), max_steps=max_steps)
        return steps

    def _run_effect(self, descriptor: Any) -> None:
        if self._effect_handler is None:
            return
        if isinstance(descriptor, AddressedEffect):
            result = self._effect_handler(descriptor.request)
            if result is not None:
                self.post(descriptor.complete(result))
            return
        result = self._effect_handler(descriptor)
        if isinstance(result, SystemMessage):
            self.post(result)

    def subscriptions(self) -> List[AddressedSubscription]:
        if self.state is None:
            return []
        return self.kernel.collect_subscriptions(self.state)

    def view(self) -> Any:
        if self.state is None:
            raise RuntimeError("HostRuntime.start() must be called first")
        return self.kernel.render(self.state)
