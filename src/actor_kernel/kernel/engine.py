"""
Kernel: the entry points a host runtime drives.

Architecture:
    Components ──> Actor adapters ──> Kernel.dispatch() ──> DispatchVM
                                          │
    Host runtime <── effects, subscriptions, render output

The host calls :meth:`Kernel.initialize` once, dispatches the returned
message, then feeds every effect completion and subscription event back in as
a fresh top-level :meth:`Kernel.dispatch` call. Ordering holds within one
call; across calls it is whatever order the host delivers them in.

Example:
    kernel = Kernel([counter_actor], startup=SpawnSingleton(name="counter"))
    state, first = kernel.initialize()
    state, effects = kernel.dispatch(first, state)
    html = kernel.render(state)
"""

from __future__ import annotations

import random
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from .actor import Actor
from .address import generate_session_prefix
from .config import KernelConfig
from .registry import ActorRegistry
from .schema import (
    PID,
    AddressedSubscription,
    KernelState,
    NoOp,
    SessionInit,
    SystemMessage,
)
from .vm import DiagnosticSink, DispatchVM

ViewFn = Callable[[List[Any]], Any]


def _list_view(outputs: List[Any]) -> Any:
    return outputs


class Kernel:
    """
    The process-oriented dispatch kernel of one application.

    Render cycles (a layout embedding a PID whose render embeds the layout)
    are not detected and recurse until Python's recursion limit.
    """

    def __init__(
        self,
        actors: Union[ActorRegistry, Iterable[Actor]],
        startup: Optional[SystemMessage] = None,
        view: Optional[ViewFn] = None,
        config: Optional[KernelConfig] = None,
        diagnostic_sink: Optional[DiagnosticSink] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Args:
            actors: Every actor the application can spawn.
            startup: Message dispatched right after the session prefix is set.
            view: Combines the rendered view-registry outputs into one value.
            config: Address allocation settings (defaults if omitted).
            diagnostic_sink: Receives Diagnostic values raised during dispatch.
            rng: Random source for the session prefix (tests pass a seeded one).
        """
        self.registry = actors if isinstance(actors, ActorRegistry) else ActorRegistry(actors)
        self.config = config or KernelConfig()
        self._startup = startup or NoOp()
        self._view = view or _list_view
        self._rng = rng
        self._vm = DispatchVM(self.registry, diagnostic_sink=diagnostic_sink)

    def initialize(self) -> Tuple[KernelState, SessionInit]:
        """Empty state plus the one SessionInit message that starts the app."""
        prefix = generate_session_prefix(
            self.config.session_prefix_length,
            self.config.session_prefix_alphabet,
            rng=self._rng,
        )
        state = KernelState(last_sequence=self.config.pid_offset)
        return state, SessionInit(prefix=prefix, then=self._startup)

    def dispatch(self, message: SystemMessage, state: KernelState) -> Tuple[KernelState, List[Any]]:
        """Resolve ``message`` to completion.

        Returns the new state and the effect descriptors, in the order they
        were produced. ``state`` itself is left untouched.
        """
        return self._vm.run(message, state)

    def collect_subscriptions(self, state: KernelState) -> List[AddressedSubscription]:
        subscriptions: List[AddressedSubscription] = []
        for pid in state.live_pids():
            entry = state.processes[pid.sequence]
            actor = self.registry.get(entry.actor)
            subscriptions.extend(actor.subscriptions(pid, entry.state))
        return subscriptions

    def render(self, state: KernelState) -> Any:
        """Render every view-registry entry, newest first, through ``view``.

        Rendering is per entry: the singleton registry plays no part, and a
        PID added twice renders twice.
        """
        outputs = []
        for pid in state.views:
            output = self.render_pid(state, pid)
            if output is not None:
                outputs.append(output)
        return self._view(outputs)

    def render_pid(self, state: KernelState, pid: PID) -> Optional[Any]:
        entry = state.lookup(pid)
        if entry is None:
            return None
        actor = self.registry.get(entry.actor)
        return actor.render(pid, entry.state, lambda peer: self.render_pid(state, peer))

    def summary(self, state: KernelState) -> Dict[str, Any]:
        """Snapshot of the registries for debugging tools."""
        return {
            "session_prefix": state.session_prefix,
            "last_sequence": state.last_sequence,
            "processes": {
                str(entry.pid): {
                    "actor": entry.actor,
                    "spawned_by": entry.pid.spawned_by,
                    "singleton": entry.pid.is_singleton,
                }
                for entry in (state.processes[seq] for seq in sorted(state.processes))
            },
            "singletons": {
                name: str(pid)
                for name, pid in state.singletons.items()
                if state.is_live(pid)
            },
            "views": [str(pid) for pid in state.views],
        }
