"""
Dispatch VM: the recursive interpreter for system messages.

One call to :meth:`DispatchVM.run` resolves a message against a fork of the
kernel state until no directives remain. Every nested directive finishes its
whole chain (spawns, kills, follow-up messages) before the next sibling in a
Batch starts. Effects are never executed here; they are collected in order
and returned to the host.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import structlog

from .address import NULL_SEQUENCE, new_pid
from .errors import ActorNotRegisteredError
from .registry import ActorRegistry
from .schema import (
    PID,
    AddView,
    AppMessage,
    Batch,
    Diagnostic,
    DiagnosticKind,
    Effect,
    Kill,
    KernelState,
    MessageKind,
    NoOp,
    ProcessEntry,
    ResolveOrSpawnSingleton,
    SendToPID,
    SendToSingleton,
    SessionInit,
    Spawn,
    SpawnSingleton,
    SystemEventMessage,
    SystemMessage,
    UnroutablePayload,
)

logger = structlog.get_logger()

DiagnosticSink = Callable[[Diagnostic], None]


@dataclass
class DispatchRun:
    """Working state of one top-level dispatch call."""

    state: KernelState
    effects: List[Any] = field(default_factory=list)


class DispatchVM:
    def __init__(
        self,
        actors: ActorRegistry,
        diagnostic_sink: Optional[DiagnosticSink] = None,
    ) -> None:
        self._actors = actors
        self._sink = diagnostic_sink
        self._handlers: Dict[MessageKind, Callable[[Any, DispatchRun, int], None]] = {
            MessageKind.NOOP: self._noop,
            MessageKind.APP: self._app,
            MessageKind.UNROUTABLE: self._unroutable,
            MessageKind.SESSION_INIT: self._session_init,
            MessageKind.SYSTEM_EVENT: self._system_event,
            MessageKind.BATCH: self._batch,
            MessageKind.EFFECT: self._effect,
            MessageKind.SEND_TO_PID: self._send_to_pid,
            MessageKind.SEND_TO_SINGLETON: self._send_to_singleton,
            MessageKind.SPAWN: self._spawn_directive,
            MessageKind.SPAWN_SINGLETON: self._spawn_singleton,
            MessageKind.KILL: self._kill,
            MessageKind.ADD_VIEW: self._add_view,
            MessageKind.RESOLVE_OR_SPAWN_SINGLETON: self._resolve_or_spawn,
        }

    def run(self, message: SystemMessage, state: KernelState) -> Tuple[KernelState, List[Any]]:
        run = DispatchRun(state=state.fork())
        self.dispatch(message, run, NULL_SEQUENCE)
        return run.state, run.effects

    def dispatch(self, message: SystemMessage, run: DispatchRun, origin: int) -> None:
        """Resolve ``message`` completely.

        ``origin`` is the sequence of the process whose output is being
        interpreted (0 for the host); spawns record it as ``spawned_by``.
        """
        handler = self._handlers.get(getattr(message, "kind", None))
        if handler is None:
            self.report(
                Diagnostic(
                    kind=DiagnosticKind.UNKNOWN_MESSAGE,
                    message=f"Cannot dispatch {type(message).__name__}",
                    details={"message": message},
                )
            )
            return
        handler(message, run, origin)

    def report(self, diagnostic: Diagnostic) -> None:
        logger.warning(
            diagnostic.message,
            kind=diagnostic.kind.value,
            pid=str(diagnostic.pid) if diagnostic.pid else None,
        )
        if self._sink is not None:
            self._sink(diagnostic)

    # ========== Plain messages ==========

    def _noop(self, message: NoOp, run: DispatchRun, origin: int) -> None:
        pass

    def _app(self, message: AppMessage, run: DispatchRun, origin: int) -> None:
        # A payload only means something once SendToPID gives it a target.
        pass

    def _unroutable(self, message: UnroutablePayload, run: DispatchRun, origin: int) -> None:
        self.report(
            Diagnostic(
                kind=DiagnosticKind.UNROUTABLE_PAYLOAD,
                message=f"Actor {message.actor} cannot handle payload",
                pid=message.pid,
                details={"actor": message.actor, "payload": message.payload},
            )
        )

    def _session_init(self, message: SessionInit, run: DispatchRun, origin: int) -> None:
        if run.state.session_prefix:
            self.report(
                Diagnostic(
                    kind=DiagnosticKind.SESSION_ALREADY_INITIALIZED,
                    message="Session prefix already set; ignoring SessionInit",
                    details={"prefix": message.prefix},
                )
            )
            return
        run.state.session_prefix = message.prefix
        logger.debug("session started", prefix=message.prefix)
        self.dispatch(message.then, run, origin)

    def _system_event(self, message: SystemEventMessage, run: DispatchRun, origin: int) -> None:
        entry = run.state.lookup(message.pid)
        if entry is None:
            return
        actor = self._actors.get(entry.actor)
        new_state, follow_up = actor.handle_event(message.pid, message.event, entry.state)
        run.state.processes[message.pid.sequence] = entry.model_copy(update={"state": new_state})
        self.dispatch(follow_up, run, message.pid.sequence)

    # ========== Directives ==========

    def _batch(self, message: Batch, run: DispatchRun, origin: int) -> None:
        for item in message.items:
            self.dispatch(item, run, origin)

    def _effect(self, message: Effect, run: DispatchRun, origin: int) -> None:
        run.effects.append(message.descriptor)

    def _send_to_pid(self, message: SendToPID, run: DispatchRun, origin: int) -> None:
        entry = run.state.lookup(message.pid)
        if entry is None:
            # Stale or never-issued address.
            return
        actor = self._actors.get(entry.actor)
        new_state, follow_up = actor.update(message.pid, message.payload, entry.state)
        run.state.processes[message.pid.sequence] = entry.model_copy(update={"state": new_state})
        self.dispatch(follow_up, run, message.pid.sequence)

    def _send_to_singleton(self, message: SendToSingleton, run: DispatchRun, origin: int) -> None:
        if run.state.live_singleton(message.name) is None:
            self.spawn(message.name, run, origin, singleton=True)
        pid = run.state.live_singleton(message.name)
        if pid is None:
            # Unknown actor, or the new singleton died during its own init.
            return
        self.dispatch(SendToPID(pid=pid, payload=message.payload), run, origin)

    def _spawn_directive(self, message: Spawn, run: DispatchRun, origin: int) -> None:
        pid = self.spawn(message.actor, run, origin)
        if pid is not None:
            self.dispatch(message.reply(pid), run, origin)

    def _spawn_singleton(self, message: SpawnSingleton, run: DispatchRun, origin: int) -> None:
        if run.state.live_singleton(message.name) is not None:
            return
        self.spawn(message.name, run, origin, singleton=True)

    def _kill(self, message: Kill, run: DispatchRun, origin: int) -> None:
        entry = run.state.lookup(message.pid)
        if entry is None:
            return
        actor = self._actors.get(entry.actor)
        teardown = actor.kill(message.pid, entry.state)
        del run.state.processes[message.pid.sequence]
        logger.debug("process killed", pid=str(message.pid), actor=entry.actor)
        self.dispatch(teardown, run, message.pid.sequence)

    def _add_view(self, message: AddView, run: DispatchRun, origin: int) -> None:
        run.state.views.insert(0, message.pid)

    def _resolve_or_spawn(
        self, message: ResolveOrSpawnSingleton, run: DispatchRun, origin: int
    ) -> None:
        pid = run.state.live_singleton(message.name)
        if pid is None:
            pid = self.spawn(message.name, run, origin, singleton=True)
        if pid is not None:
            self.dispatch(message.continuation(pid), run, origin)

    # ========== Spawning ==========

    def spawn(
        self,
        name: str,
        run: DispatchRun,
        origin: int,
        singleton: bool = False,
    ) -> Optional[PID]:
        """Create a process for actor ``name`` and run its init chain.

        Singletons are bound before the init message is dispatched, so a
        process may address its own singleton name while initializing.
        """
        try:
            actor = self._actors.get(name)
        except ActorNotRegisteredError:
            self.report(
                Diagnostic(
                    kind=DiagnosticKind.UNKNOWN_ACTOR,
                    message=f"No actor registered as {name}",
                    details={"actor": name, "singleton": singleton},
                )
            )
            return None

        pid = new_pid(run.state, spawned_by=origin, is_singleton=singleton)
        state, init_message = actor.init(pid)
        run.state.processes[pid.sequence] = ProcessEntry(pid=pid, actor=name, state=state)
        if singleton:
            run.state.singletons[name] = pid
        logger.debug("process spawned", pid=str(pid), actor=name, spawned_by=origin)

        self.dispatch(init_message, run, pid.sequence)
        return pid
