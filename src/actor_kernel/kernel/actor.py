"""
Actor adapter: lifts one component into the kernel's uniform types.

The integrator supplies four translations per actor:

    lift_state          component state   -> process-table value
    lift_message        component message -> payload carried by SendToPID
    lower_message       payload           -> component message, or None if not ours
    translate_outgoing  (pid, notification) -> directives

State and message lifting default to tagging with the actor name (``Envelope``
for messages), so most actors only write ``translate_outgoing``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Tuple

from .component import Component, ComponentKind
from .schema import (
    PID,
    AddressedEffect,
    AddressedSubscription,
    Effect,
    Envelope,
    NoOp,
    SendToPID,
    SystemEvent,
    SystemEventKind,
    SystemMessage,
    UnroutablePayload,
    batch,
)

TranslateFn = Callable[[PID, Any], Iterable[SystemMessage]]
ToSelf = Callable[[Any], SystemMessage]
MapViewFn = Callable[[Any, ToSelf], Any]


def _identity(value: Any) -> Any:
    return value


def _no_output(pid: PID, notification: Any) -> Iterable[SystemMessage]:
    return ()


@dataclass
class Actor:
    name: str
    component: Component
    translate_outgoing: TranslateFn = _no_output
    lift_message: Optional[Callable[[Any], Any]] = None
    lower_message: Optional[Callable[[Any], Optional[Any]]] = None
    lift_state: Callable[[Any], Any] = _identity
    lower_state: Callable[[Any], Any] = _identity
    map_view: Optional[MapViewFn] = None
    description: str = field(default="")

    def __post_init__(self) -> None:
        if self.lift_message is None:
            self.lift_message = self._envelope
        if self.lower_message is None:
            self.lower_message = self._open_envelope

    def _envelope(self, message: Any) -> Envelope:
        return Envelope(actor=self.name, body=message)

    def _open_envelope(self, payload: Any) -> Optional[Any]:
        if isinstance(payload, Envelope) and payload.actor == self.name:
            return payload.body
        return None

    @property
    def kind(self) -> ComponentKind:
        return self.component.kind

    def to_self(self, pid: PID) -> ToSelf:
        """Address a component-level message back to ``pid``."""

        def deliver(message: Any) -> SystemMessage:
            return SendToPID(pid=pid, payload=self.lift_message(message))

        return deliver

    def message_for(self, pid: PID, message: Any) -> SendToPID:
        return SendToPID(pid=pid, payload=self.lift_message(message))

    # ========== Lifecycle ==========

    def init(self, pid: PID) -> Tuple[Any, SystemMessage]:
        return self._apply(pid, self.component.init(pid))

    def update(self, pid: PID, payload: Any, lifted: Any) -> Tuple[Any, SystemMessage]:
        message = self.lower_message(payload)
        if message is None:
            return lifted, UnroutablePayload(pid=pid, actor=self.name, payload=payload)
        state = self.lower_state(lifted)
        return self._apply(pid, self.component.update(message, state))

    def handle_event(
        self, pid: PID, event: SystemEvent, lifted: Any
    ) -> Tuple[Any, SystemMessage]:
        message = self.component.system_event_message(event)
        if message is None:
            return lifted, NoOp()
        state = self.lower_state(lifted)
        return self._apply(pid, self.component.update(message, state))

    def kill(self, pid: PID, lifted: Any) -> SystemMessage:
        """Teardown output for ``pid``; the final state is discarded."""
        _, teardown = self.handle_event(pid, SystemEvent(kind=SystemEventKind.KILL), lifted)
        return teardown

    def _apply(self, pid: PID, transition: Any) -> Tuple[Any, SystemMessage]:
        state, out, effects = transition
        items: List[SystemMessage] = []
        for notification in out:
            items.extend(self.translate_outgoing(pid, notification))
        deliver = self.to_self(pid)
        for request in effects:
            items.append(
                Effect(descriptor=AddressedEffect(pid=pid, request=request, deliver=deliver))
            )
        return self.lift_state(state), batch(*items)

    # ========== Subscriptions & Rendering ==========

    def subscriptions(self, pid: PID, lifted: Any) -> List[AddressedSubscription]:
        if self.component.subscriptions is None:
            return []
        deliver = self.to_self(pid)
        return [
            AddressedSubscription(pid=pid, descriptor=descriptor, deliver=deliver)
            for descriptor in self.component.subscriptions(self.lower_state(lifted))
        ]

    def render(
        self, pid: PID, lifted: Any, render_pid: Callable[[PID], Any]
    ) -> Optional[Any]:
        if self.kind == ComponentKind.SERVICE:
            return None
        state = self.lower_state(lifted)
        if self.kind == ComponentKind.LAYOUT:
            output = self.component.render(state, render_pid)
        else:
            output = self.component.render(state)
        if self.map_view is not None:
            output = self.map_view(output, self.to_self(pid))
        return output
