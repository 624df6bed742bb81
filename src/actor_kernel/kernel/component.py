"""
The component contract: plain state/message-in/message-out units.

A component never sees the kernel. It receives its own PID at init, its own
state on every call, and answers with a Transition of (new state, outgoing
notifications, effect requests). The actor layer decides what those mean.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, NamedTuple, Optional, Sequence

from .errors import ComponentContractError
from .schema import PID, SystemEvent


class Transition(NamedTuple):
    state: Any
    out: Sequence[Any] = ()
    effects: Sequence[Any] = ()


class ComponentKind(str, Enum):
    UI = "ui"
    LAYOUT = "layout"
    SERVICE = "service"


InitFn = Callable[[PID], Transition]
UpdateFn = Callable[[Any, Any], Transition]
SubscriptionsFn = Callable[[Any], List[Any]]
SystemEventFn = Callable[[SystemEvent], Optional[Any]]


@dataclass
class Component:
    """
    One component's behavior.

    ``render`` takes ``(state)`` for UI components and
    ``(state, render_pid)`` for layouts, where ``render_pid`` renders another
    process inline. Services have no render at all.
    """

    init: InitFn
    update: UpdateFn
    kind: ComponentKind = ComponentKind.SERVICE
    render: Optional[Callable[..., Any]] = None
    subscriptions: Optional[SubscriptionsFn] = None
    on_system_event: Optional[SystemEventFn] = None

    def __post_init__(self) -> None:
        if self.kind == ComponentKind.SERVICE and self.render is not None:
            raise ComponentContractError("Service components cannot render")
        if self.kind != ComponentKind.SERVICE and self.render is None:
            raise ComponentContractError(
                f"{self.kind.value} components need a render function"
            )

    @classmethod
    def ui(
        cls,
        init: InitFn,
        update: UpdateFn,
        render: Callable[[Any], Any],
        subscriptions: Optional[SubscriptionsFn] = None,
        on_system_event: Optional[SystemEventFn] = None,
    ) -> Component:
        return cls(init, update, ComponentKind.UI, render, subscriptions, on_system_event)

    @classmethod
    def layout(
        cls,
        init: InitFn,
        update: UpdateFn,
        render: Callable[[Any, Callable[[PID], Any]], Any],
        subscriptions: Optional[SubscriptionsFn] = None,
        on_system_event: Optional[SystemEventFn] = None,
    ) -> Component:
        return cls(init, update, ComponentKind.LAYOUT, render, subscriptions, on_system_event)

    @classmethod
    def service(
        cls,
        init: InitFn,
        update: UpdateFn,
        subscriptions: Optional[SubscriptionsFn] = None,
        on_system_event: Optional[SystemEventFn] = None,
    ) -> Component:
        return cls(init, update, ComponentKind.SERVICE, None, subscriptions, on_system_event)

    def system_event_message(self, event: SystemEvent) -> Optional[Any]:
        """The inbound message this component wants for ``event``, if any."""
        if self.on_system_event is None:
            return None
        return self.on_system_event(event)
