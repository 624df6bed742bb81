from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PID(BaseModel):
    """Opaque address of a live or formerly-live process.

    Identity is the session prefix plus the sequence number; the spawn
    metadata rides along but never takes part in equality.
    """

    model_config = ConfigDict(frozen=True)

    session_prefix: str
    sequence: int
    spawned_by: int = 0
    is_singleton: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PID):
            return NotImplemented
        return (self.session_prefix, self.sequence) == (
            other.session_prefix,
            other.sequence,
        )

    def __hash__(self) -> int:
        return hash((self.session_prefix, self.sequence))

    def __str__(self) -> str:
        return f"{self.session_prefix}#{self.sequence}"


class MessageKind(str, Enum):
    NOOP = "noop"
    APP = "app"
    UNROUTABLE = "unroutable"
    SESSION_INIT = "session_init"
    SYSTEM_EVENT = "system_event"
    BATCH = "batch"
    EFFECT = "effect"
    SEND_TO_PID = "send_to_pid"
    SEND_TO_SINGLETON = "send_to_singleton"
    SPAWN = "spawn"
    SPAWN_SINGLETON = "spawn_singleton"
    KILL = "kill"
    ADD_VIEW = "add_view"
    RESOLVE_OR_SPAWN_SINGLETON = "resolve_or_spawn_singleton"


class SystemEventKind(str, Enum):
    KILL = "kill"
    PID_NOT_FOUND = "pid_not_found"


class SystemEvent(BaseModel):
    """An event the kernel (or host) raises about a process' surroundings."""

    model_config = ConfigDict(frozen=True)

    kind: SystemEventKind
    subject: Optional[PID] = None


class SystemMessage(BaseModel):
    """Base of the recursive message algebra the kernel interprets."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: MessageKind


class NoOp(SystemMessage):
    kind: Literal[MessageKind.NOOP] = MessageKind.NOOP


class AppMessage(SystemMessage):
    """A domain payload with no target; only meaningful inside SendToPID."""

    kind: Literal[MessageKind.APP] = MessageKind.APP
    payload: Any = None


class UnroutablePayload(SystemMessage):
    kind: Literal[MessageKind.UNROUTABLE] = MessageKind.UNROUTABLE
    pid: PID
    actor: str
    payload: Any = None


class SessionInit(SystemMessage):
    kind: Literal[MessageKind.SESSION_INIT] = MessageKind.SESSION_INIT
    prefix: str
    then: SystemMessage = Field(default_factory=NoOp)


class SystemEventMessage(SystemMessage):
    kind: Literal[MessageKind.SYSTEM_EVENT] = MessageKind.SYSTEM_EVENT
    pid: PID
    event: SystemEvent


class Directive(SystemMessage):
    """Kernel-level instruction produced by an actor's output translation."""


class Batch(Directive):
    kind: Literal[MessageKind.BATCH] = MessageKind.BATCH
    items: List[SystemMessage] = Field(default_factory=list)


class Effect(Directive):
    kind: Literal[MessageKind.EFFECT] = MessageKind.EFFECT
    descriptor: Any


class SendToPID(Directive):
    kind: Literal[MessageKind.SEND_TO_PID] = MessageKind.SEND_TO_PID
    pid: PID
    payload: Any = None


class SendToSingleton(Directive):
    kind: Literal[MessageKind.SEND_TO_SINGLETON] = MessageKind.SEND_TO_SINGLETON
    name: str
    payload: Any = None


class Spawn(Directive):
    kind: Literal[MessageKind.SPAWN] = MessageKind.SPAWN
    actor: str
    reply: Callable[[PID], SystemMessage]


class SpawnSingleton(Directive):
    kind: Literal[MessageKind.SPAWN_SINGLETON] = MessageKind.SPAWN_SINGLETON
    name: str


class Kill(Directive):
    kind: Literal[MessageKind.KILL] = MessageKind.KILL
    pid: PID


class AddView(Directive):
    kind: Literal[MessageKind.ADD_VIEW] = MessageKind.ADD_VIEW
    pid: PID


class ResolveOrSpawnSingleton(Directive):
    kind: Literal[MessageKind.RESOLVE_OR_SPAWN_SINGLETON] = (
        MessageKind.RESOLVE_OR_SPAWN_SINGLETON
    )
    name: str
    continuation: Callable[[PID], SystemMessage]


def batch(*messages: SystemMessage) -> SystemMessage:
    """Collapse messages into one; an empty batch is a NoOp."""
    items = [m for m in messages if not isinstance(m, NoOp)]
    if not items:
        return NoOp()
    if len(items) == 1:
        return items[0]
    return Batch(items=items)


class Envelope(BaseModel):
    """Default lifted form of a component's inbound message."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    actor: str
    body: Any = None


class AddressedEffect(BaseModel):
    """A component's effect request, bound to the process that asked for it.

    The host runs ``request`` and hands the outcome to :meth:`complete`,
    which yields the message to dispatch as a new top-level call.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    pid: PID
    request: Any
    deliver: Callable[[Any], SystemMessage] = Field(exclude=True)

    def complete(self, result: Any) -> SystemMessage:
        return self.deliver(result)


class AddressedSubscription(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    pid: PID
    descriptor: Any
    deliver: Callable[[Any], SystemMessage] = Field(exclude=True)

    def notify(self, event: Any) -> SystemMessage:
        return self.deliver(event)


class DiagnosticKind(str, Enum):
    UNROUTABLE_PAYLOAD = "unroutable_payload"
    UNKNOWN_ACTOR = "unknown_actor"
    SESSION_ALREADY_INITIALIZED = "session_already_initialized"
    UNKNOWN_MESSAGE = "unknown_message"


class Diagnostic(BaseModel):
    """A non-fatal problem surfaced during dispatch."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: DiagnosticKind
    message: str
    pid: Optional[PID] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class ProcessEntry(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    pid: PID
    actor: str
    state: Any = None


class KernelState(BaseModel):
    """Process table plus the singleton and view registries."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    session_prefix: str = ""
    last_sequence: int = 0
    processes: Dict[int, ProcessEntry] = Field(default_factory=dict)
    singletons: Dict[str, PID] = Field(default_factory=dict)
    views: List[PID] = Field(default_factory=list)

    def fork(self) -> KernelState:
        """Copy the containers so a dispatch never touches its input."""
        return self.model_copy(
            update={
                "processes": dict(self.processes),
                "singletons": dict(self.singletons),
                "views": list(self.views),
            }
        )

    def lookup(self, pid: PID) -> Optional[ProcessEntry]:
        entry = self.processes.get(pid.sequence)
        if entry is None or entry.pid != pid:
            return None
        return entry

    def is_live(self, pid: PID) -> bool:
        return self.lookup(pid) is not None

    def live_singleton(self, name: str) -> Optional[PID]:
        pid = self.singletons.get(name)
        if pid is None or not self.is_live(pid):
            return None
        return pid

    def live_pids(self) -> List[PID]:
        return [self.processes[seq].pid for seq in sorted(self.processes)]
