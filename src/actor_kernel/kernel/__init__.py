"""
Kernel: the machinery of the actor system.

This module contains the dispatch infrastructure:
- schema: PIDs, system messages, directives and kernel state
- address: session prefixes and PID allocation
- component: the component contract (UI, layout, service)
- actor: adapters lifting components into kernel types
- registry: the closed set of actors of one application
- vm: the recursive message interpreter
- engine: host-facing entry points
- runner: a reference synchronous host runtime
"""
from .errors import (
    ActorImportError,
    ActorNotRegisteredError,
    ComponentContractError,
    ConfigError,
    KernelError,
)
from .schema import (
    PID,
    AddressedEffect,
    AddressedSubscription,
    AddView,
    AppMessage,
    Batch,
    Diagnostic,
    DiagnosticKind,
    Directive,
    Effect,
    Envelope,
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
    SystemEvent,
    SystemEventKind,
    SystemEventMessage,
    SystemMessage,
    UnroutablePayload,
    batch,
)
from .address import generate_session_prefix, new_pid
from .config import KernelConfig, load_config
from .component import Component, ComponentKind, Transition
from .actor import Actor
from .registry import ActorRegistry
from .vm import DispatchVM
from .engine import Kernel
from .runner import HostRuntime

__all__ = [
    # Errors
    "ActorImportError",
    "ActorNotRegisteredError",
    "ComponentContractError",
    "ConfigError",
    "KernelError",
    # Schema
    "PID",
    "AddressedEffect",
    "AddressedSubscription",
    "AddView",
    "AppMessage",
    "Batch",
    "Diagnostic",
    "DiagnosticKind",
    "Directive",
    "Effect",
    "Envelope",
    "Kill",
    "KernelState",
    "MessageKind",
    "NoOp",
    "ProcessEntry",
    "ResolveOrSpawnSingleton",
    "SendToPID",
    "SendToSingleton",
    "SessionInit",
    "Spawn",
    "SpawnSingleton",
    "SystemEvent",
    "SystemEventKind",
    "SystemEventMessage",
    "SystemMessage",
    "UnroutablePayload",
    "batch",
    # Addressing
    "generate_session_prefix",
    "new_pid",
    # Config
    "KernelConfig",
    "load_config",
    # Components & actors
    "Component",
    "ComponentKind",
    "Transition",
    "Actor",
    "ActorRegistry",
    # Dispatch
    "DispatchVM",
    "Kernel",
    "HostRuntime",
]
