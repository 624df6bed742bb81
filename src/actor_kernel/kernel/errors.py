"""
Exceptions for wiring and configuration mistakes.

Nothing here is raised from inside a dispatch call: stale addresses, unroutable
payloads and unknown actor names degrade to no-ops or Diagnostic values.
"""
from __future__ import annotations


class KernelError(Exception):
    """Base class for actor-kernel errors."""


class ActorNotRegisteredError(KernelError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Actor not registered: {self.name}"


class ActorImportError(KernelError, ImportError):
    pass


class ComponentContractError(KernelError, ValueError):
    pass


class ConfigError(KernelError, ValueError):
    pass
