from __future__ import annotations

from importlib import import_module
from typing import Dict, Iterable, List, Optional

from .actor import Actor
from .errors import ActorImportError, ActorNotRegisteredError


class ActorRegistry:
    """The closed set of actors compiled into one application."""

    def __init__(self, actors: Optional[Iterable[Actor]] = None) -> None:
        self._registry: Dict[str, Actor] = {}
        for actor in actors or ():
            self.register(actor)

    def register(self, actor: Actor) -> None:
        self._registry[actor.name] = actor

    def register_from_ref(self, python_ref: str) -> Actor:
        """Import an ``Actor`` object by dotted path and register it.

        Lets an application list its actors in configuration, e.g.
        ``"myapp.widgets.counter.actor"``.
        """
        try:
            module_name, attr_name = python_ref.rsplit(".", 1)
            module = import_module(module_name)
            actor = getattr(module, attr_name)
        except (ValueError, ImportError, AttributeError) as exc:
            raise ActorImportError(f"Cannot import actor {python_ref}: {exc}") from exc

        if not isinstance(actor, Actor):
            raise ActorImportError(f"{python_ref} is not an Actor")

        self.register(actor)
        return actor

    def get(self, name: str) -> Actor:
        try:
            return self._registry[name]
        except KeyError:
            raise ActorNotRegisteredError(name) from None

    def names(self) -> List[str]:
        return sorted(self._registry)

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    def __len__(self) -> int:
        return len(self._registry)
