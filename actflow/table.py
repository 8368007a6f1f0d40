"""Immutable action tables consumed by the flow compiler."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Set, Tuple

from .descriptor import NextDescriptor, coerce_descriptor
from .errors import MalformedDescriptor


class ActionTable(Mapping[str, NextDescriptor]):
    """Read-only mapping from action id to its next descriptor."""

    def __init__(self, actions: Mapping[str, Any]) -> None:
        entries: Dict[str, NextDescriptor] = {}
        for action, raw in actions.items():
            if not isinstance(action, str) or not action:
                raise MalformedDescriptor(repr(action), "action ids must be non-empty strings")
            entries[action] = coerce_descriptor(action, raw)
        self._entries = MappingProxyType(entries)

    def __getitem__(self, action: str) -> NextDescriptor:
        return self._entries[action]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ActionTable({dict(self._entries)!r})"

    def descriptor(self, action: str) -> NextDescriptor:
        """Return the validated descriptor for ``action``."""

        return self._entries[action]

    def references(self) -> Set[str]:
        """Return every action id named as a successor."""

        names: Set[str] = set()
        for descriptor in self._entries.values():
            names.update(target for _, target in descriptor.alternatives())
        return names

    def dangling(self) -> Tuple[str, ...]:
        """Successor ids that have no entry of their own, sorted."""

        return tuple(sorted(self.references() - set(self._entries)))

    def reachable(self, entry: str) -> Tuple[str, ...]:
        """Return known actions reachable from ``entry`` in discovery order."""

        order: Dict[str, None] = {}
        pending = [entry]
        while pending:
            action = pending.pop()
            if action in order or action not in self._entries:
                continue
            order[action] = None
            targets = [target for _, target in self._entries[action].alternatives()]
            pending.extend(reversed(targets))
        return tuple(order)


__all__ = ["ActionTable"]
