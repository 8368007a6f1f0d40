"""Workflow declarations and their expansion into per-dimension tables.

An :class:`ActivityUnit` collects the actions of one workflow.  Every action
may be declared several times with different ``dims`` so the successor can
depend on a dimension of variation such as a feature flag.  For each
combination of dimension values the unit selects the applicable declaration
of every action and produces an :class:`ActionTable`, with a synthetic
``start`` action leading to the action flagged as the starting point.
"""

from __future__ import annotations

import itertools
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .colors import class_name
from .descriptor import NextDescriptor, Single, coerce_descriptor
from .errors import FlowError, MalformedDescriptor
from .table import ActionTable

logger = logging.getLogger(__name__)

ENTRY_ACTION = "start"


@dataclass(frozen=True)
class ActionVariant:
    """One declaration of an action, valid for the dimensions in ``dims``."""

    action: str
    next: NextDescriptor
    start: bool = False
    dims: Mapping[str, str] = field(default_factory=dict)

    def matches(self, selection: Mapping[str, str]) -> bool:
        return all(selection.get(name) == value for name, value in self.dims.items())


@dataclass(frozen=True)
class Dimension:
    """A concrete combination of dimension values."""

    values: Tuple[Tuple[str, str], ...]

    @property
    def label(self) -> str:
        return " ".join(value for _, value in self.values)

    def as_dict(self) -> Dict[str, str]:
        return dict(self.values)


class ActivityUnit:
    """All declared actions of a workflow plus its dimension names."""

    def __init__(
        self,
        dimensions: Sequence[str] = (),
        variants: Iterable[ActionVariant] = (),
        *,
        colors: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.dimensions: Tuple[str, ...] = tuple(dimensions)
        self.colors: Dict[str, str] = dict(colors or {})
        self._variants: List[ActionVariant] = []
        for variant in variants:
            self._add_variant(variant)

    # ------------------------------------------------------------------
    # construction
    # ------------------------------------------------------------------
    def add(
        self,
        action: str,
        next: Any = None,
        *,
        start: bool = False,
        dims: Optional[Mapping[str, str]] = None,
    ) -> "ActivityUnit":
        """Declare ``action`` and return ``self`` for chaining."""

        if dims is not None and not isinstance(dims, Mapping):
            raise MalformedDescriptor(action, "'dims' must map dimension names to values")
        variant = ActionVariant(
            action=action,
            next=coerce_descriptor(action, next),
            start=start,
            dims=MappingProxyType({str(k): str(v) for k, v in (dims or {}).items()}),
        )
        self._add_variant(variant)
        return self

    def _add_variant(self, variant: ActionVariant) -> None:
        unknown = sorted(set(variant.dims) - set(self.dimensions))
        if unknown:
            raise MalformedDescriptor(
                variant.action, f"unknown dimension(s) {', '.join(unknown)}"
            )
        self._variants.append(variant)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ActivityUnit":
        """Build a unit from a decoded workflow document."""

        if not isinstance(data, Mapping):
            raise FlowError("workflow document must be a JSON object")
        dimensions = data.get("dimensions", [])
        if not isinstance(dimensions, list) or not all(isinstance(d, str) for d in dimensions):
            raise FlowError("workflow 'dimensions' must be a list of names")
        colors = data.get("colors", {})
        if not isinstance(colors, Mapping):
            raise FlowError("workflow 'colors' must be a JSON object")
        actions = data.get("actions", {})
        if not isinstance(actions, Mapping):
            raise FlowError("workflow 'actions' must be a JSON object")

        unit = cls(dimensions, colors=colors)
        for action, declarations in actions.items():
            if isinstance(declarations, Mapping):
                declarations = [declarations]
            if not isinstance(declarations, list):
                raise MalformedDescriptor(action, "declaration must be an object or a list of objects")
            for declaration in declarations:
                if not isinstance(declaration, Mapping):
                    raise MalformedDescriptor(action, "declaration must be an object")
                extra = sorted(set(declaration) - {"next", "start", "dims"})
                if extra:
                    logger.warning("ignoring unknown keys %s on action %s", ", ".join(extra), action)
                unit.add(
                    action,
                    declaration.get("next"),
                    start=bool(declaration.get("start", False)),
                    dims=declaration.get("dims"),
                )
        return unit

    @classmethod
    def load(cls, path: Path) -> "ActivityUnit":
        """Load a workflow document from ``path``."""

        data = json.loads(path.read_text("utf-8"))
        return cls.from_json(data)

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def actions(self) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(variant.action for variant in self._variants))

    def classes(self) -> Tuple[str, ...]:
        """Class names referenced by declared actions or their successors."""

        names: Dict[str, None] = {}
        for variant in self._variants:
            candidates = [variant.action]
            candidates.extend(target for _, target in variant.next.alternatives())
            for candidate in candidates:
                name = class_name(candidate)
                if name is not None:
                    names[name] = None
        return tuple(names)

    def dimension_values(self) -> Dict[str, Tuple[str, ...]]:
        values: Dict[str, Dict[str, None]] = {name: {} for name in self.dimensions}
        for variant in self._variants:
            for name, value in variant.dims.items():
                values[name][value] = None
        return {name: tuple(seen) for name, seen in values.items()}

    def combinations(self) -> Iterator[Dimension]:
        values = self.dimension_values()
        for name, options in values.items():
            if not options:
                logger.warning("dimension %s has no declared values", name)
                values[name] = ("",)
        for combination in itertools.product(*(values[name] for name in self.dimensions)):
            yield Dimension(tuple(zip(self.dimensions, combination)))

    def table_for(self, dimension: Dimension) -> ActionTable:
        """Select the declarations that apply to ``dimension``."""

        selection = dimension.as_dict()
        chosen: Dict[str, ActionVariant] = {}
        for variant in self._variants:
            if not variant.matches(selection):
                continue
            current = chosen.get(variant.action)
            if current is None or len(variant.dims) > len(current.dims):
                chosen[variant.action] = variant

        entries: Dict[str, NextDescriptor] = {
            action: variant.next for action, variant in chosen.items()
        }
        starts = [action for action, variant in chosen.items() if variant.start]
        if len(starts) > 1:
            logger.warning(
                "several start actions for %r, using %s", dimension.label, starts[0]
            )
        if starts and starts[0] != ENTRY_ACTION:
            if ENTRY_ACTION in entries:
                raise MalformedDescriptor(
                    ENTRY_ACTION, "action name is reserved when another action is flagged as start"
                )
            entries = {ENTRY_ACTION: Single(starts[0]), **entries}
        return ActionTable(entries)

    def tables(self) -> Iterator[Tuple[Dimension, ActionTable]]:
        for dimension in self.combinations():
            yield dimension, self.table_for(dimension)


__all__ = ["ActivityUnit", "ActionVariant", "Dimension", "ENTRY_ACTION"]
