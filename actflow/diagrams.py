"""Generate one activity diagram per dimension combination of a unit."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .colors import DEFAULT_MAX_ATTEMPTS, ClassColors
from .errors import FlowError
from .flow import DiagramRenderer, FlowCompiler
from .unit import ENTRY_ACTION, ActivityUnit, Dimension

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiagramDocument:
    """Rendered diagram of a single dimension combination."""

    name: str
    dimension: Dimension
    lines: Tuple[str, ...]

    @property
    def filename(self) -> str:
        return f"{self.name}.uml"

    @property
    def text(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)

    def chunks(self) -> Iterator[str]:
        """Yield a ``"\\0<filename>"`` marker followed by the text lines."""

        yield f"\0{self.filename}"
        for line in self.lines:
            yield f"{line}\n"

    def write(self, directory: Path) -> Path:
        path = directory / self.filename
        path.write_text(self.text, "utf-8")
        return path


@dataclass(frozen=True)
class DiagramFailure:
    """A dimension whose flow could not be compiled."""

    dimension: Dimension
    error: FlowError


class Diagrams:
    """Compile and render every dimension of an :class:`ActivityUnit`.

    Colors are assigned once per run for all classes of the unit, so the
    same class keeps its color across the generated documents.  A
    :class:`FlowError` only aborts the diagram of the failing dimension; it is
    logged and collected in :attr:`failures`.
    """

    def __init__(
        self,
        unit: ActivityUnit,
        *,
        entry: str = ENTRY_ACTION,
        strict: bool = False,
        indent: str = "\t",
        rng: Optional[random.Random] = None,
        max_color_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.unit = unit
        self.entry = entry
        self.strict = strict
        self.colors = ClassColors(unit.colors, rng=rng, max_attempts=max_color_attempts)
        self.renderer = DiagramRenderer(self.colors, indent)
        self.failures: List[DiagramFailure] = []

    def generate_class_colors(self) -> None:
        self.colors.assign(self.unit.classes())

    def generate(self) -> Iterator[DiagramDocument]:
        self.generate_class_colors()
        self.failures = []
        for dimension in self.unit.combinations():
            try:
                table = self.unit.table_for(dimension)
                tree = FlowCompiler(table, strict=self.strict).compile(self.entry)
            except FlowError as error:
                error.with_dimension(dimension.label)
                logger.error("skipping diagram for %r: %s", dimension.label, error)
                self.failures.append(DiagramFailure(dimension, error))
                continue
            yield self._document(dimension, self.renderer.render(tree))

    def chunks(self) -> Iterator[str]:
        for document in self.generate():
            yield from document.chunks()

    def _document(self, dimension: Dimension, body: List[str]) -> DiagramDocument:
        lines = ["@startuml"]
        if self.unit.dimensions:
            lines.append("floating note left")
            lines.extend(f"\t{name}: {value}" for name, value in dimension.values)
            lines.append("end note")
        lines.extend(body)
        lines.append("@enduml")
        name = f"activity {dimension.label}".strip()
        return DiagramDocument(name=name, dimension=dimension, lines=tuple(lines))


__all__ = ["Diagrams", "DiagramDocument", "DiagramFailure"]
