"""Lockstep simulation of the alternatives leaving a decision point.

Every alternative is followed by its own :class:`Trace`.  The simulator
advances all traces one action per round, in declared order, and stops as
soon as one action has been emitted by every trace.  That action is where the
alternatives reconverge; whatever each trace produced from that point on is
cut off again so the continuation is only rendered once, after the
conditional block.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Set, Tuple

from ..descriptor import ReturnKey
from ..errors import FlowError
from .model import BranchTree, Node

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from .compiler import FlowCompiler


class Trace:
    """Linear compilation state for one alternative.

    The trace owns its node list, the position map used for loop detection
    and the history of emitted cursors.  ``marks`` records, for every emitted
    cursor, the node index its step starts at; a loop folding that index into
    its body moves the mark onto the loop node.  :meth:`step` processes the
    current cursor and returns the next one, or ``None`` once the trace
    finished.
    """

    def __init__(self, compiler: "FlowCompiler", start: str, active: Tuple[str, ...] = ()) -> None:
        self.compiler = compiler
        self.start = start
        self.cursor: Optional[str] = start
        self.previous: Optional[str] = None
        self.active = active
        self.nodes: List[Node] = []
        self.positions: Dict[str, int] = {}
        self.processed: Set[str] = set()
        self.emitted: List[str] = [start]
        self.seen: Set[str] = {start}
        self.marks: Dict[str, int] = {start: 0}
        self.error: Optional[FlowError] = None
        self.done = False

    def step(self) -> Optional[str]:
        if self.done:
            return None
        action = self.compiler.advance(self)
        if action is None:
            self.done = True
            return None
        self.emitted.append(action)
        self.seen.add(action)
        self.marks.setdefault(action, len(self.nodes))
        return action

    def run(self) -> BranchTree:
        while not self.done:
            self.step()
        return self.tree()

    def cancel(self) -> None:
        self.done = True

    def park(self, error: FlowError) -> None:
        """Stop the trace after a failed step, keeping ``error`` for later."""

        self.error = error
        self.done = True

    def cut(self, action: str) -> BranchTree:
        """Return the nodes built before ``action`` was reached."""

        mark = self.marks.get(action)
        if mark is None:
            return self.tree()
        return tuple(self.nodes[:mark])

    def tree(self) -> BranchTree:
        return tuple(self.nodes)


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of a lockstep run.

    ``branches`` pairs every alternative key with its compiled sub-tree in
    declared order.  ``convergence`` is ``None`` when the alternatives never
    meet again.
    """

    convergence: Optional[str]
    branches: Tuple[Tuple[ReturnKey, BranchTree], ...]


class BranchSimulator:
    """Advance the traces of a decision point until they reconverge."""

    def __init__(
        self,
        compiler: "FlowCompiler",
        alternatives: Sequence[Tuple[ReturnKey, str]],
        active: Tuple[str, ...] = (),
    ) -> None:
        self._alternatives = tuple(alternatives)
        self._traces = [
            (key, compiler.start_trace(target, active)) for key, target in self._alternatives
        ]

    @property
    def traces(self) -> Tuple[Trace, ...]:
        return tuple(trace for _, trace in self._traces)

    def run(self) -> SimulationResult:
        convergence = self._initial_convergence()
        while convergence is None and not all(trace.done for _, trace in self._traces):
            for _, trace in self._traces:
                if trace.done:
                    continue
                try:
                    action = trace.step()
                except FlowError as error:
                    # running ahead of the join may hit structure owned by an outer trace
                    trace.park(error)
                    continue
                if action is None:
                    continue
                if self._is_common(action):
                    convergence = action
                    break
        if convergence is None:
            for _, trace in self._traces:
                if trace.error is not None:
                    raise trace.error
        else:
            for _, trace in self._traces:
                trace.cancel()
        return SimulationResult(convergence, self._branches(convergence))

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _initial_convergence(self) -> Optional[str]:
        for _, trace in self._traces:
            if self._is_common(trace.start):
                return trace.start
        return None

    def _is_common(self, action: str) -> bool:
        return all(action in trace.seen for _, trace in self._traces)

    def _branches(self, convergence: Optional[str]) -> Tuple[Tuple[ReturnKey, BranchTree], ...]:
        branches = []
        for key, trace in self._traces:
            tree = trace.tree() if convergence is None else trace.cut(convergence)
            branches.append((key, tree))
        return tuple(branches)


__all__ = ["Trace", "SimulationResult", "BranchSimulator"]
