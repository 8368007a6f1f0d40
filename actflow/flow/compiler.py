"""Compile an action table into a structured branch tree."""

from __future__ import annotations

import logging
from typing import Optional, Set

from ..descriptor import Fork, Single, Terminal
from ..errors import DanglingReference, UnresolvableCycle
from ..table import ActionTable
from .model import ActionNode, BranchTree, ConditionalNode, LoopNode, StopNode
from .simulator import BranchSimulator, Trace

logger = logging.getLogger(__name__)


class FlowCompiler:
    """Turn the state machine of an :class:`ActionTable` into a branch tree.

    Compilation follows the successors from an entry action.  Decision points
    become conditional blocks that end where their alternatives reconverge,
    and a two-way decision pointing back at itself or at an action emitted
    earlier in the same trace becomes a repeat loop.  Actions missing from the
    table are rendered as terminal steps unless ``strict`` is set.
    """

    def __init__(self, table: ActionTable, *, strict: bool = False) -> None:
        self.table = table
        self.strict = strict
        self._reported: Set[str] = set()

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def compile(self, entry: str) -> BranchTree:
        tree = self.start_trace(entry).run()
        logger.debug("compiled flow from %s into %d top-level nodes", entry, len(tree))
        return tree

    def start_trace(self, start: str, active=()) -> Trace:
        return Trace(self, start, tuple(active))

    # ------------------------------------------------------------------
    # trace stepping
    # ------------------------------------------------------------------
    def advance(self, trace: Trace) -> Optional[str]:
        """Process the cursor of ``trace`` and return the next cursor."""

        action = trace.cursor
        if action is None:
            return None
        if action not in self.table:
            self._dangling(action, trace.previous)
            trace.nodes.extend((ActionNode(action), StopNode()))
            return None
        if action in trace.processed:
            raise UnresolvableCycle(action)

        descriptor = self.table.descriptor(action)
        if isinstance(descriptor, Terminal):
            self._emit(trace, action)
            trace.nodes.append(StopNode())
            return None
        if isinstance(descriptor, Single):
            self._emit(trace, action)
            return self._move(trace, descriptor.target)
        return self._decide(trace, action, descriptor)

    def _decide(self, trace: Trace, action: str, descriptor) -> Optional[str]:
        alternatives = descriptor.alternatives()
        if len(alternatives) == 2:
            for index, (key, target) in enumerate(alternatives):
                if target in trace.positions or target == action:
                    _, follow = alternatives[1 - index]
                    return self._close_loop(trace, action, key, target, follow)
        for _, target in alternatives:
            if target in trace.positions:
                raise UnresolvableCycle(action)
        if action in trace.active:
            raise UnresolvableCycle(action)

        self._emit(trace, action)
        simulator = BranchSimulator(self, alternatives, trace.active + (action,))
        result = simulator.run()
        trace.nodes.append(
            ConditionalNode(result.branches, labeled=not isinstance(descriptor, Fork))
        )
        if result.convergence is None:
            return None
        return self._move(trace, result.convergence)

    def _close_loop(self, trace: Trace, action: str, key, target: str, follow: str) -> str:
        position = trace.positions.get(target, len(trace.nodes))
        body = tuple(trace.nodes[position:])
        del trace.nodes[position:]
        trace.nodes.append(LoopNode(body=body, repeat_action=action, repeat_key=key))
        for name, mark in trace.marks.items():
            if mark > position:
                trace.marks[name] = position
        trace.processed.add(action)
        # the tail after the loop starts a fresh linear trace
        trace.positions = {}
        logger.debug("loop closed at %s back to %s, continuing at %s", action, target, follow)
        return self._move(trace, follow)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _emit(trace: Trace, action: str) -> None:
        trace.positions[action] = len(trace.nodes)
        trace.processed.add(action)
        trace.nodes.append(ActionNode(action))

    @staticmethod
    def _move(trace: Trace, target: str) -> str:
        trace.previous = trace.cursor
        trace.cursor = target
        return target

    def _dangling(self, action: str, referrer: Optional[str]) -> None:
        if self.strict:
            raise DanglingReference(action, referrer)
        if action not in self._reported:
            self._reported.add(action)
            logger.warning("unknown action %s treated as terminal (referenced by %s)", action, referrer)


def compile_flow(table: ActionTable, entry: str, *, strict: bool = False) -> BranchTree:
    """Compile ``table`` starting at ``entry``."""

    return FlowCompiler(table, strict=strict).compile(entry)


__all__ = ["FlowCompiler", "compile_flow"]
