"""Data structures describing a structured activity flow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple, Union

from ..descriptor import ReturnKey, format_key


@dataclass(frozen=True)
class ActionNode:
    """A single executed step."""

    action: str

    def describe(self) -> str:
        return self.action


@dataclass(frozen=True)
class StopNode:
    """Marks the end of the flow after a terminal action."""

    def describe(self) -> str:
        return "stop"


@dataclass(frozen=True)
class ConditionalNode:
    """One sub-tree per alternative of a decision point.

    ``labeled`` is ``False`` for forks whose alternatives carry no return
    value; their keys are the alternative positions.
    """

    branches: Tuple[Tuple[ReturnKey, "BranchTree"], ...]
    labeled: bool = True

    @property
    def keys(self) -> Tuple[ReturnKey, ...]:
        return tuple(key for key, _ in self.branches)

    def branch(self, key: ReturnKey) -> "BranchTree":
        """Return the sub-tree selected by ``key``."""

        for candidate, tree in self.branches:
            if candidate is key or (type(candidate) is type(key) and candidate == key):
                return tree
        raise KeyError(key)

    def describe(self) -> str:
        keys = ", ".join(format_key(key) for key in self.keys)
        return f"if [{keys}]"


@dataclass(frozen=True)
class LoopNode:
    """Repeat ``body`` then ``repeat_action`` while it returns ``repeat_key``."""

    body: "BranchTree"
    repeat_action: str
    repeat_key: ReturnKey

    def describe(self) -> str:
        return f"repeat {self.repeat_action} while {format_key(self.repeat_key)}"


Node = Union[ActionNode, StopNode, ConditionalNode, LoopNode]
BranchTree = Tuple[Node, ...]


def iter_actions(tree: BranchTree) -> Iterator[str]:
    """Yield every action id of ``tree`` in rendering order."""

    for node in tree:
        if isinstance(node, ActionNode):
            yield node.action
        elif isinstance(node, ConditionalNode):
            for _, branch in node.branches:
                yield from iter_actions(branch)
        elif isinstance(node, LoopNode):
            yield from iter_actions(node.body)
            yield node.repeat_action


__all__ = [
    "ActionNode",
    "StopNode",
    "ConditionalNode",
    "LoopNode",
    "Node",
    "BranchTree",
    "iter_actions",
]
