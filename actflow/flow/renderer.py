"""Render branch trees as PlantUML activity diagram statements."""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..colors import ClassColors, class_name, method_name
from ..descriptor import format_key
from .model import ActionNode, BranchTree, ConditionalNode, LoopNode, StopNode


class DiagramRenderer:
    """Serialise a :data:`BranchTree` into one statement per line."""

    def __init__(self, colors: Optional[ClassColors] = None, indent: str = "\t") -> None:
        self.colors = colors if colors is not None else ClassColors()
        self.indent = indent

    def render(self, tree: BranchTree) -> List[str]:
        return list(self._render(tree, ""))

    def format_action(self, action: str) -> str:
        name = class_name(action)
        if name is None:
            return f":{action};"
        return f"{self.colors.color_for(name)}:{method_name(action)}|"

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _render(self, tree: BranchTree, prefix: str) -> Iterable[str]:
        for node in tree:
            if isinstance(node, ActionNode):
                yield prefix + self.format_action(node.action)
            elif isinstance(node, StopNode):
                yield prefix + "stop"
            elif isinstance(node, ConditionalNode):
                yield from self._render_conditional(node, prefix)
            elif isinstance(node, LoopNode):
                yield prefix + "repeat"
                yield from self._render(node.body, prefix + self.indent)
                yield prefix + self.indent + self.format_action(node.repeat_action)
                yield prefix + f"repeat while (r = {format_key(node.repeat_key)})"
            else:
                raise TypeError(f"unsupported branch tree node: {node!r}")

    def _render_conditional(self, node: ConditionalNode, prefix: str) -> Iterable[str]:
        last = len(node.branches) - 1
        for index, (key, branch) in enumerate(node.branches):
            label = f" ({format_key(key)})" if node.labeled else ""
            if index == 0:
                yield prefix + ("if (r) then" + label if node.labeled else "if () then")
            elif index == last:
                yield prefix + "else" + label
            else:
                yield prefix + ("elseif (r) then" + label if node.labeled else "elseif () then")
            yield from self._render(branch, prefix + self.indent)
        yield prefix + "endif"


def render_tree(tree: BranchTree, colors: Optional[ClassColors] = None, indent: str = "\t") -> List[str]:
    """Render ``tree`` with a throwaway :class:`DiagramRenderer`."""

    return DiagramRenderer(colors, indent).render(tree)


__all__ = ["DiagramRenderer", "render_tree"]
