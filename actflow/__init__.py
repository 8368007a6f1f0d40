"""Public package exports for the activity-flow diagram compiler."""

from .colors import ClassColors
from .descriptor import Conditional, Fork, Single, Terminal, parse_next
from .diagrams import DiagramDocument, DiagramFailure, Diagrams
from .errors import DanglingReference, FlowError, MalformedDescriptor, UnresolvableCycle
from .flow import (
    ActionNode,
    BranchSimulator,
    ConditionalNode,
    DiagramRenderer,
    FlowCompiler,
    LoopNode,
    StopNode,
    compile_flow,
    render_tree,
)
from .table import ActionTable
from .unit import ActivityUnit, Dimension

__all__ = [
    "ActionTable",
    "ActivityUnit",
    "Dimension",
    "Terminal",
    "Single",
    "Fork",
    "Conditional",
    "parse_next",
    "FlowCompiler",
    "compile_flow",
    "BranchSimulator",
    "ActionNode",
    "StopNode",
    "ConditionalNode",
    "LoopNode",
    "DiagramRenderer",
    "render_tree",
    "ClassColors",
    "Diagrams",
    "DiagramDocument",
    "DiagramFailure",
    "FlowError",
    "MalformedDescriptor",
    "UnresolvableCycle",
    "DanglingReference",
]
