"""Public exports for the flow compilation stage."""

from .compiler import FlowCompiler, compile_flow
from .model import ActionNode, BranchTree, ConditionalNode, LoopNode, StopNode, iter_actions
from .renderer import DiagramRenderer, render_tree
from .simulator import BranchSimulator, SimulationResult, Trace

__all__ = [
    "FlowCompiler",
    "compile_flow",
    "BranchSimulator",
    "SimulationResult",
    "Trace",
    "ActionNode",
    "StopNode",
    "ConditionalNode",
    "LoopNode",
    "BranchTree",
    "iter_actions",
    "DiagramRenderer",
    "render_tree",
]
