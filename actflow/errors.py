"""Exceptions raised while compiling activity flows."""

from __future__ import annotations

from typing import Optional


class FlowError(ValueError):
    """Base class for problems found in an action table."""

    def __init__(self, message: str, action: Optional[str] = None) -> None:
        super().__init__(message)
        self.action = action
        self.dimension: Optional[str] = None

    def with_dimension(self, dimension: str) -> "FlowError":
        """Attach the dimension label the failing table belongs to."""

        self.dimension = dimension
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.dimension:
            return f"{message} (dimension {self.dimension!r})"
        return message


class MalformedDescriptor(FlowError):
    """A next descriptor does not match any supported shape."""

    def __init__(self, action: str, detail: str) -> None:
        super().__init__(f"malformed next descriptor for {action}: {detail}", action)
        self.detail = detail


class UnresolvableCycle(FlowError):
    """A trace revisited an action without a loop-closing alternative."""

    def __init__(self, action: str, dimension: Optional[str] = None) -> None:
        super().__init__(f"unresolvable cycle at {action}", action)
        self.dimension = dimension


class DanglingReference(FlowError):
    """A descriptor names an action that is absent from the table."""

    def __init__(self, action: str, referrer: Optional[str] = None) -> None:
        origin = f" referenced by {referrer}" if referrer else ""
        super().__init__(f"unknown action {action}{origin}", action)
        self.referrer = referrer


__all__ = ["FlowError", "MalformedDescriptor", "UnresolvableCycle", "DanglingReference"]
