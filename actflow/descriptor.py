"""Successor descriptors attached to every action of a workflow.

An action declares what runs after it through its *next* descriptor.  Four
shapes exist: a terminal action has no successor, a single successor is an
unconditional continuation, a fork lists unlabeled alternatives and a
conditional maps return values of the action onto the follow-up action.

Workflows written by hand use the compact annotation syntax understood by
:func:`parse_next`::

    Order::check
    {true: Order::pay, false: Order::cancel, null: retry}

Return values are restricted to ``null``, ``true``, ``false`` and
non-negative integers in that syntax.  Programmatic tables may also use plain
string labels as return keys.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from .errors import MalformedDescriptor

ReturnKey = Union[bool, int, str, None]

RETURN_VALUE_PATTERN = r"(?:null|true|false|0|[1-9][0-9]*)"
FUNCTION_PATTERN = r"(?:[A-Za-z\\_][A-Za-z0-9\\_]+::)?[A-Za-z_][A-Za-z0-9_]+"

_FUNCTION_RE = re.compile(rf"^{FUNCTION_PATTERN}$")
_CONDITIONAL_RE = re.compile(
    rf"^\s*\{{\s*{RETURN_VALUE_PATTERN}\s*:\s*{FUNCTION_PATTERN}\s*"
    rf"(?:,\s*{RETURN_VALUE_PATTERN}\s*:\s*{FUNCTION_PATTERN}\s*)*\}}\s*$"
)
_PAIR_RE = re.compile(rf"\s*({RETURN_VALUE_PATTERN})\s*:\s*({FUNCTION_PATTERN})\s*")


@dataclass(frozen=True)
class Terminal:
    """The action ends the workflow."""

    def alternatives(self) -> Tuple[Tuple[ReturnKey, str], ...]:
        return ()


@dataclass(frozen=True)
class Single:
    """Unconditional continuation with ``target``."""

    target: str

    def alternatives(self) -> Tuple[Tuple[ReturnKey, str], ...]:
        return ((None, self.target),)


@dataclass(frozen=True)
class Fork:
    """Unlabeled alternatives keyed by their position."""

    targets: Tuple[str, ...]

    def alternatives(self) -> Tuple[Tuple[ReturnKey, str], ...]:
        return tuple(enumerate(self.targets))


@dataclass(frozen=True)
class Conditional:
    """Alternatives selected by the return value of the action."""

    branches: Tuple[Tuple[ReturnKey, str], ...]

    def alternatives(self) -> Tuple[Tuple[ReturnKey, str], ...]:
        return self.branches


NextDescriptor = Union[Terminal, Single, Fork, Conditional]
DESCRIPTOR_TYPES = (Terminal, Single, Fork, Conditional)


def format_key(key: ReturnKey) -> str:
    """Render a return key the way it is written in annotations."""

    if key is None:
        return "null"
    if key is True:
        return "true"
    if key is False:
        return "false"
    return str(key)


def parse_return_key(text: str) -> ReturnKey:
    """Convert a textual return value into its typed key.

    ``null``, ``true`` and ``false`` map onto ``None``/``True``/``False`` and
    decimal integers onto :class:`int`.  Other labels are kept verbatim.
    """

    token = text.strip()
    if token == "null":
        return None
    if token == "true":
        return True
    if token == "false":
        return False
    if re.fullmatch(r"-?(?:0|[1-9][0-9]*)", token):
        return int(token)
    return token


def _key_identity(key: ReturnKey) -> Tuple[str, ReturnKey]:
    # True == 1 in Python, the type keeps the two apart.
    return (type(key).__name__, key)


def build_conditional(action: str, pairs: Iterable[Tuple[ReturnKey, Any]]) -> Conditional:
    """Create a :class:`Conditional` after validating keys and targets."""

    branches = []
    seen = set()
    for key, target in pairs:
        if key is not None and not isinstance(key, (bool, int, str)):
            raise MalformedDescriptor(action, f"unsupported return key {key!r}")
        if not isinstance(target, str) or not target:
            raise MalformedDescriptor(action, f"invalid target {target!r} for key {format_key(key)}")
        identity = _key_identity(key)
        if identity in seen:
            raise MalformedDescriptor(action, f"duplicate return key {format_key(key)}")
        seen.add(identity)
        branches.append((key, target))
    if not branches:
        raise MalformedDescriptor(action, "conditional without alternatives")
    return Conditional(tuple(branches))


def parse_next(action: str, text: Optional[str]) -> NextDescriptor:
    """Parse the annotation form of a next descriptor."""

    if text is None:
        return Terminal()
    if _FUNCTION_RE.match(text):
        return Single(text)
    if _CONDITIONAL_RE.match(text):
        body = text.strip()[1:-1]
        pairs = []
        for chunk in body.split(","):
            match = _PAIR_RE.fullmatch(chunk)
            if match is None:  # pragma: no cover - guarded by _CONDITIONAL_RE
                raise MalformedDescriptor(action, f"cannot parse {chunk!r}")
            pairs.append((parse_return_key(match.group(1)), match.group(2)))
        return build_conditional(action, pairs)
    raise MalformedDescriptor(action, f"cannot parse next annotation {text!r}")


def coerce_descriptor(action: str, raw: Any) -> NextDescriptor:
    """Turn a loosely typed value into a :data:`NextDescriptor`.

    Accepted inputs are existing descriptors, ``None`` (terminal), strings
    (single successor or conditional annotation), sequences of action ids
    (fork) and mappings from return key to action id (conditional).  Empty
    sequences and mappings are terminal.
    """

    if isinstance(raw, DESCRIPTOR_TYPES):
        return raw
    if raw is None:
        return Terminal()
    if isinstance(raw, str):
        if raw.strip().startswith("{"):
            return parse_next(action, raw)
        if not raw:
            raise MalformedDescriptor(action, "empty action id")
        return Single(raw)
    if isinstance(raw, Mapping):
        if not raw:
            return Terminal()
        pairs = []
        for key, target in raw.items():
            if isinstance(key, str):
                key = parse_return_key(key)
            pairs.append((key, target))
        return build_conditional(action, pairs)
    if isinstance(raw, (list, tuple)):
        if not raw:
            return Terminal()
        for target in raw:
            if not isinstance(target, str) or not target:
                raise MalformedDescriptor(action, f"invalid fork target {target!r}")
        return Fork(tuple(raw))
    raise MalformedDescriptor(action, f"unsupported descriptor type {type(raw).__name__}")


__all__ = [
    "ReturnKey",
    "Terminal",
    "Single",
    "Fork",
    "Conditional",
    "NextDescriptor",
    "format_key",
    "parse_return_key",
    "parse_next",
    "build_conditional",
    "coerce_descriptor",
]
