"""Per-class colors used to tell actions of different classes apart."""

from __future__ import annotations

import logging
import random
from typing import Dict, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 20


def class_name(action: str) -> Optional[str]:
    """Return the class part of a ``Class::method`` action id."""

    head, separator, _ = action.partition("::")
    if not separator:
        return None
    return head


def method_name(action: str) -> str:
    """Return the method part of a ``Class::method`` action id."""

    _, separator, tail = action.partition("::")
    return tail if separator else action


class ClassColors:
    """Assign a light color to every class once per run.

    Colors are drawn from a pastel grid (every channel ``0x70``..``0xF0`` in
    steps of ``0x10``).  A collision with an already assigned color is retried
    up to ``max_attempts`` times, after which the duplicate is kept.
    """

    def __init__(
        self,
        preset: Optional[Mapping[str, str]] = None,
        *,
        rng: Optional[random.Random] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._colors: Dict[str, str] = dict(preset or {})
        self._rng = rng or random.Random()
        self.max_attempts = max(1, max_attempts)

    def __contains__(self, name: str) -> bool:
        return name in self._colors

    def get(self, name: str) -> Optional[str]:
        return self._colors.get(name)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._colors)

    def assign(self, names: Iterable[str]) -> None:
        """Generate colors for every class in ``names`` that lacks one."""

        for name in names:
            if name not in self._colors:
                self._colors[name] = self._generate(name)

    def color_for(self, name: str) -> str:
        """Return the color of ``name``, generating one on first use."""

        if name not in self._colors:
            self._colors[name] = self._generate(name)
        return self._colors[name]

    def _random_color(self) -> str:
        channels = (self._rng.randint(7, 15) * 16 for _ in range(3))
        return "#" + "".join(f"{channel:02x}" for channel in channels)

    def _generate(self, name: str) -> str:
        used = set(self._colors.values())
        color = self._random_color()
        attempts = 1
        while color in used:
            if attempts >= self.max_attempts:
                logger.debug("no unused color left for %s, reusing %s", name, color)
                break
            color = self._random_color()
            attempts += 1
        return color


__all__ = ["ClassColors", "class_name", "method_name", "DEFAULT_MAX_ATTEMPTS"]
