"""Best-effort parsing of browser and driver version strings."""

from __future__ import annotations

import re
from typing import NamedTuple

_LEADING_NUMBER = re.compile(r"^\s*[vV]?(\d+)")


class BrowserVersion(NamedTuple):
    """Comparable version; missing components are zero."""

    major: int
    minor: int = 0
    patch: int = 0
    extra: tuple[int, ...] = ()

    def __str__(self) -> str:
        parts = [self.major, self.minor, self.patch, *self.extra]
        return ".".join(str(part) for part in parts)


def parse_version(text: str) -> BrowserVersion:
    """Extract a :class:`BrowserVersion` from free-form *text*.

    Components are read left to right and parsing stops at the first one that
    does not start with a number, so ``"59.0a1"`` yields ``59.0.0`` and
    ``"75.0.3770.90"`` keeps its fourth component in :attr:`BrowserVersion.extra`.
    """

    numbers: list[int] = []
    for index, part in enumerate(text.strip().split(".")):
        match = _LEADING_NUMBER.match(part) if index == 0 else re.match(r"^(\d+)", part)
        if not match:
            break
        numbers.append(int(match.group(1)))
        if match.end() != len(part):
            break
    if not numbers:
        raise ValueError(f"no version number in {text!r}")
    major, *rest = numbers
    minor = rest[0] if len(rest) > 0 else 0
    patch = rest[1] if len(rest) > 1 else 0
    return BrowserVersion(major, minor, patch, tuple(rest[2:]))
