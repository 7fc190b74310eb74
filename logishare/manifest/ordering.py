"""Natural, case-insensitive, locale-aware ordering of relative paths.

``track10.wav`` sorts after ``track9.wav``; ``Audio`` and ``audio`` compare
equal on the natural key and fall back to the raw path so the order stays
total.
"""

from __future__ import annotations

import locale
import re
from typing import Any

_DIGITS = re.compile(r"(\d+)")


def natural_key(path: str) -> tuple[Any, ...]:
    """Sort key for *path*.

    Digit runs compare numerically, everything else compares case-folded
    through :func:`locale.strxfrm`.  Each chunk is tagged with its kind so
    numbers and text are never compared directly.
    """
    chunks: list[tuple[int, Any]] = []
    for i, part in enumerate(_DIGITS.split(path)):
        if not part:
            continue
        if i % 2:
            chunks.append((0, int(part)))
        else:
            chunks.append((1, locale.strxfrm(part.casefold())))
    return (tuple(chunks), path)


def sort_paths(paths: list[str]) -> list[str]:
    return sorted(paths, key=natural_key)
