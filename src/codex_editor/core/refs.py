"""
Live references to locations.

A ref keeps pointing at the same content while operations are applied,
e.g. the end of a range being deleted, or the place a background image read
should land. Refs must be released with ``unref()`` once no longer needed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Set

from . import path as paths
from .path import Path
from .range import Point, Range, transform_point, transform_range

if TYPE_CHECKING:
    from .operations import Operation


class _Ref:
    def __init__(self, registry: Set["_Ref"], current, affinity: Optional[str]):
        self._registry = registry
        self.current = current
        self.affinity = affinity
        registry.add(self)

    def unref(self):
        """Stop tracking and return the last known location."""
        self._registry.discard(self)
        current = self.current
        self.current = None
        return current

    def transform(self, op: "Operation") -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.current!r})"


class PathRef(_Ref):
    current: Optional[Path]

    def transform(self, op: "Operation") -> None:
        if self.current is None:
            return
        self.current = paths.transform(self.current, op, self.affinity)
        if self.current is None:
            self.unref()


class PointRef(_Ref):
    current: Optional[Point]

    def transform(self, op: "Operation") -> None:
        if self.current is None:
            return
        self.current = transform_point(self.current, op, self.affinity)
        if self.current is None:
            self.unref()


class RangeRef(_Ref):
    current: Optional[Range]

    def transform(self, op: "Operation") -> None:
        if self.current is None:
            return
        self.current = transform_range(self.current, op, self.affinity)
        if self.current is None:
            self.unref()
