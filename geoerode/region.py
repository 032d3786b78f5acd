"""
Axis-aligned N-dimensional regions.

A Region is an origin (``index``) plus an extent (``size``) per axis.  Three
region notions appear throughout the package:

  - requested region : what a consumer wants computed
  - buffered region  : what is actually held in an array
  - largest region   : the full extent of an image, ``Region.from_shape(a.shape)``

All arrays are C-ordered numpy arrays, so axis 0 is the slowest-varying axis.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Region:
    index: Tuple[int, ...]
    size: Tuple[int, ...]

    def __post_init__(self):
        index = tuple(int(i) for i in self.index)
        size = tuple(int(s) for s in self.size)
        if len(index) != len(size):
            raise ValueError(
                f"index and size must have the same length, got {len(index)} and {len(size)}"
            )
        if any(s < 0 for s in size):
            raise ValueError(f"size must be non-negative, got {size}")
        object.__setattr__(self, "index", index)
        object.__setattr__(self, "size", size)

    @classmethod
    def from_shape(cls, shape: Sequence[int]) -> "Region":
        """Largest possible region of an array with the given shape."""
        return cls((0,) * len(shape), tuple(shape))

    @property
    def ndim(self) -> int:
        return len(self.size)

    @property
    def upper(self) -> Tuple[int, ...]:
        """Exclusive end coordinate per axis."""
        return tuple(i + s for i, s in zip(self.index, self.size))

    @property
    def n_pixels(self) -> int:
        n = 1
        for s in self.size:
            n *= s
        return n

    @property
    def is_empty(self) -> bool:
        return self.n_pixels == 0

    def pad(self, radius: int = 1) -> "Region":
        """Grow the region by ``radius`` pixels on every side (may leave the image)."""
        return Region(
            tuple(i - radius for i in self.index),
            tuple(s + 2 * radius for s in self.size),
        )

    def crop(self, other: "Region") -> "Region":
        """
        Intersection with ``other``.

        A disjoint pair yields an empty region anchored at the clipped origin.
        """
        self._check_rank(other)
        lo = [max(a, b) for a, b in zip(self.index, other.index)]
        hi = [min(a, b) for a, b in zip(self.upper, other.upper)]
        size = [max(0, h - l) for l, h in zip(lo, hi)]
        return Region(tuple(lo), tuple(size))

    def contains(self, other: "Region") -> bool:
        self._check_rank(other)
        return all(
            a <= b and bu <= au
            for a, b, au, bu in zip(self.index, other.index, self.upper, other.upper)
        )

    def is_inside(self, coord: Sequence[int]) -> bool:
        if len(coord) != self.ndim:
            return False
        return all(i <= c < u for c, i, u in zip(coord, self.index, self.upper))

    def slices(self, relative_to: Optional["Region"] = None) -> Tuple[slice, ...]:
        """
        Numpy index for this region inside a buffer.

        Parameters
        ----------
        relative_to : Region, optional
            Buffered region of the array being indexed.  Defaults to a buffer
            whose origin is the global origin.
        """
        origin = relative_to.index if relative_to is not None else (0,) * self.ndim
        return tuple(
            slice(i - o, i - o + s) for i, o, s in zip(self.index, origin, self.size)
        )

    def split(self, n: int, axis: int = 0) -> List["Region"]:
        """
        Partition into at most ``n`` disjoint contiguous slabs along ``axis``.

        Slab lengths differ by at most one pixel; empty slabs are dropped, so
        fewer than ``n`` slabs come back when the axis is shorter than ``n``.

        >>> [r.size for r in Region((0, 0), (5, 4)).split(2)]
        [(3, 4), (2, 4)]
        """
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")
        if self.is_empty:
            return []
        if self.ndim == 0:
            return [self]
        axis = axis % self.ndim

        length = self.size[axis]
        n = min(n, length)
        base, extra = divmod(length, n)

        slabs = []
        start = self.index[axis]
        for k in range(n):
            step = base + (1 if k < extra else 0)
            index = list(self.index)
            size = list(self.size)
            index[axis] = start
            size[axis] = step
            slabs.append(Region(tuple(index), tuple(size)))
            start += step
        return slabs

    def _check_rank(self, other: "Region") -> None:
        if other.ndim != self.ndim:
            raise ValueError(f"Region rank mismatch: {self.ndim} vs {other.ndim}")

    def __str__(self) -> str:
        return f"Region(index={self.index}, size={self.size})"
