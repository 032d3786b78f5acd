"""
Exceptions raised by geoerode.

Every failure aborts the current request; nothing is retried, since
re-running a deterministic computation on the same inputs gives the same
outcome.
"""
from __future__ import annotations

from typing import Optional, Tuple


class GeodesicErodeError(Exception):
    """Base class for geoerode errors."""


class GeometryMismatchError(GeodesicErodeError, ValueError):
    """Marker and mask do not share the same region geometry."""


class PreconditionError(GeodesicErodeError, ValueError):
    """Marker is below mask somewhere (only raised when the debug check is on)."""

    def __init__(self, message: str, coordinate: Tuple[int, ...]):
        super().__init__(message)
        self.coordinate = coordinate


class ErosionWorkerError(GeodesicErodeError, RuntimeError):
    """A worker failed while eroding its slab; no output is published."""

    def __init__(self, message: str, region=None):
        super().__init__(message)
        self.region = region


class ErosionCancelled(GeodesicErodeError, RuntimeError):
    """The request was cancelled before every slab was processed."""


class ConvergenceError(GeodesicErodeError, RuntimeError):
    """The iteration cap was reached before a fixed point."""

    def __init__(self, message: str, n_iterations: Optional[int] = None):
        super().__init__(message)
        self.n_iterations = n_iterations


class InsufficientRegionError(GeodesicErodeError, ValueError):
    """An input buffer does not cover the region the computation must read."""

    def __init__(self, message: str, required=None, buffered=None):
        super().__init__(message)
        self.required = required
        self.buffered = buffered
