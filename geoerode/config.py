"""
ErodeConfig — all tunable parameters for geodesic erosion in one dataclass.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ErodeConfig:
    # ------------------------------------------------------------------ #
    # Run mode
    # False (default) iterates to a fixed point: reconstruction by erosion.
    # True runs a single geodesic erosion step.
    # ------------------------------------------------------------------ #
    run_one_iteration: bool = False

    # ------------------------------------------------------------------ #
    # Connectivity
    # face-only by default; use fully_connected for 1-pixel-wide objects
    # ------------------------------------------------------------------ #
    fully_connected: bool = False

    # ------------------------------------------------------------------ #
    # Parallelism
    # ------------------------------------------------------------------ #
    workers: Optional[int] = 1   # threads per pass; 0 / None → os.cpu_count()
    split_axis: int = 0          # slabs are cut along this axis

    # ------------------------------------------------------------------ #
    # Safety
    # ------------------------------------------------------------------ #
    max_iterations: Optional[int] = None   # None = no cap
    check_preconditions: bool = False      # verify marker >= mask (O(N))

    def __post_init__(self):
        if not self.workers:
            self.workers = os.cpu_count() or 1
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.max_iterations is not None and self.max_iterations < 1:
            raise ValueError("max_iterations must be >= 1 (or None for no cap)")

    def resolve_axis(self, ndim: int) -> int:
        """Split axis as a non-negative index for an image of rank ``ndim``."""
        if not -ndim <= self.split_axis < ndim:
            raise ValueError(f"split_axis {self.split_axis} out of range for {ndim}-D image")
        return self.split_axis % ndim

    def describe(self) -> str:
        """Human-readable summary of the settings."""
        cap = self.max_iterations if self.max_iterations is not None else "none"
        lines = [
            f"Run one iteration:   {self.run_one_iteration}",
            f"Fully connected:     {self.fully_connected}",
            f"Workers:             {self.workers}",
            f"Split axis:          {self.split_axis}",
            f"Max iterations:      {cap}",
            f"Check preconditions: {self.check_preconditions}",
        ]
        return "\n".join(lines)
