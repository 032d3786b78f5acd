"""
Orchestrator: negotiate regions, then erode once or iterate to a fixed point.

Stages per request (geodesic_erode):
  1. Validate marker / mask geometry and pixel type
  2. Negotiate marker, mask and output regions, and check the input buffers
     cover them
  3. Optional debug check that marker >= mask
  4a. Single iteration: one region-parallel pass straight into the output
  4b. Convergence: repeat region-parallel passes, each consuming the previous
      pass's output as its marker, until no pixel changes

Convergence is guaranteed for finite value domains: iterates never increase
and are bounded below by the mask.  Only two buffers live at once; they swap
roles every pass.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .config import ErodeConfig
from .erode import check_dtype_pair, erode_region
from .errors import (
    ConvergenceError,
    GeometryMismatchError,
    InsufficientRegionError,
    PreconditionError,
)
from .executor import run_regions
from .negotiate import RegionPlan, negotiate_regions
from .region import Region


@dataclass
class ErodeResult:
    output: np.ndarray            # pixels of ``region``
    region: Region                # output region actually produced
    n_iterations: int             # passes run, including the confirming pass
    changes: List[int] = field(default_factory=list)   # changed pixels per pass
    plan: Optional[RegionPlan] = None
    time_s: float = 0.0

    @property
    def converged(self) -> bool:
        return bool(self.changes) and self.changes[-1] == 0


def validate_inputs(
    marker: np.ndarray,
    mask: np.ndarray,
    image_region: Optional[Region] = None,
    marker_region: Optional[Region] = None,
    mask_region: Optional[Region] = None,
) -> Tuple[Region, Region, Region]:
    """
    Raise unless marker and mask share geometry and have ordered pixel types.

    With no regions given both arrays must be the whole image.  Otherwise
    each array holds its buffered region of ``image_region``.

    Returns
    -------
    (image_region, marker_region, mask_region)
    """
    if marker.ndim == 0:
        raise GeometryMismatchError("Marker must have at least one dimension")
    if image_region is None and marker_region is None and mask_region is None:
        if marker.shape != mask.shape:
            raise GeometryMismatchError(
                f"Marker shape {marker.shape} does not match mask shape {mask.shape}"
            )
    if mask.ndim != marker.ndim:
        raise GeometryMismatchError(
            f"Marker rank {marker.ndim} does not match mask rank {mask.ndim}"
        )
    check_dtype_pair(marker.dtype, mask.dtype)

    if image_region is None:
        image_region = Region.from_shape(marker.shape)
    if marker_region is None:
        marker_region = Region.from_shape(marker.shape)
    if mask_region is None:
        mask_region = Region.from_shape(mask.shape)

    for name, arr, reg in (("Marker", marker, marker_region), ("Mask", mask, mask_region)):
        if reg.ndim != image_region.ndim or arr.ndim != image_region.ndim:
            raise GeometryMismatchError(
                f"{name} rank does not match image rank {image_region.ndim}"
            )
        if arr.shape != reg.size:
            raise GeometryMismatchError(
                f"{name} buffer shape {arr.shape} does not match its region {reg}"
            )
        if not image_region.contains(reg):
            raise GeometryMismatchError(
                f"{name} region {reg} lies outside the image {image_region}"
            )
    return image_region, marker_region, mask_region


def check_marker_dominates(
    marker: np.ndarray,
    mask: np.ndarray,
    region: Optional[Region] = None,
    marker_region: Optional[Region] = None,
    mask_region: Optional[Region] = None,
) -> None:
    """
    Raise PreconditionError at the first coordinate where marker < mask.

    Costs a full pass over the region, so it is only run on request.
    Coordinates are reported in image space, not buffer space.
    """
    if marker_region is None:
        marker_region = Region.from_shape(marker.shape)
    if mask_region is None:
        mask_region = Region.from_shape(mask.shape)
    if region is None:
        region = mask_region
    sub_marker = marker[region.slices(relative_to=marker_region)]
    sub_mask = mask[region.slices(relative_to=mask_region)]
    # numpy compares mixed types in their common type, so no wraparound here
    bad = sub_marker < sub_mask
    if bad.any():
        local = tuple(int(c) for c in np.argwhere(bad)[0])
        coord = tuple(c + o for c, o in zip(local, region.index))
        raise PreconditionError(
            f"Marker ({sub_marker[local]}) is below mask ({sub_mask[local]}) at {coord}",
            coordinate=coord,
        )


def _check_coverage(name: str, buffered: Region, required: Region) -> None:
    if not buffered.contains(required):
        raise InsufficientRegionError(
            f"{name} buffer {buffered} does not cover the required region {required}",
            required=required, buffered=buffered,
        )


def geodesic_erode(
    marker: np.ndarray,
    mask: np.ndarray,
    cfg: Optional[ErodeConfig] = None,
    requested_region: Optional[Region] = None,
    cancel: Optional[threading.Event] = None,
    verbose: bool = False,
    image_region: Optional[Region] = None,
    marker_region: Optional[Region] = None,
    mask_region: Optional[Region] = None,
) -> ErodeResult:
    """
    Geodesic erosion of ``marker`` over ``mask``.

    Parameters
    ----------
    marker : ndarray
        Image to erode.  Must be >= ``mask`` pixelwise (caller's obligation,
        checked only when ``cfg.check_preconditions`` is set).  Not modified.
    mask : ndarray
        Pixelwise lower bound.  Not modified.  Same shape as ``marker``
        unless buffered regions are given.
    cfg : ErodeConfig or None (uses defaults: run to convergence, face
        connectivity, one worker)
    requested_region : Region, optional
        Output region wanted.  Defaults to the whole image.  In convergence
        mode it is always enlarged to the whole image.
    cancel : threading.Event, optional
        Set from another thread to abort; raises ``ErosionCancelled``.
    verbose : bool
    image_region : Region, optional
        The whole image (largest possible region).  Defaults to the extent
        of ``marker``.
    marker_region, mask_region : Region, optional
        Part of the image each array holds.  Default to the array's own
        extent anchored at the origin.  A single iteration needs only
        ``result.plan.marker_region`` / ``result.plan.mask_region`` buffered;
        convergence needs the whole image.

    Returns
    -------
    result : ErodeResult
        ``result.output`` covers ``result.region``; ``result.n_iterations`` is
        1 in single-iteration mode, otherwise the number of passes including
        the final pass that changed nothing.

    Raises
    ------
    InsufficientRegionError
        If a buffer does not cover the region negotiated for it.
    """
    if cfg is None:
        cfg = ErodeConfig()
    marker = np.asarray(marker)
    mask = np.asarray(mask)
    largest, marker_region, mask_region = validate_inputs(
        marker, mask, image_region, marker_region, mask_region,
    )

    t0 = time.perf_counter()
    if requested_region is None:
        requested_region = largest
    plan = negotiate_regions(requested_region, largest, cfg.run_one_iteration)
    _check_coverage("Marker", marker_region, plan.marker_region)
    _check_coverage("Mask", mask_region, plan.mask_region)
    axis = cfg.resolve_axis(marker.ndim)

    if verbose:
        mode = "single iteration" if cfg.run_one_iteration else "until convergence"
        print(f"  Geodesic erosion ({mode}): output {plan.output_region}, "
              f"{cfg.workers} worker(s)", flush=True)

    if cfg.check_preconditions:
        check_marker_dominates(marker, mask, plan.mask_region,
                               marker_region, mask_region)

    if cfg.run_one_iteration:
        output = np.empty(plan.output_region.size, dtype=marker.dtype)

        def _step(slab: Region) -> None:
            erode_region(marker, mask, slab, output,
                         fully_connected=cfg.fully_connected,
                         out_region=plan.output_region,
                         marker_region=marker_region,
                         mask_region=mask_region,
                         largest=largest)

        run_regions(_step, plan.output_region, workers=cfg.workers,
                    cancel=cancel, axis=axis)
        before = marker[plan.output_region.slices(relative_to=marker_region)]
        n_changed = int(np.count_nonzero(output != before))
        elapsed = time.perf_counter() - t0
        if verbose:
            print(f"  1 iteration, {n_changed} pixel(s) changed  ({elapsed:.2f}s)",
                  flush=True)
        return ErodeResult(output, plan.output_region, 1, [n_changed], plan,
                           round(elapsed, 4))

    # Convergence reads the whole image, so both buffers are the whole image here.
    output, changes = _iterate(marker, mask, cfg, largest, axis, cancel, verbose)
    elapsed = time.perf_counter() - t0
    if verbose:
        print(f"  Converged after {len(changes)} iteration(s)  ({elapsed:.2f}s)",
              flush=True)
    return ErodeResult(output, largest, len(changes), changes, plan, round(elapsed, 4))


def _iterate(
    marker: np.ndarray,
    mask: np.ndarray,
    cfg: ErodeConfig,
    largest: Region,
    axis: int,
    cancel: Optional[threading.Event],
    verbose: bool,
):
    """Run passes until a fixed point; return (final iterate, changed pixels per pass)."""
    current = marker.copy()
    scratch = np.empty_like(current)
    changes: List[int] = []

    while True:
        src, dst = current, scratch

        def _step(slab: Region) -> None:
            erode_region(src, mask, slab, dst, fully_connected=cfg.fully_connected,
                         out_region=largest, marker_region=largest,
                         mask_region=largest, largest=largest)

        run_regions(_step, largest, workers=cfg.workers, cancel=cancel, axis=axis)

        # Exact equality for every pixel type.
        n_changed = int(np.count_nonzero(dst != src))
        changes.append(n_changed)
        if verbose:
            print(f"  Iteration {len(changes)}: {n_changed} pixel(s) changed", flush=True)

        current, scratch = dst, src
        if n_changed == 0:
            return current, changes

        if cfg.max_iterations is not None and len(changes) >= cfg.max_iterations:
            raise ConvergenceError(
                f"No fixed point after {len(changes)} iterations "
                f"({n_changed} pixel(s) still changing); check for non-finite "
                f"values or marker < mask",
                n_iterations=len(changes),
            )


def reconstruction_by_erosion(
    marker: np.ndarray,
    mask: np.ndarray,
    fully_connected: bool = False,
    workers: int = 1,
    max_iterations: Optional[int] = None,
) -> np.ndarray:
    """Fixed point of geodesic erosion; returns only the output image."""
    cfg = ErodeConfig(
        run_one_iteration=False,
        fully_connected=fully_connected,
        workers=workers,
        max_iterations=max_iterations,
    )
    return geodesic_erode(marker, mask, cfg).output
