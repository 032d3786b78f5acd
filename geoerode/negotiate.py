"""
Region negotiation: how much input must be resident before computing output.

Single iteration
    marker : requested output padded by one pixel, clipped to the image
    mask   : requested output (it only enters pointwise)
    output : unchanged

Convergence
    marker, mask, output : the whole image.  A fixed point can depend on any
    pixel through repeated radius-1 propagation, so a sub-region request
    still forces a full-image computation.

Negotiation happens before any buffer is allocated.
"""
from __future__ import annotations

from typing import NamedTuple, Tuple

from .region import Region


class RegionPlan(NamedTuple):
    marker_region: Region
    mask_region: Region
    output_region: Region


def enlarge_output_region(
    requested: Region,
    largest: Region,
    run_one_iteration: bool,
) -> Region:
    """Output region to produce for a given request."""
    if run_one_iteration:
        return requested
    return largest


def required_input_regions(
    requested: Region,
    largest: Region,
    run_one_iteration: bool,
) -> Tuple[Region, Region]:
    """Return ``(marker_region, mask_region)`` needed to compute ``requested``."""
    if run_one_iteration:
        return requested.pad(1).crop(largest), requested
    return largest, largest


def negotiate_regions(
    requested: Region,
    largest: Region,
    run_one_iteration: bool,
) -> RegionPlan:
    """
    Full negotiation: enlarge the output request, then derive input regions.

    Raises
    ------
    ValueError
        If ``requested`` is not inside ``largest``.
    """
    if requested.ndim != largest.ndim:
        raise ValueError(
            f"Requested region has rank {requested.ndim}, image has rank {largest.ndim}"
        )
    if not largest.contains(requested):
        raise ValueError(f"Requested {requested} lies outside the image {largest}")

    output_region = enlarge_output_region(requested, largest, run_one_iteration)
    marker_region, mask_region = required_input_regions(
        output_region, largest, run_one_iteration,
    )
    return RegionPlan(marker_region, mask_region, output_region)
