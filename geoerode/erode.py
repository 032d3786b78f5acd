"""
Elementary geodesic erosion: one radius-1 step against a mask.

For every pixel p of the region being computed:

    eroded(p) = min(marker(p), marker(p + o) for every neighbour offset o)
    output(p) = max(eroded(p), mask(p))

Neighbours outside the image are left out of the minimum, so the border never
shrinks the image.  ``grey_erosion(..., mode="nearest")`` gives exactly this:
a clamped out-of-image neighbour is either the pixel itself (face
connectivity) or another neighbour already in the set (full connectivity).

The marker is read over the region plus a one-pixel halo; the mask is read
over the region only, since it enters pointwise through the maximum.  Either
input may be a crop of the image as long as it covers what is read.

Marker and mask may have different pixel types.  The maximum is taken in
their common numpy type and the result is clipped into the marker's range, so
e.g. a uint8 marker over an int8 mask of -1 never wraps around.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
from scipy.ndimage import grey_erosion

from .errors import InsufficientRegionError
from .neighborhood import structuring_element
from .region import Region


_SUPPORTED_KINDS = "biuf"


def check_dtype(dtype: np.dtype) -> None:
    """Raise TypeError unless pixels of ``dtype`` are totally ordered scalars."""
    dtype = np.dtype(dtype)
    if dtype.kind not in _SUPPORTED_KINDS:
        raise TypeError(
            f"Unsupported pixel type {dtype}; expected bool, integer or floating"
        )


def check_dtype_pair(marker_dtype: np.dtype, mask_dtype: np.dtype) -> None:
    """Raise TypeError if the output (marker type) cannot hold mask values."""
    marker_dtype = np.dtype(marker_dtype)
    mask_dtype = np.dtype(mask_dtype)
    check_dtype(marker_dtype)
    check_dtype(mask_dtype)
    if mask_dtype.kind == "f" and marker_dtype.kind != "f":
        raise TypeError(
            f"Floating mask ({mask_dtype}) needs a floating marker, got {marker_dtype}"
        )


def _work_dtype(dtype: np.dtype) -> np.dtype:
    # ndimage filters have no bool / float16 kernels; both embed exactly.
    if dtype == np.bool_:
        return np.dtype(np.uint8)
    if dtype == np.float16:
        return np.dtype(np.float32)
    return dtype


def _fit_to(values: np.ndarray, dtype: np.dtype) -> np.ndarray:
    """Clip ``values`` into the range of ``dtype`` and cast."""
    if values.dtype == dtype:
        return values
    if dtype.kind == "b":
        values = np.clip(values, 0, 1)
    elif dtype.kind in "iu":
        info = np.iinfo(dtype)
        values = np.clip(values, info.min, info.max)
    return values.astype(dtype)


def erode_region(
    marker: np.ndarray,
    mask: np.ndarray,
    region: Region,
    out: np.ndarray,
    fully_connected: bool = False,
    out_region: Optional[Region] = None,
    marker_region: Optional[Region] = None,
    mask_region: Optional[Region] = None,
    largest: Optional[Region] = None,
) -> None:
    """
    Compute one geodesic erosion step for ``region`` and write it into ``out``.

    Parameters
    ----------
    marker, mask : ndarray
        Buffers holding ``marker_region`` / ``mask_region`` of the images.
        Neither is modified.
    region : Region
        Pixels to compute.  Must lie inside ``largest``.
    out : ndarray
        Destination buffer.  Only the pixels of ``region`` are written.
    fully_connected : bool
        Use the face+edge+vertex neighbourhood instead of face-only.
    out_region : Region, optional
        Buffered region of ``out``.  Defaults to ``largest``.
    marker_region, mask_region : Region, optional
        Buffered regions of ``marker`` / ``mask``.  Default to full buffers
        anchored at the origin.  ``marker_region`` must cover ``region``
        padded by one pixel and clipped to the image; ``mask_region`` must
        cover ``region``.
    largest : Region, optional
        The whole image.  Defaults to ``marker_region``, which is only right
        when ``marker`` is not a crop.

    Raises
    ------
    InsufficientRegionError
        If a buffer does not cover what the step reads.
    """
    if region.is_empty:
        return

    if marker_region is None:
        marker_region = Region.from_shape(marker.shape)
    if mask_region is None:
        mask_region = Region.from_shape(mask.shape)
    if largest is None:
        largest = marker_region

    halo = region.pad(1).crop(largest)
    if not marker_region.contains(halo):
        raise InsufficientRegionError(
            f"Marker buffer {marker_region} does not cover {halo}",
            required=halo, buffered=marker_region,
        )
    if not mask_region.contains(region):
        raise InsufficientRegionError(
            f"Mask buffer {mask_region} does not cover {region}",
            required=region, buffered=mask_region,
        )

    work = _work_dtype(marker.dtype)
    window = marker[halo.slices(relative_to=marker_region)].astype(work, copy=False)
    footprint = structuring_element(marker.ndim, fully_connected)
    eroded = grey_erosion(window, footprint=footprint, mode="nearest")

    eroded = eroded[region.slices(relative_to=halo)]
    lower = mask[region.slices(relative_to=mask_region)]

    dest = region.slices(relative_to=out_region if out_region is not None else largest)
    out[dest] = _fit_to(np.maximum(eroded, lower), out.dtype)


def elementary_erosion(
    marker: np.ndarray,
    mask: np.ndarray,
    fully_connected: bool = False,
) -> np.ndarray:
    """Single-threaded geodesic erosion step over the whole image, into a new array."""
    marker = np.asarray(marker)
    mask = np.asarray(mask)
    check_dtype_pair(marker.dtype, mask.dtype)
    out = np.empty_like(marker)
    erode_region(marker, mask, Region.from_shape(marker.shape), out,
                 fully_connected=fully_connected)
    return out
