"""
Shared fixtures for geoerode tests.

Provides synthetic marker / mask pairs and a brute-force reference for one
geodesic erosion step.

Marker convention: marker >= mask everywhere.  Most fixtures build the marker
as ``mask + non-negative bump`` so the precondition holds by construction.
"""
from __future__ import annotations

import numpy as np
import pytest

from geoerode.neighborhood import neighbor_offsets


def naive_geodesic_step(
    marker: np.ndarray,
    mask: np.ndarray,
    fully_connected: bool = False,
) -> np.ndarray:
    """
    Pixel-by-pixel reference: min over in-image neighbours, then max with mask.

    Neighbours outside the image are skipped.
    """
    offsets = neighbor_offsets(marker.ndim, fully_connected)
    out = np.empty_like(marker)
    for p in np.ndindex(*marker.shape):
        v = marker[p]
        for off in offsets:
            q = tuple(a + b for a, b in zip(p, off))
            if all(0 <= c < s for c, s in zip(q, marker.shape)):
                v = min(v, marker[q])
        out[p] = max(v, mask[p])
    return out


def make_pair(
    shape,
    dtype=np.int32,
    seed: int = 0,
    high: int = 50,
):
    """Random (marker, mask) with marker >= mask."""
    rng = np.random.default_rng(seed)
    mask = rng.integers(0, high, size=shape).astype(dtype)
    bump = rng.integers(0, high, size=shape).astype(dtype)
    return (mask + bump).astype(dtype), mask


@pytest.fixture
def pair_2d():
    """40×33 integer image pair (odd extents so slabs are uneven)."""
    return make_pair((40, 33), seed=1)


@pytest.fixture
def pair_3d():
    """9×8×7 integer image pair."""
    return make_pair((9, 8, 7), seed=2, high=20)


@pytest.fixture
def pair_float():
    """30×30 float32 pair with continuous values."""
    rng = np.random.default_rng(3)
    mask = rng.normal(0.0, 1.0, size=(30, 30)).astype(np.float32)
    marker = mask + np.abs(rng.normal(0.0, 2.0, size=(30, 30))).astype(np.float32)
    return marker, mask


@pytest.fixture
def basin_2d():
    """
    Classic fill-holes setup (64×64).

    Mask: a bright ring (value 10) enclosing a dark basin (value 2) on a
    background of 0.  Marker: mask maximum everywhere except the border,
    where it equals the mask.  Reconstruction by erosion fills the basin up
    to the ring height and leaves the background at 0.
    """
    ny, nx = 64, 64
    yy, xx = np.ogrid[:ny, :nx]
    r2 = (xx - 32) ** 2 + (yy - 32) ** 2
    mask = np.zeros((ny, nx), dtype=np.uint8)
    mask[r2 <= 20 ** 2] = 10
    mask[r2 <= 15 ** 2] = 2

    marker = np.full_like(mask, mask.max())
    marker[0, :] = mask[0, :]
    marker[-1, :] = mask[-1, :]
    marker[:, 0] = mask[:, 0]
    marker[:, -1] = mask[:, -1]
    return marker, mask
