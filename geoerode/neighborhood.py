"""
Elementary (radius-1) neighborhoods.

Face connectivity keeps the 2*N unit steps along each axis (4 neighbours in
2-D, 6 in 3-D).  Full connectivity keeps every offset in {-1, 0, 1}^N except
the zero offset (8 in 2-D, 26 in 3-D).
"""
from __future__ import annotations

import itertools
from typing import Tuple

import numpy as np
from scipy.ndimage import generate_binary_structure


def _check_ndim(ndim: int) -> None:
    if ndim < 1:
        raise ValueError(f"ndim must be >= 1, got {ndim}")


def neighbor_offsets(ndim: int, fully_connected: bool = False) -> Tuple[Tuple[int, ...], ...]:
    """
    Neighbour offsets of the elementary structuring element, in lexicographic order.

    >>> neighbor_offsets(2)
    ((-1, 0), (0, -1), (0, 1), (1, 0))
    """
    _check_ndim(ndim)
    offsets = []
    for off in itertools.product((-1, 0, 1), repeat=ndim):
        n_steps = sum(1 for o in off if o != 0)
        if n_steps == 0:
            continue
        if fully_connected or n_steps == 1:
            offsets.append(off)
    return tuple(offsets)


def structuring_element(ndim: int, fully_connected: bool = False) -> np.ndarray:
    """
    Boolean footprint of shape ``(3,) * ndim``, centre included.

    Connectivity 1 of ``generate_binary_structure`` is the face neighbourhood;
    connectivity ``ndim`` is the full one.
    """
    _check_ndim(ndim)
    return generate_binary_structure(ndim, ndim if fully_connected else 1)
