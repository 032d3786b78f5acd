"""
geoerode — Geodesic grey-scale erosion and reconstruction by erosion for N-D images.

Quick start:
    import numpy as np
    from geoerode import ErodeConfig, geodesic_erode

    marker = np.array([5, 5, 1, 5, 5])
    mask = np.zeros(5, dtype=marker.dtype)

    one = geodesic_erode(marker, mask, ErodeConfig(run_one_iteration=True))
    one.output                                   # [5, 1, 1, 1, 5]

    rec = geodesic_erode(marker, mask, ErodeConfig(workers=4))
    rec.output, rec.n_iterations                 # [1, 1, 1, 1, 1], 3
"""

__version__ = "0.1.0"

from .config import ErodeConfig
from .converge import (
    ErodeResult,
    check_marker_dominates,
    geodesic_erode,
    reconstruction_by_erosion,
)
from .erode import elementary_erosion, erode_region
from .errors import (
    ConvergenceError,
    ErosionCancelled,
    ErosionWorkerError,
    GeodesicErodeError,
    GeometryMismatchError,
    InsufficientRegionError,
    PreconditionError,
)
from .negotiate import RegionPlan, negotiate_regions
from .neighborhood import neighbor_offsets, structuring_element
from .region import Region

__all__ = [
    "ErodeConfig",
    "ErodeResult",
    "Region",
    "RegionPlan",
    "geodesic_erode",
    "reconstruction_by_erosion",
    "elementary_erosion",
    "erode_region",
    "check_marker_dominates",
    "negotiate_regions",
    "neighbor_offsets",
    "structuring_element",
    "GeodesicErodeError",
    "GeometryMismatchError",
    "InsufficientRegionError",
    "PreconditionError",
    "ErosionWorkerError",
    "ErosionCancelled",
    "ConvergenceError",
    "__version__",
]

try:
    from .viz import plot_convergence, plot_reconstruction
    __all__.extend(["plot_convergence", "plot_reconstruction"])
except ImportError:
    pass
