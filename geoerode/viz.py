"""
Visualisation helpers: convergence trace, marker/mask/output comparison.

Requires matplotlib (``pip install geoerode[viz]``).  Figures are saved as
PNG (300 DPI) + SVG by default.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

import numpy as np
import matplotlib
matplotlib.use("Agg")   # headless by default
import matplotlib.pyplot as plt

from .converge import ErodeResult


def save_figure(
    fig: plt.Figure,
    name: str,
    outdir: str | Path,
    formats: Sequence[str] = ("png", "svg"),
    dpi: int = 300,
) -> List[Path]:
    """Write ``fig`` as ``outdir/name.<fmt>`` for each format; return the paths."""
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    paths = [outdir / f"{name}.{fmt}" for fmt in formats]
    for path in paths:
        fig.savefig(path, dpi=dpi, bbox_inches="tight")
    return paths


def plot_convergence(
    result: ErodeResult,
    outdir: str | Path,
    name: str = "convergence",
    formats: Sequence[str] = ("png", "svg"),
    dpi: int = 300,
) -> List[Path]:
    """Bar chart of changed pixels per pass."""
    changes = np.asarray(result.changes, dtype=np.int64)
    passes = np.arange(1, changes.size + 1)

    fig, ax = plt.subplots(figsize=(6, 3.5))
    ax.bar(passes, changes, color="steelblue", edgecolor="white", linewidth=0.5)
    ax.set_xlabel("Iteration", fontsize=11)
    ax.set_ylabel("Changed pixels", fontsize=11)
    if changes.size and changes.max() > 0:
        ax.set_yscale("symlog")
    ax.set_title(f"Geodesic erosion: {result.n_iterations} iteration(s)", fontsize=11)
    fig.tight_layout()

    saved = save_figure(fig, name, outdir, formats=formats, dpi=dpi)
    plt.close(fig)
    return saved


def plot_reconstruction(
    marker: np.ndarray,
    mask: np.ndarray,
    output: np.ndarray,
    outdir: str | Path,
    name: str = "reconstruction",
    formats: Sequence[str] = ("png", "svg"),
    dpi: int = 300,
) -> List[Path]:
    """
    Compare marker, mask and output.

    1-D images are drawn as overlaid profiles, 2-D images as three panels on
    a shared grey scale.
    """
    marker = np.asarray(marker)
    mask = np.asarray(mask)
    output = np.asarray(output)

    if marker.ndim == 1:
        fig, ax = plt.subplots(figsize=(8, 3.5))
        x = np.arange(marker.size)
        ax.step(x, marker, where="mid", color="#e74c3c", label="marker")
        ax.step(x, mask, where="mid", color="#2ecc71", label="mask")
        ax.step(x, output, where="mid", color="black", linestyle="--", label="output")
        ax.set_xlabel("Index", fontsize=11)
        ax.set_ylabel("Value", fontsize=11)
        ax.legend(fontsize=9, frameon=False)
    elif marker.ndim == 2:
        vmin = float(min(marker.min(), mask.min(), output.min()))
        vmax = float(max(marker.max(), mask.max(), output.max()))
        fig, axes = plt.subplots(1, 3, figsize=(12, 4))
        for ax, img, title in zip(axes, (marker, mask, output),
                                  ("Marker", "Mask", "Output")):
            ax.imshow(img, cmap="gray", vmin=vmin, vmax=vmax, interpolation="nearest")
            ax.set_title(title, fontsize=11)
            ax.set_axis_off()
    else:
        raise ValueError(f"Only 1-D and 2-D images can be plotted, got {marker.ndim}-D")

    fig.tight_layout()
    saved = save_figure(fig, name, outdir, formats=formats, dpi=dpi)
    plt.close(fig)
    return saved
