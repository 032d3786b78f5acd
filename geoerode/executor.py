"""
Region-parallel execution of a per-region computation.

The output region is cut into contiguous slabs along one axis (axis 0, the
slowest-varying axis of a C-ordered array, by default) and each slab is handed
to ``func`` on its own thread.  Slabs are disjoint and the inputs are
read-only while a pass runs, so the result does not depend on scheduling.

Returning from ``run_regions`` is a barrier: every slab has been written, or
an exception is raised and the pass is to be treated as aborted.
"""
from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional

from .errors import ErosionCancelled, ErosionWorkerError
from .region import Region


def run_regions(
    func: Callable[[Region], None],
    region: Region,
    workers: int = 1,
    cancel: Optional[threading.Event] = None,
    axis: int = 0,
) -> List[Region]:
    """
    Run ``func(slab)`` over a partition of ``region``.

    Parameters
    ----------
    func : callable
        Per-slab computation.  Must only write pixels of the slab it gets.
    region : Region
        Region to cover.
    workers : int
        Number of slabs / threads.  1 = sequential (no thread pool).
    cancel : threading.Event, optional
        When set, no further slab is started and ``ErosionCancelled`` is
        raised once the running slabs have finished.  A flag set at any point
        before the barrier aborts the whole pass.
    axis : int
        Axis along which slabs are cut.

    Returns
    -------
    slabs : list of Region
        The partition that was processed, in region order.
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    slabs = region.split(workers, axis=axis)

    if workers == 1 or len(slabs) <= 1:
        for slab in slabs:
            if cancel is not None and cancel.is_set():
                raise ErosionCancelled(f"Cancelled before {slab}")
            try:
                func(slab)
            except Exception as exc:
                raise ErosionWorkerError(f"Worker failed on {slab}: {exc}", region=slab) from exc
        if cancel is not None and cancel.is_set():
            raise ErosionCancelled(f"Cancelled during pass over {region}")
        return slabs

    abort = threading.Event()

    def _run(slab: Region) -> bool:
        if abort.is_set() or (cancel is not None and cancel.is_set()):
            return False
        func(slab)
        return True

    with ThreadPoolExecutor(max_workers=len(slabs)) as pool:
        futures = [pool.submit(_run, slab) for slab in slabs]
        for fut in as_completed(futures):
            if not fut.cancelled() and fut.exception() is not None:
                # Stop launching work; running slabs finish before the pool exits.
                abort.set()
                for f in futures:
                    f.cancel()
                break

    for slab, fut in zip(slabs, futures):
        if not fut.cancelled() and fut.exception() is not None:
            exc = fut.exception()
            raise ErosionWorkerError(f"Worker failed on {slab}: {exc}", region=slab) from exc

    n_done = sum(1 for fut in futures if not fut.cancelled() and fut.result())
    if n_done < len(slabs) or (cancel is not None and cancel.is_set()):
        raise ErosionCancelled(f"Cancelled after {n_done}/{len(slabs)} slabs")
    return slabs
