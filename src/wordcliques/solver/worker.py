"""Main module for worker tasks in the parallel clique search."""

from collections.abc import Iterable
from dataclasses import dataclass
from multiprocessing.sharedctypes import Synchronized
from typing import TypeAlias

import numpy as np

from wordcliques.matrix import ActiveSet, CompatibilityMatrix
from wordcliques.solver.errors import ResultLimitExceededError

Clique: TypeAlias = tuple[int, ...]
"""Indices of the vertices of a clique, in strictly increasing order."""


@dataclass(kw_only=True)
class WorkerState:
    """Global state maintained by each worker."""

    worker_idx: int
    """Index of the worker."""

    matrix: CompatibilityMatrix
    """Degree-ordered compatibility matrix.  Read-only for the whole search."""

    n_tasks_done: int = 0
    """Number of partitions searched by this worker."""


worker_state: WorkerState | None = None
"""Global state for each worker process.

In thread mode all workers share the same module, so this holds the same matrix for every
thread; only `worker_idx` is overwritten.
"""


def init_worker_globals(
    worker_ctr: "Synchronized[int]",
    matrix: CompatibilityMatrix,
) -> None:
    """Initialize global variables for workers.

    Args:
        worker_ctr (Synchronized[int]): Shared counter for workers.
        matrix (CompatibilityMatrix): The matrix to search.
    """
    global worker_state  # noqa: PLW0603
    with worker_ctr.get_lock():
        # Get and set the shared worker counter atomically, using the obtained value
        # as the worker index
        worker_idx = worker_ctr.value
        worker_ctr.value += 1

    worker_state = WorkerState(worker_idx=worker_idx, matrix=matrix)
    print(f"Worker {worker_state.worker_idx} initialized.", flush=True)


def worker_task(*, task_idx: int, n_tasks: int, k: int, max_results: int | None) -> list[Clique]:
    """Search the partition `task_idx::n_tasks` of the outer vertex index.

    Args:
        task_idx (int): Index of this partition.
        n_tasks (int): Total number of partitions.
        k (int): Number of vertices per clique.
        max_results (int | None): Limit on the number of cliques this partition may return.

    Returns:
        The cliques whose smallest vertex lies in this partition.
    """
    # Ensure worker_state is initialized
    if not worker_state:
        raise RuntimeError("Worker state not initialized. Call init_worker_globals first.")

    matrix = worker_state.matrix
    cliques = search_partition(
        matrix,
        k,
        range(task_idx, matrix.n, n_tasks),
        max_results=max_results,
    )
    worker_state.n_tasks_done += 1
    return cliques


def search_partition(
    matrix: CompatibilityMatrix,
    k: int,
    outer: Iterable[int],
    *,
    max_results: int | None = None,
) -> list[Clique]:
    """Find all cliques of size `k` whose smallest vertex is in `outer`.

    Args:
        matrix (CompatibilityMatrix): The compatibility matrix.
        k (int): Number of vertices per clique (at least 2).
        outer (Iterable[int]): Candidate first vertices.
        max_results (int | None): Raise once more than this many cliques are found.

    Returns:
        A private buffer of cliques, each a tuple of increasing vertex indices.
    """
    found: list[Clique] = []
    depth = k - 2
    # Shared by every level of the recursion; only used inside `count_common`
    scratch = matrix.scratch()
    for i in outer:
        active = matrix.neighbors_above(i)
        # Need k - 1 more vertices after i
        if matrix.size(active) < k - 1:
            continue
        extend_clique(
            matrix, (i,), active, depth, found, max_results=max_results, scratch=scratch
        )
    return found


def extend_clique(
    matrix: CompatibilityMatrix,
    chosen: Clique,
    active: ActiveSet,
    depth: int,
    found: list[Clique],
    *,
    max_results: int | None = None,
    scratch: np.ndarray | None = None,
) -> None:
    """Extend `chosen` by every combination of vertices from `active`.

    Args:
        matrix (CompatibilityMatrix): The compatibility matrix.
        chosen (Clique): Vertices chosen so far, in increasing order.
        active (ActiveSet): Vertices adjacent to all of `chosen`, all with a larger index
            than the last chosen vertex.
        depth (int): Number of vertices still to choose before the final one.
        found (list[Clique]): Buffer receiving completed cliques.
        max_results (int | None): Raise as soon as `found` holds more than this many cliques.
        scratch (np.ndarray | None): Work buffer from `matrix.scratch()`.

    Raises:
        ResultLimitExceededError: If `max_results` is exceeded.
    """
    if depth == 0:
        found.extend(chosen + (v,) for v in matrix.members(active))
        if max_results is not None and len(found) > max_results:
            raise ResultLimitExceededError(f"More than {max_results:,} cliques found.")
        return

    # `remaining` is always `active` restricted to indices greater than `j`
    remaining = matrix.copy_set(active)
    for j in matrix.members(active):
        matrix.discard(remaining, j)
        # After j, `depth` more vertices are needed from its common neighbors
        if matrix.count_common(remaining, j, out=scratch) < depth:
            continue
        extend_clique(
            matrix,
            chosen + (j,),
            matrix.intersect(remaining, j),
            depth - 1,
            found,
            max_results=max_results,
            scratch=scratch,
        )
