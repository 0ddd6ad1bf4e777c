"""Implementation of the parallel search: task distribution and result merging."""

import traceback
from concurrent.futures import Executor, as_completed
from dataclasses import dataclass, field
from typing import Literal, TextIO, TypedDict

from wordcliques.solver.errors import CliqueSearchError, ResultLimitExceededError
from wordcliques.solver.worker import Clique, worker_task


class WorkerTaskPayload(TypedDict):
    """Payload submitted to workers."""

    task_idx: int
    """Index of the partition of the outer vertex index."""
    n_tasks: int
    """Total number of partitions."""
    k: int
    """Number of vertices per clique."""
    max_results: int | None
    """Limit on the number of cliques per partition."""


@dataclass
class Result:
    """Wrapper for worker task results."""

    task_idx: int
    status: Literal["success", "error"]
    cliques: list[Clique] = field(default_factory=list)
    err_msg: str | None = None
    limit_exceeded: bool = False


def count_tasks(n_vertices: int, n_workers: int, tasks_per_worker: int) -> int:
    """Return the number of partitions to split the outer index into (at least 1)."""
    return max(1, min(n_vertices, n_workers * max(1, tasks_per_worker)))


def search_with_parallel_partitions(
    executor: Executor,
    *,
    n_vertices: int,
    n_tasks: int,
    k: int,
    logf: TextIO,
    max_results: int | None = None,
) -> list[Clique]:
    """Search all partitions of the outer vertex index in parallel and merge the results.

    Partition `t` holds the first vertices `t, t + n_tasks, t + 2 * n_tasks, ...`.  Striping
    spreads the degree-ordered vertices evenly over the tasks.  Each task returns its own
    buffer; buffers are concatenated only after every task has finished.

    Args:
        executor (Executor): Executor whose workers were initialized with the matrix.
        n_vertices (int): Number of vertices in the matrix.
        n_tasks (int): Number of partitions.
        k (int): Number of vertices per clique.
        logf: File object to log the search.
        max_results (int | None): Limit on the total number of cliques.

    Returns:
        All cliques found, in no particular order.

    Raises:
        CliqueSearchError: If any task fails.  Remaining tasks are cancelled.
        ResultLimitExceededError: If more than `max_results` cliques are found.
    """
    tasks: list[WorkerTaskPayload] = [
        {"task_idx": t, "n_tasks": n_tasks, "k": k, "max_results": max_results}
        for t in range(n_tasks)
    ]
    print(
        f"Searching {n_vertices:,} first vertices in {n_tasks} partitions...",
        file=logf,
        flush=True,
    )

    buffers: dict[int, list[Clique]] = {}
    futures = [executor.submit(_worker_task, task) for task in tasks]
    for future in as_completed(futures):
        result = future.result()
        if result.status == "error":
            print(
                f"Partition {result.task_idx} encountered an error; terminating remaining workers.",
                file=logf,
                flush=True,
            )
            print(result.err_msg, file=logf, flush=True)
            executor.shutdown(wait=False, cancel_futures=True)
            if result.limit_exceeded:
                raise ResultLimitExceededError(result.err_msg)
            raise CliqueSearchError(f"Partition {result.task_idx} failed:\n{result.err_msg}")
        buffers[result.task_idx] = result.cliques

    cliques = [clique for t in sorted(buffers) for clique in buffers[t]]
    if max_results is not None and len(cliques) > max_results:
        raise ResultLimitExceededError(f"More than {max_results:,} cliques found.")
    print(
        f"All {n_tasks} partitions searched, {len(cliques):,} cliques found.",
        file=logf,
        flush=True,
    )
    return cliques


def _worker_task(args: WorkerTaskPayload) -> Result:
    """Worker task to search one partition of the outer vertex index.

    Args:
        args (dict): Dictionary received from `executor.submit` containing:
            - "task_idx": Index of the partition.
            - "n_tasks": Total number of partitions.
            - "k": Number of vertices per clique.
            - "max_results": Limit on the number of cliques.

    Returns:
        A Result wrapper.
    """
    try:
        return Result(task_idx=args["task_idx"], status="success", cliques=worker_task(**args))
    except Exception as e:
        return Result(
            task_idx=args.get("task_idx", -1),
            status="error",
            err_msg=f"Worker encountered an error: {str(e)}\n{traceback.format_exc()}",
            limit_exceeded=isinstance(e, ResultLimitExceededError),
        )
