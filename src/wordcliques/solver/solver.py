"""Main solver module: builds the compatibility graph and enumerates its cliques."""

import os
import sys
from collections.abc import Sequence
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from multiprocessing import Value
from multiprocessing.sharedctypes import Synchronized
from pathlib import Path
from pprint import pprint
from time import time
from typing import TextIO

from wordcliques.alphabet import ALPHABET, max_group_size
from wordcliques.groups import WordGroup, export_groups
from wordcliques.matrix import CompatibilityMatrix, Representation, build_matrix
from wordcliques.reorder import reorder
from wordcliques.solver.config import config as solver_config
from wordcliques.solver.errors import UsageError
from wordcliques.solver.parallel import count_tasks, search_with_parallel_partitions
from wordcliques.solver.task_args import TaskArgs
from wordcliques.solver.utils import TIMESTAMP_FMT, int_comma, time_str
from wordcliques.solver.worker import init_worker_globals, search_partition
from wordcliques.wordlist import load_word_list, remove_anagrams


def resolve_n_workers(n_workers: int | None = None) -> int:
    """Return the number of workers to use.

    Args:
        n_workers (int | None): Requested number of workers.  If None, uses
            `config.max_workers`, or the number of CPU cores minus one.
    """
    if n_workers is None:
        n_workers = solver_config.max_workers
    if n_workers is None:
        cpus = os.cpu_count() or 1  # Fallback to 1 if os.cpu_count() is None
        n_workers = max(1, cpus - 1)  # Leave one core free
    if n_workers < 1:
        raise UsageError(f"Number of workers must be at least 1, got {n_workers}.")
    return n_workers


def get_executor(
    *,
    n_workers: int,
    use_threads: bool | None = None,
    matrix: CompatibilityMatrix | None = None,
) -> Executor:
    """Get an executor for the solver.

    Args:
        n_workers (int): Number of workers to create.
        use_threads (bool | None): Use a thread pool instead of a process pool.  Defaults to
            `config.use_threads`.
        matrix (CompatibilityMatrix | None): If given, every worker is initialized with the
            matrix for the clique search.

    Returns:
        A ProcessPoolExecutor or ThreadPoolExecutor instance.
    """
    if use_threads is None:
        use_threads = solver_config.use_threads
    pool_cls = ThreadPoolExecutor if use_threads else ProcessPoolExecutor
    if matrix is None:
        return pool_cls(max_workers=n_workers)

    worker_ctr: Synchronized[int] = Value("i", 0)
    return pool_cls(
        max_workers=n_workers,
        initializer=init_worker_globals,
        initargs=(worker_ctr, matrix),
    )


def find_cliques(
    matrix: CompatibilityMatrix,
    words: Sequence[str],
    k: int,
    *,
    n_workers: int | None = None,
    use_threads: bool | None = None,
    tasks_per_worker: int | None = None,
    max_results: int | None = None,
    logf: TextIO | None = None,
) -> list[WordGroup]:
    """Find every group of `k` words that are pairwise adjacent in the matrix.

    Args:
        matrix (CompatibilityMatrix): Compatibility matrix, index-aligned with `words`.
        words (Sequence[str]): The vocabulary.
        k (int): Number of words per group (at least 2).
        n_workers (int | None): Number of workers.  With 1 worker the search runs in the
            calling process.
        use_threads (bool | None): Use threads instead of processes for the workers.
        tasks_per_worker (int | None): Partitions of the outer vertex index per worker.
            Defaults to `config.tasks_per_worker`.
        max_results (int | None): Limit on the number of groups.  Defaults to
            `config.max_results`.
        logf: File object to log the search.  Defaults to stdout.

    Returns:
        The word groups, in no particular order.

    Raises:
        UsageError: If `k` is less than 2, or `words` does not match the matrix.
    """
    if k < 2:
        raise UsageError(f"Group size must be at least 2, got {k}.")
    if len(words) != matrix.n:
        raise UsageError(
            f"Word list has {len(words)} entries but the matrix has {matrix.n} vertices."
        )
    n_workers = resolve_n_workers(n_workers)
    if tasks_per_worker is None:
        tasks_per_worker = solver_config.tasks_per_worker
    if max_results is None:
        max_results = solver_config.max_results
    logf = logf or sys.stdout

    if matrix.n == 0:
        return []

    if n_workers == 1:
        print("Searching in a single worker...", file=logf, flush=True)
        cliques = search_partition(matrix, k, range(matrix.n), max_results=max_results)
    else:
        n_tasks = count_tasks(matrix.n, n_workers, tasks_per_worker)
        with get_executor(n_workers=n_workers, use_threads=use_threads, matrix=matrix) as executor:
            try:
                cliques = search_with_parallel_partitions(
                    executor,
                    n_vertices=matrix.n,
                    n_tasks=n_tasks,
                    k=k,
                    logf=logf,
                    max_results=max_results,
                )
            except BaseException as e:
                executor.shutdown(wait=False, cancel_futures=True)
                raise e

    return [WordGroup.from_words(words[idx] for idx in clique) for clique in cliques]


@dataclass
class SolveResult:
    """Outcome of a solver run."""

    matrix: CompatibilityMatrix
    """The (possibly degree-ordered) compatibility matrix."""

    words: list[str]
    """The word list, index-aligned with `matrix`."""

    perm: list[int]
    """`perm[index in matrix] == index in the input vocabulary`."""

    groups: list[WordGroup]
    """All groups of `k` letter-disjoint words."""

    k: int
    """Number of words per group."""

    timings: dict[str, float] = field(default_factory=dict)
    """Seconds spent in each stage."""


def solve(
    words: Sequence[str],
    *,
    k: int | None = None,
    representation: Representation | str | None = None,
    reorder_by_degree: bool | None = None,
    n_workers: int | None = None,
    use_threads: bool | None = None,
    alphabet: str = ALPHABET,
    logf: TextIO | None = None,
) -> SolveResult:
    """Find all groups of `k` words with no letter in common.

    Arguments left as None take their value from the solver configuration.

    Args:
        words (Sequence[str]): Equal-length words, each without repeated letters.
        k (int | None): Number of words per group.
        representation (Representation | str | None): Compatibility matrix storage layout.
        reorder_by_degree (bool | None): Whether to sort vertices by ascending degree.
        n_workers (int | None): Number of workers for building the matrix and searching.
        use_threads (bool | None): Use threads instead of processes for the workers.
        alphabet (str): The working alphabet.
        logf: File object to log the solving process.  Defaults to stdout.

    Returns:
        A SolveResult with the matrix, the aligned word list and the groups found.
    """
    logf = logf or sys.stdout
    if k is None:
        k = solver_config.group_size
    if representation is None:
        representation = solver_config.representation
    if reorder_by_degree is None:
        reorder_by_degree = solver_config.reorder_by_degree

    # All validation happens before any work is dispatched
    task_args = TaskArgs(
        words=words,
        k=k,
        representation=representation,
        reorder_by_degree=reorder_by_degree,
        alphabet=alphabet,
    )
    n_workers = resolve_n_workers(n_workers)

    print("Solver config:", file=logf, flush=True)
    pprint(solver_config.model_dump(), stream=logf, width=120)
    print("Solver initialized with:", file=logf, flush=True)
    pprint(task_args.summary(), stream=logf, width=120)
    print("", file=logf, flush=True)

    timings: dict[str, float] = {}

    # Build the compatibility matrix
    t0 = time()
    n_words = len(task_args.words)
    if n_workers > 1 and n_words > solver_config.matrix_block_rows:
        with get_executor(n_workers=n_workers, use_threads=use_threads) as executor:
            matrix = build_matrix(
                task_args.words,
                task_args.representation,
                executor=executor,
                alphabet=alphabet,
            )
    else:
        matrix = build_matrix(task_args.words, task_args.representation, alphabet=alphabet)
    timings["build_matrix"] = time() - t0
    print(
        f"Built {matrix.representation.value} matrix: {int_comma(matrix.n)} words, "
        f"{int_comma(matrix.n_edges())} compatible pairs, {int_comma(matrix.nbytes)} bytes "
        f"({time_str(timings['build_matrix'])}).",
        file=logf,
        flush=True,
    )

    # Put sparsely connected words first
    search_words = task_args.words
    perm = list(range(n_words))
    if task_args.reorder_by_degree:
        t0 = time()
        matrix, search_words, perm = reorder(matrix, task_args.words)
        timings["reorder"] = time() - t0
        print(f"Reordered by degree ({time_str(timings['reorder'])}).", file=logf, flush=True)

    t0 = time()
    groups = find_cliques(
        matrix,
        search_words,
        task_args.k,
        n_workers=n_workers,
        use_threads=use_threads,
        logf=logf,
    )
    timings["find_cliques"] = time() - t0
    print(
        f"Found {int_comma(len(groups))} groups of {task_args.k} words "
        f"({time_str(timings['find_cliques'])}).",
        file=logf,
        flush=True,
    )

    return SolveResult(
        matrix=matrix,
        words=search_words,
        perm=perm,
        groups=groups,
        k=task_args.k,
        timings=timings,
    )


def run(word_list_path: str | None = None) -> SolveResult:
    """Load a word list, find its word groups, and write the log and results.

    Args:
        word_list_path (str | None): Word list file.  Defaults to `config.word_list_path`.
    """
    path = Path(word_list_path or solver_config.word_list_path)
    words = load_word_list(path, word_length=solver_config.word_length)
    print(f"Loaded {int_comma(len(words))} words of length {solver_config.word_length}.")
    if solver_config.remove_anagrams:
        words = remove_anagrams(words)
        print(f"{int_comma(len(words))} words left after removing anagrams.")

    k = solver_config.group_size
    if k is None:
        k = max_group_size(solver_config.word_length, len(ALPHABET))
    if k < 2:
        raise UsageError(f"Group size must be at least 2, got {k}.")
    logfile = (
        Path(solver_config.log_dir) / path.stem / f"k{k}-{solver_config.representation}.log"
    )
    print(f"Log file: {logfile}")
    logfile.parent.mkdir(parents=True, exist_ok=True)

    with open(logfile, "w", encoding="utf-8") as logf:
        start_time_str = datetime.now().astimezone().strftime(TIMESTAMP_FMT)
        print(f"Word list: {path}", file=logf, flush=True)
        print(f"Start time: {start_time_str}", file=logf, flush=True)
        try:
            result = solve(words, k=k, logf=logf)
        except KeyboardInterrupt:
            print("Solver interrupted by user.", file=logf, flush=True)
            print("Solver interrupted by user.")
            sys.exit(1)

        if solver_config.export_results:
            out = export_groups(result.groups, logfile.with_suffix(".tsv"))
            print(
                f"Exported {int_comma(len(result.groups))} groups to {out}",
                file=logf,
                flush=True,
            )
            print(f"Results: {out}")

    print(f"Found {int_comma(len(result.groups))} groups of {k} words.")
    print(f"Total time: {time_str(sum(result.timings.values()))}")
    return result
