"""Degree ordering of the compatibility graph.

Searching sparsely connected vertices first makes the neighbor-count pruning in the clique
search reject partial groups much earlier.  Ordering only affects running time, never the
set of groups found.
"""

from collections.abc import Sequence

from wordcliques.matrix import CompatibilityMatrix
from wordcliques.solver.errors import UsageError


def degree_order(matrix: CompatibilityMatrix, *, descending: bool = False) -> list[int]:
    """Return the vertex indices sorted by degree, ties broken by index.

    Args:
        matrix (CompatibilityMatrix): The compatibility matrix.
        descending (bool): Put high-degree vertices first (much slower to search; useful
            only for benchmarking the heuristic).
    """
    degrees = matrix.degrees()
    if descending:
        return sorted(range(matrix.n), key=lambda i: (-degrees[i], i))
    return sorted(range(matrix.n), key=lambda i: (degrees[i], i))


def reorder(
    matrix: CompatibilityMatrix,
    words: Sequence[str],
    *,
    descending: bool = False,
) -> tuple[CompatibilityMatrix, list[str], list[int]]:
    """Apply the degree ordering to the matrix and the word list together.

    Returns:
        A tuple `(matrix, words, perm)` where `perm[new_index] == old_index`.
    """
    if len(words) != matrix.n:
        raise UsageError(
            f"Word list has {len(words)} entries but the matrix has {matrix.n} vertices."
        )
    perm = degree_order(matrix, descending=descending)
    return matrix.permute(perm), [words[old] for old in perm], perm
