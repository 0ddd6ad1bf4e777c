"""Classes and functions for the word compatibility matrix.

The matrix is an N x N symmetric boolean relation over the vocabulary: entry (i, j) is True
iff words i and j share no letter.  The diagonal is always False.  Two storage layouts are
available, selected by `Representation`; both expose the same operations, so the clique
search never needs to know which one it is running on.
"""

from collections.abc import Iterable, Sequence
from concurrent.futures import Executor
from enum import Enum
from typing import TypeAlias

import numpy as np
from bitarray import bitarray
from bitarray.util import count_and, zeros

from wordcliques.alphabet import ALPHABET, letter_mask
from wordcliques.solver.config import config as solver_config
from wordcliques.solver.errors import InvalidWordError, MatrixTooLargeError, UsageError


class Representation(str, Enum):
    """Storage layout of a compatibility matrix."""

    PACKED = "packed"
    """One bitarray per row, 1 bit per entry."""

    EXPANDED = "expanded"
    """A single numpy bool array, 1 byte per entry."""


ActiveSet: TypeAlias = bitarray | np.ndarray
"""A subset of vertices, in the same layout as a matrix row."""


class CompatibilityMatrix:
    """Store the pairwise compatibility relation of a vocabulary.

    Rows are never modified after construction; `permute` returns a new matrix.
    Sets returned by `neighbors_above`, `copy_set` and `intersect` are owned by the caller.
    """

    def __init__(self, representation: Representation, data: list[bitarray] | np.ndarray) -> None:
        self.representation = Representation(representation)
        if self.representation is Representation.PACKED:
            self._rows: list[bitarray] = list(data)
            self.n = len(self._rows)
        else:
            self._dense: np.ndarray = np.asarray(data, dtype=bool)
            if self._dense.ndim != 2 or self._dense.shape[0] != self._dense.shape[1]:
                raise UsageError(f"Expanded matrix must be square, got shape {self._dense.shape}.")
            self.n = self._dense.shape[0]

    @property
    def packed(self) -> bool:
        """Whether the matrix uses the 1-bit-per-entry layout."""
        return self.representation is Representation.PACKED

    def __len__(self) -> int:
        return self.n

    def __getitem__(self, idx: tuple[int, int]) -> bool:
        """Get the entry (i, j)."""
        if not (isinstance(idx, tuple) and len(idx) == 2):
            raise IndexError("Invalid index type for CompatibilityMatrix.")
        i, j = idx
        if self.packed:
            return bool(self._rows[i][j])
        return bool(self._dense[i, j])

    def __repr__(self) -> str:
        return f"CompatibilityMatrix({self.representation.value}, n={self.n})"

    def row(self, i: int) -> ActiveSet:
        """Return row `i` (neighbors of vertex `i`).  Must be treated as read-only."""
        if self.packed:
            return self._rows[i]
        return self._dense[i]

    def degrees(self) -> list[int]:
        """Return the number of neighbors of each vertex."""
        if self.packed:
            return [row.count() for row in self._rows]
        return self._dense.sum(axis=1).tolist()

    def neighbors_above(self, i: int) -> ActiveSet:
        """Return the neighbors of vertex `i` with an index greater than `i`."""
        active = self.row(i).copy()
        active[: i + 1] = False
        return active

    def members(self, active: ActiveSet) -> Iterable[int]:
        """Iterate over the vertices in `active`, in ascending order."""
        if self.packed:
            return active.search(1)
        return np.flatnonzero(active).tolist()

    def size(self, active: ActiveSet) -> int:
        """Return the number of vertices in `active`."""
        if self.packed:
            return active.count()
        return int(np.count_nonzero(active))

    def copy_set(self, active: ActiveSet) -> ActiveSet:
        """Return an independent copy of `active`."""
        return active.copy()

    def discard(self, active: ActiveSet, j: int) -> None:
        """Remove vertex `j` from `active`, in place."""
        active[j] = False

    def scratch(self) -> np.ndarray | None:
        """Return a reusable work buffer for `count_common`, or None if none is needed.

        The buffer is owned by the caller and must not be shared between threads.
        """
        if self.packed:
            return None
        return np.empty(self.n, dtype=bool)

    def count_common(self, active: ActiveSet, j: int, out: np.ndarray | None = None) -> int:
        """Return the size of `active & row(j)` without building the intersection.

        In the expanded layout the element-wise AND is written into `out` (see `scratch`);
        without it a temporary array is allocated.
        """
        if self.packed:
            return count_and(active, self._rows[j])
        return int(np.count_nonzero(np.logical_and(active, self._dense[j], out=out)))

    def intersect(self, active: ActiveSet, j: int) -> ActiveSet:
        """Return a new set holding `active & row(j)`."""
        if self.packed:
            return active & self._rows[j]
        return np.logical_and(active, self._dense[j])

    def permute(self, perm: Sequence[int]) -> "CompatibilityMatrix":
        """Return a new matrix with vertex `perm[a]` of this matrix moved to index `a`."""
        if sorted(perm) != list(range(self.n)):
            raise UsageError("perm must be a permutation of the vertex indices.")
        order = np.asarray(perm, dtype=np.intp)
        if not self.packed:
            return CompatibilityMatrix(self.representation, self._dense[np.ix_(order, order)])

        rows: list[bitarray] = []
        for old in order:
            bits = np.frombuffer(self._rows[old].unpack(), dtype=np.uint8)[order]
            row = bitarray()
            row.pack(bits.tobytes())
            rows.append(row)
        return CompatibilityMatrix(self.representation, rows)

    def to_numpy(self) -> np.ndarray:
        """Return the matrix as a dense numpy bool array (always a copy)."""
        if not self.packed:
            return self._dense.copy()
        if self.n == 0:
            return np.zeros((0, 0), dtype=bool)
        return np.stack([np.frombuffer(row.unpack(), dtype=bool) for row in self._rows])

    @property
    def nbytes(self) -> int:
        """Storage used by the matrix entries, in bytes."""
        if self.packed:
            return sum(row.nbytes for row in self._rows)
        return self._dense.nbytes

    def n_edges(self) -> int:
        """Number of compatible (unordered) word pairs."""
        return sum(self.degrees()) // 2

    def density(self) -> float:
        """Fraction of off-diagonal entries that are True."""
        if self.n < 2:
            return 0.0
        return 2 * self.n_edges() / (self.n * (self.n - 1))


def estimate_matrix_bytes(n: int, representation: Representation) -> int:
    """Return the storage needed for an n x n matrix in the given layout."""
    if Representation(representation) is Representation.PACKED:
        return n * ((n + 7) // 8)
    return n * n


def get_word_masks(words: Sequence[str], alphabet: str = ALPHABET) -> list[int]:
    """Validate the vocabulary and return the letter mask of each word.

    Raises:
        InvalidWordError: If the words differ in length or use characters outside the alphabet.
        UsageError: If a word appears twice.
    """
    if not words:
        return []
    length = len(words[0])
    if length == 0:
        raise InvalidWordError("Words must not be empty.")
    seen: set[str] = set()
    for word in words:
        if len(word) != length:
            raise InvalidWordError(
                f"All words must have length {length}; '{word}' has length {len(word)}."
            )
        if word in seen:
            raise UsageError(f"Duplicate word in vocabulary: '{word}'.")
        seen.add(word)
    return [letter_mask(word, alphabet) for word in words]


def create_letter_buckets(masks: list[int], alphabet_size: int) -> list[bitarray]:
    """Create one bitarray per letter, marking the words that contain it.

    Element `p` has bit `idx` set iff word `idx` contains letter `p` of the alphabet.
    """
    n = len(masks)
    buckets = [zeros(n) for _ in range(alphabet_size)]
    for idx, mask in enumerate(masks):
        for pos in range(alphabet_size):
            if mask >> pos & 1:
                buckets[pos][idx] = True
    return buckets


def compute_packed_rows(
    masks: list[int],
    buckets: list[bitarray],
    lo: int,
    hi: int,
) -> list[bitarray]:
    """Compute rows `lo` to `hi` (exclusive) of the matrix in the packed layout.

    Each row is the complement of the union of the letter buckets of its word
    (see `create_letter_buckets`).
    """
    n = len(masks)
    rows: list[bitarray] = []
    for i in range(lo, hi):
        row = zeros(n)
        mask = masks[i]
        for pos, bucket in enumerate(buckets):
            if mask >> pos & 1:
                row |= bucket
        row.invert()
        row[i] = False
        rows.append(row)
    return rows


def compute_expanded_rows(masks: np.ndarray, lo: int, hi: int) -> np.ndarray:
    """Compute rows `lo` to `hi` (exclusive) of the matrix in the expanded layout."""
    block = (masks[lo:hi, None] & masks[None, :]) == 0
    block[np.arange(hi - lo), np.arange(lo, hi)] = False
    return block


def row_blocks(n: int, block_rows: int) -> list[tuple[int, int]]:
    """Split rows `0..n` into disjoint `(lo, hi)` ranges of at most `block_rows` rows."""
    if block_rows < 1:
        raise UsageError("block_rows must be positive.")
    return [(lo, min(lo + block_rows, n)) for lo in range(0, n, block_rows)]


def build_matrix(
    words: Sequence[str],
    representation: Representation | str = Representation.PACKED,
    *,
    executor: Executor | None = None,
    alphabet: str = ALPHABET,
    block_rows: int | None = None,
    max_bytes: int | None = None,
) -> CompatibilityMatrix:
    """Build the compatibility matrix for the given vocabulary.

    Rows are computed in disjoint blocks, each owned by a single task, so no cell is ever
    written twice.  With an executor the blocks are computed in parallel.

    Args:
        words (Sequence[str]): The vocabulary; equal-length words over `alphabet`.
        representation (Representation | str): Storage layout for the matrix.
        executor (Executor | None): Optional executor for computing row blocks in parallel.
        alphabet (str): The working alphabet.
        block_rows (int | None): Rows per block.  Defaults to `config.matrix_block_rows`.
        max_bytes (int | None): Allocation limit.  Defaults to `config.max_matrix_bytes`.

    Returns:
        The compatibility matrix, index-aligned with `words`.

    Raises:
        MatrixTooLargeError: If the matrix would exceed the allocation limit, or if
            allocation fails.
    """
    representation = Representation(representation)
    masks = get_word_masks(words, alphabet)
    n = len(masks)
    if block_rows is None:
        block_rows = solver_config.matrix_block_rows
    if max_bytes is None:
        max_bytes = solver_config.max_matrix_bytes

    needed = estimate_matrix_bytes(n, representation)
    if needed > max_bytes:
        raise MatrixTooLargeError(
            f"A {representation.value} matrix for {n:,} words needs {needed:,} bytes "
            f"(limit {max_bytes:,})."
        )

    blocks = row_blocks(n, block_rows)
    try:
        if representation is Representation.PACKED:
            # Buckets are built once and shared read-only by every block
            buckets = create_letter_buckets(masks, len(alphabet))
            rows: list[bitarray] = []
            if executor is None:
                for lo, hi in blocks:
                    rows.extend(compute_packed_rows(masks, buckets, lo, hi))
            else:
                futures = [
                    executor.submit(compute_packed_rows, masks, buckets, lo, hi)
                    for lo, hi in blocks
                ]
                for future in futures:
                    rows.extend(future.result())
            return CompatibilityMatrix(representation, rows)

        dense = np.zeros((n, n), dtype=bool)
        mask_array = np.asarray(masks, dtype=np.int64)
        if executor is None:
            for lo, hi in blocks:
                dense[lo:hi] = compute_expanded_rows(mask_array, lo, hi)
        else:
            futures = [
                executor.submit(compute_expanded_rows, mask_array, lo, hi) for lo, hi in blocks
            ]
            for (lo, hi), future in zip(blocks, futures):
                dense[lo:hi] = future.result()
        return CompatibilityMatrix(representation, dense)
    except MemoryError as e:
        raise MatrixTooLargeError(
            f"Out of memory building a {representation.value} matrix for {n:,} words."
        ) from e
