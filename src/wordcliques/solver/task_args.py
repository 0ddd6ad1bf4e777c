"""Run arguments for the word clique solver."""

from collections.abc import Sequence
from datetime import datetime
from time import time

from wordcliques.alphabet import ALPHABET, max_group_size
from wordcliques.matrix import Representation
from wordcliques.solver.errors import UsageError
from wordcliques.solver.utils import TIMESTAMP_FMT


class TaskArgs:
    """Validated arguments for one solver run.

    Pickleable, so that it can be passed to worker processes.
    """

    def __init__(
        self,
        *,
        words: Sequence[str],
        k: int | None = None,
        representation: Representation | str = Representation.PACKED,
        reorder_by_degree: bool = True,
        alphabet: str = ALPHABET,
    ) -> None:
        """Validate the run arguments.

        Args:
            words (Sequence[str]): The vocabulary.
            k (int | None): Number of words per group.  If None, the largest size the
                alphabet allows for the word length.
            representation (Representation | str): Compatibility matrix storage layout.
            reorder_by_degree (bool): Whether to sort vertices by ascending degree.
            alphabet (str): The working alphabet.

        Raises:
            UsageError: If `k` is less than 2, or the representation is unknown.
        """
        self.words = list(words)
        """The vocabulary, in input order."""

        self.word_length = len(self.words[0]) if self.words else 0
        """Length of every word (0 for an empty vocabulary)."""

        if k is None:
            k = max_group_size(self.word_length, len(alphabet)) if self.word_length else 2
        if k < 2:
            raise UsageError(f"Group size must be at least 2, got {k}.")
        self.k = k
        """Number of words per group."""

        try:
            representation = Representation(representation)
        except ValueError:
            raise UsageError(f"Unknown matrix representation: {representation!r}") from None
        self.representation = representation
        """Compatibility matrix storage layout."""

        self.reorder_by_degree = reorder_by_degree
        """Whether to sort vertices by ascending degree before searching."""

        self.alphabet = alphabet
        """The working alphabet."""

        self.start_time = time()
        """Timestamp when the run started, in seconds since the epoch."""

    def summary(self) -> dict[str, object]:
        """Return a dictionary-based summary of the task arguments."""
        return {
            "words_count": len(self.words),
            "word_length": self.word_length,
            "k": self.k,
            "representation": self.representation.value,
            "reorder_by_degree": self.reorder_by_degree,
            "start_time": datetime.fromtimestamp(self.start_time)
            .astimezone()
            .strftime(TIMESTAMP_FMT),
        }
