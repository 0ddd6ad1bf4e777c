"""Exceptions raised by the word clique solver."""


class UsageError(ValueError):
    """Invalid arguments passed to the solver (detected before any work is dispatched)."""

    pass


class InvalidWordError(UsageError):
    """A word contains characters outside the alphabet, or has the wrong length."""

    pass


class MatrixTooLargeError(MemoryError):
    """The compatibility matrix for the vocabulary cannot be allocated."""

    pass


class ResultLimitExceededError(MemoryError):
    """The number of word groups found exceeds the configured limit."""

    pass


class CliqueSearchError(RuntimeError):
    """A worker failed during the parallel search; no partial result is returned."""

    pass
