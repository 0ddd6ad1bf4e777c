"""Letter masks and the word compatibility predicate."""

from functools import lru_cache
from string import ascii_lowercase

from wordcliques.solver.errors import InvalidWordError

ALPHABET = ascii_lowercase
"""Default working alphabet (a-z)."""


@lru_cache(maxsize=300_000)
def letter_mask(word: str, alphabet: str = ALPHABET) -> int:
    """Return a bitmask of the letters used by `word`.

    Bit `p` is set iff `alphabet[p]` occurs in the word.

    Raises:
        InvalidWordError: If the word contains a character outside the alphabet.
    """
    mask = 0
    for ch in word:
        pos = alphabet.find(ch)
        if pos < 0:
            raise InvalidWordError(f"Invalid character '{ch}' in word '{word}'.")
        mask |= 1 << pos
    return mask


def compatible(w1: str, w2: str, alphabet: str = ALPHABET) -> bool:
    """Returns whether the two words share no letter."""
    return letter_mask(w1, alphabet) & letter_mask(w2, alphabet) == 0


def has_unique_letters(word: str, alphabet: str = ALPHABET) -> bool:
    """Returns whether no letter occurs twice in `word`."""
    return letter_mask(word, alphabet).bit_count() == len(word)


def max_group_size(word_length: int, alphabet_size: int = len(ALPHABET)) -> int:
    """Largest number of letter-disjoint words of `word_length` the alphabet can hold.

    For 5-letter words over 26 letters this is 5.
    """
    if word_length <= 0:
        raise ValueError("Word length must be positive.")
    return alphabet_size // word_length
