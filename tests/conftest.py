"""Shared fixtures for the word clique tests."""

import random
from itertools import combinations

import pytest

from wordcliques.alphabet import compatible

SMALL_ALPHABET = "abcdefghij"


def brute_force_groups(words: list[str], k: int, alphabet: str) -> set[frozenset[str]]:
    """All k-subsets of `words` whose members are pairwise letter-disjoint."""
    return {
        frozenset(combo)
        for combo in combinations(words, k)
        if all(compatible(a, b, alphabet) for a, b in combinations(combo, 2))
    }


@pytest.fixture
def disjoint_words() -> list[str]:
    """Five pairwise letter-disjoint words covering 25 letters."""
    return ["abcde", "fghij", "klmno", "pqrst", "uvwxy"]


@pytest.fixture
def small_words() -> list[str]:
    """Random 3-letter words with unique letters over a 10-letter alphabet."""
    rng = random.Random(1234)
    words: list[str] = []
    while len(words) < 40:
        word = "".join(rng.sample(SMALL_ALPHABET, 3))
        if word not in words:
            words.append(word)
    return words
