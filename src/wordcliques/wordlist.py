"""Module for word list management."""

from collections.abc import Iterable
from os import PathLike
from pathlib import Path

from wordcliques.alphabet import ALPHABET, has_unique_letters
from wordcliques.solver.config import config as solver_config


def anagram_key(word: str) -> str:
    """Return the letters of `word` in sorted order; anagrams share the same key."""
    return "".join(sorted(word))


def filter_words(
    words: Iterable[str],
    *,
    word_length: int,
    alphabet: str = ALPHABET,
) -> list[str]:
    """Keep words of exactly `word_length` letters from `alphabet` with no repeated letter.

    Words are stripped and lower-cased.  The first occurrence order is kept and duplicates
    are dropped.
    """
    letters = set(alphabet)
    seen: set[str] = set()
    kept: list[str] = []
    for line in words:
        word = line.strip().lower()
        if len(word) != word_length or word in seen:
            continue
        if not set(word) <= letters:
            continue
        if not has_unique_letters(word, alphabet):
            continue
        seen.add(word)
        kept.append(word)
    return kept


def load_word_list(
    path: PathLike | str | None = None,
    *,
    word_length: int | None = None,
    alphabet: str = ALPHABET,
) -> list[str]:
    """Load the word list from a one-word-per-line file.

    Args:
        path: Word list file.  Defaults to `config.word_list_path`.
        word_length: Length of words to keep.  Defaults to `config.word_length`.
        alphabet: The working alphabet.

    Returns:
        The filtered words, in file order.
    """
    word_list_path = Path(path if path is not None else solver_config.word_list_path)
    if not word_list_path.is_file():
        raise FileNotFoundError(f"Word list file not found: {word_list_path}")
    if word_length is None:
        word_length = solver_config.word_length

    with word_list_path.open("r", encoding="utf-8") as f:
        return filter_words(f, word_length=word_length, alphabet=alphabet)


def remove_anagrams(words: Iterable[str]) -> list[str]:
    """Keep only the first word seen for each set of letters, preserving order.

    Groups that need a non-representative anagram are recovered afterwards with
    `groups.expand_anagrams`.
    """
    seen: set[str] = set()
    kept: list[str] = []
    for word in words:
        key = anagram_key(word)
        if key in seen:
            continue
        seen.add(key)
        kept.append(word)
    return kept


def anagram_classes(words: Iterable[str]) -> dict[str, list[str]]:
    """Map each sorted-letter key to the words sharing those letters, in input order."""
    classes: dict[str, list[str]] = {}
    for word in words:
        classes.setdefault(anagram_key(word), []).append(word)
    return classes
