"""Word groups: materialized cliques, and their deterministic export."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from itertools import product
from os import PathLike
from pathlib import Path

from sortedcontainers import SortedList


@dataclass(frozen=True)
class WordGroup:
    """A set of mutually letter-disjoint words, with the letters they use."""

    words: frozenset[str]
    """The member words."""

    chars: frozenset[str] = field(compare=False)
    """Union of the letters of the member words."""

    @classmethod
    def from_words(cls, words: Iterable[str]) -> "WordGroup":
        """Create a WordGroup from its member words."""
        members = frozenset(words)
        return cls(words=members, chars=frozenset("".join(members)))

    @property
    def nwords(self) -> int:
        """Number of words in the group."""
        return len(self.words)

    @property
    def nchars(self) -> int:
        """Number of distinct letters used by the group."""
        return len(self.chars)

    @property
    def disjoint(self) -> bool:
        """Whether no letter is shared by two member words."""
        return self.nchars == sum(len(w) for w in self.words)

    def __contains__(self, word: object) -> bool:
        return word in self.words

    def __len__(self) -> int:
        return len(self.words)

    def sorted_words(self) -> tuple[str, ...]:
        """Return the member words in lexicographic order."""
        return tuple(sorted(self.words))

    def __str__(self) -> str:
        return " ".join(self.sorted_words())


def union(group: WordGroup, other: WordGroup | str) -> WordGroup:
    """Return a new group with the words of `other` (a group or a single word) added."""
    if isinstance(other, str):
        return WordGroup(words=group.words | {other}, chars=group.chars | set(other))
    return WordGroup(words=group.words | other.words, chars=group.chars | other.chars)


def sort_groups(groups: Iterable[WordGroup]) -> list[tuple[str, ...]]:
    """Return each group as a sorted tuple of words, the tuples themselves sorted."""
    return list(SortedList(group.sorted_words() for group in groups))


def export_groups(groups: Iterable[WordGroup], path: PathLike | str) -> Path:
    """Write the groups to a tab-delimited file, one group per line, in sorted order.

    Returns:
        The path written to.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        for words in sort_groups(groups):
            f.write("\t".join(words) + "\n")
    return out


def expand_anagrams(
    groups: Iterable[WordGroup],
    classes: Mapping[str, Iterable[str]],
) -> list[WordGroup]:
    """Expand groups of anagram representatives into every combination of anagram variants.

    Args:
        groups: Groups found over a vocabulary with anagrams removed.
        classes: Mapping of sorted-letter key to all words with those letters
            (see `wordlist.anagram_classes`).
    """
    expanded: list[WordGroup] = []
    for group in groups:
        variants = [classes.get("".join(sorted(w)), [w]) for w in group.sorted_words()]
        expanded.extend(WordGroup.from_words(combo) for combo in product(*variants))
    return expanded
