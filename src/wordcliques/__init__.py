"""Word Clique Finder.

Finds every group of k fixed-length words in which no two words share a letter (for
example, five 5-letter words using 25 distinct letters).  The groups are the k-cliques of
a graph whose vertices are words and whose edges join letter-disjoint words; they are found
by a pruned, parallel, depth-bounded search over a bit-packed compatibility matrix.
"""

from sys import argv, exit

from .solver import solver


def main() -> None:
    """Main entry point for the word clique finder."""
    # Expect at most one argument: path to the word list file
    if len(argv) > 2:
        print("Usage: python -m wordcliques [<path_to_word_list>]")
        exit(1)
    word_list_path = argv[1] if len(argv) == 2 else None
    solver.run(word_list_path)
