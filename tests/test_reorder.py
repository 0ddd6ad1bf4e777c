"""Tests for wordcliques/reorder.py"""

import pytest

from conftest import SMALL_ALPHABET
from wordcliques.matrix import Representation, build_matrix
from wordcliques.reorder import degree_order, reorder
from wordcliques.solver.errors import UsageError


@pytest.mark.parametrize("representation", [Representation.PACKED, Representation.EXPANDED])
class TestReorder:
    def test_ascending_degree(self, small_words, representation):
        matrix = build_matrix(small_words, representation, alphabet=SMALL_ALPHABET)
        new_matrix, _, _ = reorder(matrix, small_words)
        degrees = new_matrix.degrees()
        assert degrees == sorted(degrees)

    def test_ties_broken_by_index(self, disjoint_words, representation):
        """All five disjoint words have degree 4, so the order is unchanged."""
        matrix = build_matrix(disjoint_words, representation)
        assert degree_order(matrix) == [0, 1, 2, 3, 4]

    def test_descending(self, disjoint_words, representation):
        words = disjoint_words + ["abfgk"]
        matrix = build_matrix(words, representation)
        # degrees: [4, 4, 4, 5, 5, 2]
        assert degree_order(matrix) == [5, 0, 1, 2, 3, 4]
        assert degree_order(matrix, descending=True) == [3, 4, 0, 1, 2, 5]

    def test_words_follow_matrix(self, small_words, representation):
        """Entry (a, b) of the new matrix is the old entry for the same two words."""
        matrix = build_matrix(small_words, representation, alphabet=SMALL_ALPHABET)
        new_matrix, new_words, perm = reorder(matrix, small_words)
        assert new_words == [small_words[old] for old in perm]
        assert sorted(perm) == list(range(len(small_words)))
        index = {w: i for i, w in enumerate(small_words)}
        for a, wa in enumerate(new_words):
            for b, wb in enumerate(new_words):
                assert new_matrix[a, b] == matrix[index[wa], index[wb]]

    def test_input_unchanged(self, small_words, representation):
        matrix = build_matrix(small_words, representation, alphabet=SMALL_ALPHABET)
        before = matrix.to_numpy()
        words_before = list(small_words)
        reorder(matrix, small_words)
        assert (matrix.to_numpy() == before).all()
        assert small_words == words_before

    def test_length_mismatch(self, small_words, representation):
        matrix = build_matrix(small_words, representation, alphabet=SMALL_ALPHABET)
        with pytest.raises(UsageError, match="entries"):
            reorder(matrix, small_words[:-1])

    def test_empty(self, representation):
        matrix = build_matrix([], representation)
        new_matrix, new_words, perm = reorder(matrix, [])
        assert new_matrix.n == 0 and new_words == [] and perm == []
