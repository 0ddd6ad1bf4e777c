"""Tests for wordcliques/solver/solver.py and the command line entry point"""

import io

import pytest

import wordcliques
from conftest import SMALL_ALPHABET, brute_force_groups
from wordcliques.matrix import Representation
from wordcliques.solver import solver
from wordcliques.solver.config import config as solver_config
from wordcliques.solver.errors import UsageError
from wordcliques.solver.task_args import TaskArgs


class TestTaskArgs:
    def test_default_group_size(self, disjoint_words):
        assert TaskArgs(words=disjoint_words).k == 5
        assert TaskArgs(words=["abcd"]).k == 6

    def test_invalid_group_size(self, disjoint_words):
        with pytest.raises(UsageError, match="at least 2"):
            TaskArgs(words=disjoint_words, k=1)

    def test_invalid_representation(self, disjoint_words):
        with pytest.raises(UsageError, match="representation"):
            TaskArgs(words=disjoint_words, representation="sparse")

    def test_summary(self, disjoint_words):
        summary = TaskArgs(words=disjoint_words, representation="expanded").summary()
        assert summary["words_count"] == 5
        assert summary["word_length"] == 5
        assert summary["k"] == 5
        assert summary["representation"] == "expanded"


class TestSolve:
    def test_five_disjoint_words(self, disjoint_words):
        logf = io.StringIO()
        result = solver.solve(disjoint_words + ["abfgk"], k=5, n_workers=1, logf=logf)
        assert [group.words for group in result.groups] == [frozenset(disjoint_words)]
        assert result.k == 5
        assert set(result.timings) == {"build_matrix", "reorder", "find_cliques"}
        log = logf.getvalue()
        assert "Solver config:" in log
        assert "Found 1 groups of 5 words" in log

    def test_words_aligned_with_matrix(self, small_words):
        result = solver.solve(
            small_words, k=3, n_workers=1, alphabet=SMALL_ALPHABET, logf=io.StringIO()
        )
        assert result.words == [small_words[old] for old in result.perm]
        degrees = result.matrix.degrees()
        assert degrees == sorted(degrees)

    @pytest.mark.parametrize("representation", ["packed", "expanded"])
    @pytest.mark.parametrize("reorder_by_degree", [True, False])
    def test_options_do_not_change_groups(self, small_words, representation, reorder_by_degree):
        result = solver.solve(
            small_words,
            k=3,
            representation=representation,
            reorder_by_degree=reorder_by_degree,
            n_workers=2,
            use_threads=True,
            alphabet=SMALL_ALPHABET,
            logf=io.StringIO(),
        )
        assert result.matrix.representation is Representation(representation)
        assert {g.words for g in result.groups} == brute_force_groups(
            small_words, 3, SMALL_ALPHABET
        )

    def test_without_reordering_perm_is_identity(self, small_words):
        result = solver.solve(
            small_words,
            k=2,
            reorder_by_degree=False,
            n_workers=1,
            alphabet=SMALL_ALPHABET,
            logf=io.StringIO(),
        )
        assert result.perm == list(range(len(small_words)))
        assert result.words == small_words
        assert "reorder" not in result.timings

    def test_parallel_matrix_build(self, small_words, monkeypatch):
        """Vocabularies larger than one row block are built on the worker pool."""
        monkeypatch.setattr(solver_config, "matrix_block_rows", 8)
        result = solver.solve(
            small_words,
            k=3,
            n_workers=3,
            use_threads=True,
            alphabet=SMALL_ALPHABET,
            logf=io.StringIO(),
        )
        assert {g.words for g in result.groups} == brute_force_groups(
            small_words, 3, SMALL_ALPHABET
        )

    def test_usage_error_before_work(self, disjoint_words):
        with pytest.raises(UsageError):
            solver.solve(disjoint_words, k=1, logf=io.StringIO())

    def test_empty_vocabulary(self):
        result = solver.solve([], k=2, n_workers=1, logf=io.StringIO())
        assert result.groups == []


@pytest.fixture
def configured(tmp_path, monkeypatch):
    """Point the solver configuration at a temporary word list and log directory."""
    path = tmp_path / "words.txt"
    path.write_text(
        "\n".join(["abcde", "fghij", "klmno", "pqrst", "uvwxy", "edcba", "zzzzz", "apple"]),
        encoding="utf-8",
    )
    monkeypatch.setattr(solver_config, "word_list_path", str(path))
    monkeypatch.setattr(solver_config, "log_dir", str(tmp_path / "logs"))
    monkeypatch.setattr(solver_config, "word_length", 5)
    monkeypatch.setattr(solver_config, "group_size", None)
    monkeypatch.setattr(solver_config, "max_workers", 1)
    monkeypatch.setattr(solver_config, "representation", "packed")
    return tmp_path


class TestRun:
    def test_run_writes_log_and_results(self, configured):
        result = solver.run()
        assert len(result.groups) == 1
        log = configured / "logs" / "words" / "k5-packed.log"
        tsv = log.with_suffix(".tsv")
        assert log.is_file()
        assert "Start time:" in log.read_text(encoding="utf-8")
        assert tsv.read_text(encoding="utf-8") == "abcde\tfghij\tklmno\tpqrst\tuvwxy\n"

    def test_run_keeps_anagrams(self, configured, monkeypatch):
        """Without anagram removal 'edcba' forms a second group."""
        monkeypatch.setattr(solver_config, "remove_anagrams", False)
        result = solver.run()
        assert len(result.groups) == 2

    def test_run_without_export(self, configured, monkeypatch):
        monkeypatch.setattr(solver_config, "export_results", False)
        solver.run()
        assert not (configured / "logs" / "words" / "k5-packed.tsv").exists()

    @pytest.mark.parametrize("group_size", [0, 1])
    def test_invalid_group_size(self, configured, monkeypatch, group_size):
        """A configured group size below 2 is reported, not replaced by the default."""
        monkeypatch.setattr(solver_config, "group_size", group_size)
        with pytest.raises(UsageError, match="at least 2"):
            solver.run()
        assert not (configured / "logs").exists()

    def test_missing_word_list(self, configured):
        with pytest.raises(FileNotFoundError):
            solver.run(str(configured / "nope.txt"))

    def test_main(self, configured, monkeypatch, capsys):
        monkeypatch.setattr(wordcliques, "argv", ["wordcliques", solver_config.word_list_path])
        wordcliques.main()
        assert "Found 1 groups of 5 words." in capsys.readouterr().out

    def test_main_usage(self, monkeypatch, capsys):
        monkeypatch.setattr(wordcliques, "argv", ["wordcliques", "a", "b"])
        with pytest.raises(SystemExit):
            wordcliques.main()
        assert "Usage" in capsys.readouterr().out
