"""Word clique solver configuration."""

from typing import Literal

from dotenv import find_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine the environment file path, or None if not found
ENV_FILE = find_dotenv() or None


class SolverConfig(BaseSettings):
    """Configuration settings for the word clique solver."""

    word_length: int = 5
    """Length of every word in the vocabulary. Default: 5."""

    group_size: int | None = None
    """Number of words per group. If None (default), the largest size the alphabet allows."""

    representation: Literal["packed", "expanded"] = "packed"
    """Compatibility matrix storage: 1 bit per entry ("packed") or 1 byte ("expanded")."""

    remove_anagrams: bool = True
    """Whether to keep only one word per anagram class before searching. Default: True."""

    reorder_by_degree: bool = True
    """Whether to sort vertices by ascending degree before searching. Default: True."""

    max_workers: int | None = None
    """Maximum number of workers to use. If None (default), uses os.cpu_count() - 1."""

    use_threads: bool = False
    """Whether to use a thread pool instead of a process pool. Default: False."""

    tasks_per_worker: int = 4
    """Number of striped partitions of the outer search index per worker. Default: 4."""

    matrix_block_rows: int = 512
    """Number of matrix rows computed per block when building the matrix. Default: 512."""

    max_matrix_bytes: int = 2 * 1024**3
    """Refuse to allocate a compatibility matrix larger than this. Default: 2 GiB."""

    max_results: int | None = None
    """Maximum number of word groups to collect. If None (default), no limit."""

    word_list_path: str = "words_alpha.txt"
    """Word list file (one word per line) used when none is given. Default: "words_alpha.txt"."""

    log_dir: str = "logs"
    """Directory for per-run log files and exported results. Default: "logs"."""

    export_results: bool = True
    """Whether to write the sorted word groups to a tab-delimited file. Default: True."""

    model_config = SettingsConfigDict(
        env_prefix="WORDCLIQUES_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="forbid",
    )


config = SolverConfig()
