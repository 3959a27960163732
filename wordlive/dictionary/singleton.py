from __future__ import annotations

from pathlib import Path

from wordlive.dictionary.registry import CsvWordDictionary, create_csv_dictionary


_DICTIONARY: CsvWordDictionary | None = None


def init_dictionary(*, project_root: Path) -> CsvWordDictionary:
    """Create the process-wide dictionary once.

    Safe to call multiple times; subsequent calls return the existing instance.
    Loading the word file happens lazily in `initialize()`.
    """

    global _DICTIONARY
    if _DICTIONARY is None:
        _DICTIONARY = create_csv_dictionary(root=project_root)
    return _DICTIONARY


def reset_dictionary_for_tests() -> None:
    global _DICTIONARY
    _DICTIONARY = None


def get_dictionary() -> CsvWordDictionary:
    if _DICTIONARY is None:
        raise RuntimeError("Dictionary not initialized. Call init_dictionary() at startup.")
    return _DICTIONARY
