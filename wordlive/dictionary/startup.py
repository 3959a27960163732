from __future__ import annotations

from pathlib import Path

from wordlive.dictionary.registry import CsvWordDictionary
from wordlive.dictionary.singleton import init_dictionary


def init_dictionary_for_app() -> CsvWordDictionary:
    # project root is two levels up from this file: wordlive/dictionary/startup.py
    project_root = Path(__file__).resolve().parents[2]
    return init_dictionary(project_root=project_root)
