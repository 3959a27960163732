from __future__ import annotations

import random
from pathlib import Path

import pytest

from wordlive.dictionary.registry import (
    CsvWordDictionary,
    DictionaryLoadError,
    create_csv_dictionary,
    load_word_csv,
)
from wordlive.dictionary.singleton import get_dictionary

TEST_WORDS = Path(__file__).resolve().parent / "assets" / "words.csv"


def test_load_word_csv_parses_lists_and_flags() -> None:
    entries = {e.word: e for e in load_word_csv(TEST_WORDS)}

    assert entries["BERAS"].playable
    assert not entries["SABAR"].playable
    assert entries["BERAS"].definition.meanings == ("padi yang sudah terkelupas kulitnya",)
    assert entries["BERAS"].definition.examples == ("Ibu membeli beras di pasar.",)


def test_load_word_csv_rejects_duplicates_and_skips_non_words(tmp_path: Path) -> None:
    p = tmp_path / "words.csv"
    p.write_text("word,playable,meanings,examples\nberas,1,a|b,\nbe-ras,1,,\n", encoding="utf-8")
    entries = load_word_csv(p)
    assert [e.word for e in entries] == ["BERAS"]
    assert entries[0].definition.meanings == ("a", "b")

    p.write_text("word,playable\nBERAS,1\nberas,0\n", encoding="utf-8")
    with pytest.raises(DictionaryLoadError):
        load_word_csv(p)


def test_load_word_csv_reads_bom_crlf_and_quoted_newlines(tmp_path: Path) -> None:
    p = tmp_path / "words.csv"
    p.write_bytes(
        b"\xef\xbb\xbfword,playable,meanings,examples\r\n"
        b'BERAS,1,"padi, sudah dikupas","baris satu\r\nbaris dua"\r\n'
        b"KURSI,0,,\r\n"
    )

    entries = {e.word: e for e in load_word_csv(p)}

    assert list(entries) == ["BERAS", "KURSI"]
    assert entries["BERAS"].playable
    assert entries["BERAS"].definition.meanings == ("padi, sudah dikupas",)
    assert entries["BERAS"].definition.examples == ("baris satu\r\nbaris dua",)
    assert not entries["KURSI"].playable


def test_load_word_csv_requires_header(tmp_path: Path) -> None:
    p = tmp_path / "words.csv"
    p.write_text("kata,main\nBERAS,1\n", encoding="utf-8")
    with pytest.raises(DictionaryLoadError):
        load_word_csv(p)


@pytest.mark.asyncio
async def test_dictionary_lookups(dictionary: CsvWordDictionary) -> None:
    with pytest.raises(DictionaryLoadError):
        dictionary.get_random_word(5)

    await dictionary.initialize()
    await dictionary.initialize()  # idempotent
    assert dictionary.is_initialized

    assert dictionary.get_random_word(5) == "BERAS"
    assert dictionary.is_valid_word("sabar")
    assert dictionary.is_valid_word(" Rumah ")
    assert not dictionary.is_valid_word("QQQQQ")

    definition = dictionary.get_word_definition("beras")
    assert definition is not None
    assert definition.meanings
    # Listed but without meanings or examples.
    assert dictionary.get_word_definition("PINTU") is None
    assert dictionary.get_word_definition("QQQQQ") is None

    with pytest.raises(DictionaryLoadError):
        dictionary.get_random_word(6)


@pytest.mark.asyncio
async def test_missing_file_uses_fallback_unless_strict(tmp_path: Path) -> None:
    loose = CsvWordDictionary(path=tmp_path / "missing.csv", rng=random.Random(1))
    await loose.initialize()
    assert loose.is_valid_word("BERAS")
    assert len(loose.get_random_word(5)) == 5

    strict = CsvWordDictionary(path=tmp_path / "missing.csv", strict=True)
    with pytest.raises(DictionaryLoadError):
        await strict.initialize()
    assert not strict.is_initialized


def test_strict_mode_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORDLE_STRICT_DICTIONARY", "true")
    d = create_csv_dictionary(root=tmp_path)
    assert d._strict is True  # noqa: SLF001

    monkeypatch.delenv("WORDLE_STRICT_DICTIONARY")
    d = create_csv_dictionary(root=tmp_path)
    assert d._strict is False  # noqa: SLF001


def test_singleton_points_at_test_assets() -> None:
    assert get_dictionary()._path == TEST_WORDS  # noqa: SLF001
