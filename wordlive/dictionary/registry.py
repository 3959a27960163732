from __future__ import annotations

import asyncio
import csv
import logging
import os
import random
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"^[A-Z]+$")
_LIST_SEP = "|"


class DictionaryLoadError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class WordDefinition:
    meanings: tuple[str, ...] = ()
    examples: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class WordEntry:
    word: str
    playable: bool
    definition: WordDefinition = field(default_factory=WordDefinition)


class WordDictionary(Protocol):
    """Word source consumed by the round controller."""

    async def initialize(self) -> None:  # pragma: no cover
        ...

    def get_random_word(self, length: int) -> str:  # pragma: no cover
        ...

    def is_valid_word(self, candidate: str) -> bool:  # pragma: no cover
        ...

    def get_word_definition(self, word: str) -> WordDefinition | None:  # pragma: no cover
        ...


def _norm_word(s: str) -> str:
    return s.strip().upper()


def _split_list(cell: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in cell.split(_LIST_SEP) if part.strip())


def _read_csv_rows(path: Path) -> list[list[str]]:
    try:
        with path.open(encoding="utf-8-sig", newline="") as f:
            rows = [[c.strip() for c in row if c is not None] for row in csv.reader(f)]
    except FileNotFoundError as e:
        raise DictionaryLoadError(f"Word file not found: {path}") from e

    return [row for row in rows if any(cell for cell in row)]


def load_word_csv(path: Path) -> list[WordEntry]:
    """Parse `word,playable,meanings,examples` rows.

    `meanings` and `examples` are `|`-separated. Words that are not purely
    alphabetic are skipped; duplicates are rejected.
    """

    rows = _read_csv_rows(path)
    if not rows:
        raise DictionaryLoadError(f"Empty word CSV: {path}")

    header = [c.casefold() for c in rows[0]]
    if header[:2] != ["word", "playable"]:
        raise DictionaryLoadError(f"Unexpected header in {path}: {rows[0]}")

    seen: set[str] = set()
    out: list[WordEntry] = []
    for row in rows[1:]:
        word = _norm_word(row[0]) if row else ""
        if not _WORD_RE.match(word):
            continue
        if word in seen:
            raise DictionaryLoadError(f"Duplicate word in {path}: {word}")
        seen.add(word)

        playable = len(row) > 1 and row[1].strip().lower() in {"1", "true", "yes"}
        meanings = _split_list(row[2]) if len(row) > 2 else ()
        examples = _split_list(row[3]) if len(row) > 3 else ()
        out.append(WordEntry(word=word, playable=playable, definition=WordDefinition(meanings=meanings, examples=examples)))

    if not out:
        raise DictionaryLoadError(f"No usable words in {path}")
    return out


def _fallback_entries() -> list[WordEntry]:
    """Tiny built-in word list used when the asset CSV is missing."""

    return [
        WordEntry("BERAS", True, WordDefinition(("padi yang sudah terkelupas kulitnya",), ("Ibu membeli beras di pasar.",))),
        WordEntry("KURSI", True, WordDefinition(("tempat duduk yang berkaki dan bersandaran",), ())),
        WordEntry("PINTU", True, WordDefinition(("tempat untuk masuk dan keluar",), ("Tolong tutup pintunya.",))),
        WordEntry("MERAH", True, WordDefinition(("warna dasar yang serupa dengan warna darah",), ())),
        WordEntry("SABAR", False, WordDefinition(("tahan menghadapi cobaan",), ())),
        WordEntry("BESAR", False, WordDefinition(("lebih dari ukuran sedang",), ())),
        WordEntry("RUMAH", False, WordDefinition(("bangunan untuk tempat tinggal",), ())),
    ]


class CsvWordDictionary:
    """Word service backed by `assets/words.csv`.

    Every listed word is a valid guess; only `playable` words are drawn as solutions.
    """

    def __init__(self, *, path: Path, strict: bool = False, rng: random.Random | None = None) -> None:
        self._path = path
        self._strict = strict
        self._rng = rng or random.Random()
        self._entries: dict[str, WordEntry] | None = None

    @property
    def is_initialized(self) -> bool:
        return self._entries is not None

    async def initialize(self) -> None:
        if self._entries is not None:
            return

        try:
            entries = await asyncio.to_thread(load_word_csv, self._path)
        except DictionaryLoadError:
            if self._strict:
                raise
            logger.warning("Word file %s unusable; using built-in fallback words", self._path)
            entries = _fallback_entries()

        self._entries = {e.word: e for e in entries}
        logger.info(
            "Dictionary ready: %d words (%d playable)",
            len(self._entries),
            sum(1 for e in self._entries.values() if e.playable),
        )

    def _require(self) -> dict[str, WordEntry]:
        if self._entries is None:
            raise DictionaryLoadError("Dictionary not initialized. Await initialize() first.")
        return self._entries

    def get_random_word(self, length: int) -> str:
        pool = sorted(w for w, e in self._require().items() if e.playable and len(w) == length)
        if not pool:
            raise DictionaryLoadError(f"No playable words of length {length}")
        return self._rng.choice(pool)

    def is_valid_word(self, candidate: str) -> bool:
        return _norm_word(candidate) in self._require()

    def get_word_definition(self, word: str) -> WordDefinition | None:
        entry = self._require().get(_norm_word(word))
        if entry is None:
            return None
        if not entry.definition.meanings and not entry.definition.examples:
            return None
        return entry.definition


def create_csv_dictionary(*, root: Path) -> CsvWordDictionary:
    # Strict mode surfaces a missing/broken word file instead of silently using fallback words.
    strict = os.getenv("WORDLE_STRICT_DICTIONARY", "").strip().lower() in {"1", "true", "yes"}
    return CsvWordDictionary(path=root / "assets" / "words.csv", strict=strict)
