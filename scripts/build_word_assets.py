"""Build `assets/words.csv` from a raw dictionary export.

Contract
- Input: a CSV with at least a `word` column; optional `meaning` and `example`
  columns (one row per sense, so a word may repeat).
- Output: `<repo>/assets/words.csv` with header `word,playable,meanings,examples`.
  - words are trimmed and uppercased; non-alphabetic entries are dropped
  - senses of the same word are merged into `|`-separated lists
  - `playable` is 1 for words of the target length that have at least one meaning

Usage:
    uv run python scripts/build_word_assets.py path/to/export.csv --length 5

This script is deterministic (output is sorted by word).
"""

from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

LIST_SEP = "|"


def _join_unique(values: pd.Series) -> str:
    seen: list[str] = []
    for v in values.dropna():
        s = str(v).strip().replace(LIST_SEP, "/")
        if s and s not in seen:
            seen.append(s)
    return LIST_SEP.join(seen)


def build_words_frame(raw: pd.DataFrame, *, length: int) -> pd.DataFrame:
    if "word" not in raw.columns:
        raise ValueError(f"Expected a 'word' column, got {list(raw.columns)}")

    df = raw.copy()
    for col in ("meaning", "example"):
        if col not in df.columns:
            df[col] = None

    df["word"] = df["word"].astype(str).str.strip().str.upper()
    df = df[df["word"].str.fullmatch(r"[A-Z]+")]

    grouped = (
        df.groupby("word", sort=True)
        .agg(meanings=("meaning", _join_unique), examples=("example", _join_unique))
        .reset_index()
    )
    grouped["playable"] = ((grouped["word"].str.len() == length) & (grouped["meanings"] != "")).astype(int)
    return grouped[["word", "playable", "meanings", "examples"]]


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("source", type=Path)
    parser.add_argument("--length", type=int, default=5)
    parser.add_argument("--out", type=Path, default=None)
    args = parser.parse_args()

    repo_root = Path(__file__).resolve().parents[1]
    out_path = args.out or repo_root / "assets" / "words.csv"
    out_path.parent.mkdir(parents=True, exist_ok=True)

    out = build_words_frame(pd.read_csv(args.source), length=args.length)
    out.to_csv(out_path, index=False)
    print(f"Wrote {len(out)} words ({int(out['playable'].sum())} playable) to {out_path}")


if __name__ == "__main__":
    main()
