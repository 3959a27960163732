from __future__ import annotations

import os
import random
from collections.abc import Generator
from pathlib import Path

import pytest

from wordlive.config import GameSettings
from wordlive.controller import GamePhaseController
from wordlive.dictionary.registry import CsvWordDictionary
from wordlive.scheduler import ManualScheduler

TEST_ROOT = Path(__file__).resolve().parent
TEST_WORDS = TEST_ROOT / "assets" / "words.csv"


@pytest.fixture(scope="session", autouse=True)
def _init_dictionary_from_test_fixtures() -> None:
    """Initialize the word service from `tests/assets` and forbid fallback words.

    This keeps tests hermetic: BERAS is the only playable word, so every round's
    solution is known up front.
    """

    os.environ["WORDLE_STRICT_DICTIONARY"] = "1"

    from wordlive.dictionary.singleton import init_dictionary, reset_dictionary_for_tests

    reset_dictionary_for_tests()

    # Point the loader at a fake project root: tests/ contains an assets/ dir.
    init_dictionary(project_root=TEST_ROOT)


@pytest.fixture()
def dictionary() -> CsvWordDictionary:
    return CsvWordDictionary(path=TEST_WORDS, strict=True, rng=random.Random(7))


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def controller(dictionary: CsvWordDictionary, scheduler: ManualScheduler) -> GamePhaseController:
    return GamePhaseController(dictionary=dictionary, scheduler=scheduler, settings=GameSettings())

@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch) -> Generator:
    """FastAPI TestClient running the real startup with short timings and fakeredis."""

    import fakeredis
    from fastapi.testclient import TestClient

    from wordlive.api.deps import get_redis
    from wordlive.main import app
    from wordlive.runtime import reset_controller_for_tests

    for name, value in {
        "WORDLE_PREPARE_MS": "20",
        "WORDLE_INGEST_TICK_MS": "5",
        "WORDLE_REVEAL_DELAY_MS": "20",
        "WORDLE_SUMMARY_DISPLAY_MS": "200",
        "WORDLE_TEARDOWN_MS": "20",
        "WORDLE_EVENT_STREAM": "0",
    }.items():
        monkeypatch.setenv(name, value)

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    reset_controller_for_tests()
    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_controller_for_tests()
