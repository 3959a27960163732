from __future__ import annotations

import random

from wordlive.api.models import User
from wordlive.core.leaderboard import LeaderboardAccumulator

ALICE = User(unique_id="alice", nickname="Alice")
BOB = User(unique_id="bob", nickname="Bob")
CAROL = User(unique_id="carol", nickname="Carol")


def test_alice_twice_bob_once() -> None:
    board = LeaderboardAccumulator()
    board.record_win(ALICE)
    board.record_win(ALICE)
    board.record_win(BOB)

    assert [(e.user.nickname, e.wins) for e in board.entries()] == [("Alice", 2), ("Bob", 1)]


def test_tie_goes_to_whoever_reached_the_count_first() -> None:
    board = LeaderboardAccumulator()
    board.record_win(BOB)
    board.record_win(ALICE)
    board.record_win(ALICE)
    board.record_win(BOB)

    # Both have 2; Alice got there first.
    assert [e.user.unique_id for e in board.entries()] == ["alice", "bob"]


def test_totals_do_not_depend_on_interleaving() -> None:
    wins = [ALICE] * 5 + [BOB] * 3 + [CAROL] * 1
    random.Random(3).shuffle(wins)

    board = LeaderboardAccumulator()
    for user in wins:
        board.record_win(user)

    assert board.wins_for("alice") == 5
    assert board.wins_for("bob") == 3
    assert board.wins_for("carol") == 1
    assert board.wins_for("nobody") == 0
    assert len(board) == 3
    assert [e.wins for e in board.entries()] == [5, 3, 1]


def test_latest_profile_is_kept() -> None:
    board = LeaderboardAccumulator()
    board.record_win(ALICE)
    entry = board.record_win(User(unique_id="alice", nickname="Alice B."))

    assert entry.wins == 2
    assert board.entries()[0].user.nickname == "Alice B."
