"""Round-engine primitives (guess scoring, gating, gifts, leaderboard, ingest).

Kept free of FastAPI and scheduling concerns so they can be reused by the
controller, scripts, and tests.
"""
