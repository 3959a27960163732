from __future__ import annotations

from collections.abc import Generator

import fakeredis
import pytest
import redis

from wordlive.config import GameSettings
from wordlive.core.events import RoundEvent
from wordlive.dictionary.registry import CsvWordDictionary
from wordlive.infra.redis_client import create_redis
from wordlive.runtime import get_controller, init_controller, reset_controller_for_tests
from wordlive.scheduler import ManualScheduler
from wordlive.streams import ROUND_EVENTS_STREAM, RoundEventStream, event_fields, read_round_events


@pytest.fixture()
def r() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def fresh_runtime() -> Generator[None, None, None]:
    reset_controller_for_tests()
    yield
    reset_controller_for_tests()


def test_event_fields_are_strings() -> None:
    event = RoundEvent.now(type="NOTICE", round_id=3, payload={"content": "hai", "severity": "info"})
    fields = event_fields(event)

    assert fields["type"] == "NOTICE"
    assert fields["round_id"] == "3"
    assert fields["payload"] == '{"content":"hai","severity":"info"}'
    assert all(isinstance(v, str) for v in fields.values())


def test_publish_and_read_back(r: fakeredis.FakeRedis) -> None:
    stream = RoundEventStream(r=r)

    stream(RoundEvent.now(type="PHASE_CHANGED", round_id=1, payload={"from": "loading", "to": "preparing"}))
    assert stream.publish(RoundEvent.now(type="COUNTDOWN_TICK", round_id=1, payload={"countdown": 899})) is None

    messages = read_round_events(r=r)
    assert len(messages) == 1
    assert messages[0]["type"] == "PHASE_CHANGED"
    assert messages[0]["payload"] == {"from": "loading", "to": "preparing"}
    assert messages[0]["id"]


def test_redis_outage_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    class _DownRedis:
        def xadd(self, *args: object, **kwargs: object) -> str:
            raise redis.ConnectionError("connection refused")

    stream = RoundEventStream(r=_DownRedis())  # type: ignore[arg-type]
    event = RoundEvent.now(type="ROUND_STARTED", round_id=1, payload={})

    assert stream.publish(event) is None
    assert "Could not publish ROUND_STARTED" in caplog.text


def test_redis_client_fails_fast(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("REDIS_SOCKET_TIMEOUT_MS", raising=False)
    client = create_redis("redis://localhost:6399/0")
    kwargs = client.connection_pool.connection_kwargs
    assert kwargs["socket_timeout"] == 0.5
    assert kwargs["socket_connect_timeout"] == 0.5

    monkeypatch.setenv("REDIS_SOCKET_TIMEOUT_MS", "250")
    kwargs = create_redis("redis://localhost:6399/0").connection_pool.connection_kwargs
    assert kwargs["socket_timeout"] == 0.25
    assert kwargs["socket_connect_timeout"] == 0.25

    monkeypatch.setenv("REDIS_SOCKET_TIMEOUT_MS", "soon")
    with pytest.raises(ValueError, match="REDIS_SOCKET_TIMEOUT_MS"):
        create_redis("redis://localhost:6399/0")


@pytest.mark.asyncio
async def test_runtime_wires_the_stream(
    r: fakeredis.FakeRedis, dictionary: CsvWordDictionary, fresh_runtime: None
) -> None:
    scheduler = ManualScheduler()
    controller = init_controller(settings=GameSettings(), dictionary=dictionary, scheduler=scheduler, redis_client=r)
    assert get_controller() is controller
    assert init_controller(settings=GameSettings(), dictionary=dictionary, scheduler=scheduler) is controller

    controller.start()
    await scheduler.advance(5000)

    types = [m["type"] for m in read_round_events(r=r, count=200, key=ROUND_EVENTS_STREAM)]
    assert types == ["PHASE_CHANGED", "PHASE_CHANGED", "ROUND_STARTED"]


@pytest.mark.asyncio
async def test_stream_can_be_disabled(r: fakeredis.FakeRedis, dictionary: CsvWordDictionary, fresh_runtime: None) -> None:
    scheduler = ManualScheduler()
    settings = GameSettings(event_stream_enabled=False)
    controller = init_controller(settings=settings, dictionary=dictionary, scheduler=scheduler, redis_client=r)

    controller.start()
    await scheduler.advance(3000)

    assert read_round_events(r=r) == []


def test_controller_must_be_initialized(fresh_runtime: None) -> None:
    with pytest.raises(RuntimeError):
        get_controller()
