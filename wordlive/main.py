import logging

from fastapi import FastAPI

from wordlive.api.routes import router
from wordlive.config import load_settings
from wordlive.dictionary.startup import init_dictionary_for_app
from wordlive.infra.redis_client import create_redis
from wordlive.runtime import init_controller, shutdown_controller
from wordlive.scheduler import AsyncioScheduler

app = FastAPI(title="wordlive", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    settings = load_settings()
    dictionary = init_dictionary_for_app()
    redis_client = create_redis() if settings.event_stream_enabled else None
    controller = init_controller(
        settings=settings,
        dictionary=dictionary,
        scheduler=AsyncioScheduler(),
        redis_client=redis_client,
    )
    if not controller.started:
        controller.start()
    logger.info("Round engine started (word length %d)", settings.word_length)


@app.on_event("shutdown")
async def _shutdown() -> None:
    shutdown_controller()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "wordlive", "version": "0.1.0"}
