import asyncio
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tempo_splits.api.auth import router as auth_router
from tempo_splits.api.splits import router as splits_router
from tempo_splits.api.payments import router as payments_router
from tempo_splits.api.stats import router as stats_router
from tempo_splits.core.config import settings
from tempo_splits.workers.auto_distribute import run_auto_distribution

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger("tempo_splits")


async def auto_distribute_loop():
    while True:
        try:
            await run_auto_distribution()
        except Exception:
            logger.exception("Auto-distribution run failed")  # keep the loop alive
        await asyncio.sleep(settings.auto_distribute_interval)


@asynccontextmanager
async def lifespan(app):
    task = None
    if settings.auto_distribute_enabled:
        task = asyncio.create_task(auto_distribute_loop())
    yield
    if task:
        task.cancel()


app = FastAPI(title="Tempo Splits API", version="0.1.0", lifespan=lifespan)

cors_origins = settings.cors_origins.split(",")

from starlette.types import ASGIApp, Receive, Scope, Send

class TimingMiddleware:
    """Lightweight ASGI middleware: one log line per HTTP request."""
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        t0 = time.perf_counter()
        status_code = 0

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        await self.app(scope, receive, send_wrapper)
        ms = int((time.perf_counter() - t0) * 1000)
        method = scope.get("method", "?")
        path = scope.get("path", "?")
        logger.info(f"{method} {path} -> {status_code} in {ms}ms")


app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth_router)
app.include_router(splits_router)
app.include_router(payments_router)
app.include_router(stats_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "chain_id": settings.chain_id}
