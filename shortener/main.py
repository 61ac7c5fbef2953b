from contextlib import asynccontextmanager
from fastapi import FastAPI

from .api.errors import register_error_handlers
from .api.v1 import records
from .database import engine, init_db
from .redis import redis_client

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    await init_db()
    await redis_client.connect()
    yield
    # Shutdown logic
    await redis_client.close()
    await engine.dispose()

from .observability import PrometheusMiddleware, metrics_endpoint
from .logging_config import setup_logging

setup_logging()

app = FastAPI(
    title="Short Link Records",
    description="CRUD service for short-token to URL records",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(PrometheusMiddleware)

register_error_handlers(app)

app.add_route("/metrics", metrics_endpoint)

app.include_router(records.router, prefix="/v1")

@app.get("/health")
async def health():
    return {"status": "ok"}
