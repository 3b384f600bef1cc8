import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import settings
from backend.routers.entities import router as entities_router
from backend.routers.grid import router as grid_router
from backend.services.fetch import HttpFetcher, build_fetcher
from backend.services.grid_cache import GridStateCache
from backend.services.grid_session import GridSessionRegistry
from backend.services.store import get_store

logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    fetcher = build_fetcher(get_store())
    registry = GridSessionRegistry(
        fetcher,
        state_cache=GridStateCache(max_age=settings.GRID_STATE_MAX_AGE_SECONDS),
    )
    app.state.grid_sessions = registry
    yield
    await registry.close_all()
    if isinstance(fetcher, HttpFetcher):
        await fetcher.aclose()


app = FastAPI(title="Grouped Cameras API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Grid routes go first: /api/grid/{view_id} would otherwise match /api/{collection}/{entity_id}.
app.include_router(grid_router)
app.include_router(entities_router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
