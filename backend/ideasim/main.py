import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ideasim import __version__
from ideasim.config import settings
from ideasim.services.simulation_service import get_engine_config
from ideasim.api.routes import catalog, health, simulations


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: configure logging and build the engine config
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    get_engine_config()
    yield


app = FastAPI(title="Idea Viability Simulator", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api")
app.include_router(simulations.router, prefix="/api")
app.include_router(catalog.router, prefix="/api")
