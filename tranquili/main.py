# tranquili+ backend api
# fastapi app with async mongodb, bearer-token auth, and achievement tracking

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tranquili.config import settings
from tranquili.services.db import db
from tranquili.routers import achievements, chat, moods

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """startup: connect to mongodb. shutdown: close connection."""
    logger.info("Starting Tranquili+ backend...")
    await db.connect()
    logger.info("Tranquili+ backend ready")
    yield
    logger.info("Shutting down Tranquili+ backend...")
    await db.close()


app = FastAPI(
    title="Tranquili+ API",
    description="Backend API for Tranquili+ — mood check-ins, chat history, and achievements",
    version="0.1.0",
    lifespan=lifespan,
)

# cors — allow frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# register routers
app.include_router(moods.router)
app.include_router(chat.router)
app.include_router(achievements.router)


@app.get("/health")
async def health_check():
    """basic health check endpoint"""
    return {"status": "ok", "service": "tranquili-api"}
