from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

import models  # noqa: F401  registers tables on Base.metadata
from database import Base, engine, get_settings, serializable_session
from core.clock import SystemClock
from services.round_seeder import seed_rounds
from api import rounds, boards, transactions, players

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables, then make sure rounds are seeded and one is active
    Base.metadata.create_all(bind=engine)

    if settings.seed_on_startup:
        with serializable_session() as db:
            seed_rounds(db, SystemClock(), settings.club_timezone, settings.seed_weeks_ahead)
    yield


app = FastAPI(
    title="Club Lottery API",
    description="Weekly numbers lottery: rounds, boards and the deposit ledger",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(rounds.router)
app.include_router(boards.router)
app.include_router(transactions.router)
app.include_router(players.router)


@app.get("/")
def root():
    return {"message": "Club Lottery API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
