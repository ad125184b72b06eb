from fastapi import FastAPI

from app.challenges.router import router as challenges_router
from app.config import settings
from app.logging_config import setup_logging
from app.stats.router import router as stats_router

setup_logging(settings.log_level)

app = FastAPI(title="Reading Tracker", version="0.1.0")
app.include_router(challenges_router)
app.include_router(stats_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "challenges": {
            "list": "/challenges",
            "detail": "/challenges/{id}",
            "generate_sql": "/challenges/generate-sql",
        },
        "stats": "/stats?year={year}",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
