import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger

from liftcoach.api.coach import router as coach_router
from liftcoach.api.exercises import router as exercises_router
from liftcoach.api.profile import router as profile_router
from liftcoach.api.programs import router as programs_router
from liftcoach.api.workouts import history_router
from liftcoach.api.workouts import router as workouts_router
from liftcoach.config.settings import settings
from liftcoach.core.logger import setup_logger
from liftcoach.db.session import init_db

# Initialize logger
setup_logger(level=settings.log_level, log_file=settings.log_file, json_file=settings.log_json)

if not settings.openai_api_key:
    logger.warning("OPENAI_API_KEY is not set. Coaching tips will use static fallbacks and chat will fail.")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifespan - ensure database tables exist on startup."""
    logger.info("Ensuring database tables exist")
    init_db()

    await asyncio.sleep(0)
    yield

    logger.info("LiftCoach backend shutting down")


app = FastAPI(title="LiftCoach", lifespan=lifespan)

app.include_router(profile_router)
app.include_router(exercises_router)
app.include_router(programs_router)
app.include_router(workouts_router)
app.include_router(history_router)
app.include_router(coach_router)

logger.info("FastAPI application initialized")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests."""
    logger.debug(f"Request: {request.method} {request.url.path}")
    response = await call_next(request)
    logger.debug(f"Response: {response.status_code} for {request.method} {request.url.path}")
    return response
