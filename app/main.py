import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import auth, discussions, health, jobs, questions, realtime, sessions, users
from app.core import config
from app.core.exceptions import register_exception_handlers
from app.core.logging_config import setup_logging
from app.db.init_db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL)
    init_db()
    if config.BYPASS_AUTH:
        logger.warning("BYPASS_AUTH is on: every request runs as the mock user")
    logger.info("PrepWise API started")
    yield


# ============================================
# FASTAPI APP INIT
# ============================================

app = FastAPI(title="PrepWise API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)

register_exception_handlers(app)


# ============================================
# REGISTER ALL ROUTERS
# ============================================

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(jobs.router)
app.include_router(questions.router)
app.include_router(sessions.router)
app.include_router(discussions.router)
app.include_router(realtime.router)
