"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from reelgen import __version__
from reelgen.config import settings
from reelgen.db.database import init_db, close_db
from reelgen.api.routes import router
from reelgen.workers.job_runner import job_runner
from reelgen.workers.handlers import handle_generate_reel

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {settings.app_name}...")

    await init_db()
    logger.info("Database initialized")

    job_runner.register_handler("generate_reel", handle_generate_reel)
    logger.info("Job handlers registered")

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await job_runner.shutdown()
    await close_db()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="Meeting highlight reel generation",
    version=__version__,
    lifespan=lifespan
)

app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "api": "/api",
        "docs": "/docs"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "reelgen.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
