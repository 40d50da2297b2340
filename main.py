# main.py
"""Main application: library search API"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import settings
from services.logger_config import setup_logging
from database.session import init_database
from api.endpoints import router

setup_logging()
logger = logging.getLogger(settings.LOGGER_NAME)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting application...")

    # Database initialization (tables + full-text index)
    await init_database()
    logger.info("Database initialized")

    logger.info(
        f"Services configured: vector backend={settings.VECTOR_BACKEND}, "
        f"embedding provider={settings.EMBEDDING_PROVIDER}"
    )
    yield

    logger.info("Application shutdown complete")

app = FastAPI(
    title=settings.APP_TITLE,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

app.include_router(router)

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Search failed"})

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
