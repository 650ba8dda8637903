import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from modbase.core.config import settings
from modbase.core.database import engine
from modbase.core.error_handlers import register_exception_handlers
from modbase.core.logging_config import setup_logging
from modbase.db.init_db import create_tables
from modbase.middleware.logging import LoggingMiddleware
from modbase.api.v1.api import api_router
from modbase.api.web.admin import router as admin_router

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await create_tables()
    logger.info(f"Application started ({settings.ENVIRONMENT})")
    yield
    await engine.dispose()
    logger.info("Application stopped")

# Create FastAPI app
app_config = {
    "title": "Modbase Administration",
    "description": "Role/permission authorization and filterable repositories for modular admin backends",
    "version": "1.0.0",
    "lifespan": lifespan,
}

app = FastAPI(**app_config)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.add_middleware(LoggingMiddleware)

register_exception_handlers(app)

# Include routers
app.include_router(api_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/admin", tags=["Administration"])

@app.get("/")
async def root():
    return {
        "message": "Welcome to Modbase Administration",
        "status": "active",
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
async def health_check():
    database = "connected"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        database = "unavailable"

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {"database": database}
    }

def run_http():
    """Run HTTP server"""
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)

if __name__ == "__main__":
    run_http()
