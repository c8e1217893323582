"""
FastAPI Customer Master Data API Server

Provides REST API endpoints for parties and everything attached to them:
natural persons, legal entities, addresses, contacts, identity documents,
consents, statuses, relationships, group memberships, economic activities,
provider references and PEP declarations.

Usage:
    uvicorn api.server:app --reload --port 8000
"""

import os
import time
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Depends, Security
from fastapi.responses import RedirectResponse
from fastapi.security import APIKeyHeader

from api.models import HealthResponse
from api.middleware import (
    setup_cors,
    setup_exception_handlers,
    RequestLoggingMiddleware,
)
from api.resources import configure_resources
from api.routes import include_resource_routers
from config_manager import get_config, ConfigManager, ConfigurationError
from database.connection import DatabaseSettings, init_db, close_db, get_db_provider

# Setup logging (reconfigured from config.yaml on startup)
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Environment variables with defaults
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
CONFIG_PATH = os.getenv("CONFIG_PATH")
API_KEY = os.getenv("API_KEY", "")  # Required for resource endpoints when set

# Global state
_config: Optional[ConfigManager] = None
_startup_time: Optional[datetime] = None

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: Optional[str] = Security(api_key_header)) -> str:
    """Verify API key for protected endpoints.

    If API_KEY environment variable is not set, authentication is disabled.
    """
    if not API_KEY:
        # API key not configured - allow all requests (development mode)
        return "dev-mode"

    if not api_key:
        raise HTTPException(
            status_code=401, detail="Missing API key. Provide X-API-Key header."
        )

    if api_key != API_KEY:
        raise HTTPException(status_code=403, detail="Invalid API key")

    return api_key


def get_config_instance() -> ConfigManager:
    """Dependency to get the config instance."""
    global _config
    if _config is None:
        _config = get_config(CONFIG_PATH)
    return _config


def database_settings_from_config(config: ConfigManager) -> DatabaseSettings:
    """config.yaml database section as defaults, DB_* environment variables on top."""
    db = config.database
    return DatabaseSettings.from_env(DatabaseSettings(
        host=db.host,
        port=db.port,
        database=db.name,
        user=db.user,
        password=db.password,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_recycle=db.pool_recycle,
        echo=db.echo,
    ))


# Configuration needed to build the application (title, docs, CORS)
_config = get_config_instance()

# Create FastAPI application
app = FastAPI(
    title=_config.api.title,
    description="CRUD and filtered search over parties and their related records",
    version=_config.api.version,
    docs_url=_config.api.docs_url,
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# Setup middleware
setup_cors(app, _config.api.cors_origins)
app.add_middleware(RequestLoggingMiddleware)
setup_exception_handlers(app)

# Resource endpoints
include_resource_routers(app, dependencies=[Depends(verify_api_key)])


@app.on_event("startup")
async def startup():
    """Load configuration, apply it, and connect to the database."""
    global _config, _startup_time

    start_time = time.time()

    try:
        _config = get_config(CONFIG_PATH)
        _config.configure_logging()
        logger.info(f"Configuration loaded from {_config.config_path}")

        try:
            configure_resources(_config.ownership.enforced_resources)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        init_db(settings=database_settings_from_config(_config))

        _startup_time = datetime.now(timezone.utc)
        logger.info("API ready in %.2f seconds", time.time() - start_time)

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        raise
    except Exception as e:
        logger.error(f"Startup error: {e}")
        raise


@app.on_event("shutdown")
async def shutdown():
    """Cleanup on shutdown."""
    logger.info("Shutting down Customer Master Data API...")
    close_db()


@app.get(
    "/api/v1/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check service and database status",
)
def health_check():
    """Return service and database status. Always returns HTTP 200."""
    uptime_seconds = None
    if _startup_time:
        uptime_seconds = int((datetime.now(timezone.utc) - _startup_time).total_seconds())

    try:
        provider = get_db_provider()
        if not provider.initialized:
            database = "not_initialized"
        elif provider.health_check():
            database = "connected"
        else:
            database = "disconnected"
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        database = "error"

    return HealthResponse(
        status="healthy" if database == "connected" else "degraded",
        database=database,
        version=get_config_instance().api.version,
        uptime_seconds=uptime_seconds,
    )


# Root redirect to docs
@app.get("/", include_in_schema=False)
async def root():
    """Redirect root to API documentation."""
    return RedirectResponse(url=app.docs_url or "/api/openapi.json")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=API_HOST, port=API_PORT)
