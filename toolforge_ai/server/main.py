"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS),
registers exception handlers and includes all API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolforge_ai.agent_core.service import get_toolbox
from toolforge_ai.core.logging_config import get_logger, setup_logging

from .api.v1 import agents, capabilities, health
from .core import constant
from .exception_handlers import setup_exception_handlers

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates the ephemeral store tables (SQL backend) on startup and disposes
    of the database engine on shutdown.
    """
    toolbox = get_toolbox()
    try:
        logger.info("Starting up Toolforge-AI Server...")
        await toolbox.startup()
    except Exception as e:
        logger.error(f"Ephemeral store initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down Toolforge-AI Server...")
    await toolbox.shutdown()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Toolforge-AI Server API

    List, describe and invoke capabilities, and run agents that call them.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(capabilities.router, prefix=f"{constant.API_V1_STR}/capabilities", tags=["capabilities"])
app.include_router(agents.router, prefix=f"{constant.API_V1_STR}/agents", tags=["agents"])


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    import uvicorn

    from toolforge_ai.core.config import settings

    uvicorn.run(app, host=settings.server_host, port=settings.server_port)
