from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from merchai.config import logger
from merchai.services.studio import Studio, build_studio

from .routers import router


def create_app(studio: Optional[Studio] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        studio: Pre-built components, used by tests. Built at startup otherwise.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.studio = studio or build_studio()
        logger.info("Studio session started")
        yield
        app.state.studio.close()

    app = FastAPI(
        title="MerchAI Studio API",
        description="AI-powered logo merchandise mockups",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(router)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


app = create_app()

logger.info("MerchAI Studio API initialized successfully")
