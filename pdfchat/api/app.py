"""FastAPI application factory and configuration.

The lifespan owns the single live session: it is built and started on
startup and closed, releasing its realtime subscription, on shutdown.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from supabase import AsyncClient, acreate_client

from pdfchat.api.routes import router as session_router
from pdfchat.config import AppConfig, get_app_config
from pdfchat.registry.client import DocumentRegistry
from pdfchat.session.controller import SessionController, session_scope
from pdfchat.workflow.chat import ChatTurnDriver
from pdfchat.workflow.ingestion import IngestionDriver

logger = logging.getLogger(__name__)


def build_session(
    config: AppConfig,
    http_client: httpx.AsyncClient,
    supabase_client: AsyncClient,
) -> SessionController:
    """Wire a session controller from configuration and shared clients."""
    registry = DocumentRegistry(
        supabase_client,
        documents_table=config.documents_table,
        vectors_table=config.vectors_table,
    )
    ingestion = IngestionDriver(
        http_client,
        registry,
        config.ingest_webhook_url,
        progress_interval=config.progress_interval,
        timeout=config.ingest_timeout,
    )
    chat = ChatTurnDriver(http_client, config.chat_webhook_url, timeout=config.chat_timeout)
    return SessionController(
        registry,
        ingestion,
        chat,
        error_reset_delay=config.error_reset_delay,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage the session lifecycle.

    A session injected through create_app() is left to its owner.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    if app.state.session is not None:
        yield
        return

    logger.info("Starting PDF Chat session...")
    config = get_app_config()
    supabase_client = await acreate_client(config.supabase_url, config.supabase_key)
    async with httpx.AsyncClient() as http_client:
        controller = build_session(config, http_client, supabase_client)
        async with session_scope(controller):
            app.state.session = controller
            yield
            app.state.session = None
    logger.info("PDF Chat session shut down")


def create_app(session: SessionController | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        session: Pre-built session to serve instead of one built from
            the environment at startup.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="PDF Chat API",
        description=(
            "Session API for chatting with ingested PDF documents. Starts the "
            "external ingestion workflow, keeps one conversation per document "
            "and relays chat turns to the external chat workflow."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    application.state.session = session

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(session_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "pdfchat"}

    return application
