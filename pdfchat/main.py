"""Main application entry point.

Runs FastAPI with NiceGUI mounted for the chat interface on one port.
Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Run FastAPI with NiceGUI mounted on the same server.

    FastAPI serves the session API, NiceGUI the chat page. The session
    lives for the lifetime of the server.
    """
    import uvicorn
    from nicegui import ui

    from pdfchat.api.app import create_app
    from pdfchat.ui.chat_page import register_chat_page

    app = create_app()
    register_chat_page(app)

    ui.run_with(
        app,
        title="PDF Chat",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "pdfchat-secret"),
    )

    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting server on http://localhost:{port}")
    logger.info(f"API docs available at http://localhost:{port}/docs")

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
