"""NiceGUI interface - thin visualization layer over the session.

Responsibilities:
    - Upload form with the progress narrator and ingestion status
    - Document list with switch and delete actions
    - Chat view with suggestions and a thinking indicator

Contains no business logic. Reads session snapshots and calls session
operations only.
"""

from pdfchat.ui.chat_page import register_chat_page

__all__ = ["register_chat_page"]
