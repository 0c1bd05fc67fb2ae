"""NiceGUI chat interface rendering the live session."""

from fastapi import FastAPI
from nicegui import ui

from pdfchat.models.schemas import (
    Document,
    IngestionStatus,
    Message,
    MessageRole,
    SessionSnapshot,
    validate_document_url,
)
from pdfchat.registry.client import RegistryError
from pdfchat.session.controller import SessionController

# Seconds between re-renders of a page whose session changed
REFRESH_INTERVAL = 0.25

CUSTOM_CSS = """
<style>
    body { background: #f5f5f5; min-height: 100vh; }
    .panel { background: white; border-radius: 12px; box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1); }
    .header { background: linear-gradient(135deg, #4f46e5 0%, #7c3aed 100%); }
    .message-user { background: #4f46e5; color: white; border-radius: 18px 18px 4px 18px; }
    .message-assistant { background: #f3f4f6; color: #1f2937; border-radius: 18px 18px 18px 4px; }
    .document-active { border-left: 3px solid #4f46e5; background: #eef2ff; }
</style>
"""

BUSY_STATES = {IngestionStatus.UPLOADING, IngestionStatus.PROCESSING}


def render_message(message: Message) -> None:
    is_user = message.role is MessageRole.USER
    align = "justify-end" if is_user else "justify-start"
    bubble = "message-user" if is_user else "message-assistant"
    with ui.row().classes(f"w-full {align}"):
        with ui.element("div").classes(f"max-w-[75%] px-4 py-3 {bubble}"):
            if is_user:
                ui.label(message.content).classes("text-sm whitespace-pre-wrap")
            else:
                ui.markdown(message.content).classes("text-sm")


def render_status(snapshot: SessionSnapshot) -> None:
    """Ingestion status line under the upload form."""
    if snapshot.status in BUSY_STATES:
        with ui.row().classes("items-center gap-2"):
            ui.spinner(size="sm")
            ui.label(snapshot.loading_step or "Starting...").classes("text-sm text-indigo-700")
    elif snapshot.status is IngestionStatus.READY and snapshot.active_document:
        ui.label(f"Ready: {snapshot.active_document.filename}").classes("text-sm text-green-700")
    elif snapshot.status is IngestionStatus.ERROR:
        ui.label("Ingestion failed. Check the link and try again.").classes("text-sm text-red-600")


def register_chat_page(app: FastAPI) -> None:
    """Register the chat page for the session owned by app."""

    @ui.page("/")
    def chat_page() -> None:
        ui.add_head_html(CUSTOM_CSS)
        session: SessionController = app.state.session
        dirty = True

        def mark_dirty() -> None:
            nonlocal dirty
            dirty = True

        async def upload() -> None:
            try:
                url = validate_document_url(url_input.value or "")
            except ValueError as e:
                ui.notify(str(e), type="warning")
                return
            url_input.value = ""
            if not await session.upload_document(url):
                ui.notify("Ingestion failed", type="negative")

        async def send(text: str | None = None) -> None:
            content = (text if text is not None else message_input.value or "").strip()
            if not content or session.thinking:
                return
            message_input.value = ""
            await session.send_message(content)

        async def delete(document: Document) -> None:
            try:
                await session.delete_document(document.id)
            except RegistryError as e:
                ui.notify(f"Could not delete {document.filename}: {e}", type="negative")
            else:
                ui.notify(f"Deleted {document.filename}", type="positive")

        def confirm_delete(document: Document) -> None:
            with ui.dialog() as dialog, ui.card():
                ui.label(f"Delete {document.filename}?").classes("font-semibold")
                ui.label("Its conversation is discarded as well.").classes("text-sm text-gray-500")
                with ui.row().classes("w-full justify-end"):
                    ui.button("Cancel", on_click=dialog.close).props("flat")

                    async def confirmed() -> None:
                        dialog.close()
                        await delete(document)

                    ui.button("Delete", on_click=confirmed).props("color=negative")
            dialog.open()

        @ui.refreshable
        def status_view() -> None:
            render_status(session.snapshot())

        @ui.refreshable
        def documents_view() -> None:
            snapshot = session.snapshot()
            if not snapshot.documents:
                ui.label("No documents yet").classes("text-sm text-gray-400")
                return
            active_key = snapshot.active_document.key if snapshot.active_document else None
            for document in snapshot.documents:
                css = "document-active" if document.key == active_key else ""
                with ui.row().classes(f"w-full items-center justify-between px-2 py-1 {css}"):
                    with ui.column().classes("gap-0 cursor-pointer").on(
                        "click", lambda d=document: session.switch_active_document(d.id)
                    ):
                        ui.label(document.filename).classes("text-sm font-medium truncate")
                        ui.label(document.processed_at).classes("text-[10px] text-gray-400")
                    ui.button(
                        icon="delete", on_click=lambda d=document: confirm_delete(d)
                    ).props("flat round dense color=grey")

        @ui.refreshable
        def messages_view() -> None:
            snapshot = session.snapshot()
            if snapshot.status is not IngestionStatus.READY:
                with ui.column().classes("w-full h-64 items-center justify-center"):
                    ui.icon("description").classes("text-5xl text-gray-300")
                    ui.label("Ingest a PDF to start chatting").classes("text-gray-400")
                return
            if not snapshot.messages:
                with ui.column().classes("w-full items-center gap-2 py-8"):
                    ui.label("Ask something about the document").classes("text-gray-500")
                    for question in snapshot.suggestions:
                        ui.button(
                            question, on_click=lambda q=question: send(q)
                        ).props("outline rounded no-caps")
            for message in snapshot.messages:
                render_message(message)
            if snapshot.thinking:
                with ui.row().classes("items-center gap-2"):
                    ui.spinner("dots", size="lg")
                    ui.label("Thinking...").classes("text-sm text-gray-500 italic")

        def sync() -> None:
            nonlocal dirty
            if not dirty:
                return
            dirty = False
            status_view.refresh()
            documents_view.refresh()
            messages_view.refresh()
            busy = session.status in BUSY_STATES
            url_input.set_enabled(not busy)
            upload_btn.set_enabled(not busy)
            ready = session.status is IngestionStatus.READY
            message_input.set_enabled(ready)
            send_btn.set_enabled(ready and not session.thinking)

        # === UI Layout ===
        with ui.row().classes("w-full p-4 gap-4 no-wrap items-start"):
            with ui.column().classes("w-80 panel p-4 gap-3"):
                ui.label("Knowledge base").classes("text-lg font-semibold")
                url_input = ui.input(placeholder="https://example.com/file.pdf").classes("w-full")
                upload_btn = ui.button("Ingest", on_click=upload).classes("w-full")
                status_view()
                ui.separator()
                ui.label("Documents").classes("text-sm font-semibold text-gray-600")
                documents_view()

            with ui.column().classes("flex-grow panel gap-0").style("height: calc(100vh - 2rem)"):
                with ui.row().classes("w-full header px-5 py-3 items-center justify-between"):
                    ui.label("PDF Chat").classes("text-lg font-semibold text-white")
                    ui.button(icon="add", on_click=session.reset_conversation).props(
                        "flat round color=white"
                    ).tooltip("New conversation")
                with ui.scroll_area().classes("flex-grow w-full bg-gray-50"):
                    with ui.column().classes("w-full p-5 gap-3"):
                        messages_view()
                with ui.row().classes("w-full p-4 gap-3 items-end border-t no-wrap"):
                    message_input = (
                        ui.textarea(placeholder="Type a message...")
                        .props("autogrow dense rows=1 outlined")
                        .classes("flex-grow")
                        .on("keydown.enter.prevent", lambda: send())
                    )
                    send_btn = ui.button(icon="send", on_click=lambda: send()).props("round")

        session.add_listener(mark_dirty)
        ui.context.client.on_disconnect(lambda: session.remove_listener(mark_dirty))
        ui.timer(REFRESH_INTERVAL, sync)
