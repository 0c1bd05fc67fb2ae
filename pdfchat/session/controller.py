"""Session controller: the single state machine behind the chat UI.

Composes the document registry, the ingestion and chat drivers and the
conversation store. The presentation layer reads snapshot() and calls the
public operations; nothing else mutates session state.

Two independent axes are tracked:
    - ingestion status: idle -> processing -> ready, or -> error -> idle
    - thinking: whether any chat turn is still in flight

While a document is active, its conversation object is the one held in
the store, so every appended message is already saved under its key.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, Callable, Coroutine, Sequence
from contextlib import asynccontextmanager
from typing import Any

from pdfchat.models.schemas import (
    Conversation,
    Document,
    IngestionStatus,
    Message,
    MessageRole,
    SessionSnapshot,
    validate_document_url,
)
from pdfchat.registry.client import Disposer, DocumentRegistry, RegistryError
from pdfchat.session.conversations import ConversationStore
from pdfchat.workflow.chat import APOLOGY_REPLY, ChatTurnDriver
from pdfchat.workflow.ingestion import IngestionDriver, IngestionError

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTIONS: tuple[str, ...] = (
    "What is this document about?",
    "Summarize the key points",
    "What are the conclusions?",
    "Explain the methodology",
)

Listener = Callable[[], None]


class SessionController:
    """Owns the live session: documents, active conversation and status."""

    def __init__(
        self,
        registry: DocumentRegistry,
        ingestion: IngestionDriver,
        chat: ChatTurnDriver,
        store: ConversationStore | None = None,
        error_reset_delay: float = 8.0,
        default_suggestions: Sequence[str] = DEFAULT_SUGGESTIONS,
    ) -> None:
        """Initialize an idle session.

        Args:
            registry: Remote document registry client.
            ingestion: Driver for the ingestion webhook.
            chat: Driver for the chat webhook.
            store: Conversation store; a fresh one when omitted.
            error_reset_delay: Seconds before a failed ingestion reads idle again.
            default_suggestions: Example questions shown for a new conversation.
        """
        self._registry = registry
        self._ingestion = ingestion
        self._chat = chat
        self._store = store if store is not None else ConversationStore()
        self._error_reset_delay = error_reset_delay
        self._default_suggestions = list(default_suggestions)

        self._status = IngestionStatus.IDLE
        self._loading_step = ""
        self._documents: list[Document] = []
        self._active_document: Document | None = None
        self._conversation = Conversation()
        self._suggestions = list(self._default_suggestions)
        self._pending_turns = 0
        self._error_epoch = 0
        # Bumped whenever the user picks what the session shows
        self._selection_epoch = 0

        self._listeners: list[Listener] = []
        self._tasks: set[asyncio.Task[Any]] = set()
        self._dispose: Disposer | None = None
        self._started = False
        self._closed = False
        self.revision = 0

    # === Read-only state ===

    @property
    def status(self) -> IngestionStatus:
        return self._status

    @property
    def loading_step(self) -> str:
        return self._loading_step

    @property
    def thinking(self) -> bool:
        return self._pending_turns > 0

    @property
    def documents(self) -> list[Document]:
        return list(self._documents)

    @property
    def active_document(self) -> Document | None:
        return self._active_document

    @property
    def conversation_id(self) -> str:
        return self._conversation.conversation_id

    @property
    def messages(self) -> list[Message]:
        return list(self._conversation.messages)

    @property
    def suggestions(self) -> list[str]:
        return list(self._suggestions)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            status=self._status,
            loading_step=self._loading_step,
            thinking=self.thinking,
            active_document=self._active_document,
            documents=self.documents,
            conversation_id=self.conversation_id,
            messages=self.messages,
            suggestions=self.suggestions,
        )

    # === Re-render signal ===

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        self.revision += 1
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Session listener failed")

    # === Lifecycle ===

    async def start(self) -> None:
        """Load the document list and subscribe to registry changes.

        The newest document becomes active when nothing is active yet.
        """
        if self._started:
            return
        self._started = True

        self._documents = await self._registry.list_documents()
        if (
            self._documents
            and self._active_document is None
            and self._status is IngestionStatus.IDLE
        ):
            self._activate(self._documents[0])
            logger.info(f"Resumed session on {self._documents[0].filename}")
        self._notify()

        self._dispose = await self._registry.subscribe_to_changes(self._on_registry_change)

    async def close(self) -> None:
        """Release the registry subscription and pending background tasks."""
        if self._closed:
            return
        self._closed = True

        dispose, self._dispose = self._dispose, None
        if dispose is not None:
            await dispose()

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._listeners.clear()
        logger.info("Session closed")

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        if self._closed:
            coro.close()
            return
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_registry_change(self) -> None:
        self._spawn(self.refresh_documents())

    # === Internal transitions ===

    def _activate(self, document: Document) -> None:
        conversation = self._store.get(document.id)
        if conversation is None:
            conversation = Conversation()
            self._store.put(document.id, conversation)
        self._active_document = document
        self._conversation = conversation
        self._status = IngestionStatus.READY

    def _clear_active(self) -> None:
        self._active_document = None
        self._conversation = Conversation()
        self._suggestions = list(self._default_suggestions)
        self._status = IngestionStatus.IDLE

    def _save_active(self) -> None:
        if self._active_document is not None:
            self._store.put(self._active_document.id, self._conversation)

    def _set_loading_step(self, step: str) -> None:
        self._loading_step = step
        self._notify()

    def _fail_ingestion(self) -> None:
        self._status = IngestionStatus.ERROR
        self._error_epoch += 1
        self._notify()
        self._spawn(self._revert_error(self._error_epoch))

    async def _revert_error(self, epoch: int) -> None:
        await asyncio.sleep(self._error_reset_delay)
        # A newer action already left this error state
        if self._status is IngestionStatus.ERROR and self._error_epoch == epoch:
            self._status = IngestionStatus.IDLE
            self._notify()

    # === Operations ===

    async def refresh_documents(self) -> None:
        """Replace the document list with the registry's current content.

        Safe to run any number of times. If the active document vanished
        remotely it is cleared as if deleted locally. An unreadable registry
        leaves the current state untouched.
        """
        try:
            documents = await self._registry.fetch_documents()
        except RegistryError as e:
            logger.warning(f"Keeping current document list: {e}")
            return

        self._documents = documents
        active = self._active_document
        if active is not None:
            current = next((d for d in documents if d.key == active.key), None)
            if current is None:
                logger.info(f"Active document {active.filename} was removed")
                self._store.remove(active.id)
                self._clear_active()
            else:
                self._active_document = current
        self._notify()

    async def upload_document(self, url: str) -> bool:
        """Ingest a document link and make the result the active document.

        The current conversation is detached and a fresh one minted before
        the request is issued. On failure the status reads error, then
        idle again after the reset delay.

        If the user switches documents or starts another upload while this
        one runs, the result no longer drives the session: a new document
        is only registered with its own empty conversation, and a failure
        leaves the status alone.

        Args:
            url: Absolute document URL.

        Returns:
            True if the document was ingested.

        Raises:
            ValueError: If the URL is not a well-formed absolute URL.
        """
        url = validate_document_url(url)

        self._save_active()
        self._selection_epoch += 1
        epoch = self._selection_epoch
        pending = Conversation()
        self._active_document = None
        self._conversation = pending
        self._suggestions = list(self._default_suggestions)
        self._status = IngestionStatus.PROCESSING
        self._loading_step = ""
        self._notify()

        def on_step(step: str) -> None:
            if self._selection_epoch == epoch:
                self._set_loading_step(step)

        try:
            outcome = await self._ingestion.ingest(url, on_step)
        except Exception as e:
            if isinstance(e, IngestionError):
                logger.error(f"Ingestion of {url} failed ({type(e).__name__}): {e}")
            else:
                logger.exception(f"Unexpected ingestion failure for {url}")
            if self._selection_epoch == epoch:
                self._loading_step = ""
                self._fail_ingestion()
            return False

        self._documents = outcome.documents
        if self._selection_epoch != epoch:
            if outcome.document.key not in self._store:
                self._store.put(outcome.document.id, Conversation())
            logger.info(f"Ingested {outcome.document.filename} in the background")
            self._notify()
            return True

        self._loading_step = ""
        self._active_document = outcome.document
        self._store.put(outcome.document.id, pending)
        self._conversation = pending
        if outcome.suggestions:
            self._suggestions = list(outcome.suggestions)
        self._status = IngestionStatus.READY
        self._notify()
        return True

    async def send_message(self, text: str) -> bool:
        """Send a user turn and append the assistant's reply.

        The user message is appended before the request is issued. Replies
        are appended in the order requests settle, to the conversation that
        sent them.

        Args:
            text: User input; surrounding whitespace is ignored.

        Returns:
            False if the message was rejected (empty, or no ready document).
        """
        content = text.strip() if isinstance(text, str) else ""
        if not content:
            return False
        document = self._active_document
        if self._status is not IngestionStatus.READY or document is None:
            logger.warning("Ignoring message sent without a ready document")
            return False

        conversation = self._conversation
        conversation.append(Message(role=MessageRole.USER, content=content))
        self._pending_turns += 1
        self._notify()

        try:
            try:
                reply = await self._chat.reply(
                    conversation.conversation_id, content, document.filename
                )
            except Exception:
                logger.exception("Unexpected chat turn failure")
                reply = APOLOGY_REPLY
            conversation.append(Message(role=MessageRole.ASSISTANT, content=reply))
        finally:
            self._pending_turns -= 1
            self._notify()
        return True

    def switch_active_document(self, document_id: int | str) -> bool:
        """Make a known document active, restoring its saved conversation.

        Returns:
            False if the id is not in the document list.
        """
        target = next((d for d in self._documents if d.key == str(document_id)), None)
        if target is None:
            return False

        self._save_active()
        self._selection_epoch += 1
        self._activate(target)
        self._loading_step = ""
        self._suggestions = list(self._default_suggestions)
        self._notify()
        return True

    async def delete_document(self, document_id: int | str) -> None:
        """Delete a document and its conversation, then refresh the list.

        Raises:
            RegistryError: If the registry rejected the deletion. Session
                state is left unchanged in that case.
        """
        await self._registry.delete_document(document_id)
        self._store.remove(document_id)

        active = self._active_document
        if active is not None and active.key == str(document_id):
            self._clear_active()
            self._notify()

        await self.refresh_documents()

    def reset_conversation(self) -> None:
        """Start over with an empty conversation for the active document."""
        self._conversation = Conversation()
        self._save_active()
        self._notify()


@asynccontextmanager
async def session_scope(controller: SessionController) -> AsyncGenerator[SessionController]:
    """Start a session and guarantee it is closed exactly once."""
    await controller.start()
    try:
        yield controller
    finally:
        await controller.close()
