"""Supabase-backed registry of processed documents.

Reads and deletes rows of the processed-documents table, removes the
matching vector records on delete, and relays realtime change events so
several sessions stay consistent with the same store.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError
from supabase import AsyncClient

from pdfchat.models.schemas import Document

logger = logging.getLogger(__name__)

Disposer = Callable[[], Awaitable[None]]


class RegistryError(Exception):
    """Raised when the remote store rejects a registry write."""


class DocumentRegistry:
    """Client for the remote document registry.

    Read failures never escape: they degrade to "no documents yet" so the
    session keeps rendering. Only deletion reports failures to its caller.
    """

    def __init__(
        self,
        client: AsyncClient,
        documents_table: str = "active_session_files",
        vectors_table: str = "documents",
        schema: str = "public",
    ) -> None:
        """Initialize the registry client.

        Args:
            client: Connected Supabase async client.
            documents_table: Table holding processed-document rows.
            vectors_table: Table holding vector records tagged by filename.
            schema: Database schema watched for change events.
        """
        self._client = client
        self._documents_table = documents_table
        self._vectors_table = vectors_table
        self._schema = schema

    @staticmethod
    def _to_documents(rows: list[dict[str, Any]]) -> list[Document]:
        documents: list[Document] = []
        for row in rows:
            try:
                documents.append(Document.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping malformed registry row {row.get('id')}: {e}")
        return documents

    async def fetch_documents(self) -> list[Document]:
        """Fetch every document, most recently processed first.

        Raises:
            RegistryError: If the store cannot be read.
        """
        try:
            response = await (
                self._client.table(self._documents_table)
                .select("*")
                .order("processed_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise RegistryError(f"Failed to list documents: {e}") from e
        return self._to_documents(response.data or [])

    async def list_documents(self) -> list[Document]:
        """Like fetch_documents(), but an unreadable store reads as empty."""
        try:
            return await self.fetch_documents()
        except RegistryError as e:
            logger.warning(str(e))
            return []

    async def delete_document(self, document_id: int | str) -> Document:
        """Delete a document row, then its vector records.

        Vector cleanup is best effort: its failure is logged and never
        undoes or fails the row deletion.

        Args:
            document_id: Registry id of the document.

        Returns:
            The deleted document.

        Raises:
            RegistryError: If the store rejects the deletion or no row matched.
        """
        try:
            response = await (
                self._client.table(self._documents_table)
                .delete()
                .eq("id", document_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Registry rejected deletion of document {document_id}: {e}")
            raise RegistryError(f"Could not delete document {document_id}") from e

        deleted = self._to_documents(response.data or [])
        if not deleted:
            raise RegistryError(f"Document {document_id} was not deleted")

        document = deleted[0]
        logger.info(f"Deleted document {document.id} ({document.filename})")
        await self._delete_vectors(document.filename)
        return document

    async def _delete_vectors(self, filename: str) -> None:
        try:
            await (
                self._client.table(self._vectors_table)
                .delete()
                .eq("metadata->>filename", filename)
                .execute()
            )
        except Exception as e:
            logger.warning(f"Vector cleanup failed for {filename}: {e}")
            return
        logger.info(f"Deleted vector records for {filename}")

    async def subscribe_to_changes(self, callback: Callable[[], None]) -> Disposer:
        """Relay insert/update/delete events on the documents table.

        Args:
            callback: Invoked once per event; the payload is not passed on,
                an event only means the document list needs a refresh.

        Returns:
            Async disposer releasing the channel. Only its first call
            does anything.
        """

        def on_change(payload: dict[str, Any]) -> None:
            logger.debug(f"Registry change received: {payload.get('eventType', payload)}")
            callback()

        channel = self._client.channel(f"{self._documents_table}_changes")
        try:
            await channel.on_postgres_changes(
                "*",
                schema=self._schema,
                table=self._documents_table,
                callback=on_change,
            ).subscribe()
        except Exception as e:
            logger.warning(f"Realtime subscription failed, continuing without it: {e}")

            async def noop() -> None:
                return None

            return noop

        released = False

        async def dispose() -> None:
            nonlocal released
            if released:
                return
            released = True
            try:
                await self._client.remove_channel(channel)
            except Exception as e:
                logger.warning(f"Failed to release realtime channel: {e}")
            else:
                logger.info("Realtime subscription released")

        return dispose
