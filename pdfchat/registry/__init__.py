"""Remote document registry backed by Supabase.

Responsibilities:
    - Ordered listing and point reads of processed documents
    - Deletion with best-effort vector record cleanup
    - Realtime change notifications with an explicit disposer
"""

from pdfchat.registry.client import DocumentRegistry, RegistryError

__all__ = ["DocumentRegistry", "RegistryError"]
