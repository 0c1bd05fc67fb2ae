"""PDF Chat - conversational front end over an external PDF ingestion workflow.

Combines httpx for the workflow webhooks, Supabase for the document
registry and its realtime changes, FastAPI and NiceGUI for the hosting
shell, and Pydantic for data validation.

Components:
    - session: Session controller and per-document conversation store
    - workflow: Ingestion and chat webhook drivers
    - registry: Remote document registry client
    - api: Session HTTP endpoints and application lifespan
    - ui: Web interface rendering the session
    - models: Domain models and webhook payloads
"""

__version__ = "0.1.0"
