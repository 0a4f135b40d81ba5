"""FastAPI endpoints for the document chat service.

HTTP and streaming routes with async request handling.
Supports Server-Sent Events for real-time chat streaming.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Streaming chat over an uploaded document
    - POST /api/extract: PDF text extraction
"""

from src.api.app import app, create_app

__all__ = ["app", "create_app"]
