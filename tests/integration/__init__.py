"""Integration tests for components working together as a system.

Requests go through the real FastAPI app via httpx ASGITransport.

Coverage:
    - POST /api/chat: admission, validation, SSE streaming, error events
    - POST /api/extract: PDF upload and text extraction
    - GET /health

Only the language model is substituted, through dependency overrides.
"""
