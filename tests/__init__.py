"""Test package for Document Chat.

Unit tests cover isolated logic; integration tests drive the real FastAPI
app over HTTP.

Structure:
    - unit/: Admission, validation, proxy, config and parser tests
    - integration/: Endpoint tests for chat streaming and PDF extraction

The upstream model is always replaced by a scripted provider, so no API
key or network access is needed. Leverages pytest with pytest-check for
soft assertions.
"""
