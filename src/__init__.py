"""Document Chat - streaming LLM answers grounded in an uploaded PDF.

Combines FastAPI for HTTP streaming, Agno for model orchestration,
pypdf for text extraction, and Pydantic for data validation.

Components:
    - admission: Per-client fixed-window request admission
    - api: HTTP endpoints and streaming responses
    - completion: Streaming proxy to the language model
    - parsing: PDF text extraction
    - models: Request/response schemas and validation
"""

__version__ = "0.1.0"
