"""Unit tests for individual components in isolation.

Ensures fast execution with minimal dependencies.

Coverage:
    - admission/: Fixed-window counting, retry hints, pruning, locking
    - models/: Request validation and truncation
    - completion/: Prompt building, message conversion, streaming, timeouts
    - parsing/: PDF text extraction

Uses a fake clock and a scripted provider instead of real time and models.
"""
