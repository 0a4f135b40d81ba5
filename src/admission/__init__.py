"""Request admission control for the chat endpoint.

Rejects clients that exceed their request budget before any body parsing
or model call happens.

Responsibilities:
    - Fixed-window request counting per client
    - Retry hints for rejected clients
    - Pruning of expired windows to bound memory

The AdmissionController base class keeps the in-memory implementation
swappable for a shared-store one.
"""

from src.admission.config import AdmissionConfig, get_admission_config
from src.admission.controller import (
    AdmissionController,
    AdmissionDecision,
    AdmissionRejectedError,
    ClientWindow,
    FixedWindowAdmissionController,
    get_admission_controller,
    set_admission_controller,
)

__all__ = [
    "AdmissionConfig",
    "AdmissionController",
    "AdmissionDecision",
    "AdmissionRejectedError",
    "ClientWindow",
    "FixedWindowAdmissionController",
    "get_admission_config",
    "get_admission_controller",
    "set_admission_controller",
]
