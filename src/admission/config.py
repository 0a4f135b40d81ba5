"""Admission control configuration with environment variable loading."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

load_dotenv()


class AdmissionConfig(BaseModel):
    """Configuration for the per-client request admission controller.

    Attributes:
        max_requests: Requests admitted per client in one window.
        window_seconds: Length of the fixed window.
        max_tracked_clients: Tracked client count above which expired windows are pruned.
        trusted_client_header: Header trusted to carry the client address.
    """

    # Values read from the environment go through the same constraints
    model_config = ConfigDict(validate_default=True)

    max_requests: int = Field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_REQUESTS", "10")),
        ge=1,
        description="Requests admitted per client per window",
    )
    window_seconds: float = Field(
        default_factory=lambda: float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60")),
        gt=0,
        description="Fixed window length in seconds",
    )
    max_tracked_clients: int = Field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_MAX_CLIENTS", "10000")),
        ge=1,
        description="Tracked clients before expired windows are pruned",
    )
    trusted_client_header: str = Field(
        default_factory=lambda: os.getenv("TRUSTED_CLIENT_HEADER", "x-forwarded-for"),
        description="Header carrying the client address, set by a trusted proxy",
    )

    @field_validator("trusted_client_header")
    @classmethod
    def normalize_header(cls, v: str) -> str:
        """Header lookups are case-insensitive; store the lowercase form."""
        if not v or not v.strip():
            raise ValueError("TRUSTED_CLIENT_HEADER must not be empty")
        return v.strip().lower()


def get_admission_config() -> AdmissionConfig:
    """Create admission configuration from environment.

    Returns:
        Configured AdmissionConfig instance.
    """
    return AdmissionConfig()
