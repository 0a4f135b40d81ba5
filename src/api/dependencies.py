"""FastAPI dependencies shared by the routers.

Client identity is resolved here, outside the admission logic, from the
one header the deployment declares trustworthy.
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request

from src.admission import (
    AdmissionConfig,
    AdmissionController,
    get_admission_config,
    get_admission_controller,
)
from src.completion import CompletionProxy, get_completion_proxy

# Shared bucket for requests that arrive without the trusted header
LOOPBACK_CLIENT_ID = "127.0.0.1"


def get_completion_proxy_factory() -> Callable[[], CompletionProxy]:
    """Return the proxy getter without building the proxy.

    The chat route calls it only after admission and validation, so a
    missing provider configuration never masks a 429 or a 400.
    """
    return get_completion_proxy


AdmissionConfigDep = Annotated[AdmissionConfig, Depends(get_admission_config)]
AdmissionControllerDep = Annotated[AdmissionController, Depends(get_admission_controller)]
CompletionProxyFactoryDep = Annotated[
    Callable[[], CompletionProxy], Depends(get_completion_proxy_factory)
]


def get_client_id(request: Request, config: AdmissionConfigDep) -> str:
    """Resolve the calling client's identifier.

    Uses the first address of the trusted forwarding header. Direct
    connections without the header all share the loopback bucket.

    Args:
        request: Incoming request.
        config: Admission configuration naming the trusted header.

    Returns:
        Client identifier used as the admission key.
    """
    forwarded = request.headers.get(config.trusted_client_header)
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return LOOPBACK_CLIENT_ID


ClientIdDep = Annotated[str, Depends(get_client_id)]
