"""Per-client fixed-window admission control.

Decides whether a chat request may proceed before any expensive work
(body parsing, model calls) happens. Each client gets a counter that
resets once its window has elapsed:

    first request      -> count = 1, reset_at = now + window
    count < limit      -> count += 1, admitted
    count >= limit     -> rejected until now > reset_at

State lives in process memory. Deployments running several workers
need a shared-store implementation of AdmissionController instead.
"""

import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel, Field

from src.admission.config import AdmissionConfig, get_admission_config

logger = logging.getLogger(__name__)


class AdmissionDecision(BaseModel):
    """Outcome of one admission check.

    Attributes:
        allowed: Whether the request may proceed.
        remaining: Requests still available in the current window.
        limit: Requests allowed per window.
        reset_after: Seconds until the current window resets.
        retry_after: Whole seconds a rejected client should wait (0 when allowed).
    """

    allowed: bool
    remaining: int = Field(ge=0)
    limit: int = Field(ge=1)
    reset_after: float = Field(ge=0.0)
    retry_after: int = Field(default=0, ge=0)


class AdmissionRejectedError(Exception):
    """Raised when a client has used up its request budget."""

    def __init__(self, client_id: str, decision: AdmissionDecision) -> None:
        super().__init__(f"Client {client_id} exceeded {decision.limit} requests per window")
        self.client_id = client_id
        self.decision = decision


@dataclass
class ClientWindow:
    """Request counter for one client."""

    count: int
    reset_at: float


class AdmissionController(ABC):
    """Abstract base class for admission controllers."""

    @abstractmethod
    def check(self, client_id: str) -> AdmissionDecision:
        """Record a request from a client and decide whether to admit it.

        Args:
            client_id: Identifier of the calling client.

        Returns:
            AdmissionDecision for this request.
        """

    @abstractmethod
    def reset(self, client_id: str) -> None:
        """Forget all state for a client.

        Args:
            client_id: Identifier of the client.
        """

    def admit(self, client_id: str) -> AdmissionDecision:
        """Check a client and raise if the request is rejected.

        Raises:
            AdmissionRejectedError: If the client exceeded its budget.
        """
        decision = self.check(client_id)
        if not decision.allowed:
            logger.warning(
                f"Admission rejected for {client_id}: retry in {decision.retry_after}s"
            )
            raise AdmissionRejectedError(client_id, decision)
        return decision


class FixedWindowAdmissionController(AdmissionController):
    """In-memory fixed window admission controller.

    The read-check-increment sequence runs under a lock, so concurrent
    requests from one client can never be admitted past the limit.
    Expired windows are pruned once more than max_tracked_clients are held,
    at most once per window length so a full map of live windows is not
    rescanned for every new client.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60.0,
        max_tracked_clients: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the controller.

        Args:
            max_requests: Requests admitted per client in one window.
            window_seconds: Length of the fixed window in seconds.
            max_tracked_clients: Tracked clients before expired windows are pruned.
            clock: Monotonic time source in seconds.
        """
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._max_tracked_clients = max_tracked_clients
        self._clock = clock
        self._windows: dict[str, ClientWindow] = {}
        self._last_sweep = -math.inf
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls, config: AdmissionConfig, clock: Callable[[], float] = time.monotonic
    ) -> "FixedWindowAdmissionController":
        """Build a controller from an AdmissionConfig."""
        return cls(
            max_requests=config.max_requests,
            window_seconds=config.window_seconds,
            max_tracked_clients=config.max_tracked_clients,
            clock=clock,
        )

    @property
    def tracked_clients(self) -> int:
        """Number of clients currently holding a window."""
        return len(self._windows)

    def window_for(self, client_id: str) -> ClientWindow | None:
        """Return a copy of a client's window, if any."""
        with self._lock:
            window = self._windows.get(client_id)
            return ClientWindow(window.count, window.reset_at) if window else None

    def check(self, client_id: str) -> AdmissionDecision:
        now = self._clock()

        with self._lock:
            window = self._windows.get(client_id)

            if window is None or now > window.reset_at:
                if window is None and self._should_sweep(now):
                    self._prune_expired(now)
                window = ClientWindow(count=1, reset_at=now + self._window_seconds)
                self._windows[client_id] = window
                return self._decision(window, now, allowed=True)

            if window.count < self._max_requests:
                window.count += 1
                return self._decision(window, now, allowed=True)

            return self._decision(window, now, allowed=False)

    def reset(self, client_id: str) -> None:
        with self._lock:
            self._windows.pop(client_id, None)

    def prune_expired(self) -> int:
        """Drop windows whose reset time has passed.

        Returns:
            Number of windows removed.
        """
        with self._lock:
            return self._prune_expired(self._clock())

    def _should_sweep(self, now: float) -> bool:
        # Capacity sweeps run at most once per window length
        return (
            len(self._windows) >= self._max_tracked_clients
            and now - self._last_sweep >= self._window_seconds
        )

    def _prune_expired(self, now: float) -> int:
        self._last_sweep = now
        expired = [cid for cid, w in self._windows.items() if now > w.reset_at]
        for cid in expired:
            del self._windows[cid]
        if expired:
            logger.debug(f"Pruned {len(expired)} expired admission windows")
        return len(expired)

    def _decision(self, window: ClientWindow, now: float, allowed: bool) -> AdmissionDecision:
        reset_after = max(0.0, window.reset_at - now)
        if allowed:
            return AdmissionDecision(
                allowed=True,
                remaining=self._max_requests - window.count,
                limit=self._max_requests,
                reset_after=reset_after,
            )
        return AdmissionDecision(
            allowed=False,
            remaining=0,
            limit=self._max_requests,
            reset_after=reset_after,
            retry_after=max(1, math.ceil(reset_after)),
        )


# Module-level singleton instance
_admission_controller: AdmissionController | None = None


def get_admission_controller() -> AdmissionController:
    """Get or create the global admission controller.

    Returns:
        The process-wide AdmissionController (in-memory by default).
    """
    global _admission_controller
    if _admission_controller is None:
        _admission_controller = FixedWindowAdmissionController.from_config(
            get_admission_config()
        )
    return _admission_controller


def set_admission_controller(controller: AdmissionController | None) -> None:
    """Replace the global admission controller.

    Passing None makes the next get_admission_controller() call build a
    fresh in-memory controller.
    """
    global _admission_controller
    _admission_controller = controller
