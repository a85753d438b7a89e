"""
Circuit Breaker Module

This module implements the circuit breaker pattern guarding calls to an
unreliable downstream dependency, such as the embedding and rerank APIs
behind semantic search.

The breaker never raises. Callers ask ``can_execute()`` before attempting the
protected operation and report the outcome with ``record_success()`` or
``record_failure()``. A ``False`` answer means "fail fast": skip the call and
use the fallback path.

States:
- CLOSED: Normal operation, requests pass through
- OPEN: Too many consecutive failures, requests are blocked
- HALF_OPEN: Exactly one trial request (the probe) is admitted
"""

import time
import logging
import threading
from enum import Enum
from dataclasses import dataclass
from typing import Callable, Optional, Dict, Any

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    """
    Circuit breaker states.

    The string values are the ones exported to logs and health checks;
    ``gauge_value`` is the numeric form exported to monitoring.
    """
    CLOSED = "closed"        # Normal operation, requests pass through
    OPEN = "open"            # Circuit is open, requests fail fast
    HALF_OPEN = "half-open"  # One probe request is allowed through

    @property
    def gauge_value(self) -> int:
        """Numeric state for gauges (0=closed, 1=open, 2=half-open)."""
        return _GAUGE_VALUES[self]


_GAUGE_VALUES = {
    CircuitState.CLOSED: 0,
    CircuitState.OPEN: 1,
    CircuitState.HALF_OPEN: 2,
}


@dataclass
class CircuitBreakerConfig:
    """
    Configuration for the circuit breaker, fixed at construction.

    Attributes:
        failure_threshold: Consecutive failures before the circuit opens
        reset_timeout: Seconds the circuit stays open before a probe is allowed
        half_open_timeout: Upper bound in seconds on one protected call. The
            caller cancels a call that runs longer and reports it as a
            failure, so an admitted probe always resolves within this bound
    """
    failure_threshold: int = 5
    reset_timeout: float = 30.0
    half_open_timeout: float = 15.0

    def __post_init__(self):
        """Validate circuit breaker configuration."""
        if self.failure_threshold < 1:
            raise ValueError(f"failure_threshold must be at least 1, got {self.failure_threshold}")
        if self.reset_timeout < 0:
            raise ValueError(f"reset_timeout cannot be negative, got {self.reset_timeout}")
        if self.half_open_timeout <= 0:
            raise ValueError(f"half_open_timeout must be positive, got {self.half_open_timeout}")


class CircuitBreaker:
    """
    Three-state circuit breaker with a single half-open probe.

    One instance protects one dependency for the lifetime of the process.
    All state lives behind one lock so ``can_execute``, ``record_success`` and
    ``record_failure`` are atomic with respect to each other, whether callers
    share an event loop or run on separate threads.

    While the half-open probe is in flight every other caller is rejected.
    The caller must report every admitted call, including cancelled ones,
    and must bound it by ``half_open_timeout``.

    The clock is injectable: every mutating call accepts an explicit ``now``
    (seconds), and the constructor accepts a ``clock`` callable used when
    ``now`` is omitted. Tests advance time by passing ``now`` directly.

    Example:
        >>> breaker = CircuitBreaker(CircuitBreakerConfig(failure_threshold=3))
        >>> if breaker.can_execute():
        ...     try:
        ...         result = await call_semantic_backend()
        ...         breaker.record_success()
        ...     except BaseException:
        ...         breaker.record_failure()
        ...         raise
    """

    def __init__(
        self,
        config: Optional[CircuitBreakerConfig] = None,
        name: str = "semantic",
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the circuit breaker.

        Args:
            config: Breaker configuration. If None, uses defaults
            name: Name of the protected service, used in logs and metrics
            clock: Time source in seconds used when ``now`` is not passed
        """
        self.config = config or CircuitBreakerConfig()
        self.name = name
        self._clock = clock
        self._lock = threading.RLock()

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: Optional[float] = None
        self._next_probe_at: Optional[float] = None
        self._probe_in_flight = False
        self._probe_started_at: Optional[float] = None

        # Counters for monitoring
        self._total_admitted = 0
        self._total_rejected = 0
        self._total_failures = 0
        self._state_change_count = 0

        logger.info(
            f"CircuitBreaker '{self.name}' initialized: "
            f"failure_threshold={self.config.failure_threshold}, "
            f"reset_timeout={self.config.reset_timeout}s, "
            f"half_open_timeout={self.config.half_open_timeout}s"
        )

    def _now(self, now: Optional[float]) -> float:
        return self._clock() if now is None else now

    def can_execute(self, now: Optional[float] = None) -> bool:
        """
        Decide whether a protected call may proceed.

        An open circuit whose probe time has arrived moves to half-open as a
        side effect, and this caller becomes the probe.

        Args:
            now: Current time in seconds (defaults to the breaker clock)

        Returns:
            True if the caller may attempt the protected operation
        """
        with self._lock:
            now = self._now(now)

            if self._state == CircuitState.OPEN:
                if now < self._next_probe_at:
                    self._total_rejected += 1
                    return False
                logger.info(
                    f"Circuit '{self.name}': reset timeout elapsed, "
                    f"transitioning to half-open"
                )
                self._transition(CircuitState.HALF_OPEN)
                self._probe_in_flight = False

            if self._state == CircuitState.HALF_OPEN:
                # Only the probe's own outcome leaves half-open
                if self._probe_in_flight:
                    self._total_rejected += 1
                    return False
                self._probe_in_flight = True
                self._probe_started_at = now

            self._total_admitted += 1
            return True

    def record_success(self, now: Optional[float] = None) -> None:
        """
        Report a successful protected call; always closes the circuit.

        Args:
            now: Current time in seconds (unused, accepted for symmetry)
        """
        with self._lock:
            if self._state != CircuitState.CLOSED:
                logger.info(f"Circuit '{self.name}': probe succeeded, closing circuit")
                self._transition(CircuitState.CLOSED)
            self._failure_count = 0
            self._probe_in_flight = False
            self._probe_started_at = None
            self._opened_at = None
            self._next_probe_at = None

    def record_failure(self, now: Optional[float] = None) -> None:
        """
        Report a failed protected call.

        A failed half-open probe, or reaching the failure threshold, opens
        the circuit until ``now + reset_timeout``.

        Args:
            now: Current time in seconds (defaults to the breaker clock)
        """
        with self._lock:
            now = self._now(now)
            self._failure_count += 1
            self._total_failures += 1

            if (
                self._state == CircuitState.HALF_OPEN
                or self._failure_count >= self.config.failure_threshold
            ):
                if self._state == CircuitState.HALF_OPEN:
                    logger.warning(f"Circuit '{self.name}': probe failed, reopening circuit")
                else:
                    logger.warning(
                        f"Circuit '{self.name}': failure threshold reached "
                        f"({self._failure_count}/{self.config.failure_threshold}), opening circuit"
                    )
                self._transition(CircuitState.OPEN)
                self._failure_count = 0
                self._probe_in_flight = False
                self._probe_started_at = None
                self._opened_at = now
                self._next_probe_at = now + self.config.reset_timeout
            else:
                logger.debug(
                    f"Circuit '{self.name}': failure "
                    f"{self._failure_count}/{self.config.failure_threshold}"
                )

    def _transition(self, state: CircuitState) -> None:
        self._state = state
        self._state_change_count += 1

    def current_state(self) -> CircuitState:
        """Get the current circuit state."""
        return self._state

    def get_failure_count(self) -> int:
        """Get the number of consecutive failures since the last reset."""
        return self._failure_count

    def reset(self) -> None:
        """
        Manually reset the circuit breaker to closed state.

        Intended for operational overrides and tests.
        """
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._opened_at = None
            self._next_probe_at = None
            self._probe_in_flight = False
            self._probe_started_at = None
            self._state_change_count += 1
        logger.warning(f"Circuit '{self.name}': manually reset to closed state")

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get circuit breaker statistics for health checks.

        Returns:
            Dictionary with state, configuration and counters
        """
        with self._lock:
            return {
                "name": self.name,
                "state": self._state.value,
                "configuration": {
                    "failure_threshold": self.config.failure_threshold,
                    "reset_timeout": self.config.reset_timeout,
                    "half_open_timeout": self.config.half_open_timeout,
                },
                "counters": {
                    "failure_count": self._failure_count,
                    "total_admitted": self._total_admitted,
                    "total_rejected": self._total_rejected,
                    "total_failures": self._total_failures,
                    "state_change_count": self._state_change_count,
                },
                "timing": {
                    "opened_at": self._opened_at,
                    "next_probe_at": self._next_probe_at,
                    "probe_started_at": self._probe_started_at,
                },
                "probe_in_flight": self._probe_in_flight,
            }

    def __repr__(self) -> str:
        return (
            f"CircuitBreaker(name='{self.name}', state={self._state.value}, "
            f"failures={self._failure_count}/{self.config.failure_threshold})"
        )
