"""
Time-boxed handle to a blob backend.

The pool creates a backend on first use, verifies it with an access check,
and hands out the same instance until it is older than the refresh interval
or has been invalidated after a failure.
"""
import logging
import threading
import time
from typing import Callable, Optional

from curio_store.blob_backend import BlobBackend, BlobBackendError
from curio_store.errors import StorageError

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 3600.0


class BackendPool:
    """Lazily created, periodically refreshed blob backend."""

    def __init__(
        self,
        factory: Callable[[], BlobBackend],
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the pool.

        Args:
            factory: Callable creating a new backend instance
            refresh_interval: Seconds before the backend is re-created (default: 1 hour)
            clock: Monotonic time source
        """
        self._factory = factory
        self.refresh_interval = refresh_interval
        self._clock = clock
        self._backend: Optional[BlobBackend] = None
        self._created_at = 0.0
        self._lock = threading.Lock()

    def acquire(self) -> BlobBackend:
        """
        Get the current backend, creating and verifying a new one if stale.

        Returns:
            Verified BlobBackend

        Raises:
            StorageError: If the new backend fails its access check
        """
        with self._lock:
            now = self._clock()
            if self._backend is None or now - self._created_at > self.refresh_interval:
                backend = self._factory()
                try:
                    backend.check_access()
                except BlobBackendError as exc:
                    logger.error("Failed to verify storage access: %s", exc)
                    self._backend = None
                    raise StorageError("Failed to initialize storage client") from exc
                logger.info("Initialized storage backend %s", type(backend).__name__)
                self._backend = backend
                self._created_at = now
            return self._backend

    def invalidate(self) -> None:
        """Drop the current backend so the next acquire re-creates it."""
        with self._lock:
            self._backend = None
