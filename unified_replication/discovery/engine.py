import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional

from .detectors import BackendDetector, build_crd_detectors
from .types import (
    BackendDiscoveryResult,
    BackendStatus,
    DiscoveryError,
    DiscoveryErrorType,
    DiscoveryResult,
)
from ..config.settings import DiscoveryConfig
from ..translation.types import Backend

logger = logging.getLogger(__name__)


class DiscoveryEngine:
    """Finds which replication backends are installed in the cluster.

    Every backend is probed concurrently. Each probe is bounded by
    ``timeout_per_backend_seconds`` (retries included); a backend whose probe
    fails is reported as Unavailable and the pass itself still succeeds.
    """

    def __init__(self, detectors: Optional[Dict[Backend, BackendDetector]] = None,
                 config: Optional[DiscoveryConfig] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config or DiscoveryConfig()
        self.detectors: Dict[Backend, BackendDetector] = (
            dict(detectors) if detectors is not None else build_crd_detectors())
        self._clock = clock
        self._cached: Optional[DiscoveryResult] = None
        self._cached_at = 0.0
        self._refresh_task: Optional[asyncio.Task] = None

    def register_detector(self, backend: Backend, detector: BackendDetector) -> None:
        self.detectors[backend] = detector

    async def discover_backends(self) -> DiscoveryResult:
        """Run one discovery pass over every backend with a detector."""
        logger.info("Starting backend discovery")
        backends = [b for b in Backend if b in self.detectors]
        outcomes = await asyncio.gather(
            *(self._discover_bounded(backend) for backend in backends),
            return_exceptions=True,
        )

        result = DiscoveryResult()
        failures = 0
        for backend, outcome in zip(backends, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                logger.error(f"Failed to discover backend {backend}: {outcome}")
                failures += 1
                outcome = BackendDiscoveryResult(
                    backend=backend,
                    status=BackendStatus.UNAVAILABLE,
                    message=str(outcome),
                )
            result.backends[backend] = outcome
            if outcome.is_ready:
                result.available_backends.append(backend)

        if failures:
            result.error = f"Failed to discover {failures} backends"

        self._update_cache(result)
        logger.info(f"Backend discovery completed: available={len(result.available_backends)} "
                    f"total={len(result.backends)}")
        return result

    async def discover_backend(self, backend: Backend) -> BackendDiscoveryResult:
        detector = self.detectors.get(backend)
        if detector is None:
            raise DiscoveryError(DiscoveryErrorType.UNKNOWN, backend, "",
                                 f"no detector registered for backend {backend}")
        return await detector.detect()

    async def is_backend_available(self, backend: Backend) -> bool:
        result = await self.discover_backend(backend)
        return result.is_ready

    async def get_available_backends(self) -> List[Backend]:
        result = await self.discover_backends()
        return list(result.available_backends)

    async def refresh_cache(self) -> None:
        await self.discover_backends()

    def get_cached_result(self) -> Optional[DiscoveryResult]:
        """Last pass result, or None when absent or older than cache_ttl."""
        if self._cached is None:
            return None
        if self._clock() - self._cached_at > self.config.cache_ttl_seconds:
            return None
        return self._cached

    def start_auto_refresh(self) -> bool:
        """Start the background refresh task if enabled.

        Returns:
            True if a task was started
        """
        if not self.config.enable_auto_refresh:
            return False
        if self.auto_refresh_running:
            raise RuntimeError("auto refresh is already running")
        self._refresh_task = asyncio.get_event_loop().create_task(self._auto_refresh_loop())
        return True

    async def stop_auto_refresh(self) -> None:
        task, self._refresh_task = self._refresh_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Auto refresh stopped")

    @property
    def auto_refresh_running(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    async def _auto_refresh_loop(self):
        while True:
            await asyncio.sleep(self.config.refresh_interval_seconds)
            logger.debug("Performing automatic discovery refresh")
            try:
                await self.refresh_cache()
            except Exception as e:
                logger.error(f"Auto refresh failed: {e}")

    async def _discover_bounded(self, backend: Backend) -> BackendDiscoveryResult:
        timeout = self.config.timeout_per_backend_seconds
        try:
            return await asyncio.wait_for(self._discover_with_retry(backend), timeout)
        except asyncio.TimeoutError as e:
            raise DiscoveryError(DiscoveryErrorType.TIMEOUT, backend, "",
                                 f"discovery timed out after {timeout}s", e) from e

    async def _discover_with_retry(self, backend: Backend) -> BackendDiscoveryResult:
        last_error: Optional[Exception] = None
        for attempt in range(max(self.config.max_retries, 0) + 1):
            if attempt > 0:
                await asyncio.sleep(self.config.retry_delay_seconds)
            try:
                return await self.discover_backend(backend)
            except DiscoveryError as e:
                last_error = e
                if e.kind == DiscoveryErrorType.PERMISSION_DENIED:
                    break
            except Exception as e:
                last_error = e
            logger.debug(f"Discovery attempt {attempt + 1} for {backend} failed: {last_error}")
        raise last_error

    def _update_cache(self, result: DiscoveryResult) -> None:
        self._cached = result
        self._cached_at = self._clock()
