import logging
import time
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from .errors import PipelineError, PipelineStage
from .selection import BackendSelector
from ..adapters.base import ReplicationAdapter
from ..adapters.registry import AdapterRegistry
from ..config.settings import ControllerEngineConfig
from ..discovery.engine import DiscoveryEngine
from ..discovery.types import BackendCapability, DiscoveryResult
from ..models.replication import ReplicationIntent, ReplicationMode, ReplicationStatus
from ..monitoring.metrics import (
    DISCOVERY_CACHE_HITS,
    DISCOVERY_CACHE_MISSES,
    OPERATIONS,
    OPERATION_DURATION,
    PIPELINE_ERRORS,
)
from ..translation.engine import TranslationEngine
from ..translation.types import Backend, TranslationError
from ..utils.rwlock import AsyncRWLock

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SYNC = "sync"

    def __str__(self) -> str:
        return self.value


async def _create(adapter: ReplicationAdapter, intent: ReplicationIntent) -> None:
    await adapter.create_replication(intent)


async def _update(adapter: ReplicationAdapter, intent: ReplicationIntent) -> None:
    await adapter.update_replication(intent)


async def _delete(adapter: ReplicationAdapter, intent: ReplicationIntent) -> None:
    await adapter.delete_replication(intent)


async def _sync(adapter: ReplicationAdapter, intent: ReplicationIntent) -> None:
    await adapter.get_replication_status(intent)


OPERATION_HANDLERS: Dict[Operation, Callable[[ReplicationAdapter, ReplicationIntent], Awaitable[None]]] = {
    Operation.CREATE: _create,
    Operation.UPDATE: _update,
    Operation.DELETE: _delete,
    Operation.SYNC: _sync,
}

_unhandled = set(Operation) - set(OPERATION_HANDLERS)
if _unhandled:
    raise RuntimeError(f"operations without a handler: {sorted(str(op) for op in _unhandled)}")

MODE_CAPABILITIES = {
    ReplicationMode.SYNCHRONOUS.value: BackendCapability.SYNC_REPLICATION,
    ReplicationMode.ASYNCHRONOUS.value: BackendCapability.ASYNC_REPLICATION,
}


class ControllerEngine:
    """Runs a replication intent through discovery, selection, validation,
    translation and adapter dispatch.

    The discovery cache is the only state shared between concurrent calls;
    it is replaced as a whole under the write side of an AsyncRWLock.
    """

    def __init__(self, discovery: DiscoveryEngine, translator: TranslationEngine,
                 registry: AdapterRegistry, config: Optional[ControllerEngineConfig] = None,
                 selector: Optional[BackendSelector] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.discovery = discovery
        self.translator = translator
        self.registry = registry
        self.config = config or ControllerEngineConfig()
        self.selector = selector or BackendSelector()
        self._clock = clock

        self._cache: Dict[Backend, DiscoveryResult] = {}
        self._last_discovery: Optional[float] = None
        self._last_discovery_wall: Optional[float] = None
        self._cache_lock = AsyncRWLock("discovery-cache")

        self.operation_count = 0
        self.error_count = 0
        self.status_error_count = 0
        self.cache_hits = 0
        self.cache_misses = 0

    async def process_replication(self, intent: ReplicationIntent, operation) -> Backend:
        """Apply ``operation`` for ``intent`` on the selected backend.

        Args:
            intent: Replication intent in the unified vocabulary
            operation: Operation member or its string value

        Returns:
            The backend the operation ran against

        Raises:
            PipelineError: tagged with the failing stage
            ValueError: for an unknown operation name
        """
        operation = Operation(operation)
        self.operation_count += 1
        hint = intent.backend_hints()
        logger.info(f"Processing {operation} for {intent.namespace}/{intent.name} "
                    f"(backend hint: {hint[0] if hint else 'auto'})")

        start = time.time()
        backend = None
        try:
            available = await self._available_backends()
            logger.debug(f"Discovered backends: {[str(b) for b in available]}")

            backend = self._select(intent, available)
            logger.info(f"Selected backend {backend} for {intent.namespace}/{intent.name}")

            await self._validate(intent, backend)
            state, mode = self._translate(intent, backend)
            logger.debug(f"Translated state={state} mode={mode} for backend {backend}")

            adapter = await self._get_adapter(backend)
            try:
                await OPERATION_HANDLERS[operation](adapter, intent)
            except Exception as e:
                raise PipelineError(PipelineStage.EXECUTION, e) from e
        except PipelineError as e:
            self._record_failure(e, backend, operation)
            raise

        OPERATIONS.labels(backend=str(backend), operation=str(operation), result="success").inc()
        OPERATION_DURATION.labels(backend=str(backend), operation=str(operation)).observe(
            time.time() - start)
        logger.info(f"Successfully processed {operation} for {intent.namespace}/{intent.name}")
        return backend

    async def get_replication_status(self, intent: ReplicationIntent) -> ReplicationStatus:
        """Read status from the selected backend in the unified vocabulary.

        Values the reverse tables do not know are returned unchanged.
        """
        backend = None
        try:
            available = await self._available_backends()
            backend = self._select(intent, available)
            adapter = await self._get_adapter(backend)
            try:
                status = await adapter.get_replication_status(intent)
            except Exception as e:
                raise PipelineError(PipelineStage.EXECUTION, e) from e
        except PipelineError as e:
            self._record_failure(e, backend, "status", counted=False)
            raise

        try:
            status.state = self.translator.translate_state_from_backend(backend, status.state)
        except TranslationError as e:
            logger.warning(f"Keeping raw {backend} state {status.state!r}: {e}")
        try:
            status.mode = self.translator.translate_mode_from_backend(backend, status.mode)
        except TranslationError as e:
            logger.warning(f"Keeping raw {backend} mode {status.mode!r}: {e}")
        return status

    async def invalidate_cache(self) -> None:
        async with self._cache_lock.write_lock():
            self._cache = {}
            self._last_discovery = None
            self._last_discovery_wall = None
        logger.debug("Discovery cache invalidated")

    def get_metrics(self) -> Dict[str, object]:
        return {
            "operation_count": self.operation_count,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "cache_entries": len(self._cache),
            "last_discovery": self._last_discovery_wall,
            "error_count": self.error_count,
            "status_error_count": self.status_error_count,
        }

    async def _available_backends(self) -> List[Backend]:
        cached = await self._cached_backends()
        if cached is not None:
            self.cache_hits += 1
            DISCOVERY_CACHE_HITS.inc()
            logger.debug(f"Using cached discovery results: {[str(b) for b in cached]}")
            return cached

        self.cache_misses += 1
        DISCOVERY_CACHE_MISSES.inc()
        try:
            result = await self.discovery.discover_backends()
        except Exception as e:
            raise PipelineError(PipelineStage.DISCOVERY, e) from e

        if self.config.enable_caching:
            entries = {backend: result for backend in result.available_backends}
            async with self._cache_lock.write_lock():
                self._cache = entries
                self._last_discovery = self._clock()
                self._last_discovery_wall = time.time()
        return list(result.available_backends)

    async def _cached_backends(self) -> Optional[List[Backend]]:
        if not self.config.enable_caching:
            return None
        async with self._cache_lock.read_lock():
            if self._last_discovery is None or not self._cache:
                return None
            if self._clock() - self._last_discovery >= self.config.cache_expiry_seconds:
                return None
            return list(self._cache.keys())

    def _select(self, intent: ReplicationIntent, available: List[Backend]) -> Backend:
        try:
            return self.selector.select(intent, available)
        except Exception as e:
            raise PipelineError(PipelineStage.SELECTION, e) from e

    async def _validate(self, intent: ReplicationIntent, backend: Backend) -> None:
        try:
            result = await self.discovery.discover_backend(backend)
        except Exception as e:
            logger.debug(f"Could not discover backend {backend} for validation: {e}")
            return

        if not result.is_ready:
            if self.config.require_ready_backend:
                raise PipelineError(PipelineStage.VALIDATION,
                                    RuntimeError(f"backend {backend} is not ready (status {result.status})"))
            logger.debug(f"Backend {backend} not fully ready (status {result.status}), continuing")

        if self.config.enforce_capabilities:
            required = MODE_CAPABILITIES.get(intent.replication_mode)
            if required is not None and not result.supports(required):
                raise PipelineError(PipelineStage.VALIDATION,
                                    RuntimeError(f"backend {backend} does not support {required}"))
        logger.debug(f"Configuration validated for backend {backend}")

    def _translate(self, intent: ReplicationIntent, backend: Backend) -> Tuple[str, str]:
        try:
            state = self.translator.translate_state_to_backend(backend, intent.replication_state)
        except TranslationError as e:
            raise PipelineError(PipelineStage.TRANSLATION, e, "state translation failed") from e
        try:
            mode = self.translator.translate_mode_to_backend(backend, intent.replication_mode)
        except TranslationError as e:
            raise PipelineError(PipelineStage.TRANSLATION, e, "mode translation failed") from e
        return state, mode

    async def _get_adapter(self, backend: Backend) -> ReplicationAdapter:
        try:
            adapter = self.registry.create_adapter(backend, self.translator)
        except Exception as e:
            raise PipelineError(PipelineStage.ADAPTER_CREATION, e) from e
        try:
            await adapter.initialize()
        except Exception as e:
            raise PipelineError(PipelineStage.ADAPTER_INIT, e) from e
        logger.debug(f"Adapter for {backend} created and initialized")
        return adapter

    def _record_failure(self, error: PipelineError, backend: Optional[Backend], operation,
                        counted: bool = True) -> None:
        # error_count is the numerator of the health error rate and must only
        # grow alongside operation_count
        if counted:
            self.error_count += 1
        else:
            self.status_error_count += 1
        PIPELINE_ERRORS.labels(stage=str(error.stage)).inc()
        OPERATIONS.labels(backend=str(backend) if backend else "none",
                          operation=str(operation), result="error").inc()
        logger.error(str(error))
