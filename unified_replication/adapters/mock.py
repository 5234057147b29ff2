"""In-memory adapters for local runs and tests."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional, Set

from .base import (
    AdapterConfig,
    AdapterError,
    AdapterErrorType,
    AdapterFactory,
    AdapterFactoryInfo,
    ReplicationAdapter,
)
from ..models.replication import ReplicationHealth, ReplicationIntent, ReplicationStatus
from ..translation.engine import TranslationEngine
from ..translation.types import Backend

logger = logging.getLogger(__name__)


@dataclass
class MockReplication:
    name: str
    namespace: str
    state: str  # backend vocabulary
    mode: str  # backend vocabulary
    health: ReplicationHealth = ReplicationHealth.HEALTHY
    created_at: float = field(default_factory=time.time)
    last_sync_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    observed_generation: int = 0
    events: List[str] = field(default_factory=list)


class MockStore:
    """Replications keyed by namespace/name, shared by a factory's adapters."""

    def __init__(self):
        self._items: Dict[str, MockReplication] = {}
        self._lock = Lock()

    @staticmethod
    def key(intent: ReplicationIntent) -> str:
        return f"{intent.namespace}/{intent.name}"

    def get(self, key: str) -> Optional[MockReplication]:
        with self._lock:
            return self._items.get(key)

    def put(self, key: str, replication: MockReplication, must_exist: Optional[bool] = None) -> bool:
        """Store a replication.

        Returns False if ``must_exist`` is set and the key's presence does not
        match it; nothing is written in that case.
        """
        with self._lock:
            exists = key in self._items
            if must_exist is not None and exists != must_exist:
                return False
            self._items[key] = replication
            return True

    def remove(self, key: str) -> Optional[MockReplication]:
        with self._lock:
            return self._items.pop(key, None)

    def items(self) -> Dict[str, MockReplication]:
        with self._lock:
            return dict(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class MockAdapter(ReplicationAdapter):
    def __init__(self, backend: Backend, translator: TranslationEngine, config: AdapterConfig,
                 store: MockStore, failures: "FailureInjector", latency_seconds: float = 0.0):
        super().__init__(backend, translator, config)
        self.store = store
        self.failures = failures
        self.latency_seconds = latency_seconds

    async def initialize(self) -> None:
        await self._simulate("initialize")
        await super().initialize()

    async def create_replication(self, intent: ReplicationIntent) -> None:
        await self._simulate("create")
        state, mode = self.backend_values(intent)
        replication = MockReplication(
            name=intent.name,
            namespace=intent.namespace,
            state=state,
            mode=mode,
            observed_generation=intent.generation,
            events=["created"],
        )
        if not self.store.put(MockStore.key(intent), replication, must_exist=False):
            raise AdapterError(AdapterErrorType.RESOURCE, self.backend, "create", intent.name,
                               "replication already exists")
        logger.debug(f"Mock {self.backend} created {MockStore.key(intent)} state={state} mode={mode}")

    async def update_replication(self, intent: ReplicationIntent) -> None:
        await self._simulate("update")
        key = MockStore.key(intent)
        current = self.store.get(key)
        if current is None:
            raise AdapterError(AdapterErrorType.RESOURCE, self.backend, "update", intent.name,
                               "replication not found")
        state, mode = self.backend_values(intent)
        if current.state != state:
            current.events.append(f"state {current.state} -> {state}")
        current.state = state
        current.mode = mode
        current.observed_generation = intent.generation
        self.store.put(key, current)

    async def delete_replication(self, intent: ReplicationIntent) -> None:
        await self._simulate("delete")
        if self.store.remove(MockStore.key(intent)) is None:
            raise AdapterError(AdapterErrorType.RESOURCE, self.backend, "delete", intent.name,
                               "replication not found")

    async def get_replication_status(self, intent: ReplicationIntent) -> ReplicationStatus:
        await self._simulate("status")
        replication = self.store.get(MockStore.key(intent))
        if replication is None:
            raise AdapterError(AdapterErrorType.RESOURCE, self.backend, "status", intent.name,
                               "replication not found")
        return ReplicationStatus(
            state=replication.state,
            mode=replication.mode,
            message="Mock replication running",
            health=replication.health,
            last_sync_time=replication.last_sync_time,
            backend_specific={"events": list(replication.events)},
            observed_generation=replication.observed_generation,
        )

    async def _simulate(self, operation: str) -> None:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)
        self.failures.check(self.backend, operation)


class FailureInjector:
    """Deterministic failure injection for mock adapters."""

    def __init__(self):
        self.fail_next: Optional[AdapterErrorType] = None
        self.failing_operations: Set[str] = set()
        self.error_type = AdapterErrorType.OPERATION

    def fail_next_operation(self, kind: AdapterErrorType = AdapterErrorType.OPERATION) -> None:
        self.fail_next = kind

    def fail_operation(self, operation: str, kind: AdapterErrorType = AdapterErrorType.OPERATION) -> None:
        self.failing_operations.add(operation)
        self.error_type = kind

    def reset(self) -> None:
        self.fail_next = None
        self.failing_operations.clear()

    def check(self, backend: Backend, operation: str) -> None:
        if self.fail_next is not None:
            kind, self.fail_next = self.fail_next, None
            raise AdapterError(kind, backend, operation, message="injected failure")
        if operation in self.failing_operations:
            raise AdapterError(self.error_type, backend, operation, message="injected failure")


class MockAdapterFactory(AdapterFactory):
    def __init__(self, backend: Backend, latency_seconds: float = 0.0):
        super().__init__(AdapterFactoryInfo(
            name=f"Mock {backend} Adapter",
            backend=backend,
            version="1.0.0",
            description="In-memory adapter for testing",
        ))
        self.store = MockStore()
        self.failures = FailureInjector()
        self.latency_seconds = latency_seconds
        self.created = 0

    def validate_config(self, config: AdapterConfig) -> None:
        super().validate_config(config)
        if self.latency_seconds < 0:
            raise AdapterError(AdapterErrorType.CONFIGURATION, self.backend,
                               message="latency must not be negative")

    def create_adapter(self, translator: TranslationEngine,
                       config: AdapterConfig) -> ReplicationAdapter:
        self.created += 1
        return MockAdapter(self.backend, translator, config, self.store,
                           self.failures, self.latency_seconds)
