import logging
from threading import Lock
from typing import Dict, List, Optional

from .base import (
    AdapterConfig,
    AdapterError,
    AdapterErrorType,
    AdapterFactory,
    AdapterFactoryInfo,
    ReplicationAdapter,
)
from .ceph import CephAdapterFactory
from .mock import MockAdapterFactory
from .powerstore import PowerStoreAdapterFactory
from .trident import TridentAdapterFactory
from ..translation.engine import TranslationEngine
from ..translation.types import Backend

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapter factories keyed by backend.

    Built at startup and handed to the controller engine; nothing registers
    itself globally.
    """

    def __init__(self, namespace: str = "default"):
        self.namespace = namespace
        self._factories: Dict[Backend, AdapterFactory] = {}
        self._lock = Lock()

    def register_factory(self, factory: AdapterFactory) -> None:
        if factory is None:
            raise ValueError("factory cannot be None")
        with self._lock:
            if factory.backend in self._factories:
                raise AdapterError(AdapterErrorType.CONFIGURATION, factory.backend,
                                   message=f"factory for backend {factory.backend} already registered")
            self._factories[factory.backend] = factory
        logger.debug(f"Registered adapter factory {factory.info.name} for {factory.backend}")

    def unregister_factory(self, backend: Backend) -> None:
        with self._lock:
            if self._factories.pop(backend, None) is None:
                raise AdapterError(AdapterErrorType.CONFIGURATION, backend,
                                   message=f"no factory registered for backend {backend}")

    def get_factory(self, backend: Backend) -> AdapterFactory:
        with self._lock:
            factory = self._factories.get(backend)
        if factory is None:
            raise AdapterError(AdapterErrorType.CONFIGURATION, backend,
                               message=f"no factory registered for backend {backend}")
        return factory

    def list_factories(self) -> List[AdapterFactory]:
        with self._lock:
            return list(self._factories.values())

    def get_adapter_info(self, backend: Backend) -> AdapterFactoryInfo:
        return self.get_factory(backend).info

    def create_adapter(self, backend: Backend, translator: TranslationEngine,
                       config: Optional[AdapterConfig] = None) -> ReplicationAdapter:
        """Validate the config and build a fresh adapter for the backend."""
        factory = self.get_factory(backend)
        if config is None:
            config = AdapterConfig(backend=backend, namespace=self.namespace)
        factory.validate_config(config)
        return factory.create_adapter(translator, config)

    def is_backend_supported(self, backend: Backend) -> bool:
        with self._lock:
            return backend in self._factories

    def supported_backends(self) -> List[Backend]:
        with self._lock:
            return [backend for backend in Backend if backend in self._factories]


def build_default_registry(namespace: str = "default", api=None) -> AdapterRegistry:
    """Registry with the Kubernetes-backed adapters for every backend."""
    registry = AdapterRegistry(namespace)
    registry.register_factory(CephAdapterFactory(api))
    registry.register_factory(TridentAdapterFactory(api))
    registry.register_factory(PowerStoreAdapterFactory(api))
    return registry


def build_mock_registry(namespace: str = "default", latency_seconds: float = 0.0) -> AdapterRegistry:
    registry = AdapterRegistry(namespace)
    for backend in Backend:
        registry.register_factory(MockAdapterFactory(backend, latency_seconds))
    return registry
