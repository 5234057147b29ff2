from .base import (
    AdapterConfig,
    AdapterError,
    AdapterErrorType,
    AdapterFactory,
    AdapterFactoryInfo,
    ReplicationAdapter,
)
from .custom_object import CustomObjectAdapter
from .ceph import CephAdapter, CephAdapterFactory
from .trident import TridentAdapter, TridentAdapterFactory
from .powerstore import PowerStoreAdapter, PowerStoreAdapterFactory
from .mock import MockAdapter, MockAdapterFactory
from .registry import AdapterRegistry, build_default_registry, build_mock_registry

__all__ = [
    'AdapterConfig',
    'AdapterError',
    'AdapterErrorType',
    'AdapterFactory',
    'AdapterFactoryInfo',
    'ReplicationAdapter',
    'CustomObjectAdapter',
    'CephAdapter',
    'CephAdapterFactory',
    'TridentAdapter',
    'TridentAdapterFactory',
    'PowerStoreAdapter',
    'PowerStoreAdapterFactory',
    'MockAdapter',
    'MockAdapterFactory',
    'AdapterRegistry',
    'build_default_registry',
    'build_mock_registry',
]
