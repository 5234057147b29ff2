from .types import (
    BackendCapability,
    BackendDiscoveryResult,
    BackendStatus,
    CRDDefinition,
    CRDInfo,
    DiscoveryError,
    DiscoveryErrorType,
    DiscoveryResult,
)
from .detectors import BackendDetector, CRDDetector, StaticDetector
from .engine import DiscoveryEngine

__all__ = [
    'BackendCapability',
    'BackendDiscoveryResult',
    'BackendStatus',
    'CRDDefinition',
    'CRDInfo',
    'DiscoveryError',
    'DiscoveryErrorType',
    'DiscoveryResult',
    'BackendDetector',
    'CRDDetector',
    'StaticDetector',
    'DiscoveryEngine',
]
