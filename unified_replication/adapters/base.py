from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ..models.replication import ReplicationIntent, ReplicationStatus
from ..translation.engine import TranslationEngine
from ..translation.types import Backend

MANAGED_BY = "unified-replication-operator"


class AdapterErrorType(str, Enum):
    CONFIGURATION = "configuration"
    CONNECTION = "connection"
    VALIDATION = "validation"
    OPERATION = "operation"
    TIMEOUT = "timeout"
    PERMISSION = "permission"
    RESOURCE = "resource"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


RETRYABLE_ERROR_TYPES = frozenset({
    AdapterErrorType.CONNECTION,
    AdapterErrorType.TIMEOUT,
    AdapterErrorType.RESOURCE,
})


class AdapterError(Exception):
    """Failure inside a backend adapter."""

    def __init__(self, kind: AdapterErrorType, backend: Optional[Backend] = None,
                 operation: str = "", resource: str = "", message: str = "",
                 cause: Optional[BaseException] = None):
        self.kind = kind
        self.backend = backend
        self.operation = operation
        self.resource = resource
        self.message = message
        self.cause = cause
        self.retryable = kind in RETRYABLE_ERROR_TYPES
        super().__init__(self._format())
        if cause is not None:
            self.__cause__ = cause

    def _format(self) -> str:
        text = "adapter error"
        if self.backend:
            text += f" ({self.backend})"
        if self.operation:
            text += f" [{self.operation}]"
        if self.resource:
            text += f" {{{self.resource}}}"
        text += f": {self.message}"
        if self.cause is not None:
            text += f" (caused by: {self.cause})"
        return text

    def unwrap(self) -> Optional[BaseException]:
        return self.cause


@dataclass
class AdapterConfig:
    backend: Backend
    namespace: str = "default"
    timeout_seconds: float = 30.0
    managed_by: str = MANAGED_BY
    custom_settings: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AdapterFactoryInfo:
    name: str
    backend: Backend
    version: str
    description: str = ""


class ReplicationAdapter(ABC):
    """Drives one backend's control objects for a replication intent.

    Adapters receive intents in the unified vocabulary and translate state and
    mode themselves through the injected TranslationEngine. Status is returned
    in the backend's own vocabulary.
    """

    def __init__(self, backend: Backend, translator: TranslationEngine, config: AdapterConfig):
        self.backend = backend
        self.translator = translator
        self.config = config
        self.initialized = False

    async def initialize(self) -> None:
        """Prepare the adapter for use."""
        self.initialized = True

    @abstractmethod
    async def create_replication(self, intent: ReplicationIntent) -> None:
        """Create the backend replication for the intent."""
        pass

    @abstractmethod
    async def update_replication(self, intent: ReplicationIntent) -> None:
        """Bring the backend replication in line with the intent."""
        pass

    @abstractmethod
    async def delete_replication(self, intent: ReplicationIntent) -> None:
        """Remove the backend replication."""
        pass

    @abstractmethod
    async def get_replication_status(self, intent: ReplicationIntent) -> ReplicationStatus:
        """Read the backend replication status."""
        pass

    def backend_values(self, intent: ReplicationIntent):
        """Intent state and mode in this backend's vocabulary."""
        return self.translator.translate_to_backend(
            self.backend, intent.replication_state, intent.replication_mode)


class AdapterFactory(ABC):
    """Creates adapters for a single backend."""

    def __init__(self, info: AdapterFactoryInfo):
        self.info = info

    @property
    def backend(self) -> Backend:
        return self.info.backend

    def default_config(self) -> AdapterConfig:
        return AdapterConfig(backend=self.backend)

    def validate_config(self, config: AdapterConfig) -> None:
        if config is None:
            raise AdapterError(AdapterErrorType.CONFIGURATION, self.backend,
                               message="config cannot be None")
        if config.backend != self.backend:
            raise AdapterError(AdapterErrorType.CONFIGURATION, self.backend,
                               message=f"config backend {config.backend} does not match "
                                       f"factory backend {self.backend}")
        if config.timeout_seconds <= 0:
            raise AdapterError(AdapterErrorType.CONFIGURATION, self.backend,
                               message="timeout must be positive")

    @abstractmethod
    def create_adapter(self, translator: TranslationEngine,
                       config: AdapterConfig) -> ReplicationAdapter:
        pass
