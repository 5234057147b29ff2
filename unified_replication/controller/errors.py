from enum import Enum
from typing import Optional, Type, TypeVar

from ..adapters.base import AdapterError
from ..discovery.types import DiscoveryError, DiscoveryErrorType

E = TypeVar("E", bound=BaseException)


class PipelineStage(str, Enum):
    DISCOVERY = "discovery"
    SELECTION = "selection"
    VALIDATION = "validation"
    TRANSLATION = "translation"
    ADAPTER_CREATION = "adapter_creation"
    ADAPTER_INIT = "adapter_init"
    EXECUTION = "execution"

    def __str__(self) -> str:
        return self.value


STAGE_PREFIXES = {
    PipelineStage.DISCOVERY: "discovery failed",
    PipelineStage.SELECTION: "backend selection failed",
    PipelineStage.VALIDATION: "validation failed",
    PipelineStage.TRANSLATION: "translation failed",
    PipelineStage.ADAPTER_CREATION: "adapter creation failed",
    PipelineStage.ADAPTER_INIT: "adapter initialization failed",
    PipelineStage.EXECUTION: "operation execution failed",
}

# Failures in these stages depend only on the intent and the tables
PERMANENT_STAGES = frozenset({
    PipelineStage.SELECTION,
    PipelineStage.VALIDATION,
    PipelineStage.TRANSLATION,
    PipelineStage.ADAPTER_CREATION,
})


class PipelineError(Exception):
    """A controller pipeline failure tagged with the stage it happened in.

    Formats as ``<stage prefix>: [<detail>: ]<cause>`` and keeps the original
    exception as both ``cause`` and ``__cause__``.
    """

    def __init__(self, stage: PipelineStage, cause: BaseException, detail: Optional[str] = None):
        self.stage = stage
        self.cause = cause
        self.detail = detail
        parts = [STAGE_PREFIXES[stage]]
        if detail:
            parts.append(detail)
        parts.append(str(cause))
        super().__init__(": ".join(parts))
        self.__cause__ = cause

    def unwrap(self) -> BaseException:
        return self.cause

    @property
    def is_retryable(self) -> bool:
        """Whether running the same request again could succeed."""
        if self.stage in PERMANENT_STAGES:
            return False
        if isinstance(self.cause, AdapterError):
            return self.cause.retryable
        if isinstance(self.cause, DiscoveryError):
            return self.cause.kind != DiscoveryErrorType.PERMISSION_DENIED
        return self.stage == PipelineStage.DISCOVERY


class SelectionErrorType(str, Enum):
    NO_BACKEND_AVAILABLE = "no_backend_available"
    EXPLICIT_BACKEND_UNAVAILABLE = "explicit_backend_unavailable"

    def __str__(self) -> str:
        return self.value


class SelectionError(Exception):
    def __init__(self, kind: SelectionErrorType, message: str, backend=None):
        self.kind = kind
        self.backend = backend
        super().__init__(message)


def find_cause(error: Optional[BaseException], exc_type: Type[E]) -> Optional[E]:
    """Walk the ``__cause__`` chain and return the first instance of exc_type."""
    seen = set()
    while error is not None and id(error) not in seen:
        if isinstance(error, exc_type):
            return error
        seen.add(id(error))
        error = error.__cause__
    return None
