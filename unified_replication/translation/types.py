"""Core types for translating between unified and backend vocabularies."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional


class Backend(str, Enum):
    """Storage replication backends the operator can drive."""
    CEPH = "ceph"
    TRIDENT = "trident"
    POWERSTORE = "powerstore"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value) -> "Backend":
        """Return the backend for a string or Backend value."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class ErrorType(str, Enum):
    """Kinds of translation failure."""
    INVALID_VALUE = "invalid_value"
    UNSUPPORTED_MAPPING = "unsupported_mapping"
    INCONSISTENT_MAPPING = "inconsistent_mapping"
    MISSING_MAPPING = "missing_mapping"

    def __str__(self) -> str:
        return self.value


class TranslationError(Exception):
    """Translation failure attributable to a backend, field and value."""

    def __init__(self, kind: ErrorType, backend, field: str, value: str,
                 message: str, cause: Optional[BaseException] = None):
        self.kind = kind
        self.backend = backend
        self.field = field
        self.value = value
        self.message = message
        self.cause = cause
        super().__init__(self._format())
        if cause is not None:
            self.__cause__ = cause

    def _format(self) -> str:
        text = (f"translation error ({self.kind}) for backend {self.backend} "
                f"field {self.field}='{self.value}': {self.message}")
        if self.cause is not None:
            text += f" (caused by: {self.cause})"
        return text

    def unwrap(self) -> Optional[BaseException]:
        """Return the wrapped cause, if any."""
        return self.cause


def is_translation_error(err: BaseException) -> bool:
    return isinstance(err, TranslationError)


class TranslationMap:
    """Bidirectional mapping between unified and backend values.

    Build instances with :meth:`from_forward` so the reverse direction is
    derived rather than written by hand. Passing an explicit reverse map is
    supported for representing tables loaded from elsewhere; those are only
    trustworthy after :meth:`validate` returns no problems.
    """

    __slots__ = ("_forward", "_reverse")

    def __init__(self, unified_to_backend: Mapping[str, str],
                 backend_to_unified: Mapping[str, str]):
        self._forward = MappingProxyType(dict(unified_to_backend))
        self._reverse = MappingProxyType(dict(backend_to_unified))

    @classmethod
    def from_forward(cls, unified_to_backend: Mapping[str, str]) -> "TranslationMap":
        """Create a map from the unified->backend direction only."""
        return cls(unified_to_backend, derive_reverse(unified_to_backend))

    @property
    def unified_to_backend(self) -> Mapping[str, str]:
        return self._forward

    @property
    def backend_to_unified(self) -> Mapping[str, str]:
        return self._reverse

    def to_backend(self, unified_value: str) -> Optional[str]:
        return self._forward.get(unified_value)

    def from_backend(self, backend_value: str) -> Optional[str]:
        return self._reverse.get(backend_value)

    def unified_values(self) -> List[str]:
        return list(self._forward.keys())

    def backend_values(self) -> List[str]:
        return list(self._reverse.keys())

    def validate(self) -> List[str]:
        """Check bidirectional consistency.

        Returns:
            Problem descriptions; an empty list means the map is consistent.
        """
        problems = []
        derived = derive_reverse(self._forward)

        for unified, backend in self._forward.items():
            if backend not in self._reverse:
                problems.append(
                    f"backend value '{backend}' missing in reverse mapping "
                    f"(unified '{unified}' -> backend '{backend}' -> unified <none>)")
                continue
            reversed_unified = self._reverse[backend]
            if reversed_unified != unified:
                problems.append(
                    f"inconsistent mapping: unified '{unified}' -> backend "
                    f"'{backend}' -> unified '{reversed_unified}'")

        for backend, unified in self._reverse.items():
            if unified not in self._forward:
                problems.append(
                    f"unified value '{unified}' missing in forward mapping "
                    f"(reverse entry '{backend}' -> '{unified}')")
            elif derived.get(backend) != unified and self._forward[unified] != backend:
                problems.append(
                    f"inconsistent mapping: backend '{backend}' -> unified "
                    f"'{unified}' -> backend '{self._forward[unified]}'")

        return problems

    def __len__(self) -> int:
        return len(self._forward)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TranslationMap):
            return NotImplemented
        return (dict(self._forward) == dict(other._forward)
                and dict(self._reverse) == dict(other._reverse))

    def __hash__(self):
        return hash((tuple(self._forward.items()), tuple(self._reverse.items())))

    def __repr__(self) -> str:
        return f"TranslationMap({dict(self._forward)!r})"


def derive_reverse(unified_to_backend: Mapping[str, str]) -> Dict[str, str]:
    """Invert a forward map. Later entries win when targets collide."""
    return {backend: unified for unified, backend in unified_to_backend.items()}


@dataclass(frozen=True)
class BackendTables:
    """State and mode maps for one backend."""
    state: TranslationMap
    mode: TranslationMap


@dataclass(frozen=True)
class BackendInfo:
    """Vocabulary summary for a backend."""
    backend: Backend
    supported_states: List[str] = field(default_factory=list)
    supported_modes: List[str] = field(default_factory=list)
    backend_states: List[str] = field(default_factory=list)
    backend_modes: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return (f"{self.backend} backend supports:\n"
                f"  States: {', '.join(self.supported_states)} -> "
                f"{', '.join(self.backend_states)}\n"
                f"  Modes: {', '.join(self.supported_modes)} -> "
                f"{', '.join(self.backend_modes)}")
