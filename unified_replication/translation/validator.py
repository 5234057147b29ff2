"""Round-trip and coverage checks over a TranslationEngine."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from .engine import MODE_FIELD, STATE_FIELD, TranslationEngine
from .types import Backend, ErrorType, TranslationError

logger = logging.getLogger(__name__)


@dataclass
class BackendStatistics:
    backend: Backend
    state_map_size: int
    mode_map_size: int
    backend_states: int
    backend_modes: int


@dataclass
class MappingStatistics:
    total_backends: int = 0
    total_state_mappings: int = 0
    total_mode_mappings: int = 0
    backend_stats: Dict[Backend, BackendStatistics] = field(default_factory=dict)


class TranslationValidator:
    """Exercises the engine end to end rather than inspecting raw tables."""

    def __init__(self, engine: Optional[TranslationEngine] = None):
        self.engine = engine or TranslationEngine()

    def validate_all_mappings(self) -> None:
        for backend in self.engine.supported_backends():
            self.validate_backend_mappings(backend)

    def validate_backend_mappings(self, backend: Backend) -> None:
        self.validate_state_round_trip(backend)
        self.validate_mode_round_trip(backend)

    def validate_state_round_trip(self, backend: Backend) -> None:
        """Translate every supported state forward and back."""
        for unified in self.engine.get_supported_states(backend):
            backend_value = self.engine.translate_state_to_backend(backend, unified)
            reverse = self.engine.translate_state_from_backend(backend, backend_value)
            self._check(backend, STATE_FIELD, unified, backend_value, reverse)

    def validate_mode_round_trip(self, backend: Backend) -> None:
        """Translate every supported mode forward and back."""
        for unified in self.engine.get_supported_modes(backend):
            backend_value = self.engine.translate_mode_to_backend(backend, unified)
            reverse = self.engine.translate_mode_from_backend(backend, backend_value)
            self._check(backend, MODE_FIELD, unified, backend_value, reverse)

    def validate_round_trip(self, backend: Backend, state: str, mode: str) -> None:
        """Round trip a single (state, mode) pair."""
        backend_state, backend_mode = self.engine.translate_to_backend(backend, state, mode)
        reverse_state, reverse_mode = self.engine.translate_from_backend(
            backend, backend_state, backend_mode)
        self._check(backend, STATE_FIELD, state, backend_state, reverse_state)
        self._check(backend, MODE_FIELD, mode, backend_mode, reverse_mode)

    def validate_mapping_coverage(self, backend: Backend,
                                  expected_states: Iterable[str] = (),
                                  expected_modes: Iterable[str] = ()) -> None:
        """Raise MISSING_MAPPING for the first expected value with no mapping.

        Args:
            backend: Backend whose tables are checked
            expected_states: Unified states that must be mapped
            expected_modes: Unified modes that must be mapped
        """
        states = set(self.engine.get_supported_states(backend))
        for state in expected_states:
            if state not in states:
                raise TranslationError(ErrorType.MISSING_MAPPING, backend, STATE_FIELD,
                                       state, "required state mapping is missing")
        modes = set(self.engine.get_supported_modes(backend))
        for mode in expected_modes:
            if mode not in modes:
                raise TranslationError(ErrorType.MISSING_MAPPING, backend, MODE_FIELD,
                                       mode, "required mode mapping is missing")

    def mapping_statistics(self) -> MappingStatistics:
        stats = MappingStatistics()
        for backend in self.engine.supported_backends():
            info = self.engine.get_backend_info(backend)
            backend_stats = BackendStatistics(
                backend=backend,
                state_map_size=len(info.supported_states),
                mode_map_size=len(info.supported_modes),
                backend_states=len(info.backend_states),
                backend_modes=len(info.backend_modes),
            )
            stats.backend_stats[backend] = backend_stats
            stats.total_backends += 1
            stats.total_state_mappings += backend_stats.state_map_size
            stats.total_mode_mappings += backend_stats.mode_map_size
        return stats

    @staticmethod
    def _check(backend: Backend, field_name: str, unified: str,
               backend_value: str, reverse: str) -> None:
        if reverse != unified:
            logger.error(f"Round trip for {backend} {field_name} diverged: "
                         f"{unified} -> {backend_value} -> {reverse}")
            raise TranslationError(
                ErrorType.INCONSISTENT_MAPPING, backend, field_name, unified,
                f"round-trip translation inconsistent: {unified} -> {backend_value} -> {reverse}")
