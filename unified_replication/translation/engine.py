"""Translation engine for unified <-> backend state and mode values."""

import logging
from typing import List, Optional, Tuple

from .maps import DEFAULT_TABLES, TranslationTables
from .types import Backend, BackendInfo, ErrorType, TranslationError, TranslationMap
from ..monitoring.metrics import TRANSLATION_ERRORS

logger = logging.getLogger(__name__)

STATE_FIELD = "state"
MODE_FIELD = "mode"


class TranslationEngine:
    """Table-driven translator over verified bidirectional maps.

    All lookups are pure and synchronous. Validation of the tables is the
    caller's job at startup (see :meth:`validate_all_translations`).
    """

    def __init__(self, tables: Optional[TranslationTables] = None):
        self.tables = tables if tables is not None else DEFAULT_TABLES

    def translate_state_to_backend(self, backend: Backend, unified_state: str) -> str:
        return self._to_backend(backend, STATE_FIELD, unified_state)

    def translate_state_from_backend(self, backend: Backend, backend_state: str) -> str:
        return self._from_backend(backend, STATE_FIELD, backend_state)

    def translate_mode_to_backend(self, backend: Backend, unified_mode: str) -> str:
        return self._to_backend(backend, MODE_FIELD, unified_mode)

    def translate_mode_from_backend(self, backend: Backend, backend_mode: str) -> str:
        return self._from_backend(backend, MODE_FIELD, backend_mode)

    def translate_to_backend(self, backend: Backend, state: str, mode: str) -> Tuple[str, str]:
        """Translate a unified (state, mode) pair."""
        return (self.translate_state_to_backend(backend, state),
                self.translate_mode_to_backend(backend, mode))

    def translate_from_backend(self, backend: Backend, state: str, mode: str) -> Tuple[str, str]:
        """Translate a backend (state, mode) pair."""
        return (self.translate_state_from_backend(backend, state),
                self.translate_mode_from_backend(backend, mode))

    def validate_translation(self, backend: Backend) -> None:
        """Raise TranslationError(INCONSISTENT_MAPPING) if either map diverges."""
        for field_name, table in ((STATE_FIELD, self._map(backend, STATE_FIELD)),
                                  (MODE_FIELD, self._map(backend, MODE_FIELD))):
            problems = table.validate()
            if problems:
                cause = ValueError("; ".join(problems))
                raise TranslationError(
                    ErrorType.INCONSISTENT_MAPPING, backend, field_name, "",
                    f"{field_name} mapping validation failed: {problems[0]}",
                    cause)

    def validate_all_translations(self) -> None:
        """Validate every registered backend, stopping at the first failure."""
        for backend in self.supported_backends():
            self.validate_translation(backend)
            logger.debug(f"Translation tables for {backend} are consistent")

    def get_supported_states(self, backend: Backend) -> List[str]:
        return self._map(backend, STATE_FIELD).unified_values()

    def get_supported_modes(self, backend: Backend) -> List[str]:
        return self._map(backend, MODE_FIELD).unified_values()

    def supported_backends(self) -> List[Backend]:
        return self.tables.backends()

    def is_backend_supported(self, backend: Backend) -> bool:
        return backend in self.tables

    def get_backend_info(self, backend: Backend) -> BackendInfo:
        state_map = self._map(backend, STATE_FIELD)
        mode_map = self._map(backend, MODE_FIELD)
        return BackendInfo(
            backend=backend,
            supported_states=state_map.unified_values(),
            supported_modes=mode_map.unified_values(),
            backend_states=state_map.backend_values(),
            backend_modes=mode_map.backend_values(),
        )

    def _map(self, backend: Backend, field_name: str) -> TranslationMap:
        try:
            if field_name == STATE_FIELD:
                return self.tables.state_map(backend)
            return self.tables.mode_map(backend)
        except TranslationError as e:
            self._count(e)
            raise

    def _to_backend(self, backend: Backend, field_name: str, value: str) -> str:
        self._check_value(backend, field_name, value)
        translated = self._map(backend, field_name).to_backend(value)
        if translated is None:
            self._fail(ErrorType.MISSING_MAPPING, backend, field_name, value,
                       f"unified {field_name} not supported by backend")
        return translated

    def _from_backend(self, backend: Backend, field_name: str, value: str) -> str:
        self._check_value(backend, field_name, value)
        translated = self._map(backend, field_name).from_backend(value)
        if translated is None:
            self._fail(ErrorType.MISSING_MAPPING, backend, field_name, value,
                       f"backend {field_name} not recognized")
        return translated

    def _check_value(self, backend: Backend, field_name: str, value) -> None:
        if not isinstance(value, str) or not value.strip():
            self._fail(ErrorType.INVALID_VALUE, backend, field_name,
                       "" if value is None else str(value),
                       f"{field_name} value must be a non-empty string")

    def _fail(self, kind: ErrorType, backend: Backend, field_name: str,
              value: str, message: str) -> None:
        error = TranslationError(kind, backend, field_name, value, message)
        self._count(error)
        raise error

    @staticmethod
    def _count(error: TranslationError) -> None:
        TRANSLATION_ERRORS.labels(
            backend=str(error.backend), field=error.field, kind=str(error.kind)
        ).inc()
