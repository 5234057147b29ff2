"""Unit tests for the translation engine."""
import pytest

from unified_replication.translation.engine import TranslationEngine
from unified_replication.translation.maps import TranslationTables
from unified_replication.translation.types import (
    Backend,
    BackendTables,
    ErrorType,
    TranslationError,
    TranslationMap,
    is_translation_error,
)

UNIFIED_STATES = ["source", "replica", "syncing", "promoting", "demoting", "failed"]
UNIFIED_MODES = ["synchronous", "asynchronous"]


class TestTranslationEngine:
    """Forward and reverse lookups over the default tables."""

    @pytest.mark.parametrize("backend", list(Backend))
    def test_every_state_round_trips(self, translator, backend):
        for state in UNIFIED_STATES:
            backend_state = translator.translate_state_to_backend(backend, state)
            assert translator.translate_state_from_backend(backend, backend_state) == state

    @pytest.mark.parametrize("backend", list(Backend))
    def test_every_mode_round_trips(self, translator, backend):
        for mode in UNIFIED_MODES:
            backend_mode = translator.translate_mode_to_backend(backend, mode)
            assert translator.translate_mode_from_backend(backend, backend_mode) == mode

    def test_known_backend_values(self, translator):
        assert translator.translate_state_to_backend(Backend.CEPH, "source") == "primary"
        assert translator.translate_state_to_backend(Backend.CEPH, "replica") == "secondary"
        assert translator.translate_state_to_backend(Backend.TRIDENT, "promoting") == "promoted"
        assert translator.translate_state_to_backend(Backend.POWERSTORE, "replica") == "destination"
        assert translator.translate_mode_to_backend(Backend.TRIDENT, "asynchronous") == "Async"
        assert translator.translate_mode_to_backend(Backend.POWERSTORE, "synchronous") == "SYNC"

    def test_pair_translation(self, translator):
        assert translator.translate_to_backend(Backend.CEPH, "source", "synchronous") == ("primary", "sync")
        assert translator.translate_from_backend(Backend.CEPH, "primary", "sync") == ("source", "synchronous")

    def test_unmapped_mode_is_missing_mapping(self, translator):
        with pytest.raises(TranslationError) as exc_info:
            translator.translate_mode_to_backend(Backend.CEPH, "eventual")
        error = exc_info.value
        assert error.kind == ErrorType.MISSING_MAPPING
        assert error.backend == Backend.CEPH
        assert error.field == "mode"
        assert error.value == "eventual"

    def test_unknown_backend_value_is_missing_mapping(self, translator):
        with pytest.raises(TranslationError) as exc_info:
            translator.translate_state_from_backend(Backend.TRIDENT, "bogus")
        assert exc_info.value.kind == ErrorType.MISSING_MAPPING
        assert "backend state not recognized" in str(exc_info.value)

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_blank_value_is_invalid(self, translator, value):
        with pytest.raises(TranslationError) as exc_info:
            translator.translate_state_to_backend(Backend.POWERSTORE, value)
        assert exc_info.value.kind == ErrorType.INVALID_VALUE

    def test_unknown_backend_is_unsupported(self):
        tables = TranslationTables({
            Backend.CEPH: BackendTables(
                state=TranslationMap.from_forward({"source": "primary"}),
                mode=TranslationMap.from_forward({"synchronous": "sync"}),
            ),
        })
        engine = TranslationEngine(tables)
        with pytest.raises(TranslationError) as exc_info:
            engine.translate_state_to_backend(Backend.TRIDENT, "source")
        assert exc_info.value.kind == ErrorType.UNSUPPORTED_MAPPING
        assert not engine.is_backend_supported(Backend.TRIDENT)
        assert engine.supported_backends() == [Backend.CEPH]

    def test_error_message_names_backend_field_and_value(self, translator):
        with pytest.raises(TranslationError) as exc_info:
            translator.translate_mode_to_backend(Backend.CEPH, "eventual")
        message = str(exc_info.value)
        assert "missing_mapping" in message
        assert "ceph" in message
        assert "mode='eventual'" in message
        assert is_translation_error(exc_info.value)
        assert not is_translation_error(ValueError("x"))

    def test_backend_parse(self):
        assert Backend.parse("Ceph") == Backend.CEPH
        assert Backend.parse(" trident ") == Backend.TRIDENT
        assert Backend.parse(Backend.POWERSTORE) is Backend.POWERSTORE
        with pytest.raises(ValueError):
            Backend.parse("longhorn")

    def test_backend_info(self, translator):
        info = translator.get_backend_info(Backend.CEPH)
        assert info.supported_states == UNIFIED_STATES
        assert info.supported_modes == UNIFIED_MODES
        assert "primary" in info.backend_states
        assert "async" in info.backend_modes
        assert str(info).startswith("ceph backend supports:")

    def test_supported_vocabularies(self, translator):
        assert translator.get_supported_states(Backend.TRIDENT) == UNIFIED_STATES
        assert translator.get_supported_modes(Backend.POWERSTORE) == UNIFIED_MODES
        assert translator.supported_backends() == [Backend.CEPH, Backend.TRIDENT, Backend.POWERSTORE]


class TestTableValidation:
    """Startup validation of bidirectional consistency."""

    def test_default_tables_are_consistent(self, translator):
        translator.validate_all_translations()

    def test_inconsistent_table_is_reported(self):
        broken = TranslationMap({"source": "primary"}, {"primary": "replica"})
        tables = TranslationTables({
            Backend.CEPH: BackendTables(
                state=broken,
                mode=TranslationMap.from_forward({"synchronous": "sync"}),
            ),
        })
        engine = TranslationEngine(tables)
        with pytest.raises(TranslationError) as exc_info:
            engine.validate_translation(Backend.CEPH)
        error = exc_info.value
        assert error.kind == ErrorType.INCONSISTENT_MAPPING
        assert error.field == "state"
        assert str(error).find("state mapping validation failed") != -1
        assert isinstance(error.unwrap(), ValueError)
        assert error.__cause__ is error.unwrap()

    def test_validate_all_stops_at_broken_backend(self):
        tables = TranslationTables({
            Backend.CEPH: BackendTables(
                state=TranslationMap.from_forward({"source": "primary"}),
                mode=TranslationMap({"synchronous": "sync"}, {}),
            ),
        })
        with pytest.raises(TranslationError) as exc_info:
            TranslationEngine(tables).validate_all_translations()
        assert exc_info.value.field == "mode"

    def test_custom_tables_are_honoured(self):
        tables = TranslationTables.from_forward_maps(
            {Backend.TRIDENT: {"primary": "established", "secondary": "reestablishing"}},
            {Backend.TRIDENT: {"asynchronous": "Async"}},
        )
        engine = TranslationEngine(tables)
        engine.validate_all_translations()
        assert engine.translate_state_to_backend(Backend.TRIDENT, "primary") == "established"
        assert engine.translate_state_from_backend(Backend.TRIDENT, "established") == "primary"
        with pytest.raises(TranslationError):
            engine.translate_state_to_backend(Backend.TRIDENT, "promoting")
