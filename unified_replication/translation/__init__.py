from .types import (
    Backend,
    BackendInfo,
    BackendTables,
    ErrorType,
    TranslationError,
    TranslationMap,
    is_translation_error,
)
from .maps import DEFAULT_TABLES, TranslationTables
from .engine import TranslationEngine
from .validator import TranslationValidator

__all__ = [
    'Backend',
    'BackendInfo',
    'BackendTables',
    'ErrorType',
    'TranslationError',
    'TranslationMap',
    'is_translation_error',
    'DEFAULT_TABLES',
    'TranslationTables',
    'TranslationEngine',
    'TranslationValidator',
]
