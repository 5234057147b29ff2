from .errors import (
    PipelineError,
    PipelineStage,
    SelectionError,
    SelectionErrorType,
    find_cause,
)
from .selection import DEFAULT_DETECTION_RULES, BackendSelector, DetectionRule
from .engine import ControllerEngine, Operation

__all__ = [
    'PipelineError',
    'PipelineStage',
    'SelectionError',
    'SelectionErrorType',
    'find_cause',
    'DEFAULT_DETECTION_RULES',
    'BackendSelector',
    'DetectionRule',
    'ControllerEngine',
    'Operation',
]
