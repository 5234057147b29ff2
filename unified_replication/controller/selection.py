"""Backend selection for a replication intent."""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import SelectionError, SelectionErrorType
from ..models.replication import ReplicationIntent
from ..translation.types import Backend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionRule:
    """Selects ``backend`` when any fragment occurs in the storage class name."""
    backend: Backend
    fragments: Tuple[str, ...]

    def matches(self, storage_class: str) -> bool:
        name = storage_class.lower()
        return any(fragment.lower() in name for fragment in self.fragments)


DEFAULT_DETECTION_RULES = (
    DetectionRule(Backend.CEPH, ("ceph", "rbd")),
    DetectionRule(Backend.TRIDENT, ("trident", "netapp", "ontap")),
    DetectionRule(Backend.POWERSTORE, ("powerstore", "dell")),
)


class BackendSelector:
    """Picks a backend in three steps.

    1. An explicit extension block on the intent; the backend must be available.
    2. The first detection rule whose backend is available and matches the
       source storage class.
    3. The first available backend.
    """

    def __init__(self, rules: Optional[Iterable[DetectionRule]] = None):
        self.rules: List[DetectionRule] = list(rules if rules is not None else DEFAULT_DETECTION_RULES)

    def add_rule(self, rule: DetectionRule, index: Optional[int] = None) -> None:
        if index is None:
            self.rules.append(rule)
        else:
            self.rules.insert(index, rule)

    def select(self, intent: ReplicationIntent, available: Sequence[Backend]) -> Backend:
        hints = intent.backend_hints()
        if hints:
            if len(hints) > 1:
                logger.warning(f"Intent {intent.namespace}/{intent.name} has extensions for "
                               f"{', '.join(str(h) for h in hints)}; using {hints[0]}")
            backend = hints[0]
            if backend not in available:
                raise SelectionError(SelectionErrorType.EXPLICIT_BACKEND_UNAVAILABLE,
                                     f"backend {backend} not available in cluster", backend)
            return backend

        storage_class = intent.source_endpoint.storage_class
        if storage_class:
            backend = self.detect_from_storage_class(storage_class, available)
            if backend is not None:
                return backend
            logger.debug(f"Could not detect backend from storage class {storage_class}")

        if available:
            logger.info(f"No explicit backend configured, using first available: {available[0]}")
            return available[0]

        raise SelectionError(SelectionErrorType.NO_BACKEND_AVAILABLE,
                             "no backends available and no explicit backend configured")

    def detect_from_storage_class(self, storage_class: str,
                                  available: Sequence[Backend]) -> Optional[Backend]:
        for rule in self.rules:
            if rule.backend in available and rule.matches(storage_class):
                return rule.backend
        return None
