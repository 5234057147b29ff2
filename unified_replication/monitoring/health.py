import logging
import time
from dataclasses import asdict, dataclass, field
from threading import Lock
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

MAX_ERROR_RATE = 0.5


@dataclass
class HealthStatus:
    healthy: bool
    message: str = ""
    last_check: float = field(default_factory=time.time)
    operation_count: int = 0
    error_rate: float = 0.0
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class HealthChecker:
    """Liveness of a controller engine.

    Unhealthy when more than half of the processed operations failed, or when
    the engine or one of its collaborators is missing.
    """

    def __init__(self, engine=None):
        self.engine = engine
        self.check_count = 0
        self.last_status: Optional[HealthStatus] = None
        self._lock = Lock()

    def check(self) -> HealthStatus:
        with self._lock:
            self.check_count += 1
            status = HealthStatus(healthy=True)

            engine = self.engine
            if engine is None:
                status.healthy = False
                status.message = "Controller engine not available"
            else:
                metrics = engine.get_metrics()
                status.operation_count = metrics["operation_count"]
                status.details["cache_entries"] = metrics["cache_entries"]
                if status.operation_count > 0:
                    status.error_rate = metrics["error_count"] / status.operation_count
                    status.details["error_rate"] = f"{status.error_rate * 100:.2f}%"
                    if status.error_rate > MAX_ERROR_RATE:
                        status.healthy = False
                        status.message = f"High error rate: {status.error_rate * 100:.2f}%"

                for name, component in (("Discovery engine", engine.discovery),
                                        ("Translation engine", engine.translator),
                                        ("Adapter registry", engine.registry)):
                    if component is None:
                        status.healthy = False
                        status.message = f"{name} not available"

            if status.healthy and not status.message:
                status.message = "All systems operational"
            if not status.healthy:
                logger.warning(f"Health check failed: {status.message}")

            self.last_status = status
            return status


class ReadinessChecker:
    """Ready once startup validation has passed and marked it so."""

    def __init__(self, engine=None):
        self.engine = engine
        self._ready = False
        self._lock = Lock()

    def set_ready(self, ready: bool) -> None:
        with self._lock:
            self._ready = ready

    def is_ready(self) -> bool:
        with self._lock:
            return self._ready

    def check(self) -> bool:
        if not self.is_ready():
            return False
        engine = self.engine
        return (engine is not None and engine.discovery is not None
                and engine.translator is not None and engine.registry is not None)
