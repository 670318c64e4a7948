from typing import Any, Callable, Dict, Mapping, Optional

from fastapi import Request

from app.platform.exceptions import ServiceUnavailableError
from app.platform.logger import get_logger

logger = get_logger(__name__)

MOCK_AUDIT = "mock_audit"
LIGHTHOUSE = "lighthouse"
UX_AUDIT = "ux_audit"


class DriverRegistry:
    """
    Audit drivers built once at startup. A driver whose factory blew up stays
    registered as unavailable so its endpoint can answer 503.
    """

    def __init__(self):
        self._drivers: Dict[str, Any] = {}
        self._errors: Dict[str, str] = {}

    @classmethod
    def build(cls, factories: Mapping[str, Callable[[], Any]]) -> "DriverRegistry":
        registry = cls()
        for name, factory in factories.items():
            try:
                registry.register(name, factory())
                logger.info(f"Audit driver '{name}' loaded")
            except Exception as e:
                logger.error(f"Audit driver '{name}' failed to load: {e}", exc_info=True)
                registry._errors[name] = str(e)
        return registry

    def register(self, name: str, driver: Any) -> None:
        self._drivers[name] = driver
        self._errors.pop(name, None)

    def get(self, name: str, message: Optional[str] = None) -> Any:
        driver = self._drivers.get(name)
        if driver is None:
            raise ServiceUnavailableError(
                message or f"Audit driver '{name}' is unavailable",
                details=self._errors.get(name),
            )
        return driver


def get_drivers(request: Request) -> DriverRegistry:
    return request.app.state.drivers
