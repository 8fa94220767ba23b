"""Base class for collectors."""

from abc import ABC, abstractmethod

from ..errors import EnvironmentQueryFailed


class BaseCollector(ABC):
    name: str = "base"

    @abstractmethod
    def _collect(self):
        """Implement in subclass to return collected data."""
        ...

    def collect(self):
        """Wrap _collect so every failure surfaces as EnvironmentQueryFailed."""
        try:
            return self._collect()
        except EnvironmentQueryFailed:
            raise
        except Exception as exc:  # noqa: BLE001
            raise EnvironmentQueryFailed(f"{self.name}: {exc}") from exc
