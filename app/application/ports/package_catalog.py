from __future__ import annotations

from abc import ABC, abstractmethod

from app.domain.entities.service_package import ServicePackage


class PackageCatalogPort(ABC):
    @abstractmethod
    def fetch_package_catalog(self, service_type: str | None = None) -> list[ServicePackage]:
        """Active packages, optionally limited to one service type. Raises CatalogUnavailableError."""
        raise NotImplementedError

    @abstractmethod
    def get_package(self, package_id: str) -> ServicePackage | None:
        """Package by id, None if unknown. Raises CatalogUnavailableError."""
        raise NotImplementedError
