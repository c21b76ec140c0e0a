from __future__ import annotations

from app.application.ports.package_catalog import PackageCatalogPort
from app.domain.entities.service_package import ServicePackage
from app.infrastructure.catalog.catalog_data import PACKAGE_CATALOG


class PackageCatalogStore(PackageCatalogPort):
    def __init__(self, catalog: dict[str, ServicePackage] | None = None) -> None:
        self._catalog = catalog if catalog is not None else PACKAGE_CATALOG

    def fetch_package_catalog(self, service_type: str | None = None) -> list[ServicePackage]:
        packages = [p for p in self._catalog.values() if p.is_active]
        if service_type:
            packages = [p for p in packages if p.service_type == service_type]
        return packages

    def get_package(self, package_id: str) -> ServicePackage | None:
        return self._catalog.get(package_id.strip())
