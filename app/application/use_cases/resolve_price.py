from __future__ import annotations

import logging

from app.application.exceptions import CatalogUnavailableError, CollaboratorError
from app.application.ports.package_catalog import PackageCatalogPort
from app.domain.entities.pricing import PriceOutcome, PriceQuery, PriceResolution
from app.domain.entities.service_package import PricingModel, PricingTier, ServicePackage

logger = logging.getLogger(__name__)


def resolve(query: PriceQuery, catalog: ServicePackage) -> PriceResolution:
    """
    Resolve price, staff count and duration for one query against one package.

    Fixed packages always resolve to their base price; area and frequency are ignored.
    Tiered packages resolve only when an area tier matches AND that tier lists a price
    for the exact frequency. Overlapping tiers or duplicate frequency keys never raise:
    the first tier (and first price) in catalog order wins and the result is flagged.
    """
    if catalog.pricing_model == PricingModel.FIXED:
        return _resolve_fixed(query, catalog)

    if query.area is None or query.area <= 0:
        return _invalid(query, catalog, "Area must be greater than zero")
    if query.frequency is None or query.frequency <= 0:
        return _invalid(query, catalog, "Frequency must be a positive number")

    issues = find_integrity_issues(catalog)
    if issues:
        logger.warning(
            "Pricing tiers violate integrity rules, applying first-match",
            extra={"package_id": catalog.id, "reason": "; ".join(issues)},
        )

    tier = first_matching_tier(catalog.tiers, query.area)
    if tier is None:
        return PriceResolution(
            outcome=PriceOutcome.NOT_FOUND,
            package_id=query.package_id,
            area=query.area,
            frequency=query.frequency,
            pricing_model=catalog.pricing_model,
            reason=f"No pricing tier covers {query.area:g} sqm",
            integrity_issues=issues,
        )

    prices = tier.prices_for(query.frequency)
    if not prices:
        return PriceResolution(
            outcome=PriceOutcome.NOT_FOUND,
            package_id=query.package_id,
            area=query.area,
            frequency=query.frequency,
            pricing_model=catalog.pricing_model,
            tier=tier,
            reason=f"Tier {tier.area_min:g}-{tier.area_max:g} sqm has no price for frequency {query.frequency}",
            integrity_issues=issues,
        )

    return PriceResolution(
        outcome=PriceOutcome.FOUND,
        package_id=query.package_id,
        area=query.area,
        frequency=query.frequency,
        pricing_model=catalog.pricing_model,
        price=prices[0],
        required_staff=tier.required_staff,
        estimated_hours=tier.estimated_hours,
        tier=tier,
        integrity_issues=issues,
    )


def first_matching_tier(tiers: tuple[PricingTier, ...], area: float) -> PricingTier | None:
    # Tie-break policy: catalog order decides, the first covering tier wins even if later ones overlap.
    for tier in tiers:
        if tier.covers(area):
            return tier
    return None


def find_integrity_issues(package: ServicePackage) -> tuple[str, ...]:
    issues: list[str] = []
    tiers = package.tiers
    for i, tier in enumerate(tiers):
        for other in tiers[i + 1 :]:
            if tier.overlaps(other):
                issues.append(f"tier {tier.id} overlaps tier {other.id}")
        frequencies = tier.frequencies()
        duplicates = sorted({f for f in frequencies if frequencies.count(f) > 1})
        if duplicates:
            issues.append(f"tier {tier.id} repeats frequency {', '.join(str(d) for d in duplicates)}")
    return tuple(issues)


def _resolve_fixed(query: PriceQuery, catalog: ServicePackage) -> PriceResolution:
    hours = catalog.duration_minutes / 60 if catalog.duration_minutes else None
    return PriceResolution(
        outcome=PriceOutcome.FOUND,
        package_id=query.package_id,
        area=query.area,
        frequency=query.frequency,
        pricing_model=catalog.pricing_model,
        price=catalog.base_price if catalog.base_price is not None else 0.0,
        required_staff=1,
        estimated_hours=hours,
    )


def _invalid(query: PriceQuery, catalog: ServicePackage | None, reason: str) -> PriceResolution:
    return PriceResolution(
        outcome=PriceOutcome.INVALID,
        package_id=query.package_id,
        area=query.area,
        frequency=query.frequency,
        pricing_model=catalog.pricing_model if catalog else None,
        reason=reason,
    )


class ResolvePriceUseCase:
    def __init__(self, catalog: PackageCatalogPort) -> None:
        self._catalog = catalog
        self._logger = logging.getLogger(__name__)

    def execute(self, query: PriceQuery) -> PriceResolution:
        """Look up the package and resolve. Catalog failures propagate as CollaboratorError."""
        try:
            package = self._catalog.get_package(query.package_id)
        except CollaboratorError:
            raise
        except Exception as e:
            self._logger.error(
                "Package catalog lookup failed",
                extra={"package_id": query.package_id, "error": str(e)},
            )
            raise CatalogUnavailableError(f"Package catalog unavailable: {e}") from e

        if package is None:
            return _invalid(query, None, f"Unknown package {query.package_id}")

        result = resolve(query, package)
        self._logger.debug(
            "Price resolved",
            extra={"package_id": query.package_id, "reason": result.reason or result.outcome.value},
        )
        return result

    async def resolve_async(self, query: PriceQuery) -> PriceResolution:
        return self.execute(query)
