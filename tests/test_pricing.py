from __future__ import annotations

import pytest

from app.application.exceptions import CatalogUnavailableError, CollaboratorError
from app.application.use_cases.resolve_price import ResolvePriceUseCase, first_matching_tier, resolve
from app.domain.entities.pricing import PriceOutcome, PriceQuery
from app.domain.entities.service_package import PricingTier, ServicePackage
from app.infrastructure.catalog.package_catalog_store import PackageCatalogStore
from factories import fixed_package, tiered_package


def test_fixed_package_ignores_area_and_frequency():
    """Fixed pricing resolves to the base price for any input, even zero."""
    package = fixed_package(base_price=2500.0, duration=90)

    for area, frequency in [(0, 0), (55.5, 1), (10_000, 8)]:
        result = resolve(PriceQuery(package.id, area, frequency), package)
        assert result.outcome == PriceOutcome.FOUND
        assert result.price == 2500.0
        assert result.required_staff == 1
        assert result.estimated_hours == 1.5


def test_fixed_package_without_base_price_resolves_to_zero():
    package = fixed_package(base_price=None, duration=None)
    result = resolve(PriceQuery(package.id, 10, 1), package)
    assert result.found
    assert result.price == 0.0
    assert result.estimated_hours is None


def test_tiered_exact_frequency_match():
    """A covering tier prices only the frequencies it lists."""
    package = tiered_package()

    result = resolve(PriceQuery(package.id, 150, 4), package)
    assert result.outcome == PriceOutcome.FOUND
    assert result.price == 3200.0
    assert result.required_staff == 4
    assert result.estimated_hours == 3.5
    assert result.tier.id == "t2"

    missing = resolve(PriceQuery(package.id, 150, 2), package)
    assert missing.outcome == PriceOutcome.NOT_FOUND
    assert missing.price is None
    assert "frequency 2" in missing.reason


def test_tier_bounds_are_inclusive():
    package = tiered_package()
    assert resolve(PriceQuery(package.id, 100, 1), package).tier.id == "t2"
    assert resolve(PriceQuery(package.id, 199, 1), package).tier.id == "t2"
    assert resolve(PriceQuery(package.id, 99, 1), package).tier.id == "t1"


def test_area_outside_all_tiers_is_not_found():
    package = tiered_package()
    result = resolve(PriceQuery(package.id, 500, 1), package)
    assert result.outcome == PriceOutcome.NOT_FOUND
    assert result.tier is None
    assert "500" in result.reason


def test_invalid_tiered_inputs():
    package = tiered_package()
    assert resolve(PriceQuery(package.id, 0, 1), package).outcome == PriceOutcome.INVALID
    assert resolve(PriceQuery(package.id, -5, 1), package).outcome == PriceOutcome.INVALID
    assert resolve(PriceQuery(package.id, 50, 0), package).outcome == PriceOutcome.INVALID


def test_overlapping_tiers_use_first_match_and_are_flagged():
    """Overlaps never raise; catalog order decides and the result carries the problem."""
    package = tiered_package(
        tiers=(
            PricingTier(id="a", area_min=0, area_max=150, frequency_prices=((1, 900.0),)),
            PricingTier(id="b", area_min=100, area_max=200, frequency_prices=((1, 1800.0),)),
        )
    )

    result = resolve(PriceQuery(package.id, 120, 1), package)
    assert result.found
    assert result.tier.id == "a"
    assert result.price == 900.0
    assert result.flagged
    assert any("overlaps" in issue for issue in result.integrity_issues)
    assert first_matching_tier(package.tiers, 120).id == "a"


def test_duplicate_frequency_uses_first_price():
    package = tiered_package(
        tiers=(PricingTier(id="dup", area_min=0, area_max=100, frequency_prices=((1, 500.0), (1, 700.0))),)
    )
    result = resolve(PriceQuery(package.id, 50, 1), package)
    assert result.price == 500.0
    assert any("repeats frequency 1" in issue for issue in result.integrity_issues)


def test_clean_catalog_is_not_flagged():
    package = tiered_package()
    assert not resolve(PriceQuery(package.id, 50, 1), package).flagged


def test_use_case_reports_unknown_package_as_invalid():
    use_case = ResolvePriceUseCase(PackageCatalogStore({"office": tiered_package("office")}))
    result = use_case.execute(PriceQuery("nope", 50, 1))
    assert result.outcome == PriceOutcome.INVALID
    assert "nope" in result.reason


def test_use_case_resolves_from_default_catalog():
    use_case = ResolvePriceUseCase(PackageCatalogStore())
    result = use_case.execute(PriceQuery("deep-cleaning-office", 50, 1))
    assert result.found
    assert result.price == 1950.0


class _BrokenCatalog(PackageCatalogStore):
    def get_package(self, package_id: str) -> ServicePackage | None:
        raise ConnectionError("catalog offline")


def test_use_case_wraps_catalog_failures():
    """A failing catalog surfaces as a collaborator error, not as 'no price'."""
    use_case = ResolvePriceUseCase(_BrokenCatalog())
    with pytest.raises(CatalogUnavailableError) as exc_info:
        use_case.execute(PriceQuery("office", 50, 1))
    assert isinstance(exc_info.value, CollaboratorError)
    assert "catalog offline" in str(exc_info.value)


def test_query_signature_is_stable_across_numeric_types():
    assert PriceQuery("p", 120, 4).signature() == PriceQuery("p", 120.0, 4).signature()
    assert PriceQuery("p", 120, 4).signature() != PriceQuery("p", 121, 4).signature()


def test_catalog_lists_active_packages_by_service_type():
    catalog = PackageCatalogStore()
    training = catalog.fetch_package_catalog("training")
    assert [p.id for p in training] == ["personal-training"]
    assert all(p.is_active for p in catalog.fetch_package_catalog())


def test_package_from_record_and_price_range():
    package = ServicePackage.from_record(
        {
            "id": "condo",
            "name": "Condo",
            "pricing_model": "tiered",
            "tiers": [
                {
                    "area_min": 0,
                    "area_max": 50,
                    "required_staff": 2,
                    "frequency_prices": [{"frequency": 1, "price": 900}, {"frequency": 4, "price": 3000}],
                }
            ],
        }
    )

    assert package.is_tiered
    assert package.tiers[0].id == "condo-tier-0"
    assert package.price_range() == (900.0, 3000.0)
    assert resolve(PriceQuery("condo", 40, 4), package).price == 3000.0
    assert fixed_package(base_price=None).price_range() is None
