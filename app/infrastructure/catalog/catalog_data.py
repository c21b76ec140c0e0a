from __future__ import annotations

from app.domain.entities.service_package import PricingModel, PricingTier, ServicePackage


def _tier(package_id: str, index: int, area_min: float, area_max: float, staff: int, hours: float | None, prices: list[float]) -> PricingTier:
    return PricingTier(
        id=f"{package_id}-t{index}",
        area_min=area_min,
        area_max=area_max,
        required_staff=staff,
        estimated_hours=hours,
        frequency_prices=tuple(zip((1, 2, 4, 8), prices)),
    )


PACKAGE_CATALOG: dict[str, ServicePackage] = {
    "deep-cleaning-office": ServicePackage(
        id="deep-cleaning-office",
        name="Deep Cleaning Office",
        pricing_model=PricingModel.TIERED,
        service_type="cleaning",
        tiers=(
            _tier("deep-cleaning-office", 1, 0, 100, 4, 2.5, [1950, 3900, 7400, 14000]),
            _tier("deep-cleaning-office", 2, 101, 200, 4, 3.5, [3900, 7800, 14900, 28000]),
            _tier("deep-cleaning-office", 3, 201, 300, 5, 4.0, [4900, 9800, 18600, 35000]),
            _tier("deep-cleaning-office", 4, 301, 400, 8, 4.0, [5900, 11800, 22400, 42500]),
            _tier("deep-cleaning-office", 5, 401, 500, 8, 4.5, [6900, 13800, 26200, 49600]),
        ),
    ),
    "deep-cleaning-condo": ServicePackage(
        id="deep-cleaning-condo",
        name="Deep Cleaning Condo",
        pricing_model=PricingModel.TIERED,
        service_type="cleaning",
        tiers=(
            _tier("deep-cleaning-condo", 1, 0, 90, 4, 3.0, [3900, 7800, 14800, 28000]),
            _tier("deep-cleaning-condo", 2, 91, 150, 4, 3.5, [5900, 11800, 22400, 42500]),
            _tier("deep-cleaning-condo", 3, 151, 250, 6, 4.0, [7900, 15800, 30000, 56900]),
            _tier("deep-cleaning-condo", 4, 251, 350, 6, 5.0, [11000, 22000, 41800, 79000]),
        ),
    ),
    "basic-cleaning": ServicePackage(
        id="basic-cleaning",
        name="Basic Cleaning",
        pricing_model=PricingModel.FIXED,
        service_type="cleaning",
        base_price=2500,
        duration_minutes=120,
    ),
    "personal-training": ServicePackage(
        id="personal-training",
        name="Personal Training Session",
        pricing_model=PricingModel.FIXED,
        service_type="training",
        base_price=1200,
        duration_minutes=60,
    ),
}
