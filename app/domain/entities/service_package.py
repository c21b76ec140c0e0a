from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class PricingModel(str, Enum):
    FIXED = "fixed"
    TIERED = "tiered"


@dataclass(frozen=True)
class PricingTier:
    id: str
    area_min: float
    area_max: float
    required_staff: int = 1
    estimated_hours: float | None = None
    # (frequency, price) pairs in the order the catalog lists them
    frequency_prices: tuple[tuple[int, float], ...] = ()

    def covers(self, area: float) -> bool:
        return self.area_min <= area <= self.area_max

    def prices_for(self, frequency: int) -> list[float]:
        """All prices listed for an exact frequency. More than one means duplicate keys."""
        return [price for freq, price in self.frequency_prices if freq == frequency]

    def frequencies(self) -> list[int]:
        return [freq for freq, _ in self.frequency_prices]

    def overlaps(self, other: PricingTier) -> bool:
        return self.area_min <= other.area_max and other.area_min <= self.area_max


@dataclass(frozen=True)
class ServicePackage:
    id: str
    name: str
    pricing_model: PricingModel
    service_type: str = "cleaning"
    base_price: float | None = None
    duration_minutes: int | None = None
    tiers: tuple[PricingTier, ...] = field(default_factory=tuple)
    is_active: bool = True

    @property
    def is_tiered(self) -> bool:
        return self.pricing_model == PricingModel.TIERED

    def price_range(self) -> tuple[float, float] | None:
        """Lowest and highest price the package can produce, None if it has no prices."""
        if not self.is_tiered:
            if self.base_price is None:
                return None
            return (self.base_price, self.base_price)

        prices = [price for tier in self.tiers for _, price in tier.frequency_prices]
        if not prices:
            return None
        return (min(prices), max(prices))

    @staticmethod
    def from_record(record: dict) -> "ServicePackage":
        tiers = tuple(
            PricingTier(
                id=str(t.get("id") or f"{record.get('id')}-tier-{index}"),
                area_min=float(t["area_min"]),
                area_max=float(t["area_max"]),
                required_staff=int(t.get("required_staff") or 1),
                estimated_hours=t.get("estimated_hours"),
                frequency_prices=tuple(
                    (int(fp["frequency"]), float(fp["price"])) for fp in t.get("frequency_prices") or []
                ),
            )
            for index, t in enumerate(record.get("tiers") or [])
        )
        return ServicePackage(
            id=str(record["id"]),
            name=str(record.get("name") or ""),
            pricing_model=PricingModel(record.get("pricing_model") or PricingModel.FIXED.value),
            service_type=str(record.get("service_type") or "cleaning"),
            base_price=record.get("base_price"),
            duration_minutes=record.get("duration_minutes"),
            tiers=tiers,
            is_active=bool(record.get("is_active", True)),
        )
