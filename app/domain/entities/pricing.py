from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum

from app.domain.entities.service_package import PricingModel, PricingTier


class PriceOutcome(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"  # legitimate "no price for this input"
    INVALID = "invalid"  # malformed query or unknown package
    ERROR = "error"  # catalog / pricing collaborator failed


@dataclass(frozen=True)
class PriceQuery:
    package_id: str
    area: float
    frequency: int

    def signature(self) -> str:
        raw = f"{self.package_id}|{float(self.area)!r}|{int(self.frequency)}"
        return hashlib.sha1(raw.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class PriceResolution:
    outcome: PriceOutcome
    package_id: str
    area: float
    frequency: int
    pricing_model: PricingModel | None = None
    price: float | None = None
    required_staff: int | None = None
    estimated_hours: float | None = None
    tier: PricingTier | None = None
    reason: str | None = None
    integrity_issues: tuple[str, ...] = ()

    @property
    def found(self) -> bool:
        return self.outcome == PriceOutcome.FOUND

    @property
    def flagged(self) -> bool:
        return bool(self.integrity_issues)

    def notification_key(self) -> tuple:
        """Fields a caller cares about when deciding whether a result is new."""
        return (
            self.package_id,
            self.pricing_model,
            float(self.area),
            int(self.frequency),
            self.price,
            self.outcome,
        )
