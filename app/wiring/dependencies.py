from datetime import date, datetime
from functools import lru_cache
import logging
from typing import Callable
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.package_catalog import PackageCatalogPort
from app.application.use_cases.booking_lifecycle import BookingLifecycleUseCase, TransitionPolicy
from app.application.use_cases.bookings_page import BookingsPageUseCase
from app.application.use_cases.resolution_session import Listener, ResolutionSession
from app.application.use_cases.resolve_price import ResolvePriceUseCase
from app.infrastructure.catalog.package_catalog_store import PackageCatalogStore
from app.infrastructure.store.json_store import JsonBookingStore
from app.infrastructure.store.memory_store import MemoryBookingStore


_booking_store: BookingStorePort | None = None


def get_booking_store() -> BookingStorePort:
    global _booking_store
    if _booking_store is None:
        if settings.STORE_PROVIDER.lower() == "json":
            _booking_store = JsonBookingStore(data_dir=settings.DATA_DIR)
        else:
            _booking_store = MemoryBookingStore()
        logging.getLogger(__name__).info("Booking store ready: %s", type(_booking_store).__name__)
    return _booking_store


@lru_cache
def get_package_catalog() -> PackageCatalogPort:
    return PackageCatalogStore()


def get_business_today() -> Callable[[], date]:
    tz = ZoneInfo(settings.BUSINESS_TIMEZONE)

    def today() -> date:
        return datetime.now(tz).date()

    return today


def get_transition_policy() -> TransitionPolicy:
    return TransitionPolicy.default(allow_reopen_terminal=settings.ALLOW_REOPEN_TERMINAL)


def get_resolve_price_use_case() -> ResolvePriceUseCase:
    return ResolvePriceUseCase(catalog=get_package_catalog())


def get_lifecycle_use_case() -> BookingLifecycleUseCase:
    return BookingLifecycleUseCase(
        store=get_booking_store(),
        policy=get_transition_policy(),
        today=get_business_today(),
    )


def get_bookings_page_use_case() -> BookingsPageUseCase:
    return BookingsPageUseCase(
        store=get_booking_store(),
        page_size=settings.BOOKINGS_PAGE_SIZE,
        today=get_business_today(),
    )


def new_resolution_session(listener: Listener) -> ResolutionSession:
    use_case = get_resolve_price_use_case()
    return ResolutionSession(
        resolver=use_case.resolve_async,
        listener=listener,
        debounce_seconds=settings.PRICING_DEBOUNCE_MS / 1000,
    )
