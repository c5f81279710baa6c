from .generated import Base, BookingDays, Bookings, Locations, Services, metadata

__all__ = [
    "Base",
    "metadata",
    "Locations",
    "Services",
    "Bookings",
    "BookingDays",
]
