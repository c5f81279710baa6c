"""Booking domain errors. Routers map them to HTTP responses."""


class BookingError(Exception):
    """Base class for booking errors."""


class NotFoundError(BookingError):
    pass


class InvalidTransitionError(BookingError):
    pass


class NotEditableError(BookingError):
    pass


class ServiceNotOfferedError(BookingError):
    pass


class SlotUnavailableError(BookingError):
    pass


class StaleSnapshotError(BookingError):
    """The approved set or the booking changed after it was read."""


class StoreReadError(BookingError):
    pass


class StoreWriteError(BookingError):
    pass
