class ReservationProcessingError(Exception):
    """A single reservation could not be turned into calendar data."""

    def __init__(self, reservation_code: str, message: str):
        super().__init__(f"{message} (reservation {reservation_code})")
        self.reservation_code = reservation_code
        self.message = message


class CalendarEncodingError(Exception):
    """The ICS document could not be generated."""
