"""Error taxonomy for the meeting-equity engine."""


class EquityError(Exception):
    """Base class for all errors raised by this package."""


class InvalidTimeZone(EquityError):
    """The IANA time-zone identifier does not resolve."""

    def __init__(self, zone: object) -> None:
        self.zone = zone
        super().__init__(f"Invalid time zone: {zone!r}")


class InvalidCountryCode(EquityError):
    """The value is not an ISO 3166-1 alpha-2 country code."""

    def __init__(self, code: object) -> None:
        self.code = code
        super().__init__(f"Invalid ISO 3166-1 alpha-2 country code: {code!r}")


class InvalidWorkingHoursConfig(EquityError):
    """A working-hours configuration violates one of its invariants.

    ``invariant`` is a short machine-readable name of the broken rule
    (e.g. ``"green_order"``), ``message`` the human-readable explanation.
    """

    def __init__(self, invariant: str, message: str) -> None:
        self.invariant = invariant
        self.message = message
        super().__init__(f"{message} [{invariant}]")


class InvalidMeetingDuration(EquityError):
    """Meeting duration outside the accepted range."""

    def __init__(self, duration: object, minimum: int = 15, maximum: int = 480) -> None:
        self.duration = duration
        super().__init__(
            f"Meeting duration must be between {minimum} and {maximum} minutes "
            f"(got {duration!r})"
        )


class GatewayError(EquityError):
    """The holiday lookup failed (network, timeout or bad response)."""

    def __init__(self, message: str, country_code: str | None = None) -> None:
        self.country_code = country_code
        super().__init__(message)
