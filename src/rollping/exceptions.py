"""Custom exception types for the rollping application."""


class RollpingError(Exception):
    """Base exception class for all application-specific errors."""

    pass


class ConfigError(RollpingError):
    """Raised for invalid run configuration, before any probing begins."""

    pass


class NetworkError(RollpingError):
    """Raised for network-related errors, such as a failed public IP lookup."""

    pass


class GeoUnavailable(RollpingError):
    """Raised when the geolocation database cannot be cached or opened."""

    pass


class ProbeCancelled(RollpingError):
    """Raised inside a probe when the run-wide cancellation signal fires."""

    pass
