"""Exception types raised by Longtail Scout."""


class LongtailScoutError(Exception):
    """Base exception for Longtail Scout."""


class UpstreamError(LongtailScoutError):
    """An external source failed: network error, non-2xx or malformed payload."""

    def __init__(self, status, message):
        self.status = status
        self.message = message
        if status is None:
            super().__init__(message)
        else:
            super().__init__(f'[{status}] {message}')


class ConfigurationError(LongtailScoutError):
    """Required credentials or settings are missing."""


class ValidationError(LongtailScoutError):
    """Caller supplied an invalid argument, such as an empty seed keyword."""
