"""Exceptions raised by the correlation pipeline and its adapters."""


class SharedMatchError(Exception):
    """Base class for errors reported to the caller as an error record."""


class ConfigurationError(SharedMatchError):
    """The upstream credential or another setting is missing or invalid."""


class InputError(SharedMatchError):
    """The request is missing a player name."""


class NotFoundError(SharedMatchError):
    """One or both player names could not be resolved."""


class UpstreamError(SharedMatchError):
    """An external call failed or returned a payload we cannot read."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(SharedMatchError):
    """A streamed record could not be decoded by the consumer."""


class CallCancelled(Exception):
    """The consumer went away while a call was waiting for the rate gate."""
