"""Typed failures surfaced by the playlist and weather pipelines.

Callers distinguish failures by class:

- ConfigurationError: a required secret or id is missing. Not retryable.
- UpstreamUnavailable: the upstream could not be reached (DNS, connect, timeout).
- UpstreamRejected: the upstream answered with a non-success status.
- UpstreamMalformed: the upstream answered successfully without required fields.
- NotFound: the requested playlist (or weather data) does not exist upstream.

Caches never store any of these; the next request simply retries the lookup.
"""


class DeezifyError(Exception):
    """Base class for all failures raised by this package."""


class ConfigurationError(DeezifyError):
    """A required configuration value is missing."""


class UpstreamError(DeezifyError):
    """Base class for failures talking to an external service."""

    def __init__(
        self,
        message: str,
        *,
        service: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class UpstreamUnavailable(UpstreamError):
    """Network-level failure reaching an upstream."""


class UpstreamRejected(UpstreamError):
    """Upstream responded with a non-success status."""


class UpstreamMalformed(UpstreamError):
    """Upstream response is missing required fields or is not valid JSON."""


class NotFound(UpstreamError):
    """The requested resource does not exist upstream."""
