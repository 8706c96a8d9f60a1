"""Base connector module providing shared functionality for upstream connectors.

Key Components:
- request_json: Issue one HTTP request and translate every failure mode into
  the typed errors from deezify.domain.errors
- BatchProcessor: Order-preserving fan-out with bounded concurrency

Connectors never retry on their own. A failed call raises to the caller and
the surrounding cache retries naturally on the next request.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from attrs import define, field
import httpx

from deezify.config import get_logger
from deezify.domain.errors import (
    NotFound,
    UpstreamMalformed,
    UpstreamRejected,
    UpstreamUnavailable,
)

logger = get_logger(__name__).bind(service="connectors")

T = TypeVar("T")
R = TypeVar("R")


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    service: str,
    label: str,
    not_found_message: str | None = None,
    **request_kwargs: Any,
) -> Any:
    """Send a request and return the decoded JSON body.

    Args:
        client: Shared async HTTP client
        method: HTTP method
        url: Absolute URL
        service: Upstream name recorded on raised errors
        label: Human-readable endpoint name for error messages
        not_found_message: When given, a 404 raises NotFound with this message
        **request_kwargs: Passed through to httpx (headers, params, data)

    Raises:
        UpstreamUnavailable: The request never produced a response
        NotFound: 404 and not_found_message was given
        UpstreamRejected: Any other non-2xx status
        UpstreamMalformed: The body is not valid JSON
    """
    try:
        response = await client.request(method, url, **request_kwargs)
    except httpx.HTTPError as e:
        raise UpstreamUnavailable(f"Failed to reach {label}", service=service) from e

    if response.status_code == 404 and not_found_message:
        raise NotFound(not_found_message, service=service, status_code=404)

    if not response.is_success:
        raise UpstreamRejected(
            f"{label} failed with status {response.status_code}",
            service=service,
            status_code=response.status_code,
        )

    try:
        return response.json()
    except ValueError as e:
        raise UpstreamMalformed(
            f"Failed to parse {label}",
            service=service,
            status_code=response.status_code,
        ) from e


@define(frozen=True, slots=True)
class BatchProcessor(Generic[T, R]):
    """Run an async function over items with bounded concurrency.

    Results come back in input order regardless of completion order. The
    first failure propagates to the caller; lookups already started keep
    running so their results can still land in a cache.

    Attributes:
        concurrency_limit: Maximum number of calls in flight at once
        logger_instance: Logger for recording processing events
    """

    concurrency_limit: int
    logger_instance: Any = field(factory=lambda: get_logger(__name__))

    async def process(
        self,
        items: list[T],
        process_func: Callable[[T], Awaitable[R]],
    ) -> list[R]:
        if not items:
            return []

        semaphore = asyncio.Semaphore(self.concurrency_limit)

        async def run(item: T) -> R:
            async with semaphore:
                return await process_func(item)

        self.logger_instance.debug(
            f"Processing {len(items)} items",
            concurrency_limit=self.concurrency_limit,
        )
        return list(await asyncio.gather(*(run(item) for item in items)))
