"""
Consumers of the dev server's HTTP endpoints.

``collect_events`` listens to the newline-delimited JSON feed at ``/stream``
for a fixed time budget. The feed never ends on its own, so running out of
time is the normal way a collection finishes: whatever was read by then is
the result. Lines that are not valid events are dropped one by one without
aborting the collection, and a final line that never received its ``\\n``
is never parsed.
"""

import asyncio
import codecs
import json
import logging
from collections.abc import Iterator

import httpx
from pydantic import ValidationError

from sst_introspect.constants import COMPLETED_PATH, STREAM_PATH
from sst_introspect.models import CompletedDeployment, Event

logger = logging.getLogger(__name__)

DEFAULT_TIME_BUDGET = 2.0
CONNECT_TIMEOUT = 5.0


class LineBuffer:
    """Reassembles text lines from arbitrarily split byte chunks."""

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    @property
    def pending(self) -> str:
        """Text received after the last line terminator"""
        return self._pending

    def feed(self, chunk: bytes) -> list[str]:
        """Add a chunk and return every line it completed, without terminators."""
        self._pending += self._decoder.decode(chunk)
        *lines, self._pending = self._pending.split("\n")
        return lines


def parse_event_line(line: str) -> Event | None:
    """Parse one stream line, returning None for blank or malformed lines."""
    if not line.strip():
        return None
    try:
        return Event.model_validate(json.loads(line))
    except (ValueError, ValidationError) as e:
        # json.JSONDecodeError is a ValueError
        logger.debug("Skipping malformed stream line %r: %s", line[:200], e)
        return None


def iter_events(lines: list[str]) -> Iterator[Event]:
    for line in lines:
        event = parse_event_line(line)
        if event is not None:
            yield event


async def _read_stream(
    client: httpx.AsyncClient, url: str, events: list[Event]
) -> None:
    buffer = LineBuffer()
    # the collection deadline bounds the read, not a per-chunk timeout
    timeout = httpx.Timeout(None, connect=CONNECT_TIMEOUT)
    async with client.stream("GET", url, timeout=timeout) as response:
        response.raise_for_status()
        async for chunk in response.aiter_bytes():
            events.extend(iter_events(buffer.feed(chunk)))
    if buffer.pending:
        logger.debug("Stream ended with unterminated line, dropped")


async def collect_events(
    server_url: str,
    time_budget: float = DEFAULT_TIME_BUDGET,
    client: httpx.AsyncClient | None = None,
) -> list[Event]:
    """
    Collect events from ``{server_url}/stream`` for ``time_budget`` seconds.

    Hitting the deadline is not an error: the events read so far are returned.
    Transport errors and non-success statuses propagate as ``httpx`` exceptions.
    """
    url = f"{server_url.rstrip('/')}{STREAM_PATH}"
    events: list[Event] = []

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient()

    try:
        async with asyncio.timeout(time_budget):
            await _read_stream(client, url, events)
    except TimeoutError:
        logger.debug("Collection window of %.2fs closed", time_budget)
    finally:
        if owns_client:
            await client.aclose()

    logger.info("Collected %d events from %s", len(events), url)
    return events


async def fetch_completed(
    server_url: str,
    timeout: float = 5.0,
    client: httpx.AsyncClient | None = None,
) -> CompletedDeployment | None:
    """Fetch the last deployment snapshot, or None if the server has none yet."""
    url = f"{server_url.rstrip('/')}{COMPLETED_PATH}"

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient()

    try:
        response = await client.get(url, timeout=timeout)
    finally:
        if owns_client:
            await client.aclose()

    if not response.is_success:
        logger.info("No deployment snapshot at %s (%d)", url, response.status_code)
        return None
    try:
        return CompletedDeployment.model_validate_json(response.content)
    except ValidationError as e:
        logger.warning(f"Invalid deployment snapshot from {url}: {e}")
        return None
