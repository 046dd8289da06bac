import asyncio
import logging

import httpx

from sst_introspect.constants import COMPLETED_PATH

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_TIMEOUT = 1.0


async def is_server_running(
    server_url: str,
    timeout: float = DEFAULT_HEALTH_TIMEOUT,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """Single liveness sample: True only if the snapshot endpoint answers 2xx within ``timeout``."""
    url = f"{server_url.rstrip('/')}{COMPLETED_PATH}"

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient()

    try:
        # httpx applies the timeout per phase, the outer deadline bounds the total
        async with asyncio.timeout(timeout):
            response = await client.get(url, timeout=timeout)
        return response.is_success
    except (httpx.HTTPError, httpx.InvalidURL, TimeoutError) as e:
        logger.debug("Dev server at %s is not responding: %s", server_url, e)
        return False
    finally:
        if owns_client:
            await client.aclose()
