"""aiohttp JSON request helper with fixed-delay retries"""

import asyncio
import logging
from typing import Any, Optional, Type
import aiohttp

from autofolio_core import AutoFolioError

_logger = logging.getLogger(__name__)


async def request_json(
    method: str,
    url: str,
    *,
    params: Optional[dict] = None,
    payload: Optional[Any] = None,
    timeout_seconds: float = 10.0,
    max_retries: int = 1,
    retry_delay_seconds: float = 0.0,
    error_cls: Type[AutoFolioError] = AutoFolioError,
    logger: Optional[logging.Logger] = None
) -> Any:
    """
    Send a request and decode the JSON response.

    Non-200 responses, transport errors and undecodable bodies are retried up to
    max_retries attempts in total, then raised as error_cls.
    """
    logger = logger or _logger
    last_error: Optional[Exception] = None

    for attempt in range(1, max_retries + 1):
        try:
            async with aiohttp.ClientSession() as session:
                async with session.request(
                    method,
                    url,
                    params=params,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=timeout_seconds)
                ) as response:

                    if response.status != 200:
                        response_text = await response.text()
                        raise error_cls(f"{url} returned status {response.status}: {response_text[:200]}")

                    return await response.json(content_type=None)

        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, error_cls) as e:
            last_error = e
            if attempt < max_retries:
                logger.warning(f"Request to {url} failed (attempt {attempt}/{max_retries}): {e}")
                await asyncio.sleep(retry_delay_seconds)

    logger.error(f"Request to {url} failed after {max_retries} attempts: {last_error}")
    raise error_cls(f"Request to {url} failed after {max_retries} attempts: {last_error}") from last_error
