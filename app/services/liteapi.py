import asyncio
import logging

import httpx
from pydantic import ValidationError

from app.exceptions.custom import LiteApiError, RateLimitError
from app.schemas.liteapi import HotelDetail, HotelDetailResponse

logger = logging.getLogger(__name__)

BASE_URL = "https://api.liteapi.travel/v3.0"
HOTEL_DETAILS_URL = f"{BASE_URL}/data/hotel"

DEFAULT_CONCURRENCY = 5
DEFAULT_TIMEOUT = 8.0  # seconds per call
DEFAULT_RATE_LIMIT_BACKOFF = 2.0  # seconds before the single retry

_FETCH_ERRORS = (LiteApiError, httpx.HTTPError, ValidationError, ValueError, TypeError)


class LiteApiService:
    """LiteAPI hotel details client.

    All calls share one semaphore, so no more than ``concurrency`` requests
    are in flight at once across every batch handled by the process.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        concurrency: int = DEFAULT_CONCURRENCY,
        timeout: float = DEFAULT_TIMEOUT,
        rate_limit_backoff: float = DEFAULT_RATE_LIMIT_BACKOFF,
    ):
        self._client = client
        self._headers = {"X-API-Key": api_key, "Content-Type": "application/json"}
        self._semaphore = asyncio.Semaphore(concurrency)
        self._timeout = timeout
        self._rate_limit_backoff = rate_limit_backoff

    async def get_hotel_details(self, hotel_id: str) -> HotelDetail | None:
        """Fetch the detail record for one hotel. Raises on upstream errors."""
        async with self._semaphore:
            resp = await self._client.get(
                HOTEL_DETAILS_URL,
                params={"hotelId": hotel_id},
                headers=self._headers,
                timeout=self._timeout,
            )

        if resp.status_code == 429:
            raise RateLimitError("LiteAPI")
        if resp.status_code != 200:
            raise LiteApiError(resp.text, status_code=resp.status_code)

        return HotelDetailResponse(**resp.json()).data

    async def fetch_hotel_details(self, hotel_id: str) -> HotelDetail | None:
        """Best-effort fetch: one retry on rate limiting, None on any failure."""
        logger.info("Fetching hotel details for %s", hotel_id)
        try:
            return await self.get_hotel_details(hotel_id)
        except RateLimitError:
            logger.warning(
                "Rate limited for hotel %s, retrying in %.1fs", hotel_id, self._rate_limit_backoff
            )
        except _FETCH_ERRORS as exc:
            logger.warning("Failed to get hotel details for %s: %s", hotel_id, exc)
            return None

        await asyncio.sleep(self._rate_limit_backoff)

        try:
            detail = await self.get_hotel_details(hotel_id)
        except (RateLimitError, *_FETCH_ERRORS) as exc:
            logger.warning("Retry also failed for hotel %s: %s", hotel_id, exc)
            return None

        logger.info("Retry successful for hotel %s", hotel_id)
        return detail
