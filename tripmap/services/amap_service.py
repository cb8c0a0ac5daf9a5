import logging
import math
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from tripmap.models.place_models import AMapPoi, AMapResponse
from tripmap.utils.exceptions import ConfigurationError, LocationDecodeError, PlaceProviderError

AMAP_BASE_URL = "https://restapi.amap.com"
PLACE_TEXT_PATH = "/v3/place/text"
GEOCODE_PATH = "/v3/geocode/geo"


def decode_location(token: Optional[str]) -> Dict[str, float]:
    """Decode an AMap "lng,lat" token, raising LocationDecodeError when malformed"""
    if not token:
        raise LocationDecodeError("empty location")
    parts = token.split(",")
    if len(parts) < 2:
        raise LocationDecodeError(f"not a lng,lat pair: {token!r}")
    try:
        lng = float(parts[0])
        lat = float(parts[1])
    except ValueError as e:
        raise LocationDecodeError(f"non-numeric coordinate in {token!r}") from e
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise LocationDecodeError(f"non-finite coordinate in {token!r}")
    return {"lat": lat, "lng": lng}


def parse_location(token: Optional[str]) -> Optional[Dict[str, float]]:
    """Lenient variant of decode_location: None instead of an exception"""
    try:
        return decode_location(token)
    except LocationDecodeError:
        return None


class AMapService:
    """Client for the AMap (高德) Web Service place search and geocoding APIs"""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = AMAP_BASE_URL,
        page_size: int = 10,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        if not api_key:
            raise ConfigurationError("缺少高德地图Web服务API密钥，请设置环境变量 AMAP_WEB_KEY")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.logger = logging.getLogger(__name__)
        self.api_calls_made = 0
        # Shared async HTTP client with connection pooling (reused across requests)
        self.http_client = http_client or httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20)
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True
    )
    async def _get_json(self, path: str, params: Dict[str, str]) -> Any:
        """GET an AMap endpoint; only connection-level failures are retried"""
        resp = await self.http_client.get(f"{self.base_url}{path}", params=params)
        self.api_calls_made += 1
        resp.raise_for_status()
        return resp.json()

    def _parse_envelope(self, data: Any, operation: str) -> Optional[AMapResponse]:
        try:
            parsed = AMapResponse.model_validate(data)
        except ValidationError as e:
            self.logger.error(f"AMap {operation} response has unexpected shape: {e}")
            return None

        if parsed.status != "1":
            raise PlaceProviderError(parsed.infocode or parsed.status, parsed.info)
        return parsed

    async def search_poi(self, keyword: str, city: Optional[str] = None) -> List[AMapPoi]:
        """
        Keyword search, optionally scoped to a city or province.

        Raises PlaceProviderError when AMap answers with a non-"1" status; a body
        that does not look like an AMap response yields an empty list.
        """
        params = {
            "key": self.api_key,
            "keywords": (keyword or "").strip(),
            "city": (city or "").strip(),
            "offset": str(self.page_size),
            "page": "1",
            "extensions": "base",
        }
        try:
            data = await self._get_json(PLACE_TEXT_PATH, params)
            parsed = self._parse_envelope(data, "place search")
        except PlaceProviderError as e:
            self.logger.warning(f"AMap place search failed for {keyword!r}: {e}")
            raise

        if parsed is None:
            return []
        self.logger.debug(
            "AMap place search",
            extra={"keyword": keyword, "city": city, "results": len(parsed.pois)}
        )
        return parsed.pois

    async def geocode(self, address: str, city: Optional[str] = None) -> Optional[Dict[str, float]]:
        """Resolve a structured address to {"lat", "lng"}, or None when nothing matches"""
        params = {
            "key": self.api_key,
            "address": (address or "").strip(),
            "city": (city or "").strip(),
        }
        data = await self._get_json(GEOCODE_PATH, params)
        parsed = self._parse_envelope(data, "geocode")
        if parsed is None or not parsed.geocodes:
            return None
        return parse_location(parsed.geocodes[0].location)

    async def aclose(self):
        await self.http_client.aclose()
