import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from tripmap.models.place_models import AMapPoi
from tripmap.models.response_models import ResolvedPlace
from tripmap.services.amap_service import AMapService, parse_location
from tripmap.utils.exceptions import PlaceProviderError
from tripmap.utils.formatters import ResponseFormatter

logger = logging.getLogger(__name__)

CITY_SUFFIX = "市"

Sleep = Callable[[float], Awaitable[None]]


def _without_suffix(region: str) -> str:
    return region.replace(CITY_SUFFIX, "", 1)


def mentions_region(poi: AMapPoi, region: str) -> bool:
    """Loose check used to decide whether a city-prefixed retry is needed"""
    short = _without_suffix(region)
    fields = [poi.cityname or "", poi.address or ""]
    return any(region in f or short in f for f in fields)


def matches_region(city: Optional[str], address: Optional[str], region: str) -> bool:
    """
    Does a place's city or address name the target region?

    "南京市" matches a place in "南京" and "南京" matches a place in "南京市".
    """
    city = city or ""
    address = address or ""
    if region in city or region in address:
        return True
    if region.endswith(CITY_SUFFIX):
        short = region[:-1]
        return short in city or short in address
    with_suffix = region + CITY_SUFFIX
    return with_suffix in city or with_suffix in address


def filter_by_region(places: Sequence[ResolvedPlace], region: Optional[str]) -> List[ResolvedPlace]:
    """Drop places whose recorded city/address does not mention the region"""
    if not region:
        return list(places)
    short = _without_suffix(region)
    kept = []
    for place in places:
        city = place.city or ""
        address = place.address or ""
        if region in city or short in city or region in address or short in address:
            kept.append(place)
        else:
            logger.info(f"Dropping place outside {region}: {place.name} ({place.city})")
    return kept


class POIResolver:
    """
    Resolve itinerary keywords to coordinates, one AMap search at a time.

    Searches are strictly sequential with fixed pauses between them so a batch
    stays under the provider's per-second quota. A failing keyword is skipped,
    never fatal to the batch.
    """

    def __init__(
        self,
        places_service: AMapService,
        search_delay: float = 0.2,
        retry_delay: float = 0.1,
        rate_limit_backoff: float = 0.5,
        sleep: Sleep = asyncio.sleep
    ):
        self.places_service = places_service
        self.search_delay = search_delay
        self.retry_delay = retry_delay
        self.rate_limit_backoff = rate_limit_backoff
        self.sleep = sleep
        self.logger = logging.getLogger(__name__)

    async def resolve(self, keywords: Sequence[str], region: Optional[str] = None) -> List[ResolvedPlace]:
        results: List[ResolvedPlace] = []
        for index, keyword in enumerate(keywords):
            if index > 0:
                await self.sleep(self.search_delay)
            try:
                place = await self._resolve_keyword(keyword, region)
            except PlaceProviderError as e:
                self.logger.error(f"Place search failed for {keyword}: {e}")
                if e.is_rate_limited:
                    self.logger.info("AMap rate limit hit, backing off before the next keyword")
                    await self.sleep(self.rate_limit_backoff)
                continue
            except Exception as e:
                self.logger.error(f"Place search failed for {keyword}: {str(e)}")
                continue

            if place is not None:
                results.append(place)

        final = filter_by_region(results, region)
        self.logger.info(
            "POI resolution finished",
            extra={"keywords": len(keywords), "resolved": len(results), "kept": len(final), "region": region}
        )
        return final

    async def _resolve_keyword(self, keyword: str, region: Optional[str]) -> Optional[ResolvedPlace]:
        pois = await self.places_service.search_poi(keyword, region)

        if region and not any(mentions_region(poi, region) for poi in pois):
            await self.sleep(self.retry_delay)
            self.logger.debug(f"Retrying with city prefix: {region}{keyword}")
            prefixed = await self.places_service.search_poi(f"{region}{keyword}", region)
            if prefixed:
                pois = prefixed

        if not pois:
            self.logger.warning(f"No POI found for keyword {keyword!r} (region={region})")
            return None

        selected = self._select_candidate(pois, region)
        if selected is None:
            self.logger.info(
                f"No candidate in {region} for {keyword}, skipping",
                extra={"candidate_cities": [p.cityname for p in pois]}
            )
            return None

        location = parse_location(selected.location)
        if location is None:
            self.logger.warning(f"Unusable location for {selected.name}: {selected.location!r}")
            return None

        return ResolvedPlace(
            name=ResponseFormatter.clean_poi_name(selected.name),
            city=selected.cityname or region,
            address=selected.address,
            lat=location["lat"],
            lng=location["lng"]
        )

    @staticmethod
    def _select_candidate(pois: Sequence[AMapPoi], region: Optional[str]) -> Optional[AMapPoi]:
        if not region:
            return pois[0]
        for poi in pois:
            if matches_region(poi.cityname, poi.address, region):
                return poi
        return None
