import asyncio
import httpx
import pytest

from tripmap.services.amap_service import AMapService, decode_location, parse_location
from tripmap.utils.exceptions import ConfigurationError, LocationDecodeError, PlaceProviderError

SEARCH_OK = {
    "status": "1",
    "info": "OK",
    "infocode": "10000",
    "count": "2",
    "pois": [
        {"id": "B0FFF", "name": "中山陵", "address": "石象路7号", "location": "118.848,32.064", "cityname": "南京市"},
        {"id": "B0FFG", "name": "夫子庙", "address": [], "location": "118.788,32.020", "cityname": "南京市"},
    ],
}

def run_with_handler(handler, coro_factory):
    async def _run():
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        service = AMapService(api_key="test-key", http_client=client)
        try:
            return await coro_factory(service), service
        finally:
            await service.aclose()
    return asyncio.run(_run())

def test_location_token_decodes():
    assert parse_location("116.397,39.909") == {"lat": 39.909, "lng": 116.397}

@pytest.mark.parametrize("token", ["abc,39.9", "116.3", "", None, "nan,39.9", "116.3,inf"])
def test_malformed_location_is_absent(token):
    assert parse_location(token) is None

def test_decode_location_raises_typed_error():
    with pytest.raises(LocationDecodeError):
        decode_location("abc,39.9")

def test_missing_key_is_configuration_error():
    with pytest.raises(ConfigurationError):
        AMapService(api_key="")

def test_search_poi_sends_expected_params():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=SEARCH_OK)

    pois, service = run_with_handler(handler, lambda s: s.search_poi("  中山陵 ", "南京"))

    assert seen["path"] == "/v3/place/text"
    assert seen["params"] == {
        "key": "test-key",
        "keywords": "中山陵",
        "city": "南京",
        "offset": "10",
        "page": "1",
        "extensions": "base",
    }
    assert [p.name for p in pois] == ["中山陵", "夫子庙"]
    assert pois[1].address is None
    assert service.api_calls_made == 1

def test_search_poi_without_city_sends_empty_city():
    seen = {}

    def handler(request):
        seen["city"] = request.url.params.get("city")
        return httpx.Response(200, json=SEARCH_OK)

    run_with_handler(handler, lambda s: s.search_poi("西湖"))
    assert seen["city"] == ""

def test_provider_error_status_is_raised():
    def handler(request):
        return httpx.Response(200, json={
            "status": "0", "info": "CUQPS_HAS_EXCEEDED_THE_LIMIT", "infocode": "10019"
        })

    with pytest.raises(PlaceProviderError) as exc_info:
        run_with_handler(handler, lambda s: s.search_poi("西湖", "杭州"))

    assert exc_info.value.status == "10019"
    assert exc_info.value.is_rate_limited is True

def test_invalid_key_is_not_rate_limited():
    def handler(request):
        return httpx.Response(200, json={"status": "0", "info": "INVALID_USER_KEY", "infocode": "10001"})

    with pytest.raises(PlaceProviderError) as exc_info:
        run_with_handler(handler, lambda s: s.search_poi("西湖"))

    assert exc_info.value.is_rate_limited is False
    assert "API密钥不正确或过期" in str(exc_info.value)

def test_unexpected_body_yields_no_pois():
    def handler(request):
        return httpx.Response(200, json={"unexpected": True})

    pois, _ = run_with_handler(handler, lambda s: s.search_poi("西湖"))
    assert pois == []

def test_http_error_status_raises():
    def handler(request):
        return httpx.Response(503, text="unavailable")

    with pytest.raises(httpx.HTTPStatusError):
        run_with_handler(handler, lambda s: s.search_poi("西湖"))

def test_connection_errors_are_retried():
    attempts = []

    def handler(request):
        attempts.append(1)
        if len(attempts) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=SEARCH_OK)

    pois, _ = run_with_handler(handler, lambda s: s.search_poi("中山陵"))
    assert len(attempts) == 2
    assert len(pois) == 2

def test_geocode_returns_coordinates():
    def handler(request):
        assert request.url.path == "/v3/geocode/geo"
        return httpx.Response(200, json={
            "status": "1", "info": "OK", "count": "1",
            "geocodes": [{"location": "116.397,39.909", "formatted_address": "北京市东城区天安门"}],
        })

    location, _ = run_with_handler(handler, lambda s: s.geocode("天安门", "北京"))
    assert location == {"lat": 39.909, "lng": 116.397}

def test_geocode_without_match_returns_none():
    def handler(request):
        return httpx.Response(200, json={"status": "1", "info": "OK", "count": "0", "geocodes": []})

    location, _ = run_with_handler(handler, lambda s: s.geocode("不存在的地址"))
    assert location is None
