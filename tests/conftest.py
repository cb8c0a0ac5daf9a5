import pytest

from tests.fakes import FakePlacesService, RecordingSleep, make_poi
from tripmap.services.poi_resolver import POIResolver


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def nanjing_places():
    return FakePlacesService(results={
        "中山陵": [
            make_poi("中山陵", "上海市", "121.47,31.23"),
            make_poi("中山陵景区(暂停开放)", "南京市", "118.848,32.064", "玄武区石象路7号"),
        ],
        "夫子庙": [make_poi("夫子庙", "南京市", "118.788,32.020", "秦淮区贡院街")],
    })


@pytest.fixture
def resolver_factory(sleep):
    def _build(places):
        return POIResolver(places, sleep=sleep)
    return _build
