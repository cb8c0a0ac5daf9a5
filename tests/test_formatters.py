import pytest

from tripmap.models.response_models import ResolvedPlace
from tripmap.utils.formatters import ResponseFormatter

@pytest.mark.parametrize("raw,expected", [
    ("## 行程概览", "行程概览"),
    ("*轻松*的一天", "轻松的一天"),
    ("使用`地铁2号线`前往", "使用地铁2号线前往"),
    ("```json\n{\"a\": 1}\n```\n正文", "正文"),
    ("1. 第一站\n2. 第二站", "第一站\n第二站"),
    ("- 中山陵\n+ 夫子庙", "• 中山陵\n• 夫子庙"),
    ("参观[外滩]和【豫园】", "参观外滩和豫园"),
])
def test_clean_markdown(raw, expected):
    assert ResponseFormatter.clean_markdown(raw) == expected

def test_clean_markdown_handles_empty():
    assert ResponseFormatter.clean_markdown("") == ""

@pytest.mark.parametrize("raw,expected", [
    ("故宫博物院(暂停开放)", "故宫博物院"),
    ("南京博物院（装修中）", "南京博物院"),
    ("老门东 (24小时营业)  步行街", "老门东 步行街"),
    ("海底世界(北门)", "海底世界(北门)"),
])
def test_clean_poi_name(raw, expected):
    assert ResponseFormatter.clean_poi_name(raw) == expected

def test_pois_to_markers():
    pois = [
        ResolvedPlace(name="中山陵", city="南京市", address="石象路7号", lat=32.064, lng=118.848),
        ResolvedPlace(name="夫子庙", lat=32.02, lng=118.788),
    ]
    markers = ResponseFormatter.pois_to_markers(pois)
    assert [m.id for m in markers] == ["0", "1"]
    assert markers[0].subtitle == "南京市 · 石象路7号"
    assert markers[0].latitude == 32.064
    assert markers[0].longitude == 118.848
    assert markers[1].subtitle is None

def test_no_pois_no_markers():
    assert ResponseFormatter.pois_to_markers([]) == []
