import re
from typing import List

from tripmap.models.response_models import ResolvedPlace, MapMarker

# Business-status annotations AMap appends to POI names
BUSINESS_STATUS_TAGS = [
    "暂停开放",
    "已关闭",
    "停业",
    "装修中",
    "永久关闭",
    "临时关闭",
    "营业中",
    "24小时营业",
    "节假日休息",
]

_STATUS_TAG_PATTERN = re.compile(
    r"[(（](?:" + "|".join(re.escape(tag) for tag in BUSINESS_STATUS_TAGS) + r")[)）]"
)

# Applied in order; later rules see the output of earlier ones
_MARKDOWN_RULES = [
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),          # **bold**
    (re.compile(r"\*([^*]+)\*"), r"\1"),              # *italic*
    (re.compile(r"^#+\s*", re.MULTILINE), ""),        # headings
    (re.compile(r"```[\s\S]*?```"), ""),              # fenced code blocks
    (re.compile(r"`([^`]+)`"), r"\1"),                # inline code
    (re.compile(r"^\s*[-*+]\s+", re.MULTILINE), "• "),
    (re.compile(r"^\s*\d+\.\s+", re.MULTILINE), ""),  # numbered lists
    (re.compile(r"\[([^\]]+)\]"), r"\1"),
    (re.compile(r"【([^】]+)】"), r"\1"),
]

class ResponseFormatter:
    """Format model text and resolved places for presentation"""

    @staticmethod
    def clean_markdown(text: str) -> str:
        """Strip markdown decoration from model output, keeping the words."""
        if not text:
            return ""
        for pattern, replacement in _MARKDOWN_RULES:
            text = pattern.sub(replacement, text)
        return text.strip()

    @staticmethod
    def clean_poi_name(name: str) -> str:
        """Remove business-status annotations such as "(暂停开放)" from a POI name"""
        cleaned = _STATUS_TAG_PATTERN.sub("", name or "")
        return re.sub(r"\s+", " ", cleaned).strip()

    @staticmethod
    def format_subtitle(place: ResolvedPlace) -> str:
        return " · ".join(part for part in (place.city, place.address) if part)

    @staticmethod
    def pois_to_markers(pois: List[ResolvedPlace]) -> List[MapMarker]:
        """
        Convert resolved places into map markers.

        An empty list means "nothing new to show": after a contextual reply the
        map keeps whatever markers it already displays.
        """
        markers = []
        for idx, place in enumerate(pois):
            subtitle = ResponseFormatter.format_subtitle(place)
            markers.append(MapMarker(
                id=str(idx),
                title=place.name,
                subtitle=subtitle or None,
                latitude=place.lat,
                longitude=place.lng
            ))
        return markers
