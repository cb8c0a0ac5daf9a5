"""
Turn a free-text model reply into a ParsedPlan.

Two reply shapes are understood:

* contextual: a follow-up about one day of an itinerary the user already has.
  Marked with "【详细规划】", or simply lacking both the "标题：" and
  "关键景点：" markers. No keywords are produced, so no POI lookup happens and
  the caller keeps its current map.
* fresh plan: "标题：<title>", an optional "📍 推荐景点：" body, and a
  "关键景点：a, b, c" line that drives POI resolution.

Parsing is a pure function of the reply (and, for the fallback, the prompt).
"""
import logging
import re
from typing import List

from tripmap.models.plan_models import ParsedPlan, MAX_KEYWORDS
from tripmap.utils.formatters import ResponseFormatter

logger = logging.getLogger(__name__)

DETAIL_MARKER = "【详细规划】"
TITLE_MARKER = "标题："
KEYWORDS_MARKER = "关键景点："

DEFAULT_DETAIL_TITLE = "详细规划"
DEFAULT_PLAN_TITLE = "旅游行程规划"

MAX_KEYWORD_LENGTH = 50  # exclusive

# Used when a fresh plan carries no usable keyword line
FALLBACK_CITIES = ['北京', '上海', '广州', '深圳', '杭州', '南京', '苏州', '成都', '西安', '重庆']
FALLBACK_MAX_KEYWORDS = 5
FALLBACK_PROMPT_CHARS = 10

_DETAIL_TITLE_RE = re.compile(r"【详细规划】(.+?)：")
_TITLE_RE = re.compile(r"标题[:：]\s*(.+)")
_KEYWORDS_RE = re.compile(r"关键景点[:：]\s*(.+)")
_BODY_RE = re.compile(r"📍\s*推荐景点[:：]([\s\S]*?)关键景点[:：]")
_TITLE_LINE_RE = re.compile(r"标题：[^\n]*\n")
_KEYWORDS_LINE_RE = re.compile(r"关键景点：[^\n]*")
_KEYWORD_SPLIT_RE = re.compile(r"[,，、\n]")


class ReplyParser:
    """Stateless parser for model replies"""

    @staticmethod
    def is_contextual(raw_text: str) -> bool:
        return DETAIL_MARKER in raw_text or (
            TITLE_MARKER not in raw_text and KEYWORDS_MARKER not in raw_text
        )

    @staticmethod
    def split_keywords(keyword_text: str) -> List[str]:
        keywords = []
        for token in _KEYWORD_SPLIT_RE.split(keyword_text or ""):
            token = token.strip()
            if 0 < len(token) < MAX_KEYWORD_LENGTH:
                keywords.append(token)
        return keywords[:MAX_KEYWORDS]

    @staticmethod
    def extract_basic_keywords(prompt: str) -> List[str]:
        """Naive keywords straight from the prompt, for when the model gives none."""
        keywords = [city for city in FALLBACK_CITIES if city in (prompt or "")]
        if not keywords:
            keywords.append((prompt or "")[:FALLBACK_PROMPT_CHARS])
        return keywords[:FALLBACK_MAX_KEYWORDS]

    @classmethod
    def parse(cls, raw_text: str, prompt: str = "") -> ParsedPlan:
        raw_text = raw_text or ""

        if cls.is_contextual(raw_text):
            match = _DETAIL_TITLE_RE.search(raw_text)
            title = (match.group(1).strip() if match else "") or DEFAULT_DETAIL_TITLE
            logger.info("Contextual reply detected; keeping existing map markers")
            return ParsedPlan(
                title=ResponseFormatter.clean_markdown(title),
                description=ResponseFormatter.clean_markdown(raw_text.strip()),
                keywords=[],
                contextual=True
            )

        title_match = _TITLE_RE.search(raw_text)
        keyword_match = _KEYWORDS_RE.search(raw_text)
        body_match = _BODY_RE.search(raw_text)

        title = (title_match.group(1).strip() if title_match else "") or DEFAULT_PLAN_TITLE
        body = body_match.group(1).strip() if body_match else ""
        if not body:
            body = _KEYWORDS_LINE_RE.sub("", _TITLE_LINE_RE.sub("", raw_text, count=1), count=1).strip()

        keyword_text = keyword_match.group(1).strip() if keyword_match else ""
        keywords = cls.split_keywords(keyword_text)
        logger.debug("Parsed keywords", extra={"keywords": keywords, "raw": keyword_text})

        used_fallback = False
        if not keywords:
            keywords = cls.extract_basic_keywords(prompt)
            used_fallback = True
            logger.info(f"No keywords in reply, using fallback keywords: {keywords}")

        return ParsedPlan(
            title=ResponseFormatter.clean_markdown(title),
            description=ResponseFormatter.clean_markdown(body),
            keywords=keywords,
            used_fallback=used_fallback
        )
