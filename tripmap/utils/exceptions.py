"""
Error taxonomy for the planning pipeline.

Chat provider failures degrade a plan, place provider failures skip a single
keyword, and neither ever reaches the HTTP caller as a raw failure.
"""
from typing import Optional


class TripMapError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(TripMapError):
    """A required collaborator setting (API key, base URL) is missing."""


# --- Chat completion provider -------------------------------------------------

class ChatProviderError(TripMapError):
    """The chat completion call failed."""


class ProviderTimeoutError(ChatProviderError):
    pass


class ProviderAuthError(ChatProviderError):
    pass


class ProviderRateLimitedError(ChatProviderError):
    pass


class ProviderNetworkError(ChatProviderError):
    pass


class ProviderUnknownError(ChatProviderError):
    pass


# --- Place search provider ----------------------------------------------------

# AMap Web API status codes (status != "1")
AMAP_ERROR_MESSAGES = {
    "10001": "API密钥不正确或过期",
    "10002": "请求过于频繁",
    "10003": "访问已超出日配额",
    "10004": "单位时间内访问过于频繁",
    "10005": "IP白名单出错，发送请求的服务器IP不在IP白名单内",
    "10006": "绑定域名出错，当前API的请求域名与绑定域名不符",
    "10007": "数字签名未通过验证",
    "10008": "MD5安全码未通过验证",
    "10009": "请求key与绑定平台不符",
    "10010": "IP访问超限",
    "10011": "服务不支持https请求",
    "10012": "权限不足，服务请求被拒绝",
    "10013": "Key被删除",
    "10019": "使用的某个服务总QPS超限",
    "10020": "某个Key使用某个服务接口QPS超出限制",
    "10021": "账号使用某个服务接口QPS超出限制",
    "20000": "请求参数非法",
    "20001": "缺少必填参数",
    "20002": "请求协议非法",
    "20003": "其他未知错误",
}

RATE_LIMIT_STATUSES = {"10004", "10010", "10019", "10020", "10021"}
RATE_LIMIT_INFO_MARKERS = ("CUQPS_HAS_EXCEEDED_THE_LIMIT", "ACCESS_TOO_FREQUENT")


class PlaceProviderError(TripMapError):
    """AMap answered with a non-success status code."""

    def __init__(self, status: str, info: Optional[str] = None):
        self.status = status
        self.info = info
        self.description = AMAP_ERROR_MESSAGES.get(status) or info or "未知错误"
        super().__init__(f"高德地图API错误 ({status}): {self.description}")

    @property
    def is_rate_limited(self) -> bool:
        if self.status in RATE_LIMIT_STATUSES:
            return True
        info = self.info or ""
        return any(marker in info for marker in RATE_LIMIT_INFO_MARKERS)


class LocationDecodeError(TripMapError, ValueError):
    """A "lng,lat" location token could not be decoded into finite numbers."""
