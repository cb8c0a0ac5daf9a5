import asyncio
import json
import httpx
import pytest

from tripmap.models.request_models import ChatTurn
from tripmap.services.chat_completion_service import (
    ChatCompletionService,
    detect_provider,
    normalize_base_url,
)
from tripmap.utils.exceptions import (
    ConfigurationError,
    ProviderAuthError,
    ProviderNetworkError,
    ProviderRateLimitedError,
    ProviderTimeoutError,
    ProviderUnknownError,
)

def completion_body(content):
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "deepseek-chat",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }

def error_body(message):
    return {"error": {"message": message, "type": "invalid_request_error", "code": None}}

def complete_with_handler(handler, history=None):
    async def _run():
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        service = ChatCompletionService(
            api_key="sk-test-123456789",
            base_url="https://api.deepseek.com",
            max_retries=0,
            http_client=client
        )
        try:
            return await service.complete("system prompt", history, "南京三日游")
        finally:
            await service.aclose()
    return asyncio.run(_run())

def test_missing_api_key_fails_at_construction():
    with pytest.raises(ConfigurationError):
        ChatCompletionService(api_key=None)

def test_deepseek_base_url_gets_v1_suffix():
    assert normalize_base_url("https://api.deepseek.com") == "https://api.deepseek.com/v1"
    assert normalize_base_url("https://api.openai.com/v1") == "https://api.openai.com/v1"
    assert normalize_base_url(None) is None

def test_detect_provider():
    assert detect_provider("https://api.deepseek.com/v1") == "deepseek"
    assert detect_provider(None) == "openai"

def test_build_messages_preserves_order_and_maps_roles():
    history = [
        ChatTurn(type="user", content="南京三日游"),
        ChatTurn(type="ai", content="标题：南京之旅", data={"pois": []}),
    ]
    messages = ChatCompletionService.build_messages("sys", history, "第2天怎么玩")
    assert messages == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "南京三日游"},
        {"role": "assistant", "content": "标题：南京之旅"},
        {"role": "user", "content": "第2天怎么玩"},
    ]

def test_complete_returns_reply_text():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=completion_body("标题：南京之旅\n关键景点：中山陵"))

    history = [ChatTurn(type="user", content="你好")]
    text = complete_with_handler(handler, history)

    assert text == "标题：南京之旅\n关键景点：中山陵"
    assert seen["url"] == "https://api.deepseek.com/v1/chat/completions"
    assert seen["body"]["model"] == "deepseek-chat"
    assert seen["body"]["temperature"] == 0.7
    assert [m["role"] for m in seen["body"]["messages"]] == ["system", "user", "user"]

def test_request_timeout_reaches_transport():
    seen = {}

    def handler(request):
        seen["timeout"] = request.extensions["timeout"]
        return httpx.Response(200, json=completion_body("好的"))

    complete_with_handler(handler)
    assert seen["timeout"] == {"connect": 10.0, "read": 10.0, "write": 10.0, "pool": 10.0}

def test_empty_content_becomes_empty_string():
    def handler(request):
        return httpx.Response(200, json=completion_body(None))

    assert complete_with_handler(handler) == ""

@pytest.mark.parametrize("status,expected", [
    (401, ProviderAuthError),
    (429, ProviderRateLimitedError),
    (500, ProviderUnknownError),
])
def test_status_errors_are_typed(status, expected):
    def handler(request):
        return httpx.Response(status, json=error_body("boom"))

    with pytest.raises(expected):
        complete_with_handler(handler)

def test_timeout_is_typed():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ProviderTimeoutError):
        complete_with_handler(handler)

def test_connection_failure_is_typed():
    def handler(request):
        raise httpx.ConnectError("name resolution failed", request=request)

    with pytest.raises(ProviderNetworkError):
        complete_with_handler(handler)
