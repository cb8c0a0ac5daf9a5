import logging
from typing import Dict, List, Optional, Sequence

import httpx
import openai
from openai import AsyncOpenAI

from tripmap.models.request_models import ChatRole, ChatTurn
from tripmap.utils.exceptions import (
    ConfigurationError,
    ProviderAuthError,
    ProviderNetworkError,
    ProviderRateLimitedError,
    ProviderTimeoutError,
    ProviderUnknownError,
)

DEEPSEEK_BASE_URL = "https://api.deepseek.com"
DEFAULT_MODEL = "deepseek-chat"

PROVIDER_OPENAI = "openai"
PROVIDER_DEEPSEEK = "deepseek"

_ROLE_MAP = {
    ChatRole.USER: "user",
    ChatRole.AI: "assistant",
}


def normalize_base_url(base_url: Optional[str]) -> Optional[str]:
    """DeepSeek serves the OpenAI-compatible API under /v1"""
    if base_url and base_url.rstrip("/") == DEEPSEEK_BASE_URL:
        return f"{DEEPSEEK_BASE_URL}/v1"
    return base_url or None


def detect_provider(base_url: Optional[str]) -> str:
    if base_url and "deepseek.com" in base_url:
        return PROVIDER_DEEPSEEK
    return PROVIDER_OPENAI


class ChatCompletionService:
    """
    Single-shot chat completion against an OpenAI-compatible endpoint.

    One request per call, bounded by a per-request timeout. Transport-level
    retries are left to the SDK client (max_retries); this class never loops.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        request_timeout: float = 10.0,
        client_timeout: float = 180.0,
        max_retries: int = 3,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        if not api_key:
            raise ConfigurationError("缺少AI API密钥，请设置环境变量 OPENAI_API_KEY")

        self.logger = logging.getLogger(__name__)
        self.base_url = normalize_base_url(base_url)
        self.provider = detect_provider(self.base_url)
        self.model = model or DEFAULT_MODEL
        self.temperature = temperature
        self.request_timeout = request_timeout
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=self.base_url,
            timeout=client_timeout,
            max_retries=max_retries,
            http_client=http_client
        )
        self.logger.info(
            "Chat completion client initialized",
            extra={
                "provider": self.provider,
                "model": self.model,
                "base_url": self.base_url or "default",
                "api_key_prefix": api_key[:8] + "...",
            }
        )

    @staticmethod
    def build_messages(
        system_prompt: str,
        history: Optional[Sequence[ChatTurn]],
        user_prompt: str
    ) -> List[Dict[str, str]]:
        """[system] + history in conversation order + [current user message]"""
        messages = [{"role": "system", "content": system_prompt}]
        for turn in history or []:
            role = _ROLE_MAP.get(turn.type)
            if role:
                messages.append({"role": role, "content": turn.content})
        messages.append({"role": "user", "content": user_prompt})
        return messages

    async def complete(
        self,
        system_prompt: str,
        history: Optional[Sequence[ChatTurn]],
        user_prompt: str
    ) -> str:
        """Send one chat completion request and return the reply text"""
        messages = self.build_messages(system_prompt, history, user_prompt)
        self.logger.info(
            "Sending chat completion request",
            extra={
                "model": self.model,
                "message_count": len(messages),
                "history_turns": len(history or []),
                "approx_chars": sum(len(m["content"]) for m in messages),
            }
        )

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                timeout=self.request_timeout
            )
        # APITimeoutError subclasses APIConnectionError, so it goes first
        except openai.APITimeoutError as e:
            raise ProviderTimeoutError(f"timeout: {e}") from e
        except openai.AuthenticationError as e:
            raise ProviderAuthError(str(e)) from e
        except openai.RateLimitError as e:
            raise ProviderRateLimitedError(str(e)) from e
        except openai.APIConnectionError as e:
            raise ProviderNetworkError(str(e)) from e
        except openai.OpenAIError as e:
            raise ProviderUnknownError(str(e)) from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        text = content or ""
        self.logger.debug("Chat completion reply received", extra={"length": len(text)})
        return text

    async def aclose(self):
        await self.client.close()
