import logging
from typing import Optional

from tripmap.models.plan_models import ParsedPlan
from tripmap.models.request_models import PlanRequest
from tripmap.models.response_models import PlanResponse, PlanResult, PlanStatus
from tripmap.prompts.system_prompts import get_out_of_domain_notice, get_travel_planner_system_prompt
from tripmap.services.chat_completion_service import ChatCompletionService
from tripmap.services.poi_resolver import POIResolver
from tripmap.services.region_classifier import RegionClassifier
from tripmap.services.reply_parser import ReplyParser
from tripmap.utils.exceptions import (
    ChatProviderError,
    ProviderAuthError,
    ProviderNetworkError,
    ProviderRateLimitedError,
    ProviderTimeoutError,
)
from tripmap.utils.validators import PlanRequestValidator

DEFAULT_TITLE = "AI旅游规划"
FAILURE_TITLE = "旅游规划"
FAILURE_DESCRIPTION = "抱歉，服务暂时不可用，请稍后重试。"


def describe_ai_error(error: Exception) -> str:
    """Short user-facing message for a failed chat completion"""
    if isinstance(error, ProviderTimeoutError):
        return "AI响应超时，请稍后重试"
    if isinstance(error, ProviderAuthError):
        return "AI服务认证失败，请检查API密钥配置"
    if isinstance(error, ProviderRateLimitedError):
        return "AI服务请求过于频繁，请稍后重试"
    if isinstance(error, ProviderNetworkError):
        return "网络连接失败，请检查网络设置"
    message = str(error) or "未知错误"
    return f"AI服务错误: {message}"


def failure_result(error: Exception) -> PlanResult:
    return PlanResult(
        status=PlanStatus.FAILED,
        status_code=500,
        response=PlanResponse(
            title=FAILURE_TITLE,
            description=FAILURE_DESCRIPTION,
            pois=[],
            error=f"服务暂时不可用: {str(error) or '服务器内部错误'}"
        )
    )


class TripPlannerService:
    """
    Runs one planning request end to end:
    classify -> chat completion -> parse reply -> resolve POIs -> shape response.

    Provider failures never escape: a chat failure degrades the plan to
    prompt-derived keywords, place search failures drop single keywords, and
    anything unexpected becomes a FAILED result with status 500.
    """

    def __init__(
        self,
        chat_service: ChatCompletionService,
        poi_resolver: POIResolver,
        classifier: Optional[RegionClassifier] = None,
        parser: Optional[ReplyParser] = None
    ):
        self.chat_service = chat_service
        self.poi_resolver = poi_resolver
        self.classifier = classifier or RegionClassifier()
        self.parser = parser or ReplyParser()
        self.logger = logging.getLogger(__name__)

    async def plan(self, request: PlanRequest) -> PlanResult:
        try:
            return await self._plan(request)
        except Exception as e:
            self.logger.exception("Trip planning failed")
            return failure_result(e)

    async def _plan(self, request: PlanRequest) -> PlanResult:
        prompt = request.prompt

        if self.classifier.is_out_of_domain(prompt):
            self.logger.info(f"Out-of-domain trip request: {prompt[:50]}")
            return PlanResult(
                status=PlanStatus.OUT_OF_DOMAIN,
                response=PlanResponse(pois=[], **get_out_of_domain_notice())
            )

        extracted_region = self.classifier.extract_region(prompt)
        search_region = request.city or extracted_region
        self.logger.info(
            "Resolved search region",
            extra={
                **PlanRequestValidator.summarize(request),
                "extracted_region": extracted_region,
                "search_region": search_region,
            }
        )

        plan, ai_error = await self._generate_plan(request)
        if plan.used_fallback:
            self.logger.warning(f"Using prompt-derived keywords: {plan.keywords}")

        if not plan.keywords:
            self.logger.info("No keywords to resolve; skipping POI search")
            return PlanResult(
                status=PlanStatus.DEGRADED if ai_error else PlanStatus.CONTEXTUAL,
                response=PlanResponse(
                    title=plan.title,
                    description=plan.description,
                    pois=[],
                    error=ai_error
                )
            )

        pois = await self.poi_resolver.resolve(plan.keywords, search_region)
        self.logger.info(f"Planning finished with {len(pois)} places")

        return PlanResult(
            status=PlanStatus.DEGRADED if ai_error else PlanStatus.COMPLETE,
            response=PlanResponse(
                title=plan.title,
                description=plan.description,
                pois=pois,
                error=ai_error
            )
        )

    async def _generate_plan(self, request: PlanRequest):
        """Model call plus parsing; on failure returns fallback keywords and an error message"""
        try:
            raw_text = await self.chat_service.complete(
                get_travel_planner_system_prompt(),
                request.chatHistory,
                request.prompt
            )
            plan = self.parser.parse(raw_text, request.prompt)
            self.logger.info(
                "Reply parsed",
                extra={"title": plan.title, "keywords": plan.keywords, "contextual": plan.contextual}
            )
            return plan, None
        except ChatProviderError as e:
            self.logger.error(f"Chat completion failed: {type(e).__name__}: {e}")
            ai_error = describe_ai_error(e)
        except Exception as e:
            self.logger.exception("AI planning step failed")
            ai_error = describe_ai_error(e)

        fallback = ParsedPlan(
            title=DEFAULT_TITLE,
            keywords=self.parser.extract_basic_keywords(request.prompt),
            used_fallback=True
        )
        return fallback, ai_error
