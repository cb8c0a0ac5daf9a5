from typing import Any, Dict, List, Optional, Tuple
from pydantic import ValidationError
from tripmap.models.request_models import PlanRequest

class PlanRequestValidator:
    """Validator for trip planning requests"""

    @staticmethod
    def format_errors(error: ValidationError) -> List[str]:
        """Flatten pydantic errors into readable messages."""
        messages = []
        for err in error.errors():
            location = ".".join(str(part) for part in err.get("loc", ()))
            msg = err.get("msg", "invalid value")
            # Custom prompt errors already read as full sentences
            if err.get("type") in ("prompt_empty", "prompt_too_long") or not location:
                messages.append(msg)
            else:
                messages.append(f"{location}: {msg}")
        return messages

    @staticmethod
    def validate(payload: Any) -> Tuple[Optional[PlanRequest], Optional[str]]:
        """
        Validate a decoded JSON body.

        Returns (request, None) on success and (None, message) otherwise. Anything
        that is not a JSON object is validated as an empty object.
        """
        if not isinstance(payload, dict):
            payload = {}
        try:
            return PlanRequest.model_validate(payload), None
        except ValidationError as e:
            errors = PlanRequestValidator.format_errors(e)
            return None, f"请求参数错误: {', '.join(errors)}"

    @staticmethod
    def summarize(request: PlanRequest) -> Dict[str, Any]:
        """Small, log-safe summary of a request"""
        return {
            "prompt_preview": request.prompt[:50],
            "prompt_length": len(request.prompt),
            "city": request.city,
            "history_turns": len(request.chatHistory or []),
        }
