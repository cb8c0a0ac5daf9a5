from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError
from typing import List, Optional, Any
from enum import Enum

PROMPT_MAX_LENGTH = 1000

class ChatRole(str, Enum):
    USER = "user"
    AI = "ai"

class ChatTurn(BaseModel):
    """One entry of the caller-owned conversation history"""
    type: ChatRole
    content: str
    data: Optional[Any] = None

    model_config = {"frozen": True}

class PlanRequest(BaseModel):
    prompt: str = Field(..., description="Natural language trip request")
    city: Optional[str] = None
    chatHistory: Optional[List[ChatTurn]] = None

    @field_validator('prompt')
    @classmethod
    def validate_prompt(cls, v):
        if len(v) < 1:
            raise PydanticCustomError('prompt_empty', '旅游需求不能为空')
        if len(v) > PROMPT_MAX_LENGTH:
            raise PydanticCustomError('prompt_too_long', '旅游需求过长')
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"prompt": "南京三日游，喜欢历史人文"},
                {
                    "prompt": "第2天怎么玩？",
                    "chatHistory": [
                        {"type": "user", "content": "南京三日游"},
                        {"type": "ai", "content": "第1天：中山陵…第2天：夫子庙…"}
                    ]
                }
            ]
        }
    }
