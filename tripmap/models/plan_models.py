from pydantic import BaseModel, Field
from typing import List, Optional

MAX_KEYWORDS = 10

class ParsedPlan(BaseModel):
    """Structured view of one model reply"""
    title: str
    description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list, max_length=MAX_KEYWORDS)
    contextual: bool = False  # follow-up about an existing itinerary
    used_fallback: bool = False  # keywords came from the prompt, not the reply

    model_config = {"frozen": True}
