from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from enum import Enum

class ResolvedPlace(BaseModel):
    name: str
    city: Optional[str] = None
    address: Optional[str] = None
    lat: float
    lng: float

class PlanResponse(BaseModel):
    title: str
    description: Optional[str] = None
    pois: List[ResolvedPlace] = Field(default_factory=list)
    error: Optional[str] = None

class PlanStatus(str, Enum):
    COMPLETE = "complete"
    DEGRADED = "degraded"  # chat provider failed, fallback keywords used
    CONTEXTUAL = "contextual"  # no keywords, caller keeps its current map state
    OUT_OF_DOMAIN = "out_of_domain"
    FAILED = "failed"

class PlanResult(BaseModel):
    """Outcome of one pipeline run, always renderable"""
    status: PlanStatus
    response: PlanResponse
    status_code: int = 200

    def to_content(self) -> Dict[str, Any]:
        return self.response.model_dump(exclude_none=True)

class MapMarker(BaseModel):
    id: str
    title: str
    subtitle: Optional[str] = None
    latitude: float
    longitude: float

class GeocodeResponse(BaseModel):
    address: str
    city: Optional[str] = None
    lat: float
    lng: float
