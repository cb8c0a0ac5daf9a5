from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Any

def _flatten_text(v: Any) -> Optional[str]:
    # AMap returns [] instead of "" for empty text fields
    if isinstance(v, list):
        joined = "".join(str(part) for part in v if part)
        return joined or None
    return v

class AMapPoi(BaseModel):
    id: Optional[str] = None
    name: str
    address: Optional[str] = None
    location: Optional[str] = None  # "lng,lat"
    cityname: Optional[str] = None
    typecode: Optional[str] = None
    type: Optional[str] = None

    @field_validator('id', 'address', 'location', 'cityname', 'typecode', 'type', mode='before')
    @classmethod
    def flatten_text(cls, v):
        return _flatten_text(v)

class AMapGeocode(BaseModel):
    location: Optional[str] = None
    formatted_address: Optional[str] = None

    @field_validator('location', 'formatted_address', mode='before')
    @classmethod
    def flatten_text(cls, v):
        return _flatten_text(v)

class AMapResponse(BaseModel):
    status: str
    info: Optional[str] = None
    infocode: Optional[str] = None  # numeric error code, status is just "0"/"1"
    count: Optional[str] = None
    pois: List[AMapPoi] = Field(default_factory=list)
    geocodes: List[AMapGeocode] = Field(default_factory=list)

    @field_validator('pois', 'geocodes', mode='before')
    @classmethod
    def none_to_empty(cls, v):
        return v if v is not None else []
