from fastapi import FastAPI, HTTPException, Depends, Request, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from datetime import datetime
from typing import Optional

from tripmap.models.response_models import GeocodeResponse, PlanResponse, ResolvedPlace
from tripmap.services.amap_service import AMapService, parse_location
from tripmap.services.chat_completion_service import ChatCompletionService, detect_provider, normalize_base_url
from tripmap.services.poi_resolver import POIResolver
from tripmap.services.trip_planner_service import TripPlannerService, failure_result
from tripmap.utils.config import get_settings, validate_settings
from tripmap.utils.exceptions import PlaceProviderError
from tripmap.utils.formatters import ResponseFormatter
from tripmap.utils.validators import PlanRequestValidator

# Configure logging
logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format=get_settings().LOG_FORMAT
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="AI Trip Planner Map API",
    description="Plan domestic trips in natural language and pin the recommended places on a map (OpenAI-compatible chat model + AMap place search)",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global services (initialized on startup)
chat_service: ChatCompletionService = None
amap_service: AMapService = None
poi_resolver: POIResolver = None
trip_planner: TripPlannerService = None

@app.on_event("startup")
async def startup_event():
    """Initialize services on startup"""
    global chat_service, amap_service, poi_resolver, trip_planner

    try:
        settings = get_settings()

        # Validate settings
        if not validate_settings():
            logger.error("Invalid settings configuration")
            raise Exception("Invalid settings configuration")

        logger.info("Initializing services...")

        chat_service = ChatCompletionService(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            model=settings.OPENAI_MODEL,
            temperature=settings.OPENAI_TEMPERATURE,
            request_timeout=settings.OPENAI_REQUEST_TIMEOUT_SECONDS,
            client_timeout=settings.OPENAI_CLIENT_TIMEOUT_SECONDS,
            max_retries=settings.OPENAI_MAX_RETRIES
        )
        amap_service = AMapService(
            api_key=settings.AMAP_WEB_KEY,
            base_url=settings.AMAP_BASE_URL,
            page_size=settings.AMAP_PAGE_SIZE,
            timeout=settings.AMAP_HTTP_TIMEOUT_SECONDS
        )
        poi_resolver = POIResolver(
            amap_service,
            search_delay=settings.POI_SEARCH_DELAY_MS / 1000,
            retry_delay=settings.POI_RETRY_DELAY_MS / 1000,
            rate_limit_backoff=settings.POI_RATE_LIMIT_BACKOFF_MS / 1000
        )
        trip_planner = TripPlannerService(chat_service, poi_resolver)

        logger.info("All services initialized successfully")

    except Exception as e:
        logger.error(f"Failed to initialize services: {str(e)}")
        raise

@app.on_event("shutdown")
async def shutdown_event():
    """Close shared HTTP clients"""
    if amap_service is not None:
        await amap_service.aclose()
    if chat_service is not None:
        await chat_service.aclose()

# Dependencies to get services
def get_trip_planner() -> Optional[TripPlannerService]:
    return trip_planner

def get_amap_service() -> AMapService:
    if amap_service is None:
        raise HTTPException(status_code=503, detail="Place search service not available")
    return amap_service

@app.post("/api/v1/plan", response_model=PlanResponse, response_model_exclude_none=True)
async def plan_trip(
    request: Request,
    planner: Optional[TripPlannerService] = Depends(get_trip_planner)
):
    """
    Plan a trip from a natural language prompt

    Accepts {prompt, city?, chatHistory?}. Always answers with a renderable
    {title, description?, pois, error?} body: 200 for normal and degraded
    plans, 400 for malformed input, 500 when planning itself broke.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = {}

    plan_request, error = PlanRequestValidator.validate(payload)
    if error:
        logger.info(f"Rejected plan request: {error}")
        return JSONResponse(status_code=400, content={"error": error})

    if planner is None:
        result = failure_result(RuntimeError("规划服务未初始化"))
    else:
        result = await planner.plan(plan_request)

    logger.info(
        f"Plan request finished: status={result.status.value}, "
        f"pois={len(result.response.pois)}, http={result.status_code}"
    )
    return JSONResponse(status_code=result.status_code, content=result.to_content())

@app.get("/api/v1/places/search")
async def search_places(
    keyword: str = Query(..., min_length=1),
    city: Optional[str] = None,
    service: AMapService = Depends(get_amap_service)
):
    """Search AMap places by keyword, optionally scoped to a city or province."""
    try:
        logger.info(f"Searching places: {keyword} in {city}")
        pois = await service.search_poi(keyword, city)

        # Only places with usable coordinates can be pinned
        mappable = []
        for poi in pois:
            location = parse_location(poi.location)
            if location is None:
                continue
            mappable.append(ResolvedPlace(
                name=ResponseFormatter.clean_poi_name(poi.name),
                city=poi.cityname,
                address=poi.address,
                lat=location["lat"],
                lng=location["lng"]
            ))

        return {
            "keyword": keyword,
            "city": city,
            "places": [poi.model_dump(exclude_none=True) for poi in pois],
            "markers": [m.model_dump() for m in ResponseFormatter.pois_to_markers(mappable)],
            "total_results": len(pois)
        }

    except HTTPException:
        raise
    except PlaceProviderError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Error searching places: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@app.get("/api/v1/geocode", response_model=GeocodeResponse)
async def geocode_address(
    address: str = Query(..., min_length=1),
    city: Optional[str] = None,
    service: AMapService = Depends(get_amap_service)
):
    """Resolve an address to coordinates."""
    try:
        location = await service.geocode(address, city)
        if not location:
            raise HTTPException(status_code=404, detail="Address could not be geocoded")
        return GeocodeResponse(address=address, city=city, lat=location["lat"], lng=location["lng"])

    except HTTPException:
        raise
    except PlaceProviderError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Error geocoding address: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@app.get("/api/v1/env-check")
async def env_check():
    """Report which provider settings are configured, without exposing secrets"""
    try:
        settings = get_settings()
        base_url = normalize_base_url(settings.OPENAI_BASE_URL)
        api_key = settings.OPENAI_API_KEY
        return {
            "success": True,
            "message": "环境变量检查完成",
            "data": {
                "hasOpenAIKey": bool(api_key),
                "openAIKeyPrefix": (api_key[:8] + "...") if api_key else "未设置",
                "baseURL": base_url or "未设置",
                "model": settings.OPENAI_MODEL,
                "provider": detect_provider(base_url),
                "hasAmapKey": bool(settings.AMAP_WEB_KEY),
                "environment": settings.ENVIRONMENT,
                "timestamp": datetime.utcnow().isoformat()
            }
        }

    except Exception as e:
        logger.error(f"Environment check failed: {str(e)}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    try:
        services_healthy = all([
            chat_service is not None,
            amap_service is not None,
            trip_planner is not None
        ])

        return {
            "status": "healthy" if services_healthy else "degraded",
            "timestamp": datetime.utcnow().isoformat(),
            "services": {
                "chat_completion": chat_service is not None,
                "amap": amap_service is not None,
                "trip_planner": trip_planner is not None
            },
            "amap_api_calls": amap_service.api_calls_made if amap_service is not None else 0,
            "version": get_settings().API_VERSION
        }

    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "timestamp": datetime.utcnow().isoformat(),
                "error": str(e)
            }
        )

@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "AI Trip Planner Map API",
        "version": get_settings().API_VERSION,
        "description": "Plan domestic trips in natural language and get mappable places",
        "docs": "/docs",
        "health": "/health"
    }
