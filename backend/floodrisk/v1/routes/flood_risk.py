from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, Request

from floodrisk.models.assessment import Location, SourceName
from floodrisk.schemas.flood_risk import (
    AlertsResponse,
    AssessResponse,
    BatchAssessRequest,
    BatchAssessResponse,
    BatchSummary,
    HydroMetadata,
    HydroStationsResponse,
    LocationRequest,
    RegionalSummaryResponse,
    SourceAssessmentResponse,
)
from floodrisk.services.flood_risk_service import FloodRiskService

router = APIRouter(prefix="/flood-risk", tags=["flood-risk"])


def get_flood_risk_service(request: Request) -> FloodRiskService:
    return request.app.state.flood_risk_service


@router.post("/assess", response_model=AssessResponse)
async def assess(
    req: LocationRequest = Body(
        openapi_examples={
            "coastal_city": {
                "summary": "Coastal city centre with province data",
                "value": {
                    "latitude": 16.0544,
                    "longitude": 108.2022,
                    "name": "Da Nang",
                    "province": "Da Nang",
                },
            },
            "coordinates_only": {
                "summary": "Bare coordinates (historical / population sources degrade)",
                "value": {"latitude": 21.0285, "longitude": 105.8542},
            },
        }
    ),
    service: FloodRiskService = Depends(get_flood_risk_service),
):
    location = Location(**req.model_dump())
    assessment = await service.assess_location(location)
    if assessment is None:
        raise HTTPException(status_code=500, detail="Unable to complete flood risk assessment")
    return AssessResponse(data=assessment)


@router.post("/batch-assess", response_model=BatchAssessResponse)
async def batch_assess(
    req: BatchAssessRequest,
    service: FloodRiskService = Depends(get_flood_risk_service),
):
    locations = [Location(**loc.model_dump()) for loc in req.locations]
    result = await service.assess_batch(locations)
    return BatchAssessResponse(
        data=result.assessments,
        summary=BatchSummary(
            total_requested=result.total_requested,
            total_assessed=result.total_assessed,
            success_rate=result.success_rate,
        ),
    )


@router.get("/alerts/{province}", response_model=AlertsResponse)
async def alerts(
    province: str = Path(min_length=1),
    service: FloodRiskService = Depends(get_flood_risk_service),
):
    return AlertsResponse(data=await service.get_alerts(province.strip()))


@router.get("/regional-summary/{province}", response_model=RegionalSummaryResponse)
async def regional_summary(
    province: str = Path(min_length=1),
    service: FloodRiskService = Depends(get_flood_risk_service),
):
    summary = await service.get_regional_summary(province.strip())
    if summary is None:
        raise HTTPException(status_code=404, detail="Regional summary not available")
    return RegionalSummaryResponse(data=summary)


@router.get("/sources/{source}", response_model=SourceAssessmentResponse)
async def source_assessment(
    source: SourceName,
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
    name: Optional[str] = None,
    province: Optional[str] = None,
    service: FloodRiskService = Depends(get_flood_risk_service),
):
    """Score one source (terrain vulnerability, infrastructure, ...) for a point."""
    location = Location(latitude=lat, longitude=lng, name=name, province=province)
    outcome = await service.assess_source(source, location)
    if outcome.is_degraded:
        raise HTTPException(
            status_code=404,
            detail=f"{source.capitalize()} data not available for this location",
        )
    return SourceAssessmentResponse(source=source, provider=outcome.provider, data=outcome.assessment)


@router.get("/hydro/{province}", response_model=HydroStationsResponse)
async def hydro_stations(
    province: str = Path(min_length=1),
    service: FloodRiskService = Depends(get_flood_risk_service),
):
    province = province.strip()
    stations = await service.get_hydro_stations(province)
    if stations is None:
        raise HTTPException(status_code=503, detail="Hydrological data unavailable")
    return HydroStationsResponse(
        data=stations,
        metadata=HydroMetadata(province=province, count=len(stations)),
    )
