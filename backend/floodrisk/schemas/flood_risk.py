from typing import Any, List

from pydantic import BaseModel, Field

from floodrisk.config.settings import settings
from floodrisk.models.alert import AlertReport
from floodrisk.models.assessment import (
    FloodRiskAssessment,
    Location,
    RegionalRiskSummary,
    SourceAssessment,
    SourceName,
)
from floodrisk.models.sources import HydroStation


class LocationRequest(Location):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "latitude": 16.0544,
                    "longitude": 108.2022,
                    "name": "Da Nang",
                    "province": "Da Nang",
                    "district": "Hai Chau",
                },
                {
                    "latitude": 10.7769,
                    "longitude": 106.7009,
                    "name": "Ho Chi Minh City",
                    "province": "Ho Chi Minh",
                },
            ]
        }
    }


class BatchAssessRequest(BaseModel):
    locations: List[LocationRequest] = Field(min_length=1, max_length=settings.BATCH_MAX_LOCATIONS)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "locations": [
                        {"latitude": 16.0544, "longitude": 108.2022, "name": "Da Nang", "province": "Da Nang"},
                        {"latitude": 16.4637, "longitude": 107.5909, "name": "Hue", "province": "Thua Thien Hue"},
                    ]
                }
            ]
        }
    }


class AssessResponse(BaseModel):
    success: bool = True
    data: FloodRiskAssessment


class BatchSummary(BaseModel):
    total_requested: int
    total_assessed: int
    success_rate: int


class BatchAssessResponse(BaseModel):
    success: bool = True
    data: List[FloodRiskAssessment] = []
    summary: BatchSummary


class AlertsResponse(BaseModel):
    success: bool = True
    data: AlertReport


class RegionalSummaryResponse(BaseModel):
    success: bool = True
    data: RegionalRiskSummary


class SourceAssessmentResponse(BaseModel):
    success: bool = True
    source: SourceName
    provider: str
    data: SourceAssessment


class HydroMetadata(BaseModel):
    province: str
    count: int
    source: str = "Vietnam Hydro-Meteorological Service"


class HydroStationsResponse(BaseModel):
    success: bool = True
    data: List[HydroStation] = []
    metadata: HydroMetadata


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: List[Any] = []
