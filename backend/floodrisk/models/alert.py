from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel

AlertSeverity = Literal["low", "medium", "high"]

SEVERITY_RANK: dict[str, int] = {"high": 3, "medium": 2, "low": 1}


class Alert(BaseModel):
    type: str
    severity: AlertSeverity
    location: str
    message: str
    timestamp: datetime
    recommended_actions: List[str] = []

    model_config = {"frozen": True}


class AlertSummary(BaseModel):
    total_alerts: int
    high_severity_count: int
    stations_monitored: int = 0
    last_updated: datetime


class AlertReport(BaseModel):
    alerts: List[Alert] = []
    summary: AlertSummary
