"""Analytics drilldown schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class DetailRecordModel(BaseModel):
    id: str
    name: str
    date: str
    rawDate: datetime
    distance: float
    duration: float
    cost: float
    cylinders: int
    status: str


class DrilldownResponse(BaseModel):
    type: str
    title: str
    records: List[DetailRecordModel]
    error: Optional[str] = None
