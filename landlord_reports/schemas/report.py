from datetime import date
from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ReportModel(BaseModel):
    """Report rows are snake_case in Python and camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReportPeriod(ReportModel):
    """Echo of the requested window (raw query values)."""
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class FinancialSummaryOut(ReportModel):
    """Income vs paid expenses over a window."""
    total_income: float = 0.0
    total_expense: float = 0.0
    net_income: float = 0.0
    expenses_by_category: Dict[str, float] = {}
    period: ReportPeriod = ReportPeriod()


class OccupancyStatsOut(ReportModel):
    total_units: int = 0
    occupied_units: int = 0
    vacant_units: int = 0
    occupancy_rate: float = 0.0


class RentRollRow(ReportModel):
    """One active lease."""
    lease_id: str
    property: Optional[str] = None
    unit: Optional[str] = None
    tenant_name: Optional[str] = None
    lease_start: Optional[date] = None
    lease_end: Optional[date] = None
    monthly_rent: float = 0.0
    status: str


class ArrearsRow(ReportModel):
    """Active lease with no payment covering the current month."""
    lease_id: str
    property: Optional[str] = None
    unit: Optional[str] = None
    tenant_name: Optional[str] = None
    tenant_phone: Optional[str] = None
    monthly_rent: float = 0.0
    days_late: int = 0


class LeaseExpirationRow(ReportModel):
    lease_id: str
    property: Optional[str] = None
    unit: Optional[str] = None
    tenant_name: Optional[str] = None
    expiry_date: date
    days_remaining: int


class VacancyRow(ReportModel):
    local_id: str
    property: Optional[str] = None
    location: Optional[str] = None
    unit: Optional[str] = None
    size: Optional[float] = None
    price: float = 0.0
    status: str
    days_vacant: Optional[int] = None


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope: {"success": true, "data": ...}."""
    success: bool = True
    data: T


class ApiError(BaseModel):
    success: bool = False
    message: str


RentRollOut = List[RentRollRow]
ArrearsOut = List[ArrearsRow]
LeaseExpirationsOut = List[LeaseExpirationRow]
VacancyOut = List[VacancyRow]
