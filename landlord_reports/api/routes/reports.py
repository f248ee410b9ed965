"""
Reports endpoints.

The same six reports are mounted twice:
  /reports/*          admins only
  /manager/reports/*  admins and managers (managers are scoped to their properties)

Handlers only parse query parameters and wrap the result in the
{"success": ..., "data"/"message": ...} envelope the dashboard expects.
"""
import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from landlord_reports.api.deps import get_db
from landlord_reports.core.auth import CurrentUser, Role, get_current_user, require_roles
from landlord_reports.core.errors import ReportError, classify_error
from landlord_reports.schemas.report import (
    ApiResponse,
    ArrearsOut,
    FinancialSummaryOut,
    LeaseExpirationsOut,
    OccupancyStatsOut,
    RentRollOut,
    VacancyOut,
)
from landlord_reports.services import reports as report_service
from landlord_reports.services.access import normalize_property_id

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to build report"


def property_id_param(
    property_id: Optional[str] = Query(None, alias="propertyId", description="Filter by property ID"),
) -> Optional[str]:
    """propertyId with "null"/"undefined" from the query string treated as absent."""
    return normalize_property_id(property_id)


def _respond(report: str, current_user: CurrentUser, build: Callable):
    """Run one report and wrap it; errors become {"success": false, "message": ...}."""
    logger.info("Report %s requested by %s (%s)", report, current_user.id, current_user.role.value)
    try:
        data = build()
    except Exception as exc:
        status_code = classify_error(exc)
        if status_code >= 500:
            logger.exception("Report %s failed for %s", report, current_user.id)
        else:
            logger.warning("Report %s rejected for %s: %s", report, current_user.id, exc)
        message = str(exc) if status_code < 500 or isinstance(exc, ReportError) else GENERIC_FAILURE
        return JSONResponse(status_code=status_code, content={"success": False, "message": message})
    return {"success": True, "data": data}


def _register_report_routes(router: APIRouter) -> APIRouter:
    @router.get("/financials", response_model=ApiResponse[FinancialSummaryOut])
    def financial_summary(
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user),
        start_date: Optional[str] = Query(None, alias="startDate", description="ISO date (YYYY-MM-DD)"),
        end_date: Optional[str] = Query(None, alias="endDate", description="ISO date (YYYY-MM-DD)"),
        property_id: Optional[str] = Depends(property_id_param),
    ):
        """Income vs paid expenses, with expenses broken down by category."""
        return _respond(
            "financials",
            current_user,
            lambda: report_service.get_financial_summary(
                db, current_user, start_date=start_date, end_date=end_date, property_id=property_id
            ),
        )

    @router.get("/occupancy", response_model=ApiResponse[OccupancyStatsOut])
    def occupancy_stats(
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user),
        property_id: Optional[str] = Depends(property_id_param),
    ):
        """Total / occupied / vacant units and occupancy rate."""
        return _respond(
            "occupancy",
            current_user,
            lambda: report_service.get_occupancy_stats(db, current_user, property_id=property_id),
        )

    @router.get("/rent-roll", response_model=ApiResponse[RentRollOut])
    def rent_roll(
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user),
        property_id: Optional[str] = Depends(property_id_param),
    ):
        """Active leases, newest first."""
        return _respond(
            "rent-roll",
            current_user,
            lambda: report_service.get_rent_roll(db, current_user, property_id=property_id),
        )

    @router.get("/arrears", response_model=ApiResponse[ArrearsOut])
    def arrears(
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user),
        property_id: Optional[str] = Depends(property_id_param),
    ):
        """Active leases without a payment covering the current month."""
        return _respond(
            "arrears",
            current_user,
            lambda: report_service.get_arrears_report(db, current_user, property_id=property_id),
        )

    @router.get("/lease-expirations", response_model=ApiResponse[LeaseExpirationsOut])
    def lease_expirations(
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user),
        property_id: Optional[str] = Depends(property_id_param),
        days: int = Query(report_service.DEFAULT_EXPIRY_DAYS, description="Look-ahead window in days"),
    ):
        """Active leases ending within the next `days` days."""
        return _respond(
            "lease-expirations",
            current_user,
            lambda: report_service.get_lease_expirations(
                db, current_user, property_id=property_id, days=days
            ),
        )

    @router.get("/vacancy", response_model=ApiResponse[VacancyOut])
    def vacancy(
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user),
        property_id: Optional[str] = Depends(property_id_param),
    ):
        """Available units, most recently changed first."""
        return _respond(
            "vacancy",
            current_user,
            lambda: report_service.get_vacancy_report(db, current_user, property_id=property_id),
        )

    return router


router = _register_report_routes(
    APIRouter(
        prefix="/reports",
        tags=["reports"],
        dependencies=[Depends(require_roles(Role.ADMIN))],
    )
)

manager_router = _register_report_routes(
    APIRouter(
        prefix="/manager/reports",
        tags=["manager-reports"],
        dependencies=[Depends(require_roles(Role.ADMIN, Role.MANAGER))],
    )
)
