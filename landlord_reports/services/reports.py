"""
Report computers.

Each report takes the session, the caller and its own parameters, resolves
the caller's scope itself and reads everything it needs. Nothing is cached
or shared between calls. Errors are not caught here.
"""
import logging
import math
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, aliased, contains_eager, selectinload

from landlord_reports.core.auth import CurrentUser
from landlord_reports.core.errors import InvalidReportParameter
from landlord_reports.models.expense import Expense
from landlord_reports.models.lease import Lease
from landlord_reports.models.local import Local
from landlord_reports.models.payment import Payment
from landlord_reports.models.property import Property
from landlord_reports.models.tenant import Tenant
from landlord_reports.schemas.report import (
    ArrearsRow,
    FinancialSummaryOut,
    LeaseExpirationRow,
    OccupancyStatsOut,
    RentRollRow,
    ReportPeriod,
    VacancyRow,
)
from landlord_reports.services.access import ReportScope, resolve_scope

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)
UNCATEGORIZED = "Uncategorized"
DEFAULT_EXPIRY_DAYS = 90


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def _to_local_naive(dt: datetime) -> datetime:
    """Reports work in naive local time; aware values from the store are converted."""
    if dt.tzinfo is not None:
        return dt.astimezone().replace(tzinfo=None)
    return dt


def _resolve_now(now: Optional[datetime]) -> datetime:
    return _to_local_naive(now) if now is not None else datetime.now()


def _parse_iso_date(value: str, field: str) -> date:
    """Calendar date the caller wrote; a time or offset part is ignored, not converted."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (ValueError, TypeError):
        raise InvalidReportParameter(f"Invalid {field}: {value!r} (expected YYYY-MM-DD)")
    return parsed.date()


def parse_date_window(
    start_date: Optional[str], end_date: Optional[str]
) -> Optional[Tuple[datetime, datetime]]:
    """
    Inclusive [start 00:00:00, end 23:59:59.999999] window.

    Returns None (no date filter, all-time) unless both bounds are given.
    The end is pushed to the last instant of its day so a same-day range
    covers the whole day.
    """
    if not start_date or not end_date:
        return None
    start = datetime.combine(_parse_iso_date(start_date, "startDate"), time.min)
    end = datetime.combine(_parse_iso_date(end_date, "endDate"), time.max)
    return start, end


def month_bounds(day: date) -> Tuple[date, date]:
    """First and last calendar day of the month containing `day`."""
    first = day.replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    return first, next_first - ONE_DAY


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _money(value) -> float:
    """Numeric column to float; NULL counts as 0."""
    return float(value) if value is not None else 0.0


def _percent(part: int, whole: int) -> float:
    """part/whole as a percentage with one decimal, halves rounded up (1 of 16 -> 6.3)."""
    if whole <= 0:
        return 0.0
    pct = Decimal(part * 100) / Decimal(whole)
    return float(pct.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _active_leases_query(db: Session, scope: ReportScope):
    """Active leases with their local, property and (optional) tenant, narrowed by scope."""
    q = (
        db.query(Lease)
        .join(Lease.local)
        .join(Local.property)
        .outerjoin(Tenant, Lease.tenant_id == Tenant.id)
        .options(
            contains_eager(Lease.local).contains_eager(Local.property),
            contains_eager(Lease.tenant),
        )
        .filter(Lease.status == "active")
    )
    return scope.filter_properties(q)


def _lease_labels(lease: Lease) -> dict:
    """Display fields for a lease row; missing relations degrade to None."""
    local = lease.local
    prop = local.property if local is not None else None
    tenant = lease.tenant
    return {
        "lease_id": lease.id,
        "property": prop.name if prop is not None else None,
        "unit": local.reference_code if local is not None else None,
        "tenant_name": tenant.name if tenant is not None else None,
    }


# ---------------------------------------------------------------------------
# Financial summary
# ---------------------------------------------------------------------------

def _total_income(db: Session, scope: ReportScope, window) -> float:
    q = db.query(func.coalesce(func.sum(Payment.amount), 0)).select_from(Payment)
    if window is not None:
        q = q.filter(Payment.date.between(*window))
    if scope.property_id is not None:
        # already ownership-checked for managers
        q = q.filter(Payment.property_id == scope.property_id)
    if scope.manager_id is not None:
        # the denormalized property_id may be stale; ownership goes through the lease chain
        q = (
            q.join(Lease, Payment.lease_id == Lease.id)
            .join(Local, Lease.local_id == Local.id)
            .join(Property, Local.property_id == Property.id)
            .filter(Property.manager_id == scope.manager_id)
        )
    return _money(q.scalar())


def _expenses_by_category(db: Session, scope: ReportScope, window) -> Dict[str, float]:
    """Paid expenses (amount + VAT) grouped by category."""
    direct_property = aliased(Property)
    local_property = aliased(Property)
    line_total = func.coalesce(Expense.amount, 0) + func.coalesce(Expense.vat_amount, 0)

    q = (
        db.query(Expense.category, func.sum(line_total))
        .select_from(Expense)
        .outerjoin(Local, Expense.local_id == Local.id)
        .outerjoin(direct_property, Expense.property_id == direct_property.id)
        .outerjoin(local_property, Local.property_id == local_property.id)
        .filter(Expense.payment_status == "paid")
    )
    if window is not None:
        q = q.filter(Expense.date.between(*window))
    if scope.property_id is not None:
        q = q.filter(
            or_(Expense.property_id == scope.property_id, Local.property_id == scope.property_id)
        )
    if scope.manager_id is not None:
        # either attachment path may grant access
        q = q.filter(
            or_(
                direct_property.manager_id == scope.manager_id,
                local_property.manager_id == scope.manager_id,
            )
        )

    buckets: Dict[str, float] = {}
    for category, amount in q.group_by(Expense.category).all():
        label = category or UNCATEGORIZED
        buckets[label] = buckets.get(label, 0.0) + _money(amount)
    return buckets


def get_financial_summary(
    db: Session,
    current_user: CurrentUser,
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    property_id: Optional[str] = None,
) -> FinancialSummaryOut:
    """
    Total income (payments by transaction date) vs total paid expenses.

    Only paid expenses count; the figures are cash-flow, not accrual.
    """
    window = parse_date_window(start_date, end_date)
    scope = resolve_scope(db, current_user, property_id)

    total_income = _total_income(db, scope, window)
    expenses_by_category = _expenses_by_category(db, scope, window)
    total_expense = sum(expenses_by_category.values())

    logger.debug(
        "Financial summary for %s: income=%s expense=%s window=%s",
        current_user.id, total_income, total_expense, window,
    )
    return FinancialSummaryOut(
        total_income=total_income,
        total_expense=total_expense,
        net_income=total_income - total_expense,
        expenses_by_category=expenses_by_category,
        period=ReportPeriod(start_date=start_date, end_date=end_date),
    )


# ---------------------------------------------------------------------------
# Occupancy
# ---------------------------------------------------------------------------

def get_occupancy_stats(
    db: Session, current_user: CurrentUser, *, property_id: Optional[str] = None
) -> OccupancyStatsOut:
    """Unit counts; "vacant" here means anything not occupied (maintenance included)."""
    scope = resolve_scope(db, current_user, property_id)

    locals_q = scope.filter_properties(db.query(Local).join(Local.property))
    total_units = locals_q.count()
    occupied_units = locals_q.filter(Local.status == "occupied").count()
    occupancy_rate = _percent(occupied_units, total_units)

    return OccupancyStatsOut(
        total_units=total_units,
        occupied_units=occupied_units,
        vacant_units=total_units - occupied_units,
        occupancy_rate=occupancy_rate,
    )


# ---------------------------------------------------------------------------
# Rent roll
# ---------------------------------------------------------------------------

def get_rent_roll(
    db: Session, current_user: CurrentUser, *, property_id: Optional[str] = None
) -> List[RentRollRow]:
    """Active leases, most recently created first."""
    scope = resolve_scope(db, current_user, property_id)

    leases = _active_leases_query(db, scope).order_by(Lease.created_at.desc()).all()
    return [
        RentRollRow(
            **_lease_labels(lease),
            lease_start=lease.start_date,
            lease_end=lease.end_date,
            monthly_rent=_money(lease.lease_amount),
            status=lease.status,
        )
        for lease in leases
    ]


# ---------------------------------------------------------------------------
# Arrears
# ---------------------------------------------------------------------------

def get_arrears_report(
    db: Session,
    current_user: CurrentUser,
    *,
    property_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[ArrearsRow]:
    """
    Active leases with no payment whose coverage period overlaps the current month.

    Payments for other months do not matter. daysLate counts whole days
    since the 1st of the month.
    """
    scope = resolve_scope(db, current_user, property_id)
    now = _resolve_now(now)
    start_of_month, end_of_month = month_bounds(now.date())

    covering_payments = Lease.payments.and_(
        Payment.start_date <= end_of_month,
        Payment.end_date >= start_of_month,
    )
    leases = (
        _active_leases_query(db, scope)
        .options(selectinload(covering_payments))
        .execution_options(populate_existing=True)
        .all()
    )

    days_late = max(0, (now - datetime.combine(start_of_month, time.min)) // ONE_DAY)
    arrears = [
        ArrearsRow(
            **_lease_labels(lease),
            tenant_phone=lease.tenant.phone if lease.tenant is not None else None,
            monthly_rent=_money(lease.lease_amount),
            days_late=days_late,
        )
        for lease in leases
        if not lease.payments
    ]
    logger.debug("Arrears for %s: %d of %d active leases", current_user.id, len(arrears), len(leases))
    return arrears


# ---------------------------------------------------------------------------
# Lease expirations
# ---------------------------------------------------------------------------

def get_lease_expirations(
    db: Session,
    current_user: CurrentUser,
    *,
    property_id: Optional[str] = None,
    days: int = DEFAULT_EXPIRY_DAYS,
    now: Optional[datetime] = None,
) -> List[LeaseExpirationRow]:
    """Active leases ending within [today, today + days], soonest first."""
    if days is None:
        days = DEFAULT_EXPIRY_DAYS
    if days < 0:
        raise InvalidReportParameter(f"Invalid days: {days} (must be zero or more)")

    scope = resolve_scope(db, current_user, property_id)
    now = _resolve_now(now)
    today = now.date()

    leases = (
        _active_leases_query(db, scope)
        .filter(Lease.end_date.between(today, today + timedelta(days=days)))
        .order_by(Lease.end_date.asc())
        .all()
    )
    return [
        LeaseExpirationRow(
            **_lease_labels(lease),
            expiry_date=lease.end_date,
            # ceiling: a lease ending later today is 0, never negative
            days_remaining=math.ceil((datetime.combine(lease.end_date, time.min) - now) / ONE_DAY),
        )
        for lease in leases
    ]


# ---------------------------------------------------------------------------
# Vacancy
# ---------------------------------------------------------------------------

def _days_since(moment: Optional[datetime], now: datetime) -> Optional[int]:
    if moment is None:
        return None
    return (now - _to_local_naive(moment)) // ONE_DAY


def get_vacancy_report(
    db: Session,
    current_user: CurrentUser,
    *,
    property_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[VacancyRow]:
    """
    Units with status "available" (maintenance units are not vacancies),
    most recently changed first.

    daysVacant is measured from the unit's updated_at, which is the last
    change to any of its fields, not necessarily the move-out.
    """
    scope = resolve_scope(db, current_user, property_id)
    now = _resolve_now(now)

    q = (
        db.query(Local)
        .join(Local.property)
        .options(contains_eager(Local.property))
        .filter(Local.status == "available")
    )
    vacancies = scope.filter_properties(q).order_by(Local.updated_at.desc()).all()

    rows: List[VacancyRow] = []
    for local in vacancies:
        prop = local.property
        rows.append(
            VacancyRow(
                local_id=local.id,
                property=prop.name if prop is not None else None,
                location=prop.location if prop is not None else None,
                unit=local.reference_code,
                size=float(local.size_m2) if local.size_m2 is not None else None,
                price=_money(local.rent_price),
                status=local.status,
                days_vacant=_days_since(local.updated_at, now),
            )
        )
    return rows
