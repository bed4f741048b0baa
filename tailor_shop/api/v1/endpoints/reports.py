"""Dashboard, payment report and analytics endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from tailor_shop.core.security import get_session_user
from tailor_shop.db.session import get_db
from tailor_shop.models import Branch
from tailor_shop.schemas.order import OrderRead
from tailor_shop.schemas.report import (
    AnalyticsOverview,
    AnalyticsResponse,
    CustomerValue,
    DashboardResponse,
    MethodStat,
    MonthlyRevenue,
    PaymentReportRead,
    StatusStat,
    UpcomingOrders,
)
from tailor_shop.services.branch_access import BranchScope, Scoped, SessionUser, resolve_branch_id
from tailor_shop.services.payment_report import PaymentReport
from tailor_shop.services.report_exports import render_payments_csv, render_payments_pdf, report_filename
from tailor_shop.services.reporting_service import analytics, dashboard, payment_report, week_bounds
from tailor_shop.services.security_guards import branch_scope
from tailor_shop.services.urgency import Urgency
from tailor_shop.utils.time import local_now

router: APIRouter = APIRouter()

ALL_BRANCHES = "All Branches"


def _scope_and_label(db: Session, user: SessionUser, branch_id: int | None) -> tuple[BranchScope, str]:
    """Admins may narrow a report to one branch; everyone else gets their own."""
    scope = branch_scope(user)
    target = resolve_branch_id(user, branch_id)
    if target is None:
        return scope, ALL_BRANCHES
    branch = db.get(Branch, target)
    if branch is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Branch not found")
    return Scoped(target), branch.name


def _resolve_period(start_date: date | None, end_date: date | None, week: str | None) -> tuple[date, date]:
    if start_date is not None or end_date is not None:
        if start_date is None or end_date is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Both start_date and end_date are required")
        return start_date, end_date
    try:
        return week_bounds(week or "current")
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _build_report(
    db: Session,
    user: SessionUser,
    branch_id: int | None,
    start_date: date | None,
    end_date: date | None,
    week: str | None,
) -> tuple[PaymentReport, str]:
    scope, label = _scope_and_label(db, user, branch_id)
    start, end = _resolve_period(start_date, end_date, week)
    try:
        return payment_report(db, scope, start, end), label
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    branch_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> DashboardResponse:
    scope, label = _scope_and_label(db, current_user, branch_id)
    summary = dashboard(db, scope)

    def _views(tier: Urgency) -> list[OrderRead]:
        return [OrderRead.from_enriched(view) for view in summary.upcoming.get(tier, [])]

    return DashboardResponse(
        active_orders_count=summary.active_orders_count,
        total_outstanding=summary.total_outstanding,
        total_received_this_week=summary.total_received_this_week,
        upcoming_orders=UpcomingOrders(
            overdue=_views(Urgency.OVERDUE),
            due_1_day=_views(Urgency.WARNING_1),
            due_3_days=_views(Urgency.WARNING_3),
            due_5_days=_views(Urgency.WARNING_5),
        ),
        branch=label,
    )


@router.get("/weekly-payments", response_model=PaymentReportRead)
def get_weekly_payments(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    week: str | None = Query(default=None),
    branch_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> PaymentReportRead:
    report, _ = _build_report(db, current_user, branch_id, start_date, end_date, week)
    return PaymentReportRead.from_report(report)


@router.get("/weekly-payments.csv")
def get_weekly_payments_csv(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    week: str | None = Query(default=None),
    branch_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> Response:
    report, _ = _build_report(db, current_user, branch_id, start_date, end_date, week)
    return Response(
        content=render_payments_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{report_filename(report, "csv")}"'},
    )


@router.get("/weekly-payments.pdf")
def get_weekly_payments_pdf(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    week: str | None = Query(default=None),
    branch_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> Response:
    report, label = _build_report(db, current_user, branch_id, start_date, end_date, week)
    payload = render_payments_pdf(
        report,
        {"branch": label, "generated_at": local_now().strftime("%Y-%m-%d %H:%M")},
    )
    return Response(
        content=payload,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report_filename(report, "pdf")}"'},
    )


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(
    branch_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_session_user),
) -> AnalyticsResponse:
    scope, label = _scope_and_label(db, current_user, branch_id)
    result = analytics(db, scope)
    return AnalyticsResponse(
        overview=AnalyticsOverview(**result.overview),
        monthly_revenue=[MonthlyRevenue(**row) for row in result.monthly_revenue],
        top_customers=[CustomerValue(**row) for row in result.top_customers],
        payment_method_stats=[MethodStat(**row) for row in result.payment_method_stats],
        order_status_stats=[StatusStat(**row) for row in result.order_status_stats],
        branch=label,
    )
