"""Report and dashboard schemas."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from tailor_shop.schemas.order import OrderRead, PaymentRead
from tailor_shop.services.payment_report import PaymentReport


class MethodTotalsRead(BaseModel):
    count: int
    total: Decimal


class DayBucketRead(BaseModel):
    date: date
    day_name: str
    total: Decimal
    count: int
    payments: list[PaymentRead]


class PaymentReportRead(BaseModel):
    start_date: date
    end_date: date
    total_amount: Decimal
    total_count: int
    by_method: dict[str, MethodTotalsRead]
    by_day: list[DayBucketRead]

    @classmethod
    def from_report(cls, report: PaymentReport) -> "PaymentReportRead":
        return cls(
            start_date=report.start_date,
            end_date=report.end_date,
            total_amount=report.total_amount,
            total_count=report.total_count,
            by_method={
                method: MethodTotalsRead(count=totals.count, total=totals.total)
                for method, totals in report.by_method.items()
            },
            by_day=[
                DayBucketRead(
                    date=bucket.date,
                    day_name=bucket.day_name,
                    total=bucket.total,
                    count=bucket.count,
                    payments=[PaymentRead.model_validate(payment) for payment in bucket.payments],
                )
                for bucket in report.by_day
            ],
        )


class UpcomingOrders(BaseModel):
    overdue: list[OrderRead] = []
    due_1_day: list[OrderRead] = []
    due_3_days: list[OrderRead] = []
    due_5_days: list[OrderRead] = []


class DashboardResponse(BaseModel):
    active_orders_count: int
    total_outstanding: Decimal
    total_received_this_week: Decimal
    upcoming_orders: UpcomingOrders
    branch: str


class AnalyticsOverview(BaseModel):
    total_revenue: Decimal
    total_orders: int
    active_orders: int
    total_outstanding: Decimal
    total_customers: int


class MonthlyRevenue(BaseModel):
    month: str
    month_key: str
    revenue: Decimal
    payment_count: int
    average_payment: Decimal


class CustomerValue(BaseModel):
    customer_id: int
    customer_name: str
    phone_number: str
    total_orders: int
    total_spent: Decimal
    average_order_value: Decimal


class MethodStat(BaseModel):
    method: str
    total: Decimal
    count: int


class StatusStat(BaseModel):
    status: str
    count: int


class AnalyticsResponse(BaseModel):
    overview: AnalyticsOverview
    monthly_revenue: list[MonthlyRevenue]
    top_customers: list[CustomerValue]
    payment_method_stats: list[MethodStat]
    order_status_stats: list[StatusStat]
    branch: str
