"""Schema exports."""

from tailor_shop.schemas.activity_log import ActivityLogRead, BranchActivitySummaryRead, UserActivitySummaryRead
from tailor_shop.schemas.auth import LoginRequest, SessionUserResponse, TokenResponse
from tailor_shop.schemas.branch import BranchCreate, BranchRead, BranchUpdate
from tailor_shop.schemas.customer import CustomerCreate, CustomerDetail, CustomerRead, CustomerUpdate
from tailor_shop.schemas.order import InitialPayment, OrderCreate, OrderRead, OrderUpdate, PaymentRead
from tailor_shop.schemas.payment import PaymentCreate, PaymentListItem, PaymentRecorded
from tailor_shop.schemas.report import AnalyticsResponse, DashboardResponse, PaymentReportRead
from tailor_shop.schemas.user import UserCreate, UserRead, UserUpdate

__all__ = [
    "ActivityLogRead",
    "BranchActivitySummaryRead",
    "UserActivitySummaryRead",
    "LoginRequest",
    "SessionUserResponse",
    "TokenResponse",
    "BranchCreate",
    "BranchRead",
    "BranchUpdate",
    "CustomerCreate",
    "CustomerDetail",
    "CustomerRead",
    "CustomerUpdate",
    "InitialPayment",
    "OrderCreate",
    "OrderRead",
    "OrderUpdate",
    "PaymentRead",
    "PaymentCreate",
    "PaymentListItem",
    "PaymentRecorded",
    "AnalyticsResponse",
    "DashboardResponse",
    "PaymentReportRead",
    "UserCreate",
    "UserRead",
    "UserUpdate",
]
