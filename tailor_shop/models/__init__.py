"""Application models package."""

from tailor_shop.models.activity_log import ActivityLog
from tailor_shop.models.branch import Branch
from tailor_shop.models.customer import Customer
from tailor_shop.models.order import Order, Payment
from tailor_shop.models.user import User

__all__ = ["ActivityLog", "Branch", "Customer", "Order", "Payment", "User"]
