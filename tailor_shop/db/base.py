"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from tailor_shop.models import activity_log as _activity_log  # noqa: E402,F401
from tailor_shop.models import branch as _branch  # noqa: E402,F401
from tailor_shop.models import customer as _customer  # noqa: E402,F401
from tailor_shop.models import order as _order  # noqa: E402,F401
from tailor_shop.models import user as _user  # noqa: E402,F401
