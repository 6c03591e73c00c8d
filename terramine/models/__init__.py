"""SQLAlchemy ORM models."""

from terramine.models.account import Account
from terramine.models.check_in import CheckIn
from terramine.models.property import Property

__all__ = [
    "Account",
    "CheckIn",
    "Property",
]
