from .models import (
    DashboardSummary,
    DayPoint,
    Product,
    ProductRanking,
    Shop,
    Transaction,
    User,
    WeekPoint,
)
from .errors import (
    ApiError,
    AuthorizationError,
    BackendUnavailableError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "DashboardSummary",
    "DayPoint",
    "Product",
    "ProductRanking",
    "Shop",
    "Transaction",
    "User",
    "WeekPoint",
    "ApiError",
    "AuthorizationError",
    "BackendUnavailableError",
    "InsufficientStockError",
    "NotFoundError",
    "ValidationError",
]
