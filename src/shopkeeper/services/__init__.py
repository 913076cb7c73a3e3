from .auth_service import AuthService
from .inventory_service import InventoryService
from .reporting_service import ReportingService
from .shop_service import ShopService
from .storefront_service import StorefrontService
from .transaction_service import TransactionService

__all__ = [
    "AuthService",
    "InventoryService",
    "ReportingService",
    "ShopService",
    "StorefrontService",
    "TransactionService",
]
