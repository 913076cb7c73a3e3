from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

SALE = "Sale"
EXPENSE = "Expense"
WITHDRAWAL = "Withdrawal"
TRANSACTION_KINDS = (SALE, EXPENSE, WITHDRAWAL)
OUTGOING_KINDS = frozenset({EXPENSE, WITHDRAWAL})

SUPER_ADMIN = "SuperAdmin"
ADMIN = "Admin"
ROLES = (SUPER_ADMIN, ADMIN)


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    selling_price: float
    stock: int
    category: Optional[str] = None
    description: Optional[str] = None
    purchase_price: Optional[float] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    id: str
    kind: str
    amount: float
    created_at: datetime
    quantity: Optional[int] = None
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class DashboardSummary:
    total_sales: float = 0.0
    total_expenses: float = 0.0
    net_profit: float = 0.0
    total_items_sold: int = 0
    total_products: int = 0
    total_transactions: int = 0
    low_stock_products: tuple[Product, ...] = ()


@dataclass(frozen=True)
class DayPoint:
    day: date
    sales: float


@dataclass(frozen=True)
class WeekPoint:
    week_start: date
    sales: float
    expenses: float


@dataclass(frozen=True)
class ProductRanking:
    name: str
    quantity: int
    revenue: float


@dataclass(frozen=True)
class Shop:
    id: str
    name: str
    whatsapp_number: Optional[str] = None


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role: str
    shop_id: Optional[str] = None


@dataclass(frozen=True)
class AuthSession:
    token: str
    user: User


@dataclass(frozen=True)
class PublicProduct:
    product: Product
    stock_status: str
    whatsapp_link: Optional[str] = None


@dataclass(frozen=True)
class Storefront:
    shop: Shop
    products: list[PublicProduct] = field(default_factory=list)
