from __future__ import annotations

from dataclasses import dataclass

import requests

from shopkeeper.config import ApiSettings, get_api_settings
from shopkeeper.repositories.api_repo import ApiRepository
from shopkeeper.services.auth_service import AuthService
from shopkeeper.services.inventory_service import InventoryService
from shopkeeper.services.reporting_service import ReportingService
from shopkeeper.services.shop_service import ShopService
from shopkeeper.services.storefront_service import StorefrontService
from shopkeeper.services.transaction_service import TransactionService


@dataclass(frozen=True)
class AppContainer:
    settings: ApiSettings
    repo: ApiRepository
    auth: AuthService
    inventory: InventoryService
    transactions: TransactionService
    reporting: ReportingService
    shop: ShopService
    storefront: StorefrontService


def build_container(
    settings: ApiSettings | None = None,
    session: requests.Session | None = None,
    token: str | None = None,
) -> AppContainer:
    settings = settings or get_api_settings()
    repo = ApiRepository(settings.base_url, timeout=settings.timeout_seconds, session=session, token=token)

    return AppContainer(
        settings=settings,
        repo=repo,
        auth=AuthService(repo),
        inventory=InventoryService(repo),
        transactions=TransactionService(repo),
        reporting=ReportingService(repo, tz=settings.timezone),
        shop=ShopService(repo),
        storefront=StorefrontService(repo, order_message=settings.order_message),
    )
