from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional
from urllib.parse import quote

from shopkeeper.config import DEFAULT_ORDER_MESSAGE
from shopkeeper.domain.errors import ApiError, BackendUnavailableError, NotFoundError
from shopkeeper.domain.models import Product, PublicProduct, Shop, Storefront
from shopkeeper.repositories.contracts import ShopRepository
from shopkeeper.services import aggregator

log = logging.getLogger("shopkeeper.storefront")

STOCK_LABELS = {
    aggregator.OUT_OF_STOCK: "Out of stock",
    aggregator.LOW_STOCK: "Low stock",
    aggregator.IN_STOCK: "In stock",
}


def stock_status(stock: int) -> str:
    return STOCK_LABELS[aggregator.stock_level(stock)]


def build_whatsapp_link(number: str, product: Product, template: str = DEFAULT_ORDER_MESSAGE) -> str:
    digits = "".join(ch for ch in number if ch.isdigit())
    message = template.format(name=product.name, price=product.selling_price)
    return f"https://wa.me/{digits}?text={quote(message)}"


def categories(storefront: Storefront) -> list[str]:
    seen: list[str] = []
    for item in storefront.products:
        cat = item.product.category
        if cat and cat not in seen:
            seen.append(cat)
    return seen


class StorefrontService:
    def __init__(self, repo: ShopRepository, order_message: str = DEFAULT_ORDER_MESSAGE):
        self.repo = repo
        self.order_message = order_message

    def browse(
        self,
        shop_id: str,
        category: Optional[str] = None,
        search: str = "",
        in_stock_only: bool = False,
    ) -> Storefront:
        storefront = self.repo.fetch_public_products(shop_id, category=category, in_stock_only=in_stock_only)
        needle = (search or "").strip().lower()

        products: list[PublicProduct] = []
        for item in storefront.products:
            if needle and needle not in item.product.name.lower():
                continue
            if not item.stock_status:
                item = replace(item, stock_status=stock_status(item.product.stock))
            products.append(item)
        return Storefront(shop=storefront.shop, products=products)

    def whatsapp_link(self, shop: Shop, product: Product) -> str:
        try:
            return self.repo.fetch_whatsapp_link(shop.id, product.id)
        except (BackendUnavailableError, ApiError, NotFoundError) as e:
            if not shop.whatsapp_number:
                raise
            log.warning("whatsapp_link_fallback shop=%s product=%s error=%s", shop.id, product.id, e)
            return build_whatsapp_link(shop.whatsapp_number, product, self.order_message)
