from __future__ import annotations

import logging
import re

from shopkeeper.domain.errors import ValidationError
from shopkeeper.domain.models import Shop
from shopkeeper.repositories.contracts import ShopRepository

log = logging.getLogger("shopkeeper.shop")

_SEPARATORS_RE = re.compile(r"[\s\-().]")
_WHATSAPP_RE = re.compile(r"^\+?\d{8,15}$")


def normalize_whatsapp_number(number: str) -> str:
    cleaned = _SEPARATORS_RE.sub("", number or "")
    if not _WHATSAPP_RE.match(cleaned):
        raise ValidationError("WhatsApp number must contain 8 to 15 digits, optionally prefixed with '+'.")
    return cleaned


class ShopService:
    def __init__(self, repo: ShopRepository):
        self.repo = repo

    def get_shop(self) -> Shop:
        return self.repo.get_shop()

    def update_whatsapp(self, number: str) -> Shop:
        cleaned = normalize_whatsapp_number(number)
        shop = self.repo.update_whatsapp(cleaned)
        log.info("whatsapp_updated shop=%s", shop.id)
        return shop

    def public_url(self, frontend_base_url: str) -> str:
        shop = self.repo.get_shop()
        return f"{frontend_base_url.rstrip('/')}/shop/{shop.id}"
