from __future__ import annotations

from datetime import date
from typing import Optional

import logging
from shopkeeper.domain.errors import InsufficientStockError, ValidationError
from shopkeeper.domain.models import SALE, TRANSACTION_KINDS, Product, Transaction
from shopkeeper.repositories.contracts import TransactionRepository

log = logging.getLogger("shopkeeper.sales")


def suggested_amount(product: Product, quantity: int) -> float:
    return float(product.selling_price) * int(quantity)


class TransactionService:
    def __init__(self, repo: TransactionRepository):
        self.repo = repo

    def list_transactions(
        self,
        kind: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Transaction]:
        if kind and kind not in TRANSACTION_KINDS:
            raise ValidationError(f"Unknown transaction type '{kind}'.")
        return self.repo.fetch_transactions(
            kind=kind or None,
            date_from=date_from.isoformat() if date_from else None,
            date_to=date_to.isoformat() if date_to else None,
        )

    def create_transaction(
        self,
        kind: str,
        amount: Optional[float] = None,
        product_id: Optional[str] = None,
        quantity: Optional[int] = None,
        comment: Optional[str] = None,
    ) -> Transaction:
        """
        Sale requires product_id and quantity; amount defaults to
        selling_price * quantity when omitted. Expense/Withdrawal need amount.
        """
        if kind not in TRANSACTION_KINDS:
            raise ValidationError(f"Unknown transaction type '{kind}'.")

        fields: dict = {"type": kind}

        if kind == SALE:
            if not product_id or quantity is None:
                raise ValidationError("Product and quantity are required for sales.")
            qty = int(quantity)
            if qty <= 0:
                raise ValidationError("Qty must be >= 1.")
            product = self.repo.get_product(product_id)
            if qty > int(product.stock):
                raise InsufficientStockError(f"Not enough stock for {product.name}. Available: {product.stock}")
            if amount is None:
                amount = suggested_amount(product, qty)
            fields["product_id"] = product_id
            fields["quantity"] = qty
        elif amount is None:
            raise ValidationError("Amount is required.")

        if float(amount) < 0:
            raise ValidationError("Amount must be >= 0.")
        fields["amount"] = float(amount)

        comment = (comment or "").strip()
        if comment:
            fields["comment"] = comment

        tx = self.repo.create_transaction(fields)
        log.info(
            "transaction_created id=%s type=%s amount=%.2f product=%s qty=%s",
            tx.id, kind, fields["amount"], product_id, fields.get("quantity"),
        )
        return tx
