import sys
from datetime import datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def make_tx(tx_id, kind, amount, created_at, quantity=None, product_name=None, product_id=None):
    from shopkeeper.domain.models import Transaction

    if isinstance(created_at, str):
        created_at = datetime.fromisoformat(created_at)
    return Transaction(
        id=str(tx_id),
        kind=kind,
        amount=amount,
        created_at=created_at,
        quantity=quantity,
        product_id=product_id,
        product_name=product_name,
    )


def make_product(product_id, name, stock, selling_price=10.0, category=None, purchase_price=None):
    from shopkeeper.domain.models import Product

    return Product(
        id=str(product_id),
        name=name,
        selling_price=selling_price,
        stock=stock,
        category=category,
        purchase_price=purchase_price,
    )


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    """Records requests and replays queued responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append(
            {"method": method, "url": url, "params": params, "json": json, "headers": headers, "timeout": timeout}
        )
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeBackend:
    """In-memory stand-in for ApiRepository used by service tests."""

    def __init__(self, products=None, transactions=None, summary=None):
        self.products = {p.id: p for p in (products or [])}
        self.transactions = list(transactions or [])
        self.summary = summary
        self.created = []
        self.updated = []
        self.deleted = []
        self.transaction_queries = []

    def fetch_products(self, category=None, search=None):
        items = list(self.products.values())
        if category:
            items = [p for p in items if p.category == category]
        if search:
            items = [p for p in items if search.lower() in p.name.lower()]
        return items

    def get_product(self, product_id):
        from shopkeeper.domain.errors import NotFoundError

        if product_id not in self.products:
            raise NotFoundError("Product not found.")
        return self.products[product_id]

    def create_product(self, fields):
        self.created.append(fields)
        pid = str(len(self.products) + 1)
        product = make_product(pid, fields["name"], fields["stock"], fields["selling_price"], fields.get("category"))
        self.products[pid] = product
        return product

    def update_product(self, product_id, fields):
        from dataclasses import replace

        self.updated.append((product_id, fields))
        product = replace(self.products[product_id], **fields)
        self.products[product_id] = product
        return product

    def delete_product(self, product_id):
        self.deleted.append(product_id)
        self.products.pop(product_id, None)

    def fetch_transactions(self, kind=None, date_from=None, date_to=None):
        self.transaction_queries.append((kind, date_from, date_to))
        return [t for t in self.transactions if kind is None or t.kind == kind]

    def create_transaction(self, fields):
        self.created.append(fields)
        tx = make_tx(
            len(self.transactions) + 1,
            fields["type"],
            fields["amount"],
            "2024-03-04T10:00:00",
            quantity=fields.get("quantity"),
            product_id=fields.get("product_id"),
        )
        self.transactions.append(tx)
        return tx

    def fetch_dashboard_summary(self):
        from shopkeeper.domain.models import DashboardSummary

        return self.summary or DashboardSummary()
