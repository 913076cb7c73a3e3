from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date
from pathlib import Path

from shopkeeper.application.container import AppContainer, build_container
from shopkeeper.config import get_app_paths
from shopkeeper.domain.errors import AppError
from shopkeeper.logging_config import setup_logging
from shopkeeper.services import aggregator
from shopkeeper.services.reporting_service import PERIODS, day_label

log = logging.getLogger("shopkeeper.cli")


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD.") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shopkeeper", description="Shop reports from the retail backend.")
    parser.add_argument("--email", help="Login email (or set SHOPKEEPER_TOKEN).")
    parser.add_argument("--password", help="Login password.")
    sub = parser.add_subparsers(dest="command", required=True)

    dash = sub.add_parser("dashboard", help="Totals, daily and weekly series, top products.")
    dash.add_argument("--period", choices=PERIODS, default="30j")
    dash.add_argument("--from", dest="date_from", type=_parse_date)
    dash.add_argument("--to", dest="date_to", type=_parse_date)
    dash.add_argument("--export", type=Path, help="Write the report to an .xlsx file.")

    sub.add_parser("low-stock", help="Products with fewer than 5 units.")

    shop = sub.add_parser("storefront", help="Public catalog of a shop.")
    shop.add_argument("shop_id")
    shop.add_argument("--category")
    shop.add_argument("--search", default="")
    shop.add_argument("--in-stock-only", action="store_true")

    return parser


def _authenticate(container: AppContainer, args: argparse.Namespace) -> None:
    if container.repo.token:
        return
    if not args.email or not args.password:
        raise AppError("Login required: pass --email/--password or set SHOPKEEPER_TOKEN.")
    container.auth.login(args.email, args.password)


def _cmd_dashboard(container: AppContainer, args: argparse.Namespace) -> None:
    period = "custom" if (args.date_from or args.date_to) else args.period
    report = container.reporting.dashboard(period, custom_from=args.date_from, custom_to=args.date_to)
    s = report.summary

    print(f"Total sales:     {s.total_sales:,.2f}")
    print(f"Total expenses:  {s.total_expenses:,.2f}")
    print(f"Net profit:      {s.net_profit:,.2f}")
    print(f"Items sold:      {s.total_items_sold}")
    print(f"Products:        {s.total_products}")
    print(f"Transactions:    {s.total_transactions}")

    if report.sales_by_day:
        print("\nSales by day")
        for p in report.sales_by_day:
            print(f"  {day_label(p.day)}  {p.sales:>12,.2f}")
    if report.sales_vs_expenses:
        print("\nWeek of       sales      expenses")
        for w in report.sales_vs_expenses:
            print(f"  {day_label(w.week_start)}  {w.sales:>10,.2f}  {w.expenses:>10,.2f}")
    if report.top_products:
        print("\nTop products")
        for r in report.top_products:
            print(f"  {r.name:<30} {r.quantity:>5}  {r.revenue:>12,.2f}")

    if args.export:
        container.reporting.export_dashboard_excel(str(args.export), report)
        print(f"\nExported to {args.export}")


def _cmd_low_stock(container: AppContainer, args: argparse.Namespace) -> None:
    products = container.inventory.low_stock()
    if not products:
        print("No product below 5 units.")
        return
    for p in products:
        print(f"[{aggregator.stock_level(p.stock):>3}] {p.name:<30} {p.stock:>3} units  {p.category or ''}")


def _cmd_storefront(container: AppContainer, args: argparse.Namespace) -> None:
    storefront = container.storefront.browse(
        args.shop_id, category=args.category, search=args.search, in_stock_only=args.in_stock_only
    )
    print(storefront.shop.name)
    for item in storefront.products:
        p = item.product
        print(f"  {p.name:<30} {p.selling_price:>10,.2f}  {item.stock_status}")


COMMANDS = {
    "dashboard": (_cmd_dashboard, True),
    "low-stock": (_cmd_low_stock, True),
    "storefront": (_cmd_storefront, False),
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    paths = get_app_paths()
    setup_logging(paths.logs_dir, level=logging.INFO)

    try:
        container = build_container(token=os.environ.get("SHOPKEEPER_TOKEN") or None)
        handler, needs_auth = COMMANDS[args.command]
        if needs_auth:
            _authenticate(container, args)
        handler(container, args)
    except AppError as e:
        log.error("command_failed command=%s error=%s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
