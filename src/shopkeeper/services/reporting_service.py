from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta, tzinfo
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

from shopkeeper.domain.errors import ValidationError
from shopkeeper.domain.models import DashboardSummary, DayPoint, Product, ProductRanking, WeekPoint
from shopkeeper.repositories.contracts import ReportRepository
from shopkeeper.services import aggregator

log = logging.getLogger("shopkeeper.reports")

PERIOD_DAYS = {"7j": 7, "30j": 30, "90j": 90}
CUSTOM_PERIOD = "custom"
PERIODS = (*PERIOD_DAYS, CUSTOM_PERIOD)


@dataclass(frozen=True)
class DashboardReport:
    summary: DashboardSummary
    date_from: Optional[date]
    date_to: Optional[date]
    sales_by_day: list[DayPoint] = field(default_factory=list)
    sales_vs_expenses: list[WeekPoint] = field(default_factory=list)
    top_products: list[ProductRanking] = field(default_factory=list)
    low_stock: list[Product] = field(default_factory=list)


def resolve_period(
    period: str,
    today: date,
    custom_from: Optional[date] = None,
    custom_to: Optional[date] = None,
) -> Optional[tuple[date, date]]:
    """Date window for a dashboard period.

    Returns None for an incomplete custom range; the caller should skip the
    fetch in that case rather than query an open-ended window.
    """
    if period == CUSTOM_PERIOD:
        if custom_from is None or custom_to is None:
            return None
        return custom_from, custom_to
    days = PERIOD_DAYS.get(period)
    if days is None:
        raise ValidationError(f"Unknown period '{period}'. Expected one of: {', '.join(PERIODS)}.")
    return today - timedelta(days=days), today


def day_label(d: date) -> str:
    return d.strftime("%d/%m")


class ReportingService:
    def __init__(self, repo: ReportRepository, tz: tzinfo | None = None):
        self.repo = repo
        self.tz = tz

    def local_summary(self) -> DashboardSummary:
        transactions = self.repo.fetch_transactions()
        products = self.repo.fetch_products()
        return aggregator.summarize(transactions, products)

    def dashboard(
        self,
        period: str = "30j",
        today: Optional[date] = None,
        custom_from: Optional[date] = None,
        custom_to: Optional[date] = None,
    ) -> DashboardReport:
        window = resolve_period(period, today or date.today(), custom_from, custom_to)
        summary = self.repo.fetch_dashboard_summary()

        if window is None:
            log.info("dashboard_skipped_series period=%s reason=incomplete_range", period)
            return DashboardReport(
                summary=summary,
                date_from=None,
                date_to=None,
                low_stock=aggregator.select_low_stock(summary.low_stock_products),
            )

        start, end = window
        transactions = self.repo.fetch_transactions(date_from=start.isoformat(), date_to=end.isoformat())
        report = DashboardReport(
            summary=summary,
            date_from=start,
            date_to=end,
            sales_by_day=aggregator.sales_by_day(transactions, start, end, tz=self.tz),
            sales_vs_expenses=aggregator.sales_vs_expenses_by_week(transactions, tz=self.tz),
            top_products=aggregator.top_products(transactions),
            low_stock=aggregator.select_low_stock(summary.low_stock_products),
        )
        log.info(
            "dashboard_built period=%s from=%s to=%s transactions=%s",
            period, start.isoformat(), end.isoformat(), len(transactions),
        )
        return report

    def export_dashboard_excel(self, path: str, report: DashboardReport) -> None:
        wb = Workbook()

        def money(cell):
            cell.number_format = "#,##0.00"

        def bold_row(ws, r):
            for c in ws[r]:
                c.font = Font(bold=True)

        def set_widths(ws, widths: dict[str, int]):
            for col, w in widths.items():
                ws.column_dimensions[col].width = w

        def add_table(ws, name: str, end_col: int):
            if ws.max_row < 2:
                return
            ref = f"A1:{get_column_letter(end_col)}{ws.max_row}"
            tab = Table(displayName=name, ref=ref)
            tab.tableStyleInfo = TableStyleInfo(
                name="TableStyleMedium9",
                showRowStripes=True,
                showColumnStripes=False,
            )
            ws.add_table(tab)

        s = report.summary

        # -------- 1) Summary --------
        ws = wb.active
        ws.title = "Summary"
        ws["A1"] = "Summary"
        ws["A1"].font = Font(bold=True, size=14)

        ws["A3"] = "Window"
        if report.date_from and report.date_to:
            ws["B3"] = f"{report.date_from.isoformat()}  ->  {report.date_to.isoformat()}"
        else:
            ws["B3"] = "all time"

        rows = [
            ("Total sales", float(s.total_sales), "money"),
            ("Total expenses", float(s.total_expenses), "money"),
            ("Net profit", float(s.net_profit), "money"),
            ("Items sold", int(s.total_items_sold), "int"),
            ("Products", int(s.total_products), "int"),
            ("Transactions", int(s.total_transactions), "int"),
        ]
        for i, (label, val, kind) in enumerate(rows):
            r = 5 + i
            ws[f"A{r}"] = label
            ws[f"B{r}"] = val
            if kind == "money":
                money(ws[f"B{r}"])
        set_widths(ws, {"A": 22, "B": 30})

        # -------- 2) Sales by day --------
        ws2 = wb.create_sheet("Sales by day")
        ws2.append(["Date", "Label", "Sales"])
        bold_row(ws2, 1)
        for p in report.sales_by_day:
            ws2.append([p.day, day_label(p.day), float(p.sales)])
            ws2.cell(row=ws2.max_row, column=1).number_format = "yyyy-mm-dd"
            money(ws2.cell(row=ws2.max_row, column=3))
        set_widths(ws2, {"A": 14, "B": 10, "C": 16})
        add_table(ws2, "SalesByDay", 3)

        # -------- 3) Weekly --------
        ws3 = wb.create_sheet("Weekly")
        ws3.append(["Week start", "Sales", "Expenses"])
        bold_row(ws3, 1)
        for p in report.sales_vs_expenses:
            ws3.append([p.week_start, float(p.sales), float(p.expenses)])
            ws3.cell(row=ws3.max_row, column=1).number_format = "yyyy-mm-dd"
            money(ws3.cell(row=ws3.max_row, column=2))
            money(ws3.cell(row=ws3.max_row, column=3))
        set_widths(ws3, {"A": 14, "B": 16, "C": 16})
        add_table(ws3, "WeeklySalesExpenses", 3)

        # -------- 4) Top products --------
        ws4 = wb.create_sheet("Top products")
        ws4.append(["Product", "Quantity", "Revenue"])
        bold_row(ws4, 1)
        for r in report.top_products:
            ws4.append([r.name, int(r.quantity), float(r.revenue)])
            money(ws4.cell(row=ws4.max_row, column=3))
        set_widths(ws4, {"A": 34, "B": 10, "C": 16})
        add_table(ws4, "TopProducts", 3)

        # -------- 5) Low stock --------
        ws5 = wb.create_sheet("Low stock")
        ws5.append(["Product", "Category", "Stock", "Level"])
        bold_row(ws5, 1)
        for p in report.low_stock:
            ws5.append([p.name, p.category or "", int(p.stock), aggregator.stock_level(p.stock)])
        set_widths(ws5, {"A": 34, "B": 20, "C": 8, "D": 8})
        add_table(ws5, "LowStock", 4)

        wb.save(path)
        log.info("dashboard_exported path=%s", path)
