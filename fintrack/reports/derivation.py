"""
Derived Views

Pure functions over the store's collections. Nothing here reads or
writes storage; the same inputs always produce the same outputs, so the
presentation layer can recompute them after every mutation.

Amounts are summed as Decimals in list order. Rounding happens only in
format_amount, at display time.
"""

from datetime import timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Iterator, Mapping, Optional, Sequence

from fintrack.models.transaction import (
    CategoryReportRow,
    FinanceView,
    Totals,
    Transaction,
)
from fintrack.validation import parse_month_key


DEFAULT_DATE_FORMAT = "%d/%m/%Y"

_ZERO = Decimal("0")
_CENT = Decimal("0.01")


def filter_by_month(
    transactions: Iterable[Transaction],
    month_key: Optional[str],
) -> list[Transaction]:
    """
    Keep the transactions recorded in a calendar month.

    An empty key means no filter and returns every transaction. Otherwise
    the key is YYYY-MM and is compared with the timestamp's year and
    month in UTC.

    Raises:
        InvalidMonthKeyError: If the key is not empty and not YYYY-MM
    """
    wanted = parse_month_key(month_key)
    if wanted is None:
        return list(transactions)

    matched = []
    for txn in transactions:
        ts = txn.timestamp.astimezone(timezone.utc)
        if (ts.year, ts.month) == wanted:
            matched.append(txn)
    return matched


def aggregate_totals(transactions: Iterable[Transaction]) -> Totals:
    """Sum income and expense, and take the balance between them."""
    income = _ZERO
    expense = _ZERO
    for txn in transactions:
        if txn.is_income:
            income += txn.amount
        elif txn.is_expense:
            expense += txn.amount

    return Totals(income=income, expense=expense, balance=income - expense)


def report_by_category(
    categories: Sequence[str],
    transactions: Iterable[Transaction],
    goals: Mapping[str, Decimal],
) -> list[CategoryReportRow]:
    """
    One spent-vs-goal row per entry of the category set, in its order.

    Only expenses count towards `spent`, and a transaction belongs to a
    category only on an exact, case-sensitive name match. Categories
    without a goal report a goal of 0.
    """
    spent: dict[str, Decimal] = {}
    for txn in transactions:
        if txn.is_expense:
            spent[txn.category] = spent.get(txn.category, _ZERO) + txn.amount

    return [
        CategoryReportRow(
            category=category,
            spent=spent.get(category, _ZERO),
            goal=goals.get(category, _ZERO),
        )
        for category in categories
    ]


def export_rows(
    transactions: Iterable[Transaction],
    tz: Optional[tzinfo] = None,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> Iterator[list[str]]:
    """
    Lazily yield one export row per transaction.

    Row layout: [kind, description, amount, category, date]. The amount
    is the raw decimal text; the date is rendered in `tz`, or in the
    machine's local timezone when `tz` is None.
    """
    for txn in transactions:
        yield [
            txn.kind.value,
            txn.description,
            str(txn.amount),
            txn.category,
            txn.timestamp.astimezone(tz).strftime(date_format),
        ]


def available_months(transactions: Iterable[Transaction]) -> list[str]:
    """Distinct YYYY-MM keys present in the log, oldest first."""
    return sorted({txn.month_key for txn in transactions})


def build_view(
    transactions: Iterable[Transaction],
    categories: Sequence[str],
    goals: Mapping[str, Decimal],
    month_key: Optional[str] = "",
) -> FinanceView:
    """Filter once and derive totals and the category report from the result."""
    filtered = filter_by_month(transactions, month_key)
    return FinanceView(
        month_key=(month_key or "").strip(),
        transactions=filtered,
        totals=aggregate_totals(filtered),
        report=report_by_category(categories, filtered, goals),
    )


def format_amount(value: Decimal, currency_symbol: str = "") -> str:
    """Two decimal places, half-up, with an optional currency prefix."""
    text = str(value.quantize(_CENT, rounding=ROUND_HALF_UP))
    return f"{currency_symbol} {text}" if currency_symbol else text
