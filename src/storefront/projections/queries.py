"""Read-side queries over the order projections.

Listing, pagination and the admin statistics dashboard are computed from
OrderSummary and OrderLine rows.
"""

import math
from collections import defaultdict
from datetime import UTC, date, datetime, timedelta

from protean.utils.globals import current_domain

from storefront.projections.order_lines import OrderLine
from storefront.projections.order_summary import OrderSummary

# Upper bound on rows pulled into memory for a single query
MAX_ROWS = 10_000
TOP_PRODUCTS_LIMIT = 5
RECENT_DAYS = 7


def _rows(projection, **filters):
    query = current_domain.repository_for(projection)._dao.query
    if filters:
        query = query.filter(**filters)
    return query.limit(MAX_ROWS).all().items


def _newest_first(summaries):
    return sorted(summaries, key=lambda s: s.created_at.timestamp() if s.created_at else 0.0, reverse=True)


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def customer_orders(customer_id):
    """All of a customer's orders, newest first."""
    return _newest_first(_rows(OrderSummary, customer_id=str(customer_id)))


def list_orders(status=None, search=None, start_date=None, end_date=None, page=1, limit=10):
    """Staff order listing with filters and pagination.

    Returns a dict with orders, count, total_orders, total_pages and current_page.
    """
    filters = {"status": status} if status else {}
    summaries = _rows(OrderSummary, **filters)

    if search:
        needle = search.lower()
        summaries = [s for s in summaries if needle in (s.order_number or "").lower()]
    if start_date and end_date:
        start, end = _as_date(start_date), _as_date(end_date)
        summaries = [s for s in summaries if s.created_at and start <= _as_date(s.created_at) <= end]

    summaries = _newest_first(summaries)
    page = max(int(page or 1), 1)
    limit = max(int(limit or 10), 1)
    start_index = (page - 1) * limit
    page_items = summaries[start_index : start_index + limit]

    return {
        "orders": page_items,
        "count": len(page_items),
        "total_orders": len(summaries),
        "total_pages": math.ceil(len(summaries) / limit),
        "current_page": page,
    }


def order_stats(as_of=None):
    """Admin dashboard statistics.

    Counts and amounts grouped by status and by payment method, daily order
    counts for the last seven days, and the five best-selling products by
    quantity.
    """
    as_of = as_of or datetime.now(UTC)
    summaries = _rows(OrderSummary)

    by_status = defaultdict(lambda: {"count": 0, "total_amount": 0.0})
    by_payment = defaultdict(lambda: {"count": 0, "total_amount": 0.0})
    by_date = defaultdict(lambda: {"count": 0, "revenue": 0.0})
    window_start = _as_date(as_of) - timedelta(days=RECENT_DAYS)

    for summary in summaries:
        amount = summary.total_price or 0.0
        by_status[summary.status]["count"] += 1
        by_status[summary.status]["total_amount"] += amount
        by_payment[summary.payment_method]["count"] += 1
        by_payment[summary.payment_method]["total_amount"] += amount
        if summary.created_at and _as_date(summary.created_at) >= window_start:
            day = _as_date(summary.created_at).isoformat()
            by_date[day]["count"] += 1
            by_date[day]["revenue"] += amount

    products = defaultdict(lambda: {"name": None, "total_quantity": 0, "total_revenue": 0.0})
    for line in _rows(OrderLine):
        entry = products[str(line.product_id)]
        entry["name"] = entry["name"] or line.name
        entry["total_quantity"] += line.quantity or 0
        entry["total_revenue"] += line.revenue or 0.0

    top_products = sorted(
        ({"product_id": product_id, **data} for product_id, data in products.items()),
        key=lambda p: p["total_quantity"],
        reverse=True,
    )[:TOP_PRODUCTS_LIMIT]

    return {
        "orders_by_status": [
            {"status": key, **value} for key, value in sorted(by_status.items(), key=lambda kv: str(kv[0]))
        ],
        "orders_by_date": [{"date": key, **value} for key, value in sorted(by_date.items())],
        "payment_methods": [
            {"payment_method": key, **value} for key, value in sorted(by_payment.items(), key=lambda kv: str(kv[0]))
        ],
        "top_products": top_products,
    }
