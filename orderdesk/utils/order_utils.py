"""
orderdesk/utils/order_utils.py

Purpose: Order calculations and exports

- Order totals from product price, quantity and delivery charge
- CSV export of the order list
- Customer phone numbers for the SMS screen
"""

import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from orderdesk.schemas.order import Order
from orderdesk.schemas.product import Product
from orderdesk.utils.constants import ORDER_CSV_HEADER


@dataclass(frozen=True)
class OrderTotals:
    unit_price: float
    product_total: float
    delivery_charge: float
    grand_total: float


def calculate_order_totals(
    product: Optional[Product],
    quantity: int = 1,
    delivery_charge: float = 0.0,
) -> OrderTotals:
    """
    Calculates the totals shown on the order form.

    The unit price is the product's discount price when set, otherwise its
    sales price. An unknown product counts as zero.

    Example:
        sales 500, discount 450, quantity 2, delivery 60
        -> product total 900, grand total 960
    """
    unit_price = product.unit_price if product else 0.0
    quantity = max(int(quantity or 0), 0)
    delivery = float(delivery_charge or 0)
    product_total = unit_price * quantity
    return OrderTotals(
        unit_price=unit_price,
        product_total=product_total,
        delivery_charge=delivery,
        grand_total=product_total + delivery,
    )


def order_grand_total(order: Order) -> float:
    """Amount due for a saved order: backend total plus delivery charge."""
    return float(order.total_amount or 0) + float(order.delivery_charge or 0)


def _index_products(products: Iterable[Product]) -> Dict[str, Product]:
    return {product.id: product for product in products}


def export_orders_csv(orders: Iterable[Order], products: Iterable[Product]) -> str:
    """
    Renders orders as CSV text with a header row.

    Unknown products show as "N/A"; dates are rendered as YYYY-MM-DD.
    """
    by_id = _index_products(products)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(ORDER_CSV_HEADER)

    for order in orders:
        product = by_id.get(order.product_id) if order.product_id else None
        writer.writerow([
            order.display_id,
            order.customer_name,
            order.mobile_number,
            product.name if product else "N/A",
            order.quantity or 1,
            f"{order_grand_total(order):g}",
            order.status.value,
            order.created_at.date().isoformat() if order.created_at else "",
        ])

    return buffer.getvalue()


def orders_export_filename(today: Optional[date] = None) -> str:
    return f"orders-{(today or date.today()).isoformat()}.csv"


def customer_numbers(orders: Iterable[Order]) -> List[str]:
    """Unique customer mobile numbers in first-seen order."""
    seen = set()
    numbers = []
    for order in orders:
        number = (order.mobile_number or "").strip()
        if number and number not in seen:
            seen.add(number)
            numbers.append(number)
    return numbers


def export_numbers(numbers: Iterable[str]) -> str:
    """One number per line, as downloaded from the SMS screen."""
    return "\n".join(numbers)
