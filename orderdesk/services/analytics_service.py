"""
orderdesk/services/analytics_service.py

Purpose: Dashboard and analytics figures

- Role scoping (Admin sees everything, Moderator sees their own records)
- Search / status / priority / moderator filters
- Order, task, follow-up and product statistics
- Revenue and profit over delivered orders

All functions are pure; they work on already-loaded collections.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from orderdesk.schemas.follow_up import (
    FOLLOW_UP_DONE,
    FOLLOW_UP_IN_PROGRESS,
    FOLLOW_UP_PENDING,
    FollowUp,
    FollowUpStatus,
)
from orderdesk.schemas.order import Order, OrderStatus
from orderdesk.schemas.product import Product, ProductStatus
from orderdesk.schemas.task import Task, TaskPriority, TaskStatus
from orderdesk.schemas.user import Role, User
from orderdesk.utils.order_utils import customer_numbers

ALL_MODERATORS = "all"


@dataclass
class OrderStats:
    total: int = 0
    by_status: Dict[OrderStatus, int] = field(default_factory=dict)
    revenue: float = 0.0
    profit: float = 0.0
    needs_tracking: int = 0
    with_fraud_check: int = 0
    with_tracking: int = 0

    def count(self, status: OrderStatus) -> int:
        return self.by_status.get(status, 0)

    @property
    def delivered(self) -> int:
        return self.count(OrderStatus.DELIVERED)

    @property
    def delivery_rate(self) -> float:
        """Delivered share of all orders, in percent."""
        return (self.delivered / self.total) * 100 if self.total else 0.0

    @property
    def average_order_value(self) -> float:
        return self.revenue / self.delivered if self.delivered else 0.0

    @property
    def profit_margin(self) -> float:
        return (self.profit / self.revenue) * 100 if self.revenue else 0.0


@dataclass
class TaskStats:
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    high_priority_pending: int = 0

    @property
    def completion_rate(self) -> float:
        return (self.completed / self.total) * 100 if self.total else 0.0


@dataclass
class FollowUpStats:
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0


@dataclass
class ProductStats:
    total: int = 0
    active: int = 0
    inactive: int = 0


# ============================================================
# SCOPING & FILTERS
# ============================================================

def _is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == Role.ADMIN


def scope_orders(orders: Iterable[Order], user: Optional[User]) -> List[Order]:
    if _is_admin(user):
        return list(orders)
    user_id = user.id if user else None
    return [order for order in orders if user_id and order.moderator_id == user_id]


def scope_tasks(tasks: Iterable[Task], user: Optional[User]) -> List[Task]:
    if _is_admin(user):
        return list(tasks)
    user_id = user.id if user else None
    return [task for task in tasks if user_id and task.assigned_to == user_id]


def scope_follow_ups(follow_ups: Iterable[FollowUp], user: Optional[User]) -> List[FollowUp]:
    if _is_admin(user):
        return list(follow_ups)
    user_id = user.id if user else None
    return [item for item in follow_ups if user_id and item.moderator_id == user_id]


def _contains(value: Optional[str], term: str) -> bool:
    return bool(value) and term in value.lower()


def filter_orders(
    orders: Iterable[Order],
    search: str = "",
    status: Optional[OrderStatus] = None,
    moderator_id: str = ALL_MODERATORS,
) -> List[Order]:
    """
    Search matches customer name or order id (case-insensitive) or the
    mobile number (substring).
    """
    term = (search or "").strip().lower()
    results = []
    for order in orders:
        if term and not (
            _contains(order.customer_name, term)
            or _contains(order.order_id, term)
            or term in (order.mobile_number or "")
        ):
            continue
        if status is not None and order.status != status:
            continue
        if moderator_id != ALL_MODERATORS and order.moderator_id != moderator_id:
            continue
        results.append(order)
    return results


def filter_tasks(
    tasks: Iterable[Task],
    search: str = "",
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    moderator_id: str = ALL_MODERATORS,
) -> List[Task]:
    term = (search or "").strip().lower()
    results = []
    for task in tasks:
        if term and not (_contains(task.task_details, term) or _contains(task.order_id, term)):
            continue
        if status is not None and task.status != status:
            continue
        if priority is not None and task.priority != priority:
            continue
        if moderator_id != ALL_MODERATORS and task.assigned_to != moderator_id:
            continue
        results.append(task)
    return results


def filter_follow_ups(
    follow_ups: Iterable[FollowUp],
    search: str = "",
    status: Optional[FollowUpStatus] = None,
    moderator_id: str = ALL_MODERATORS,
) -> List[FollowUp]:
    term = (search or "").strip().lower()
    results = []
    for item in follow_ups:
        if term and not (_contains(item.customer_name, term) or _contains(item.order_id, term)):
            continue
        if status is not None and item.status != status:
            continue
        if moderator_id != ALL_MODERATORS and item.moderator_id != moderator_id:
            continue
        results.append(item)
    return results


# ============================================================
# STATISTICS
# ============================================================

def order_stats(orders: Iterable[Order], products: Iterable[Product]) -> OrderStats:
    """
    Order counts plus revenue and profit.

    Revenue per delivered order is the product's sales price plus the order's
    delivery charge. Profit is (sales price - production price) plus delivery
    charge, counted only when the product is known.
    """
    orders = list(orders)
    by_id = {product.id: product for product in products}

    stats = OrderStats(
        total=len(orders),
        by_status=dict(Counter(order.status for order in orders)),
    )

    for order in orders:
        if order.needs_tracking:
            stats.needs_tracking += 1
        if order.steadfast_tracking_id:
            stats.with_tracking += 1
        if order.has_fraud_check:
            stats.with_fraud_check += 1

        if order.status != OrderStatus.DELIVERED:
            continue

        product = by_id.get(order.product_id) if order.product_id else None
        delivery = float(order.delivery_charge or 0)
        sales_price = float(product.sales_price or 0) if product else 0.0
        stats.revenue += sales_price + delivery
        if product is not None:
            stats.profit += (sales_price - float(product.production_price or 0)) + delivery

    return stats


def top_products_by_revenue(
    orders: Iterable[Order], products: Iterable[Product], limit: int = 5
) -> List[Tuple[Product, float]]:
    """(product, revenue) pairs over delivered orders, highest first."""
    delivered = Counter(
        order.product_id for order in orders
        if order.status == OrderStatus.DELIVERED and order.product_id
    )
    ranked = [
        (product, delivered.get(product.id, 0) * float(product.sales_price or 0))
        for product in products
    ]
    ranked.sort(key=lambda pair: pair[1], reverse=True)
    return ranked[:limit]


def recent_orders(orders: Iterable[Order], limit: int = 5) -> List[Order]:
    return sorted(
        orders,
        key=lambda order: order.created_at.timestamp() if order.created_at else 0.0,
        reverse=True,
    )[:limit]


def task_stats(tasks: Iterable[Task]) -> TaskStats:
    stats = TaskStats()
    for task in tasks:
        stats.total += 1
        if task.status == TaskStatus.PENDING:
            stats.pending += 1
            if task.priority == TaskPriority.HIGH:
                stats.high_priority_pending += 1
        elif task.status == TaskStatus.IN_PROGRESS:
            stats.in_progress += 1
        elif task.status == TaskStatus.COMPLETED:
            stats.completed += 1
    return stats


def follow_up_stats(follow_ups: Iterable[FollowUp]) -> FollowUpStats:
    stats = FollowUpStats()
    for item in follow_ups:
        stats.total += 1
        if item.status in FOLLOW_UP_PENDING:
            stats.pending += 1
        elif item.status in FOLLOW_UP_IN_PROGRESS:
            stats.in_progress += 1
        elif item.status in FOLLOW_UP_DONE:
            stats.completed += 1
        elif item.status == FollowUpStatus.CANCELLED:
            stats.cancelled += 1
    return stats


def product_stats(products: Iterable[Product]) -> ProductStats:
    stats = ProductStats()
    for product in products:
        stats.total += 1
        if product.status == ProductStatus.ACTIVE:
            stats.active += 1
        else:
            stats.inactive += 1
    return stats


def sms_customer_numbers(orders: Iterable[Order], user: Optional[User]) -> List[str]:
    """Customer numbers the user may message, from their visible orders."""
    return customer_numbers(scope_orders(orders, user))
