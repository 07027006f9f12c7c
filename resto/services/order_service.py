"""
Order Service

Handles business logic for order operations: creation, lines, cancellation
and status changes. Every public mutation runs in one transaction, with
stock moving in lockstep with the order lines.
"""

import logging
from typing import Any, Dict, Iterable, List

from django.db import transaction

from ..exceptions import (
    InvalidArgument,
    InvalidTransition,
    OrderNotEditable,
    OrderNotFound,
)
from ..models import ActivityLog, Order, OrderDetail, Table
from ..signals import notify_order_changed
from .staff_service import StaffService
from .stock_service import StockService
from .table_service import TableService, change_table_status
from .validation import check_id, check_quantity

logger = logging.getLogger(__name__)


def _unpack_item(item):
    """Accept ``(menu_id, quantity, note)`` tuples or dicts."""
    if isinstance(item, dict):
        menu_id, quantity, note = item.get('menu_id'), item.get('quantity', 1), item.get('note', '')
    else:
        try:
            menu_id, quantity, *rest = item
        except (TypeError, ValueError):
            raise InvalidArgument(f"Invalid order item {item!r}")
        note = rest[0] if rest else ''
    return check_id(menu_id, 'menu id'), check_quantity(quantity), note


class OrderService:
    """Service for managing orders."""

    @staticmethod
    def get_order(order_id: int, for_update: bool = False) -> Order:
        order_id = check_id(order_id, 'order id')
        qs = Order.objects.select_for_update() if for_update else Order.objects.all()
        try:
            return qs.select_related('table', 'staff').get(pk=order_id)
        except Order.DoesNotExist:
            raise OrderNotFound(f"Order {order_id} not found")

    @staticmethod
    @transaction.atomic
    def create_order(table_id: int, staff_id: int, items: Iterable[Any]) -> Order:
        """
        Create a new order with its lines.

        Args:
            table_id: Table the guests sit at
            staff_id: Staff member taking the order
            items: ``(menu_id, quantity, note)`` tuples or dicts with the same keys

        Returns:
            Created Order instance

        Stock is reserved line by line; if any line fails (unknown menu or
        not enough stock) the whole order, every earlier reservation and the
        table change are rolled back.
        """
        items = list(items or [])
        if not items:
            raise InvalidArgument("At least one item is required")

        table = TableService.get_table(table_id, for_update=True)
        staff = StaffService.get_staff(staff_id)

        order = Order.objects.create(table=table, staff=staff)
        for item in items:
            menu_id, quantity, note = _unpack_item(item)
            menu = StockService.reserve(menu_id, quantity)
            OrderDetail.objects.create(
                order=order,
                menu_item=menu,
                quantity=quantity,
                unit_price=menu.price,
                note=note or '',
            )

        change_table_status(table, Table.Status.OCCUPIED, staff=staff)

        ActivityLog.record(
            ActivityLog.Action.ORDER_CREATED,
            f"Order #{order.pk} for {table} ({len(items)} items)",
            staff=staff, object_id=order.pk,
        )
        logger.info("Created order #%s for %s", order.pk, table)
        notify_order_changed(order.pk)
        return order

    @staticmethod
    @transaction.atomic
    def add_detail(order_id: int, menu_id: int, quantity: int, note: str = '', staff=None) -> OrderDetail:
        """Append a new line to an order. Identical lines are never merged."""
        quantity = check_quantity(quantity)
        order = OrderService.get_order(order_id, for_update=True)
        if not order.is_editable:
            raise OrderNotEditable(f"Order #{order.pk} is {order.get_status_display()}")

        menu = StockService.reserve(menu_id, quantity)
        detail = OrderDetail.objects.create(
            order=order,
            menu_item=menu,
            quantity=quantity,
            unit_price=menu.price,
            note=note or '',
        )

        ActivityLog.record(
            ActivityLog.Action.DETAIL_ADDED,
            f"Order #{order.pk}: +{detail.quantity}x {menu.name}",
            staff=staff, object_id=order.pk,
        )
        notify_order_changed(order.pk)
        return detail

    @staticmethod
    @transaction.atomic
    def remove_detail(detail_id: int, staff=None) -> bool:
        """Delete a line and return its portions to stock. False if missing."""
        detail_id = check_id(detail_id, 'item id')
        detail = OrderDetail.objects.select_related('order', 'menu_item').filter(pk=detail_id).first()
        if detail is None:
            return False

        order = detail.order
        if not order.is_editable:
            raise OrderNotEditable(f"Order #{order.pk} is {order.get_status_display()}")

        StockService.release(detail.menu_item_id, detail.quantity)
        description = f"Order #{order.pk}: -{detail.quantity}x {detail.menu_item.name}"
        detail.delete()

        ActivityLog.record(ActivityLog.Action.DETAIL_REMOVED, description, staff=staff, object_id=order.pk)
        notify_order_changed(order.pk)
        return True

    @staticmethod
    @transaction.atomic
    def cancel_order(order_id: int, staff=None) -> bool:
        """
        Cancel a waiting order and return all of its portions to stock.

        Returns False when the order is missing or already past Waiting;
        kitchen work that has started is never thrown away silently.
        """
        order_id = check_id(order_id, 'order id')
        order = Order.objects.select_for_update().select_related('table').filter(pk=order_id).first()
        if order is None or order.status != Order.Status.WAITING:
            logger.info("Order #%s not cancelled (missing or not waiting)", order_id)
            return False

        for detail in order.details.all():
            StockService.release(detail.menu_item_id, detail.quantity)

        order.status = Order.Status.CANCELLED
        order.save(update_fields=['status', 'updated_at'])
        TableService.release_if_idle(order.table, staff=staff)

        ActivityLog.record(ActivityLog.Action.ORDER_CANCELLED, f"Order #{order.pk}", staff=staff, object_id=order.pk)
        logger.info("Cancelled order #%s", order.pk)
        notify_order_changed(order.pk)
        return True

    @staticmethod
    @transaction.atomic
    def set_status(order_id: int, status: str, staff=None) -> Order:
        """
        Advance an order along the kitchen workflow.

        Cancelled and Paid are reached through cancel_order and
        PaymentService.pay only, since both move stock or money.
        """
        if status not in Order.Status.values:
            raise InvalidArgument(f"Unknown order status {status!r}")

        order = OrderService.get_order(order_id, for_update=True)
        if status == Order.Status.CANCELLED:
            raise InvalidTransition("Use cancel_order to cancel an order")
        if status == Order.Status.PAID:
            raise InvalidTransition("Orders become paid by recording a payment")
        if not order.can_transition_to(status):
            raise InvalidTransition(
                f"Order #{order.pk} cannot go from {order.get_status_display()} "
                f"to {Order.Status(status).label}"
            )

        previous = order.get_status_display()
        order.status = status
        order.save(update_fields=['status', 'updated_at'])

        ActivityLog.record(
            ActivityLog.Action.ORDER_STATUS,
            f"Order #{order.pk}: {previous} -> {order.get_status_display()}",
            staff=staff, object_id=order.pk,
        )
        notify_order_changed(order.pk)
        return order

    # ---- Queries ----

    @staticmethod
    def get_active_orders() -> List[Order]:
        return list(Order.objects.filter(
            status__in=Order.OPEN_STATUSES,
        ).select_related('table', 'staff').prefetch_related('details__menu_item').order_by('created_at'))

    @staticmethod
    def get_orders_by_table(table_id: int) -> List[Order]:
        return list(Order.objects.filter(
            table_id=table_id,
        ).prefetch_related('details__menu_item').order_by('-pk'))

    @staticmethod
    def get_orders_by_table_number(number: str) -> List[Order]:
        return list(Order.objects.filter(table__number=number).select_related('table').order_by('-pk'))

    @staticmethod
    def get_orders_by_date(date) -> List[Order]:
        return list(Order.objects.filter(created_at__date=date).select_related('table'))

    @staticmethod
    def get_orders_by_status(status: str) -> List[Order]:
        return list(Order.objects.filter(status=status).select_related('table'))

    @staticmethod
    def get_orders_by_paid(is_paid: bool) -> List[Order]:
        return list(Order.objects.filter(is_paid=is_paid).select_related('table'))

    @staticmethod
    def get_orders_by_staff_and_date(staff_id: int, date) -> List[Order]:
        return list(Order.objects.filter(staff_id=staff_id, created_at__date=date))

    @staticmethod
    def get_order_stats(date) -> Dict[str, Any]:
        """Order counts for a day."""
        orders = Order.objects.filter(created_at__date=date)
        return {
            'date': date.isoformat(),
            'total_orders': orders.count(),
            'paid': orders.filter(status=Order.Status.PAID).count(),
            'cancelled': orders.filter(status=Order.Status.CANCELLED).count(),
            'open': orders.filter(status__in=Order.OPEN_STATUSES).count(),
        }
