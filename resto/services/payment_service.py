"""
Payment Service

Settles delivered orders and issues receipt numbers.

Receipt numbers look like ``YYYYMMDD-NNNN`` and run 0001, 0002, ... within a
calendar day. The day's counter row is locked while a number is taken and
the receipt column is unique, so two cashiers can never print the same
number.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import List

from django.db import transaction
from django.utils import timezone

from ..exceptions import (
    AlreadyPaid,
    InsufficientPayment,
    InvalidArgument,
    NotReadyForPayment,
    OrderNotFound,
    PaymentNotFound,
)
from ..models import ActivityLog, Order, Payment, ReceiptSequence
from ..signals import notify_order_changed
from .staff_service import StaffService
from .table_service import TableService
from .validation import check_id, check_ids

logger = logging.getLogger(__name__)


def _to_amount(value):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidArgument(f"Invalid amount {value!r}")
    if not amount.is_finite() or amount < 0:
        raise InvalidArgument(f"Invalid amount {value!r}")
    return amount


class PaymentService:
    """Service for payments."""

    @staticmethod
    @transaction.atomic
    def next_receipt_number(date=None) -> str:
        """Take the next receipt number of ``date`` (default today)."""
        date = date or timezone.localdate()
        prefix = f"{date:%Y%m%d}-"
        sequence, _ = ReceiptSequence.objects.select_for_update().get_or_create(
            date=date,
            defaults={'last': Payment.objects.filter(receipt_number__startswith=prefix).count()},
        )
        sequence.last += 1
        sequence.save(update_fields=['last'])
        return Payment.format_receipt_number(date, sequence.last)

    @staticmethod
    @transaction.atomic
    def pay(order_ids: List[int], staff_id: int, amount_paid, method: str) -> List[Payment]:
        """
        Record payment for one or more delivered orders.

        All orders are checked before anything is written; one failing
        order aborts the whole batch.

        Every order in the batch is credited with the same ``amount_paid``;
        the amount is not divided between them.
        """
        order_ids = check_ids(order_ids, 'order id')
        if not order_ids:
            raise InvalidArgument("At least one order is required")
        amount = _to_amount(amount_paid)
        if method not in Payment.Method.values:
            raise InvalidArgument(f"Unknown payment method {method!r}")
        staff = StaffService.get_staff(staff_id)

        orders = {
            order.pk: order
            for order in Order.objects.select_for_update().filter(
                pk__in=order_ids,
            ).select_related('table')
        }

        for order_id in order_ids:
            order = orders.get(order_id)
            if order is None:
                raise OrderNotFound(f"Order {order_id} not found")
            if order.is_paid or order.status == Order.Status.PAID:
                raise AlreadyPaid(f"Order #{order.pk} has already been paid")
            if order.status != Order.Status.DELIVERED:
                raise NotReadyForPayment(
                    f"Order #{order.pk} is {order.get_status_display()}, not delivered"
                )
            total = order.total
            if amount < total:
                logger.warning("Payment of %s short for order #%s (total %s)", amount, order.pk, total)
                raise InsufficientPayment(f"Order #{order.pk} totals {total}, paid {amount}")

        today = timezone.localdate()
        payments = []
        for order_id in order_ids:
            order = orders[order_id]
            payment = Payment.objects.create(
                order=order,
                staff=staff,
                amount_paid=amount,
                method=method,
                receipt_number=PaymentService.next_receipt_number(today),
            )
            order.status = Order.Status.PAID
            order.is_paid = True
            order.save(update_fields=['status', 'is_paid', 'updated_at'])
            TableService.release_if_idle(order.table, staff=staff)

            ActivityLog.record(
                ActivityLog.Action.PAYMENT,
                f"Order #{order.pk} paid {amount} by {payment.get_method_display()}, receipt {payment.receipt_number}",
                staff=staff, object_id=payment.pk,
            )
            logger.info("Order #%s paid, receipt %s", order.pk, payment.receipt_number)
            notify_order_changed(order.pk)
            payments.append(payment)

        return payments

    @staticmethod
    @transaction.atomic
    def mark_failed(payment_id: int, staff=None) -> Payment:
        payment_id = check_id(payment_id, 'payment id')
        try:
            payment = Payment.objects.select_for_update().get(pk=payment_id)
        except Payment.DoesNotExist:
            raise PaymentNotFound(f"Payment {payment_id} not found")
        payment.is_successful = False
        payment.save(update_fields=['is_successful', 'updated_at'])
        ActivityLog.record(
            ActivityLog.Action.PAYMENT_FAILED, f"Receipt {payment.receipt_number}",
            staff=staff, object_id=payment.pk,
        )
        notify_order_changed(payment.order_id)
        return payment

    # ---- Queries ----

    @staticmethod
    def get_payments_by_date(date) -> List[Payment]:
        return list(Payment.objects.filter(
            receipt_number__startswith=f"{date:%Y%m%d}-",
        ).select_related('order', 'staff').order_by('receipt_number'))
