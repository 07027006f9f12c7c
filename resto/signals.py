"""
Resto Module Signals

Change notifications for open screens. Senders fire only after the
surrounding transaction commits, so a rolled back operation announces
nothing.
"""

import logging

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)

# Signals this module emits
stock_changed = Signal()  # Provides: nothing
table_status_changed = Signal()  # Provides: table_id
order_changed = Signal()  # Provides: order_id


def _send_on_commit(signal, event, **kwargs):
    from .models import RestoSettings
    if not RestoSettings.get_settings().notify_clients:
        return

    def send():
        logger.debug("Notify %s %s", event, kwargs)
        signal.send(sender=None, **kwargs)

    transaction.on_commit(send)


def notify_stock_changed():
    _send_on_commit(stock_changed, 'StockChanged')


def notify_table_changed(table_id):
    _send_on_commit(table_status_changed, 'TableStatusChanged', table_id=table_id)


def notify_order_changed(order_id):
    _send_on_commit(order_changed, 'OrderChanged', order_id=order_id)
