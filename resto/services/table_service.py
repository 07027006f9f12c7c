"""
Table Service

Table master data and occupancy status.
"""

import logging
from typing import List, Optional

from django.db import IntegrityError, transaction

from ..exceptions import DuplicateKey, InvalidArgument, TableNotFound
from ..models import ActivityLog, Order, RestoSettings, Table
from ..signals import notify_table_changed
from .validation import check_id

logger = logging.getLogger(__name__)


def change_table_status(table: Table, status: str, staff=None) -> Table:
    """Persist a new status on an already loaded table."""
    if table.status == status:
        return table
    previous = table.get_status_display()
    table.status = status
    table.save(update_fields=['status', 'updated_at'])
    ActivityLog.record(
        ActivityLog.Action.TABLE_STATUS,
        f"{table}: {previous} -> {table.get_status_display()}",
        staff=staff, object_id=table.pk,
    )
    notify_table_changed(table.pk)
    return table


class TableService:
    """Service for tables."""

    @staticmethod
    def get_table(table_id: int, for_update: bool = False) -> Table:
        table_id = check_id(table_id, 'table id')
        qs = Table.objects.select_for_update() if for_update else Table.objects.all()
        try:
            return qs.get(pk=table_id)
        except Table.DoesNotExist:
            raise TableNotFound(f"Table {table_id} not found")

    @staticmethod
    def get_table_by_number(number: str) -> Optional[Table]:
        return Table.objects.filter(number=str(number).strip()).first()

    @staticmethod
    @transaction.atomic
    def create_table(number: str, staff=None) -> Table:
        number = str(number or '').strip()
        if not number:
            raise InvalidArgument("Table number is required")
        if TableService.get_table_by_number(number):
            raise DuplicateKey(f"Table {number} already exists")
        try:
            with transaction.atomic():
                table = Table.objects.create(number=number)
        except IntegrityError:
            raise DuplicateKey(f"Table {number} already exists")

        ActivityLog.record(ActivityLog.Action.TABLE_CREATED, str(table), staff=staff, object_id=table.pk)
        logger.info("Created %s", table)
        notify_table_changed(table.pk)
        return table

    @staticmethod
    @transaction.atomic
    def set_status(table_id: int, status: str, staff=None) -> Table:
        if status not in Table.Status.values:
            raise InvalidArgument(f"Unknown table status {status!r}")
        table = TableService.get_table(table_id, for_update=True)
        return change_table_status(table, status, staff=staff)

    @staticmethod
    @transaction.atomic
    def set_active(table_id: int, is_active: bool) -> Table:
        table = TableService.get_table(table_id, for_update=True)
        table.is_active = bool(is_active)
        table.save(update_fields=['is_active', 'updated_at'])
        notify_table_changed(table.pk)
        return table

    @staticmethod
    def release_if_idle(table: Table, staff=None) -> Table:
        """Mark the table empty once it has no open order left."""
        if not RestoSettings.get_settings().release_table_on_close:
            return table
        if table.orders.filter(status__in=Order.OPEN_STATUSES).exists():
            return table
        return change_table_status(table, Table.Status.EMPTY, staff=staff)

    # ---- Queries ----

    @staticmethod
    def get_tables_by_status(*statuses: str) -> List[Table]:
        return list(Table.objects.filter(status__in=statuses, is_active=True))

    @staticmethod
    def get_empty_tables() -> List[Table]:
        return TableService.get_tables_by_status(Table.Status.EMPTY)

    @staticmethod
    def get_empty_or_occupied_tables() -> List[Table]:
        return TableService.get_tables_by_status(Table.Status.EMPTY, Table.Status.OCCUPIED)
