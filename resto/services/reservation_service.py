"""
Reservation Service

Bookings of empty tables.
"""

import logging
from typing import List

from django.db import transaction
from django.utils import timezone

from ..exceptions import InvalidArgument, ReservationNotFound, TableNotAvailable
from ..models import ActivityLog, Reservation, Table
from .staff_service import StaffService
from .table_service import TableService, change_table_status
from .validation import check_id

logger = logging.getLogger(__name__)


class ReservationService:
    """Service for reservations."""

    @staticmethod
    def get_reservation(reservation_id: int, for_update: bool = False) -> Reservation:
        reservation_id = check_id(reservation_id, 'reservation id')
        qs = Reservation.objects.select_for_update() if for_update else Reservation.objects.all()
        try:
            return qs.select_related('table', 'staff').get(pk=reservation_id)
        except Reservation.DoesNotExist:
            raise ReservationNotFound(f"Reservation {reservation_id} not found")

    @staticmethod
    @transaction.atomic
    def reserve(table_id: int, staff_id: int, reserved_for, customer_name: str = '') -> Reservation:
        """Book an empty table and mark it reserved."""
        if reserved_for is None:
            raise InvalidArgument("Reservation date is required")
        table = TableService.get_table(table_id, for_update=True)
        staff = StaffService.get_staff(staff_id)
        if table.status != Table.Status.EMPTY:
            raise TableNotAvailable(f"{table} is {table.get_status_display()}")

        reservation = Reservation.objects.create(
            table=table,
            staff=staff,
            reserved_for=reserved_for,
            customer_name=customer_name or '',
        )
        change_table_status(table, Table.Status.RESERVED, staff=staff)

        ActivityLog.record(
            ActivityLog.Action.RESERVATION,
            f"{table} reserved for {customer_name or '-'}",
            staff=staff, object_id=reservation.pk,
        )
        logger.info("Reserved %s", table)
        return reservation

    @staticmethod
    @transaction.atomic
    def change_status(reservation_id: int, status: str, staff=None) -> Reservation:
        if status not in Reservation.Status.values:
            raise InvalidArgument(f"Unknown reservation status {status!r}")
        reservation = ReservationService.get_reservation(reservation_id, for_update=True)
        reservation.status = status
        reservation.save(update_fields=['status', 'updated_at'])
        if status not in Reservation.ACTIVE_STATUSES:
            ReservationService._release_table(reservation, staff=staff)
        ActivityLog.record(
            ActivityLog.Action.RESERVATION,
            f"Reservation #{reservation.pk}: {reservation.get_status_display()}",
            staff=staff, object_id=reservation.pk,
        )
        return reservation

    @staticmethod
    def _release_table(reservation: Reservation, staff=None) -> Table:
        """Put a reserved table back to Empty once no other booking holds it."""
        table = TableService.get_table(reservation.table_id, for_update=True)
        if table.status != Table.Status.RESERVED:
            return table
        if table.reservations.filter(status__in=Reservation.ACTIVE_STATUSES).exclude(pk=reservation.pk).exists():
            return table
        return change_table_status(table, Table.Status.EMPTY, staff=staff)

    @staticmethod
    @transaction.atomic
    def reassign_table(reservation_id: int, table_id: int, staff=None) -> Reservation:
        reservation = ReservationService.get_reservation(reservation_id, for_update=True)
        reservation.table = TableService.get_table(table_id)
        reservation.save(update_fields=['table', 'updated_at'])
        ActivityLog.record(
            ActivityLog.Action.RESERVATION,
            f"Reservation #{reservation.pk} moved to {reservation.table}",
            staff=staff, object_id=reservation.pk,
        )
        return reservation

    @staticmethod
    @transaction.atomic
    def reassign_staff(reservation_id: int, staff_id: int, staff=None) -> Reservation:
        reservation = ReservationService.get_reservation(reservation_id, for_update=True)
        reservation.staff = StaffService.get_staff(staff_id)
        reservation.save(update_fields=['staff', 'updated_at'])
        ActivityLog.record(
            ActivityLog.Action.RESERVATION,
            f"Reservation #{reservation.pk} handled by {reservation.staff}",
            staff=staff, object_id=reservation.pk,
        )
        return reservation

    # ---- Queries ----

    @staticmethod
    def get_upcoming_reservations() -> List[Reservation]:
        return list(Reservation.objects.filter(
            reserved_for__gte=timezone.now(),
            status__in=Reservation.ACTIVE_STATUSES,
        ).select_related('table', 'staff'))

    @staticmethod
    def get_reservations_by_date(date) -> List[Reservation]:
        return list(Reservation.objects.filter(reserved_for__date=date).select_related('table', 'staff'))
