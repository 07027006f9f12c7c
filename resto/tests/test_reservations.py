"""
Tests for reservations and staff accounts.
"""

import pytest
from datetime import timedelta

from django.utils import timezone

from resto.exceptions import (
    DuplicateKey,
    InvalidArgument,
    ReservationNotFound,
    StaffNotFound,
    TableNotAvailable,
)
from resto.models import ActivityLog, Reservation, StaffMember, Table
from resto.services import ReservationService, StaffService


@pytest.fixture
def tonight():
    return timezone.now() + timedelta(hours=3)


# ==============================================================================
# RESERVATION TESTS
# ==============================================================================

@pytest.mark.django_db
class TestReservationService:
    """Tests for ReservationService."""

    def test_reserve_empty_table(self, table, waiter, tonight):
        reservation = ReservationService.reserve(table.pk, waiter.pk, tonight, 'Pak Hadi')

        assert reservation.status == Reservation.Status.WAITING
        assert reservation.customer_name == 'Pak Hadi'
        table.refresh_from_db()
        assert table.status == Table.Status.RESERVED
        assert ActivityLog.objects.filter(action=ActivityLog.Action.RESERVATION).exists()

    def test_reserve_taken_table(self, table, waiter, tonight):
        ReservationService.reserve(table.pk, waiter.pk, tonight)
        with pytest.raises(TableNotAvailable):
            ReservationService.reserve(table.pk, waiter.pk, tonight)
        assert Reservation.objects.count() == 1

    def test_reserve_occupied_table(self, delivered_order, table, waiter, tonight):
        with pytest.raises(TableNotAvailable):
            ReservationService.reserve(table.pk, waiter.pk, tonight)

    def test_reserve_requires_date(self, table, waiter):
        with pytest.raises(InvalidArgument):
            ReservationService.reserve(table.pk, waiter.pk, None)

    def test_reserve_unknown_staff(self, table, tonight):
        with pytest.raises(StaffNotFound):
            ReservationService.reserve(table.pk, 999, tonight)
        table.refresh_from_db()
        assert table.status == Table.Status.EMPTY

    def test_change_status(self, table, waiter, tonight):
        reservation = ReservationService.reserve(table.pk, waiter.pk, tonight)
        ReservationService.change_status(reservation.pk, Reservation.Status.CONFIRMED)
        reservation.refresh_from_db()
        assert reservation.status == Reservation.Status.CONFIRMED

    def test_change_status_unknown_value(self, table, waiter, tonight):
        reservation = ReservationService.reserve(table.pk, waiter.pk, tonight)
        with pytest.raises(InvalidArgument):
            ReservationService.change_status(reservation.pk, 'Maybe')

    def test_change_status_missing(self, db):
        with pytest.raises(ReservationNotFound):
            ReservationService.change_status(999, Reservation.Status.DONE)

    @pytest.mark.parametrize('status', [Reservation.Status.DONE, Reservation.Status.CANCELLED])
    def test_closing_reservation_frees_table(self, django_capture_on_commit_callbacks, table, waiter, tonight, status):
        reservation = ReservationService.reserve(table.pk, waiter.pk, tonight)

        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            ReservationService.change_status(reservation.pk, status, staff=waiter)

        table.refresh_from_db()
        assert table.status == Table.Status.EMPTY
        assert len(callbacks) == 1

    def test_confirming_keeps_table_reserved(self, table, waiter, tonight):
        reservation = ReservationService.reserve(table.pk, waiter.pk, tonight)
        ReservationService.change_status(reservation.pk, Reservation.Status.CONFIRMED)
        table.refresh_from_db()
        assert table.status == Table.Status.RESERVED

    def test_other_booking_keeps_table_reserved(self, table, waiter, tonight):
        first = ReservationService.reserve(table.pk, waiter.pk, tonight)
        Reservation.objects.create(table=table, staff=waiter, reserved_for=tonight + timedelta(days=1))

        ReservationService.change_status(first.pk, Reservation.Status.CANCELLED)
        table.refresh_from_db()
        assert table.status == Table.Status.RESERVED

    def test_occupied_table_left_alone(self, table, waiter, tonight):
        reservation = ReservationService.reserve(table.pk, waiter.pk, tonight)
        table.status = Table.Status.OCCUPIED
        table.save()

        ReservationService.change_status(reservation.pk, Reservation.Status.DONE)
        table.refresh_from_db()
        assert table.status == Table.Status.OCCUPIED

    def test_change_status_bad_id(self, db):
        with pytest.raises(InvalidArgument):
            ReservationService.change_status('abc', Reservation.Status.DONE)

    def test_reassign(self, table, table_2, waiter, cashier, tonight):
        reservation = ReservationService.reserve(table.pk, waiter.pk, tonight)
        ReservationService.reassign_table(reservation.pk, table_2.pk)
        ReservationService.reassign_staff(reservation.pk, cashier.pk)

        reservation.refresh_from_db()
        assert reservation.table == table_2
        assert reservation.staff == cashier

    def test_upcoming_excludes_past_and_cancelled(self, table, table_2, waiter, tonight):
        upcoming = ReservationService.reserve(table.pk, waiter.pk, tonight)
        cancelled = ReservationService.reserve(table_2.pk, waiter.pk, tonight)
        ReservationService.change_status(cancelled.pk, Reservation.Status.CANCELLED)
        Reservation.objects.create(
            table=table, staff=waiter, reserved_for=timezone.now() - timedelta(days=1),
        )

        assert ReservationService.get_upcoming_reservations() == [upcoming]

    def test_reservations_by_date(self, table, waiter, tonight):
        reservation = ReservationService.reserve(table.pk, waiter.pk, tonight)
        day = timezone.localtime(tonight).date()
        assert ReservationService.get_reservations_by_date(day) == [reservation]


# ==============================================================================
# STAFF TESTS
# ==============================================================================

@pytest.mark.django_db
class TestStaffService:
    """Tests for StaffService."""

    def test_create_staff(self, db):
        staff = StaffService.create_staff('andi', 'Andi', StaffMember.Role.COOK, 'pw')
        assert staff.pk is not None
        assert staff.role == 'Koki'
        assert staff.check_password('pw')

    def test_duplicate_username_ignores_case(self, waiter):
        with pytest.raises(DuplicateKey):
            StaffService.create_staff('PELAYAN', 'Other', StaffMember.Role.WAITER, 'pw')

    def test_unknown_role(self, db):
        with pytest.raises(InvalidArgument):
            StaffService.create_staff('andi', 'Andi', 'Chef', 'pw')

    def test_password_required(self, db):
        with pytest.raises(InvalidArgument):
            StaffService.create_staff('andi', 'Andi', StaffMember.Role.COOK, '')

    def test_find_by_credentials(self, waiter):
        assert StaffService.find_staff_by_credentials('pelayan', 'secret') == waiter
        assert StaffService.find_staff_by_credentials('Pelayan', 'secret') == waiter

    def test_wrong_password(self, waiter):
        assert StaffService.find_staff_by_credentials('pelayan', 'wrong') is None

    def test_unknown_user(self, db):
        assert StaffService.find_staff_by_credentials('nobody', 'secret') is None

    def test_inactive_staff(self, waiter):
        waiter.is_active = False
        waiter.save()
        assert StaffService.find_staff_by_credentials('pelayan', 'secret') is None

    def test_get_missing_staff(self, db):
        with pytest.raises(StaffNotFound):
            StaffService.get_staff(999)
