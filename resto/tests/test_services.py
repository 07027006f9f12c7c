"""
Unit tests for Resto module services.
"""

import pytest
from decimal import Decimal

from django.utils import timezone

from resto.exceptions import (
    DuplicateKey,
    InsufficientStock,
    InvalidArgument,
    InvalidTransition,
    MenuNotFound,
    OrderNotEditable,
    OrderNotFound,
    TableNotFound,
)
from resto.models import ActivityLog, MenuItem, Order, OrderDetail, RestoSettings, Table
from resto.services import OrderService, StockService, TableService


# ==============================================================================
# STOCK TESTS
# ==============================================================================

@pytest.mark.django_db
class TestStockService:
    """Tests for StockService."""

    def test_reserve_decrements(self, nasi_goreng):
        StockService.reserve(nasi_goreng.pk, 2)
        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 3

    def test_reserve_whole_stock(self, nasi_goreng):
        StockService.reserve(nasi_goreng.pk, 5)
        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 0

    def test_reserve_more_than_available(self, nasi_goreng):
        with pytest.raises(InsufficientStock) as exc_info:
            StockService.reserve(nasi_goreng.pk, 6)

        assert exc_info.value.requested == 6
        assert 'Nasi Goreng' in exc_info.value.message
        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 5

    def test_reserve_unknown_menu(self, db):
        with pytest.raises(MenuNotFound):
            StockService.reserve(999, 1)

    @pytest.mark.parametrize('quantity', [0, -1, 'abc', None, 2.9, '2.5', True, Decimal('1.5')])
    def test_reserve_rejects_bad_quantity(self, nasi_goreng, quantity):
        with pytest.raises(InvalidArgument):
            StockService.reserve(nasi_goreng.pk, quantity)
        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 5

    @pytest.mark.parametrize('quantity', [2, '2', 2.0, Decimal('2')])
    def test_reserve_accepts_whole_numbers(self, nasi_goreng, quantity):
        StockService.reserve(nasi_goreng.pk, quantity)
        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 3

    @pytest.mark.parametrize('menu_id', ['abc', None, 0, 1.5, True])
    def test_reserve_rejects_bad_menu_id(self, db, menu_id):
        with pytest.raises(InvalidArgument):
            StockService.reserve(menu_id, 1)

    def test_release_increments(self, nasi_goreng):
        StockService.release(nasi_goreng.pk, 3)
        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 8

    def test_release_unknown_menu(self, db):
        with pytest.raises(MenuNotFound):
            StockService.release(999, 1)

    def test_set_stock(self, nasi_goreng, cook):
        menu = StockService.set_stock(nasi_goreng.pk, 12, is_available=False, staff=cook)
        assert menu.available_quantity == 12
        assert menu.is_available is False
        assert ActivityLog.objects.filter(action=ActivityLog.Action.STOCK, staff=cook).exists()

    def test_set_stock_rejects_negative(self, nasi_goreng):
        with pytest.raises(InvalidArgument):
            StockService.set_stock(nasi_goreng.pk, -1)

    def test_set_stock_keeps_flag_when_not_given(self, nasi_goreng):
        nasi_goreng.is_available = False
        nasi_goreng.save()
        menu = StockService.set_stock(nasi_goreng.pk, 3)
        assert menu.is_available is False

    def test_save_menu_adds_item(self, owner):
        menu = StockService.save_menu('Soto Ayam', MenuItem.Category.FOOD, '12000', 8, staff=owner)

        assert menu.pk is not None
        assert menu.price == Decimal('12000')
        assert menu.available_quantity == 8
        assert menu.is_available is True
        assert ActivityLog.objects.filter(action=ActivityLog.Action.MENU_CREATED, object_id=menu.pk).exists()

    def test_save_menu_updates_item(self, nasi_goreng):
        menu = StockService.save_menu(
            'Nasi Goreng Spesial', MenuItem.Category.FOOD, Decimal('18000'), 4,
            is_available=False, menu_id=nasi_goreng.pk,
        )

        assert menu.pk == nasi_goreng.pk
        nasi_goreng.refresh_from_db()
        assert nasi_goreng.name == 'Nasi Goreng Spesial'
        assert nasi_goreng.price == Decimal('18000.00')
        assert nasi_goreng.available_quantity == 4
        assert nasi_goreng.is_available is False
        assert MenuItem.objects.count() == 1
        assert ActivityLog.objects.filter(action=ActivityLog.Action.MENU_UPDATED).exists()

    def test_save_menu_unknown_item(self, db):
        with pytest.raises(MenuNotFound):
            StockService.save_menu('Soto', MenuItem.Category.FOOD, 1000, menu_id=999)

    @pytest.mark.parametrize('name, category, price, stock', [
        ('', MenuItem.Category.FOOD, 1000, 1),
        ('Soto', 'Dessert', 1000, 1),
        ('Soto', MenuItem.Category.FOOD, '-1', 1),
        ('Soto', MenuItem.Category.FOOD, 'abc', 1),
        ('Soto', MenuItem.Category.FOOD, 1000, -1),
        ('Soto', MenuItem.Category.FOOD, 1000, 1.5),
    ])
    def test_save_menu_rejects_bad_values(self, db, name, category, price, stock):
        with pytest.raises(InvalidArgument):
            StockService.save_menu(name, category, price, stock)
        assert not MenuItem.objects.exists()

    def test_orderable_menus(self, nasi_goreng, es_teh, mie_ayam):
        es_teh.is_available = False
        es_teh.save()
        mie_ayam.available_quantity = 0
        mie_ayam.save()

        assert StockService.get_orderable_menus() == [nasi_goreng]

    def test_menus_by_category(self, nasi_goreng, es_teh, mie_ayam):
        foods = StockService.get_menus_by_category(MenuItem.Category.FOOD)
        assert {m.name for m in foods} == {'Nasi Goreng', 'Mie Ayam'}

        stocked = StockService.get_menus_by_category(MenuItem.Category.FOOD, min_stock=10)
        assert [m.name for m in stocked] == ['Mie Ayam']


# ==============================================================================
# TABLE TESTS
# ==============================================================================

@pytest.mark.django_db
class TestTableService:
    """Tests for TableService."""

    def test_create_table(self, owner):
        table = TableService.create_table(' 7 ', staff=owner)
        assert table.number == '7'
        assert table.status == Table.Status.EMPTY
        assert ActivityLog.objects.filter(action=ActivityLog.Action.TABLE_CREATED).exists()

    def test_create_duplicate_table(self, table):
        with pytest.raises(DuplicateKey):
            TableService.create_table('1')

    def test_create_table_requires_number(self, db):
        with pytest.raises(InvalidArgument):
            TableService.create_table('')

    def test_get_missing_table(self, db):
        with pytest.raises(TableNotFound):
            TableService.get_table(999)

    def test_set_status(self, table):
        TableService.set_status(table.pk, Table.Status.OCCUPIED)
        table.refresh_from_db()
        assert table.status == Table.Status.OCCUPIED
        assert ActivityLog.objects.filter(action=ActivityLog.Action.TABLE_STATUS).count() == 1

    def test_set_same_status_is_noop(self, table):
        TableService.set_status(table.pk, Table.Status.EMPTY)
        assert not ActivityLog.objects.filter(action=ActivityLog.Action.TABLE_STATUS).exists()

    def test_set_unknown_status(self, table):
        with pytest.raises(InvalidArgument):
            TableService.set_status(table.pk, 'Broken')

    def test_tables_by_status(self, table, table_2):
        TableService.set_status(table_2.pk, Table.Status.OCCUPIED)
        assert TableService.get_empty_tables() == [table]
        assert len(TableService.get_empty_or_occupied_tables()) == 2

    def test_inactive_tables_hidden(self, table, table_2):
        TableService.set_active(table_2.pk, False)
        assert TableService.get_empty_tables() == [table]


# ==============================================================================
# CREATE ORDER TESTS
# ==============================================================================

@pytest.mark.django_db
class TestCreateOrder:
    """Tests for create_order method."""

    def test_create_order(self, table, waiter, nasi_goreng, es_teh):
        order = OrderService.create_order(table.pk, waiter.pk, [
            (nasi_goreng.pk, 2, 'not spicy'),
            {'menu_id': es_teh.pk, 'quantity': 3},
        ])

        assert order.status == Order.Status.WAITING
        assert order.is_paid is False
        assert order.item_count == 2
        assert order.total == Decimal('45000.00')

        detail = order.details.get(menu_item=nasi_goreng)
        assert detail.quantity == 2
        assert detail.unit_price == Decimal('15000.00')
        assert detail.note == 'not spicy'

        nasi_goreng.refresh_from_db()
        es_teh.refresh_from_db()
        assert nasi_goreng.available_quantity == 3
        assert es_teh.available_quantity == 7

    def test_create_order_occupies_table(self, table, waiter, nasi_goreng):
        OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 1)])
        table.refresh_from_db()
        assert table.status == Table.Status.OCCUPIED

    def test_create_order_logs_activity(self, table, waiter, nasi_goreng):
        order = OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 1)])
        assert ActivityLog.objects.filter(
            action=ActivityLog.Action.ORDER_CREATED, object_id=order.pk, staff=waiter,
        ).exists()

    def test_insufficient_stock_rolls_back_everything(self, table, waiter, nasi_goreng, es_teh):
        with pytest.raises(InsufficientStock):
            OrderService.create_order(table.pk, waiter.pk, [
                (es_teh.pk, 2),
                (nasi_goreng.pk, 6),
            ])

        es_teh.refresh_from_db()
        nasi_goreng.refresh_from_db()
        table.refresh_from_db()
        assert es_teh.available_quantity == 10
        assert nasi_goreng.available_quantity == 5
        assert table.status == Table.Status.EMPTY
        assert Order.objects.count() == 0
        assert OrderDetail.objects.count() == 0

    def test_unknown_menu_rolls_back(self, table, waiter, es_teh):
        with pytest.raises(MenuNotFound):
            OrderService.create_order(table.pk, waiter.pk, [(es_teh.pk, 1), (999, 1)])
        es_teh.refresh_from_db()
        assert es_teh.available_quantity == 10
        assert Order.objects.count() == 0

    def test_empty_items(self, table, waiter):
        with pytest.raises(InvalidArgument):
            OrderService.create_order(table.pk, waiter.pk, [])

    def test_unknown_table(self, waiter, nasi_goreng):
        with pytest.raises(TableNotFound):
            OrderService.create_order(999, waiter.pk, [(nasi_goreng.pk, 1)])

    def test_fractional_quantity_rejected(self, table, waiter, es_teh, nasi_goreng):
        with pytest.raises(InvalidArgument):
            OrderService.create_order(table.pk, waiter.pk, [(es_teh.pk, 1), (nasi_goreng.pk, 2.9, '')])

        es_teh.refresh_from_db()
        nasi_goreng.refresh_from_db()
        assert es_teh.available_quantity == 10
        assert nasi_goreng.available_quantity == 5
        assert not OrderDetail.objects.exists()

    def test_whole_float_quantity_stored_as_int(self, table, waiter, nasi_goreng):
        order = OrderService.create_order(table.pk, waiter.pk, [{'menu_id': str(nasi_goreng.pk), 'quantity': 2.0}])
        assert order.details.get().quantity == 2

    @pytest.mark.parametrize('table_id', ['x', None, '1.5'])
    def test_bad_table_id(self, waiter, nasi_goreng, table_id):
        with pytest.raises(InvalidArgument):
            OrderService.create_order(table_id, waiter.pk, [(nasi_goreng.pk, 1)])

    def test_bad_menu_id_rolls_back(self, table, waiter, es_teh):
        with pytest.raises(InvalidArgument):
            OrderService.create_order(table.pk, waiter.pk, [(es_teh.pk, 1), {'menu_id': 'abc'}])
        es_teh.refresh_from_db()
        assert es_teh.available_quantity == 10
        assert not Order.objects.exists()

    def test_same_menu_twice_makes_two_lines(self, table, waiter, nasi_goreng):
        order = OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 1), (nasi_goreng.pk, 2)])
        assert order.details.count() == 2
        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 2


# ==============================================================================
# ORDER LINE TESTS
# ==============================================================================

@pytest.mark.django_db
class TestOrderDetails:
    """Tests for add_detail and remove_detail."""

    @pytest.fixture
    def order(self, table, waiter, nasi_goreng):
        return OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 1)])

    def test_add_detail(self, order, es_teh, waiter):
        detail = OrderService.add_detail(order.pk, es_teh.pk, 2, 'less ice', staff=waiter)
        assert detail.unit_price == Decimal('5000.00')
        assert order.details.count() == 2
        es_teh.refresh_from_db()
        assert es_teh.available_quantity == 8

    def test_add_detail_insufficient_stock(self, order, nasi_goreng):
        with pytest.raises(InsufficientStock):
            OrderService.add_detail(order.pk, nasi_goreng.pk, 5)
        assert order.details.count() == 1

    def test_add_detail_to_missing_order(self, nasi_goreng):
        with pytest.raises(OrderNotFound):
            OrderService.add_detail(999, nasi_goreng.pk, 1)

    def test_add_detail_fractional_quantity(self, order, es_teh):
        with pytest.raises(InvalidArgument):
            OrderService.add_detail(order.pk, es_teh.pk, 1.5)
        assert order.details.count() == 1
        es_teh.refresh_from_db()
        assert es_teh.available_quantity == 10

    def test_add_detail_to_closed_order(self, order, es_teh):
        OrderService.cancel_order(order.pk)
        with pytest.raises(OrderNotEditable):
            OrderService.add_detail(order.pk, es_teh.pk, 1)

    def test_remove_detail_restores_stock(self, order, nasi_goreng):
        detail = order.details.get()
        assert OrderService.remove_detail(detail.pk) is True

        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 5
        assert order.details.count() == 0

    def test_remove_missing_detail(self, db):
        assert OrderService.remove_detail(999) is False


# ==============================================================================
# CANCEL TESTS
# ==============================================================================

@pytest.mark.django_db
class TestCancelOrder:
    """Tests for cancel_order method."""

    def test_cancel_restores_stock(self, table, waiter, nasi_goreng, es_teh):
        order = OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 3), (es_teh.pk, 4)])

        assert OrderService.cancel_order(order.pk) is True

        order.refresh_from_db()
        nasi_goreng.refresh_from_db()
        es_teh.refresh_from_db()
        assert order.status == Order.Status.CANCELLED
        assert nasi_goreng.available_quantity == 5
        assert es_teh.available_quantity == 10
        assert order.details.count() == 2

    def test_cancel_releases_table(self, table, waiter, nasi_goreng):
        order = OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 1)])
        OrderService.cancel_order(order.pk)
        table.refresh_from_db()
        assert table.status == Table.Status.EMPTY

    def test_cancel_keeps_table_with_other_open_order(self, table, waiter, nasi_goreng, es_teh):
        first = OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 1)])
        OrderService.create_order(table.pk, waiter.pk, [(es_teh.pk, 1)])
        OrderService.cancel_order(first.pk)
        table.refresh_from_db()
        assert table.status == Table.Status.OCCUPIED

    def test_cancel_keeps_table_when_release_disabled(self, table, waiter, nasi_goreng):
        config = RestoSettings.get_settings()
        config.release_table_on_close = False
        config.save()

        order = OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 1)])
        OrderService.cancel_order(order.pk)
        table.refresh_from_db()
        assert table.status == Table.Status.OCCUPIED

    def test_cancel_missing_order(self, db):
        assert OrderService.cancel_order(999) is False

    def test_cancel_bad_id(self, db):
        with pytest.raises(InvalidArgument):
            OrderService.cancel_order('abc')

    def test_cancel_twice(self, table, waiter, nasi_goreng):
        order = OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 2)])
        assert OrderService.cancel_order(order.pk) is True
        assert OrderService.cancel_order(order.pk) is False
        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 5

    def test_cannot_cancel_once_preparing(self, table, waiter, nasi_goreng):
        order = OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 2)])
        OrderService.set_status(order.pk, Order.Status.BEING_PREPARED)

        assert OrderService.cancel_order(order.pk) is False
        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 3


# ==============================================================================
# STATUS TESTS
# ==============================================================================

@pytest.mark.django_db
class TestSetStatus:
    """Tests for set_status method."""

    @pytest.fixture
    def order(self, table, waiter, nasi_goreng):
        return OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 1)])

    def test_full_kitchen_flow(self, order, table):
        for status in (Order.Status.BEING_PREPARED, Order.Status.DONE, Order.Status.DELIVERED):
            OrderService.set_status(order.pk, status)
            order.refresh_from_db()
            assert order.status == status

        table.refresh_from_db()
        assert table.status == Table.Status.OCCUPIED
        assert ActivityLog.objects.filter(action=ActivityLog.Action.ORDER_STATUS).count() == 3

    def test_skipping_a_step(self, order):
        with pytest.raises(InvalidTransition):
            OrderService.set_status(order.pk, Order.Status.DELIVERED)

    def test_cannot_set_paid(self, delivered_order):
        with pytest.raises(InvalidTransition):
            OrderService.set_status(delivered_order.pk, Order.Status.PAID)

    def test_cannot_set_cancelled(self, order):
        with pytest.raises(InvalidTransition):
            OrderService.set_status(order.pk, Order.Status.CANCELLED)

    def test_unknown_status(self, order):
        with pytest.raises(InvalidArgument):
            OrderService.set_status(order.pk, 'Lost')

    def test_missing_order(self, db):
        with pytest.raises(OrderNotFound):
            OrderService.set_status(999, Order.Status.DONE)


# ==============================================================================
# QUERY TESTS
# ==============================================================================

@pytest.mark.django_db
class TestOrderQueries:
    """Tests for order listing queries."""

    def test_active_orders(self, delivered_order, table_2, waiter, es_teh):
        waiting = OrderService.create_order(table_2.pk, waiter.pk, [(es_teh.pk, 1)])
        cancelled = OrderService.create_order(table_2.pk, waiter.pk, [(es_teh.pk, 1)])
        OrderService.cancel_order(cancelled.pk)

        active = OrderService.get_active_orders()
        assert delivered_order in active
        assert waiting in active
        assert cancelled not in active

    def test_orders_by_table_number(self, delivered_order):
        assert OrderService.get_orders_by_table_number('1') == [delivered_order]
        assert OrderService.get_orders_by_table_number('9') == []

    def test_orders_by_paid(self, delivered_order):
        assert OrderService.get_orders_by_paid(False) == [delivered_order]
        assert OrderService.get_orders_by_paid(True) == []

    def test_orders_by_status(self, delivered_order):
        assert OrderService.get_orders_by_status(Order.Status.DELIVERED) == [delivered_order]

    def test_orders_by_staff_and_date(self, delivered_order, waiter, cashier):
        today = timezone.localdate()
        assert OrderService.get_orders_by_staff_and_date(waiter.pk, today) == [delivered_order]
        assert OrderService.get_orders_by_staff_and_date(cashier.pk, today) == []

    def test_order_stats(self, delivered_order, table_2, waiter, es_teh):
        cancelled = OrderService.create_order(table_2.pk, waiter.pk, [(es_teh.pk, 1)])
        OrderService.cancel_order(cancelled.pk)

        stats = OrderService.get_order_stats(timezone.localdate())
        assert stats['total_orders'] == 2
        assert stats['cancelled'] == 1
        assert stats['open'] == 1
        assert stats['paid'] == 0


# ==============================================================================
# SCENARIO TESTS
# ==============================================================================

@pytest.mark.django_db
class TestScenarios:
    """End-to-end order flows."""

    def test_second_order_exceeding_stock_fails(self, table, table_2, waiter, nasi_goreng):
        OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 3)])
        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 2

        with pytest.raises(InsufficientStock):
            OrderService.create_order(table_2.pk, waiter.pk, [(nasi_goreng.pk, 3)])

        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 2
        assert Order.objects.count() == 1

    def test_cancelling_done_order_rejected(self, table, waiter, nasi_goreng):
        order = OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 1)])
        OrderService.set_status(order.pk, Order.Status.BEING_PREPARED)
        OrderService.set_status(order.pk, Order.Status.DONE)

        assert OrderService.cancel_order(order.pk) is False
        order.refresh_from_db()
        assert order.status == Order.Status.DONE

    def test_stock_never_negative(self, table, waiter, nasi_goreng):
        order = OrderService.create_order(table.pk, waiter.pk, [(nasi_goreng.pk, 5)])
        for _ in range(3):
            with pytest.raises(InsufficientStock):
                OrderService.add_detail(order.pk, nasi_goreng.pk, 1)
        OrderService.remove_detail(order.details.get().pk)
        OrderService.add_detail(order.pk, nasi_goreng.pk, 4)

        nasi_goreng.refresh_from_db()
        assert nasi_goreng.available_quantity == 1
