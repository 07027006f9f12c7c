"""
Pytest fixtures for Resto module tests.
"""

import pytest
from decimal import Decimal

from resto.models import MenuItem, Order, OrderDetail, Table, StaffMember
from resto.services import StaffService


@pytest.fixture(autouse=True)
def fast_password_hasher(settings):
    """Hash staff passwords cheaply."""
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']


@pytest.fixture
def owner(db):
    return StaffService.create_staff('pemilik', 'Budi', StaffMember.Role.OWNER, 'secret')


@pytest.fixture
def waiter(db):
    return StaffService.create_staff('pelayan', 'Sari', StaffMember.Role.WAITER, 'secret')


@pytest.fixture
def cashier(db):
    return StaffService.create_staff('kasir', 'Dewi', StaffMember.Role.CASHIER, 'secret')


@pytest.fixture
def cook(db):
    return StaffService.create_staff('koki', 'Agus', StaffMember.Role.COOK, 'secret')


@pytest.fixture
def table(db):
    return Table.objects.create(number='1')


@pytest.fixture
def table_2(db):
    return Table.objects.create(number='2')


@pytest.fixture
def nasi_goreng(db):
    return MenuItem.objects.create(
        name='Nasi Goreng',
        category=MenuItem.Category.FOOD,
        price=Decimal('15000.00'),
        available_quantity=5,
    )


@pytest.fixture
def es_teh(db):
    return MenuItem.objects.create(
        name='Es Teh',
        category=MenuItem.Category.DRINK,
        price=Decimal('5000.00'),
        available_quantity=10,
    )


@pytest.fixture
def mie_ayam(db):
    return MenuItem.objects.create(
        name='Mie Ayam',
        category=MenuItem.Category.FOOD,
        price=Decimal('10000.00'),
        available_quantity=20,
    )


@pytest.fixture
def delivered_order(table, waiter, mie_ayam, nasi_goreng):
    """Delivered order worth 10000 x 2 + 15000 x 1 = 35000."""
    table.status = Table.Status.OCCUPIED
    table.save()
    order = Order.objects.create(table=table, staff=waiter, status=Order.Status.DELIVERED)
    OrderDetail.objects.create(order=order, menu_item=mie_ayam, quantity=2, unit_price=Decimal('10000.00'))
    OrderDetail.objects.create(order=order, menu_item=nasi_goreng, quantity=1, unit_price=Decimal('15000.00'))
    return order


def _login(client, staff):
    session = client.session
    session['staff_id'] = staff.pk
    session['user_name'] = staff.username
    session['user_role'] = staff.role
    session.save()
    return client


@pytest.fixture
def auth_client(client, owner):
    """Return a client logged in as the owner."""
    return _login(client, owner)


@pytest.fixture
def waiter_client(client, waiter):
    return _login(client, waiter)


@pytest.fixture
def cashier_client(client, cashier):
    return _login(client, cashier)


@pytest.fixture
def cook_client(client, cook):
    return _login(client, cook)
