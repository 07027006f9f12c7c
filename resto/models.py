"""
Resto Module Models

Restaurant point of sale records.
Features:
- Tables with occupancy status
- Menu items with a stock ledger (available quantity)
- Orders with order-detail lines carrying a unit price snapshot
- Payments with daily sequential receipt numbers
- Reservations for empty tables
- Staff members with hashed credentials and roles
- Activity log of every change

Status columns store the textual names used by the restaurant's database
(``Kosong``, ``Menunggu``, ...); in code they are ``TextChoices`` members.
"""

from decimal import Decimal

from django.contrib.auth.hashers import check_password, make_password
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# =============================================================================
# Settings
# =============================================================================

class RestoSettings(TimeStampedModel):
    """Runtime configuration, a single row."""

    release_table_on_close = models.BooleanField(
        default=True,
        verbose_name=_('Release Table On Close'),
        help_text=_('Mark the table empty once its last open order is paid or cancelled'),
    )
    low_stock_threshold = models.PositiveIntegerField(
        default=5,
        verbose_name=_('Low Stock Threshold'),
    )
    notify_clients = models.BooleanField(
        default=True,
        verbose_name=_('Realtime Notifications'),
        help_text=_('Push table, order and stock changes to open screens'),
    )

    class Meta:
        db_table = 'resto_settings'
        verbose_name = _('Resto Settings')
        verbose_name_plural = _('Resto Settings')

    def __str__(self):
        return "Resto Settings"

    @classmethod
    def get_settings(cls):
        settings, _ = cls.objects.get_or_create(pk=1)
        return settings


# =============================================================================
# Staff
# =============================================================================

class StaffMember(TimeStampedModel):
    """Pegawai: someone who can log in to the POS."""

    class Role(models.TextChoices):
        CASHIER = 'Kasir', _('Cashier')
        WAITER = 'Pelayan', _('Waiter')
        COOK = 'Koki', _('Cook')
        OWNER = 'Pemilik', _('Owner')

    username = models.CharField(max_length=50, unique=True, verbose_name=_('Username'))
    display_name = models.CharField(max_length=100, verbose_name=_('Name'))
    role = models.CharField(
        max_length=20, choices=Role.choices,
        default=Role.WAITER, verbose_name=_('Role'),
    )
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))
    password_hash = models.CharField(max_length=128, verbose_name=_('Password Hash'))

    class Meta:
        db_table = 'resto_staff'
        verbose_name = _('Staff Member')
        verbose_name_plural = _('Staff Members')
        ordering = ['display_name']

    def __str__(self):
        return self.display_name or self.username

    def set_password(self, raw_password):
        self.password_hash = make_password(raw_password)

    def check_password(self, raw_password):
        return check_password(raw_password, self.password_hash)


# =============================================================================
# Tables
# =============================================================================

class Table(TimeStampedModel):
    """Meja."""

    class Status(models.TextChoices):
        EMPTY = 'Kosong', _('Empty')
        RESERVED = 'Dipesan', _('Reserved')
        OCCUPIED = 'Ditempati', _('Occupied')
        BEING_PREPARED = 'Disiapkan', _('Being Prepared')

    number = models.CharField(max_length=10, unique=True, verbose_name=_('Table Number'))
    status = models.CharField(
        max_length=20, choices=Status.choices,
        default=Status.EMPTY, verbose_name=_('Status'),
    )
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))

    class Meta:
        db_table = 'resto_table'
        verbose_name = _('Table')
        verbose_name_plural = _('Tables')
        ordering = ['number']

    def __str__(self):
        return f"Table {self.number}"

    @property
    def open_orders(self):
        return self.orders.filter(status__in=Order.OPEN_STATUSES)


# =============================================================================
# Menu
# =============================================================================

class MenuItem(TimeStampedModel):
    """Menu entry and its stock ledger."""

    class Category(models.TextChoices):
        FOOD = 'Makanan', _('Food')
        DRINK = 'Minuman', _('Drink')
        SNACK = 'Camilan', _('Snack')

    name = models.CharField(max_length=100, verbose_name=_('Name'))
    category = models.CharField(
        max_length=20, choices=Category.choices,
        default=Category.FOOD, verbose_name=_('Category'),
    )
    price = models.DecimalField(
        max_digits=12, decimal_places=2,
        default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Price'),
    )
    available_quantity = models.PositiveIntegerField(default=0, verbose_name=_('Available Stock'))
    is_available = models.BooleanField(default=True, verbose_name=_('Available'))

    class Meta:
        db_table = 'resto_menu_item'
        verbose_name = _('Menu Item')
        verbose_name_plural = _('Menu Items')
        ordering = ['category', 'name']

    def __str__(self):
        return self.name

    @property
    def is_orderable(self):
        return self.is_available and self.available_quantity > 0

    @property
    def is_low_stock(self):
        threshold = RestoSettings.get_settings().low_stock_threshold
        return self.available_quantity <= threshold


class Ingredient(TimeStampedModel):
    """Raw ingredient on hand (stok bahan)."""

    name = models.CharField(max_length=100, unique=True, verbose_name=_('Name'))
    quantity = models.DecimalField(
        max_digits=12, decimal_places=3,
        default=Decimal('0'), validators=[MinValueValidator(Decimal('0'))],
        verbose_name=_('Quantity'),
    )
    unit = models.CharField(max_length=20, blank=True, default='', verbose_name=_('Unit'))

    class Meta:
        db_table = 'resto_ingredient'
        verbose_name = _('Ingredient')
        verbose_name_plural = _('Ingredients')
        ordering = ['name']

    def __str__(self):
        return self.name


class MenuIngredient(TimeStampedModel):
    """How much of an ingredient one portion of a menu item uses."""

    menu_item = models.ForeignKey(
        MenuItem, on_delete=models.CASCADE,
        related_name='recipe', verbose_name=_('Menu Item'),
    )
    ingredient = models.ForeignKey(
        Ingredient, on_delete=models.PROTECT,
        related_name='menu_uses', verbose_name=_('Ingredient'),
    )
    quantity_required = models.DecimalField(
        max_digits=12, decimal_places=3,
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name=_('Quantity Required'),
    )

    class Meta:
        db_table = 'resto_menu_ingredient'
        verbose_name = _('Recipe Line')
        verbose_name_plural = _('Recipe Lines')
        ordering = ['menu_item', 'ingredient__name']
        constraints = [
            models.UniqueConstraint(
                fields=['menu_item', 'ingredient'], name='resto_menu_ingredient_unique',
            ),
        ]

    def __str__(self):
        return f"{self.menu_item}: {self.quantity_required} x {self.ingredient}"


# =============================================================================
# Orders
# =============================================================================

class Order(TimeStampedModel):
    """Pesanan placed for a table."""

    class Status(models.TextChoices):
        WAITING = 'Menunggu', _('Waiting')
        CANCELLED = 'Dibatalkan', _('Cancelled')
        BEING_PREPARED = 'Disiapkan', _('Being Prepared')
        DONE = 'Selesai', _('Done')
        DELIVERED = 'Diantarkan', _('Delivered')
        PAID = 'Dibayar', _('Paid')

    TRANSITIONS = {
        Status.WAITING: (Status.BEING_PREPARED, Status.CANCELLED),
        Status.BEING_PREPARED: (Status.DONE,),
        Status.DONE: (Status.DELIVERED,),
        Status.DELIVERED: (Status.PAID,),
        Status.CANCELLED: (),
        Status.PAID: (),
    }

    OPEN_STATUSES = [
        Status.WAITING, Status.BEING_PREPARED, Status.DONE, Status.DELIVERED,
    ]

    table = models.ForeignKey(
        Table, on_delete=models.PROTECT,
        related_name='orders', verbose_name=_('Table'),
    )
    staff = models.ForeignKey(
        StaffMember, on_delete=models.PROTECT,
        related_name='orders', verbose_name=_('Staff'),
    )
    status = models.CharField(
        max_length=20, choices=Status.choices,
        default=Status.WAITING, verbose_name=_('Status'),
    )
    is_paid = models.BooleanField(default=False, verbose_name=_('Paid'))

    class Meta:
        db_table = 'resto_order'
        verbose_name = _('Order')
        verbose_name_plural = _('Orders')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='resto_order_status_idx'),
            models.Index(fields=['created_at'], name='resto_order_created_idx'),
        ]

    def __str__(self):
        return f"Order #{self.pk} ({self.table})"

    @property
    def total(self):
        return sum((detail.subtotal for detail in self.details.all()), Decimal('0.00'))

    @property
    def item_count(self):
        return self.details.count()

    @property
    def is_editable(self):
        return self.status in self.OPEN_STATUSES

    def can_transition_to(self, status):
        return status in self.TRANSITIONS.get(self.Status(self.status), ())


class OrderDetail(TimeStampedModel):
    """DetailPesanan: one menu line of an order."""

    # Deleting an order deletes its lines
    order = models.ForeignKey(
        Order, on_delete=models.CASCADE,
        related_name='details', verbose_name=_('Order'),
    )
    menu_item = models.ForeignKey(
        MenuItem, on_delete=models.PROTECT,
        related_name='order_details', verbose_name=_('Menu Item'),
    )
    quantity = models.PositiveIntegerField(
        default=1, validators=[MinValueValidator(1)],
        verbose_name=_('Quantity'),
    )
    # Price at the time of ordering; never recalculated from the menu
    unit_price = models.DecimalField(
        max_digits=12, decimal_places=2,
        default=Decimal('0.00'), verbose_name=_('Unit Price'),
    )
    note = models.CharField(max_length=255, blank=True, default='', verbose_name=_('Note'))

    class Meta:
        db_table = 'resto_order_detail'
        verbose_name = _('Order Detail')
        verbose_name_plural = _('Order Details')
        ordering = ['created_at', 'pk']

    def __str__(self):
        return f"{self.quantity}x {self.menu_item.name}"

    @property
    def subtotal(self):
        return self.unit_price * self.quantity


# =============================================================================
# Payments
# =============================================================================

class ReceiptSequence(models.Model):
    """Last receipt sequence issued on a calendar day."""

    date = models.DateField(unique=True)
    last = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'resto_receipt_sequence'
        ordering = ['-date']

    def __str__(self):
        return f"{self.date}: {self.last}"


class Payment(TimeStampedModel):
    """Pembayaran recorded against one order."""

    class Method(models.TextChoices):
        CASH = 'Cash', _('Cash')
        CARD = 'Card', _('Card')
        QRIS = 'QRIS', _('QRIS')
        BANK_TRANSFER = 'BankTransfer', _('Bank Transfer')
        E_WALLET = 'EWallet', _('E-Wallet')

    order = models.ForeignKey(
        Order, on_delete=models.PROTECT,
        related_name='payments', verbose_name=_('Order'),
    )
    staff = models.ForeignKey(
        StaffMember, on_delete=models.PROTECT,
        related_name='payments', verbose_name=_('Staff'),
    )
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, verbose_name=_('Amount Paid'))
    method = models.CharField(
        max_length=20, choices=Method.choices,
        default=Method.CASH, verbose_name=_('Method'),
    )
    receipt_number = models.CharField(max_length=20, unique=True, verbose_name=_('Receipt Number'))
    paid_at = models.DateTimeField(default=timezone.now, verbose_name=_('Paid At'))
    is_successful = models.BooleanField(default=True, verbose_name=_('Successful'))

    class Meta:
        db_table = 'resto_payment'
        verbose_name = _('Payment')
        verbose_name_plural = _('Payments')
        ordering = ['-paid_at', '-receipt_number']

    def __str__(self):
        return f"Receipt {self.receipt_number}"

    @property
    def change_due(self):
        return self.amount_paid - self.order.total

    @staticmethod
    def format_receipt_number(date, sequence):
        return f"{date:%Y%m%d}-{sequence:04d}"


# =============================================================================
# Reservations
# =============================================================================

class Reservation(TimeStampedModel):
    """Reservasi of a table."""

    class Status(models.TextChoices):
        WAITING = 'Menunggu', _('Waiting')
        CONFIRMED = 'Dikonfirmasi', _('Confirmed')
        DONE = 'Selesai', _('Done')
        CANCELLED = 'Dibatalkan', _('Cancelled')

    ACTIVE_STATUSES = [Status.WAITING, Status.CONFIRMED]

    table = models.ForeignKey(
        Table, on_delete=models.PROTECT,
        related_name='reservations', verbose_name=_('Table'),
    )
    staff = models.ForeignKey(
        StaffMember, on_delete=models.PROTECT,
        related_name='reservations', verbose_name=_('Staff'),
    )
    reserved_for = models.DateTimeField(verbose_name=_('Reserved For'))
    customer_name = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Customer'))
    status = models.CharField(
        max_length=20, choices=Status.choices,
        default=Status.WAITING, verbose_name=_('Status'),
    )

    class Meta:
        db_table = 'resto_reservation'
        verbose_name = _('Reservation')
        verbose_name_plural = _('Reservations')
        ordering = ['reserved_for']

    def __str__(self):
        return f"{self.table} @ {self.reserved_for:%Y-%m-%d %H:%M}"


# =============================================================================
# Activity Log
# =============================================================================

class ActivityLog(models.Model):
    """Append-only record of who changed what."""

    class Action(models.TextChoices):
        LOGIN = 'login', _('Login')
        ORDER_CREATED = 'order_created', _('Order created')
        DETAIL_ADDED = 'detail_added', _('Item added')
        DETAIL_REMOVED = 'detail_removed', _('Item removed')
        ORDER_CANCELLED = 'order_cancelled', _('Order cancelled')
        ORDER_STATUS = 'order_status', _('Order status changed')
        PAYMENT = 'payment', _('Payment recorded')
        PAYMENT_FAILED = 'payment_failed', _('Payment marked failed')
        TABLE_STATUS = 'table_status', _('Table status changed')
        TABLE_CREATED = 'table_created', _('Table created')
        STOCK = 'stock', _('Stock updated')
        RESERVATION = 'reservation', _('Reservation')
        MENU_CREATED = 'menu_created', _('Menu item added')
        MENU_UPDATED = 'menu_updated', _('Menu item updated')
        INGREDIENT = 'ingredient', _('Ingredient updated')
        RECIPE = 'recipe', _('Recipe changed')

    staff = models.ForeignKey(
        StaffMember, on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='activities', verbose_name=_('Staff'),
    )
    action = models.CharField(max_length=30, choices=Action.choices, verbose_name=_('Action'))
    message = models.TextField(blank=True, default='', verbose_name=_('Message'))
    object_id = models.PositiveBigIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'resto_activity_log'
        verbose_name = _('Activity')
        verbose_name_plural = _('Activity Log')
        ordering = ['-created_at', '-pk']

    def __str__(self):
        return f"{self.get_action_display()}: {self.message}"

    @classmethod
    def record(cls, action, message='', staff=None, object_id=None):
        return cls.objects.create(
            action=action,
            message=message,
            staff=staff,
            object_id=object_id,
        )
