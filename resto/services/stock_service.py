"""
Stock Service

Menu stock ledger. Every change is a single conditional UPDATE, so two
requests reserving the same menu item can never drive its stock below zero.
"""

import logging
from typing import List, Optional

from django.db import transaction
from django.db.models import F

from ..exceptions import InsufficientStock, InvalidArgument, MenuNotFound
from ..models import ActivityLog, MenuItem
from ..signals import notify_stock_changed
from .validation import check_count, check_decimal, check_id, check_quantity

logger = logging.getLogger(__name__)


class StockService:
    """Service for menu stock."""

    @staticmethod
    def get_menu(menu_id: int) -> MenuItem:
        menu_id = check_id(menu_id, 'menu id')
        try:
            return MenuItem.objects.get(pk=menu_id)
        except MenuItem.DoesNotExist:
            raise MenuNotFound(f"Menu item {menu_id} not found")

    @staticmethod
    @transaction.atomic
    def reserve(menu_id: int, quantity: int) -> MenuItem:
        """
        Take ``quantity`` portions out of stock.

        Raises InsufficientStock without touching the row when fewer
        portions are available.
        """
        menu_id = check_id(menu_id, 'menu id')
        quantity = check_quantity(quantity)
        updated = MenuItem.objects.filter(
            pk=menu_id, available_quantity__gte=quantity,
        ).update(available_quantity=F('available_quantity') - quantity)

        menu = StockService.get_menu(menu_id)
        if not updated:
            logger.warning(
                "Insufficient stock for %s: requested %s, available %s",
                menu.name, quantity, menu.available_quantity,
            )
            raise InsufficientStock(menu, quantity)

        notify_stock_changed()
        return menu

    @staticmethod
    @transaction.atomic
    def release(menu_id: int, quantity: int) -> MenuItem:
        """Put ``quantity`` portions back into stock."""
        menu_id = check_id(menu_id, 'menu id')
        quantity = check_quantity(quantity)
        updated = MenuItem.objects.filter(pk=menu_id).update(
            available_quantity=F('available_quantity') + quantity,
        )
        if not updated:
            raise MenuNotFound(f"Menu item {menu_id} not found")

        notify_stock_changed()
        return StockService.get_menu(menu_id)

    @staticmethod
    @transaction.atomic
    def set_stock(menu_id: int, quantity: int, is_available: Optional[bool] = None, staff=None) -> MenuItem:
        """Overwrite the stock count (and optionally the availability flag)."""
        quantity = check_count(quantity)

        menu = StockService.get_menu(menu_id)
        menu.available_quantity = quantity
        update_fields = ['available_quantity', 'updated_at']
        if is_available is not None:
            menu.is_available = is_available
            update_fields.append('is_available')
        menu.save(update_fields=update_fields)

        ActivityLog.record(
            ActivityLog.Action.STOCK,
            f"{menu.name}: stock set to {menu.available_quantity}",
            staff=staff, object_id=menu.pk,
        )
        logger.info("Stock of %s set to %s", menu.name, menu.available_quantity)
        notify_stock_changed()
        return menu

    @staticmethod
    @transaction.atomic
    def save_menu(
        name: str,
        category: str,
        price,
        available_quantity: int = 0,
        is_available: bool = True,
        menu_id: Optional[int] = None,
        staff=None,
    ) -> MenuItem:
        """
        Add a menu item, or overwrite every field of an existing one.

        Args:
            menu_id: Item to update; ``None`` adds a new item

        Returns:
            The saved MenuItem
        """
        name = (name or '').strip()
        if not name:
            raise InvalidArgument("Menu name is required")
        if category not in MenuItem.Category.values:
            raise InvalidArgument(f"Unknown menu category {category!r}")
        price = check_decimal(price, 'price')
        available_quantity = check_count(available_quantity)

        if menu_id is None:
            menu = MenuItem()
            action = ActivityLog.Action.MENU_CREATED
        else:
            menu = MenuItem.objects.select_for_update().filter(pk=check_id(menu_id, 'menu id')).first()
            if menu is None:
                raise MenuNotFound(f"Menu item {menu_id} not found")
            action = ActivityLog.Action.MENU_UPDATED

        menu.name = name
        menu.category = category
        menu.price = price
        menu.available_quantity = available_quantity
        menu.is_available = bool(is_available)
        menu.save()

        ActivityLog.record(action, f"{menu.name} ({menu.price})", staff=staff, object_id=menu.pk)
        logger.info("Saved menu item %s", menu.name)
        notify_stock_changed()
        return menu

    # ---- Queries ----

    @staticmethod
    def get_orderable_menus() -> List[MenuItem]:
        """Menu items that are switched on and still in stock."""
        return list(MenuItem.objects.filter(is_available=True, available_quantity__gt=0))

    @staticmethod
    def get_menus_by_category(category: str, min_stock: Optional[int] = None) -> List[MenuItem]:
        qs = MenuItem.objects.filter(category=category)
        if min_stock is not None:
            qs = qs.filter(available_quantity__gte=min_stock)
        return list(qs)
