"""
Ingredient Service

Raw ingredient stock and the recipe of each menu item (which ingredients a
portion uses and how much of each). Ordering draws on menu stock only; the
recipe is kept for the kitchen and for restocking.
"""

import logging
from typing import List, Optional

from django.db import IntegrityError, transaction

from ..exceptions import DuplicateKey, IngredientNotFound, InvalidArgument
from ..models import ActivityLog, Ingredient, MenuIngredient
from .stock_service import StockService
from .validation import check_decimal, check_id

logger = logging.getLogger(__name__)


class IngredientService:
    """Service for ingredients and recipes."""

    @staticmethod
    def get_ingredient(ingredient_id: int) -> Ingredient:
        ingredient_id = check_id(ingredient_id, 'ingredient id')
        try:
            return Ingredient.objects.get(pk=ingredient_id)
        except Ingredient.DoesNotExist:
            raise IngredientNotFound(f"Ingredient {ingredient_id} not found")

    @staticmethod
    def get_all_ingredients() -> List[Ingredient]:
        return list(Ingredient.objects.all())

    @staticmethod
    @transaction.atomic
    def save_ingredient(name: str, quantity, unit: str = '',
                        ingredient_id: Optional[int] = None, staff=None) -> Ingredient:
        """Add an ingredient, or overwrite name, quantity and unit of an existing one."""
        name = (name or '').strip()
        if not name:
            raise InvalidArgument("Ingredient name is required")
        quantity = check_decimal(quantity, 'quantity')

        if ingredient_id is None:
            ingredient = Ingredient()
        else:
            ingredient = IngredientService.get_ingredient(ingredient_id)
        if Ingredient.objects.filter(name__iexact=name).exclude(pk=ingredient.pk).exists():
            raise DuplicateKey(f"Ingredient {name} already exists")

        ingredient.name = name
        ingredient.quantity = quantity
        ingredient.unit = (unit or '').strip()
        try:
            with transaction.atomic():
                ingredient.save()
        except IntegrityError:
            raise DuplicateKey(f"Ingredient {name} already exists")

        ActivityLog.record(
            ActivityLog.Action.INGREDIENT,
            f"{ingredient.name}: {ingredient.quantity} {ingredient.unit}".rstrip(),
            staff=staff, object_id=ingredient.pk,
        )
        logger.info("Saved ingredient %s", ingredient.name)
        return ingredient

    # ---- Recipes ----

    @staticmethod
    @transaction.atomic
    def set_menu_ingredient(menu_id: int, ingredient_id: int, quantity_required, staff=None) -> MenuIngredient:
        """Add an ingredient to a menu item's recipe, or change the amount it needs."""
        quantity_required = check_decimal(quantity_required, 'quantity', allow_zero=False)
        menu = StockService.get_menu(menu_id)
        ingredient = IngredientService.get_ingredient(ingredient_id)

        line, _ = MenuIngredient.objects.select_for_update().get_or_create(
            menu_item=menu, ingredient=ingredient,
            defaults={'quantity_required': quantity_required},
        )
        if line.quantity_required != quantity_required:
            line.quantity_required = quantity_required
            line.save(update_fields=['quantity_required', 'updated_at'])

        ActivityLog.record(
            ActivityLog.Action.RECIPE,
            f"{menu.name}: {ingredient.name} x {quantity_required}",
            staff=staff, object_id=menu.pk,
        )
        return line

    @staticmethod
    def get_menu_ingredients(menu_id: int) -> List[MenuIngredient]:
        menu_id = check_id(menu_id, 'menu id')
        return list(MenuIngredient.objects.filter(menu_item_id=menu_id).select_related('ingredient'))

    @staticmethod
    @transaction.atomic
    def remove_menu_ingredient(menu_id: int, ingredient_id: int, staff=None) -> bool:
        """Drop an ingredient from a recipe. False if it was not part of it."""
        menu_id = check_id(menu_id, 'menu id')
        ingredient_id = check_id(ingredient_id, 'ingredient id')
        line = MenuIngredient.objects.select_related('menu_item', 'ingredient').filter(
            menu_item_id=menu_id, ingredient_id=ingredient_id,
        ).first()
        if line is None:
            return False

        description = f"{line.menu_item.name}: -{line.ingredient.name}"
        line.delete()
        ActivityLog.record(ActivityLog.Action.RECIPE, description, staff=staff, object_id=menu_id)
        return True
