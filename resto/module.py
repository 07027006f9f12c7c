"""
Resto Module Configuration

Point of sale for a single restaurant: tables, menu stock, orders,
payments and reservations.
"""
from django.utils.translation import gettext_lazy as _

MODULE_ID = "resto"
MODULE_NAME = _("Resto")
MODULE_ICON = "restaurant-outline"
MODULE_VERSION = "1.0.0"
MODULE_CATEGORY = "pos"

MENU = {
    "label": _("Resto"),
    "icon": "restaurant-outline",
    "order": 10,
    "show": True,
}

NAVIGATION = [
    {"id": "tables", "label": _("Tables"), "icon": "grid-outline", "view": ""},
    {"id": "menu", "label": _("Menu"), "icon": "fast-food-outline", "view": "menu"},
    {"id": "ingredients", "label": _("Ingredients"), "icon": "nutrition-outline", "view": "ingredients"},
    {"id": "orders", "label": _("Orders"), "icon": "clipboard-outline", "view": "orders"},
    {"id": "payments", "label": _("Payments"), "icon": "cash-outline", "view": "payments"},
    {"id": "reservations", "label": _("Reservations"), "icon": "calendar-outline", "view": "reservations"},
    {"id": "activity", "label": _("Activity"), "icon": "list-outline", "view": "activity"},
    {"id": "settings", "label": _("Settings"), "icon": "settings-outline", "view": "settings"},
]

SETTINGS = {
    "release_table_on_close": True,
    "low_stock_threshold": 5,
    "notify_clients": True,
}

PERMISSIONS = [
    ("view_order", _("Can view orders")),
    ("add_order", _("Can add orders")),
    ("change_order", _("Can change orders")),
    ("cancel_order", _("Can cancel orders")),
    ("change_status", _("Can advance order status")),
    ("pay_order", _("Can record payments")),
    ("view_menu", _("Can view menu")),
    ("change_stock", _("Can change menu stock")),
    ("manage_menu", _("Can add and edit menu items and recipes")),
    ("view_reservation", _("Can view reservations")),
    ("change_reservation", _("Can manage reservations")),
    ("view_activity", _("Can view activity log")),
    ("manage_settings", _("Can change settings")),
]

# Keys are the stored role names of StaffMember.Role
ROLE_PERMISSIONS = {
    "Pemilik": ["*"],
    "Kasir": [
        "view_order", "pay_order", "view_menu",
        "view_reservation", "change_reservation", "view_activity",
    ],
    "Pelayan": [
        "view_order", "add_order", "change_order", "cancel_order",
        "change_status", "view_menu", "view_reservation", "change_reservation",
    ],
    "Koki": ["view_order", "change_status", "view_menu", "change_stock"],
}


def role_has_permission(role, permission):
    """Return True if ``role`` grants ``permission`` (``resto.`` prefix optional)."""
    codename = permission.split('.', 1)[-1]
    granted = ROLE_PERMISSIONS.get(role, [])
    return "*" in granted or codename in granted
