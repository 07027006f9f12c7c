"""
Resto Module Errors

Every failure a service can report to its caller. Views turn these into
JSON error responses using ``status_code``.
"""

from django.utils.translation import gettext, gettext_lazy as _


class RestoError(Exception):
    status_code = 400
    default_message = _('Operation failed')

    def __init__(self, message=None):
        self.message = str(message or self.default_message)
        super().__init__(self.message)


# =============================================================================
# Lookups
# =============================================================================

class NotFound(RestoError):
    status_code = 404
    default_message = _('Not found')


class MenuNotFound(NotFound):
    default_message = _('Menu item not found')


class OrderNotFound(NotFound):
    default_message = _('Order not found')


class TableNotFound(NotFound):
    default_message = _('Table not found')


class StaffNotFound(NotFound):
    default_message = _('Staff member not found')


class ReservationNotFound(NotFound):
    default_message = _('Reservation not found')


class PaymentNotFound(NotFound):
    default_message = _('Payment not found')


class IngredientNotFound(NotFound):
    default_message = _('Ingredient not found')


# =============================================================================
# Business rules
# =============================================================================

class InsufficientStock(RestoError):
    status_code = 409
    default_message = _('Insufficient stock')

    def __init__(self, menu_item=None, requested=None, message=None):
        self.menu_item = menu_item
        self.requested = requested
        if message is None and menu_item is not None:
            message = gettext('Not enough stock for %(name)s (requested %(requested)s, available %(available)s)') % {
                'name': menu_item.name,
                'requested': requested,
                'available': menu_item.available_quantity,
            }
        super().__init__(message)


class InsufficientPayment(RestoError):
    status_code = 409
    default_message = _('Amount paid does not cover the order total')


class AlreadyPaid(RestoError):
    status_code = 409
    default_message = _('Order has already been paid')


class NotReadyForPayment(RestoError):
    status_code = 409
    default_message = _('Order must be delivered before payment')


class TableNotAvailable(RestoError):
    status_code = 409
    default_message = _('Table is not empty')


class InvalidArgument(RestoError):
    status_code = 400
    default_message = _('Invalid argument')


class DuplicateKey(RestoError):
    status_code = 409
    default_message = _('Value already exists')


class InvalidTransition(RestoError):
    status_code = 409
    default_message = _('Status change not allowed')


class OrderNotEditable(InvalidTransition):
    default_message = _('Order can no longer be changed')
