from .ingredient_service import IngredientService
from .order_service import OrderService
from .payment_service import PaymentService
from .reservation_service import ReservationService
from .staff_service import StaffService
from .stock_service import StockService
from .table_service import TableService

__all__ = [
    'IngredientService',
    'OrderService',
    'PaymentService',
    'ReservationService',
    'StaffService',
    'StockService',
    'TableService',
]
