from django.contrib import admin
from .models import (
    ActivityLog,
    Ingredient,
    MenuIngredient,
    MenuItem,
    Order,
    OrderDetail,
    Payment,
    Reservation,
    RestoSettings,
    StaffMember,
    Table,
)


@admin.register(RestoSettings)
class RestoSettingsAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'release_table_on_close', 'low_stock_threshold', 'notify_clients']


@admin.register(StaffMember)
class StaffMemberAdmin(admin.ModelAdmin):
    list_display = ['username', 'display_name', 'role', 'is_active']
    list_filter = ['role', 'is_active']
    search_fields = ['username', 'display_name']
    exclude = ['password_hash']


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ['number', 'status', 'is_active']
    list_filter = ['status', 'is_active']
    search_fields = ['number']


class MenuIngredientInline(admin.TabularInline):
    model = MenuIngredient
    extra = 0


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'price', 'available_quantity', 'is_available']
    list_filter = ['category', 'is_available']
    search_fields = ['name']
    inlines = [MenuIngredientInline]


@admin.register(Ingredient)
class IngredientAdmin(admin.ModelAdmin):
    list_display = ['name', 'quantity', 'unit']
    search_fields = ['name']


class OrderDetailInline(admin.TabularInline):
    model = OrderDetail
    extra = 0
    readonly_fields = ['unit_price', 'created_at']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['pk', 'table', 'staff', 'status', 'is_paid', 'created_at']
    list_filter = ['status', 'is_paid', 'created_at']
    search_fields = ['table__number']
    inlines = [OrderDetailInline]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['receipt_number', 'order', 'amount_paid', 'method', 'is_successful', 'paid_at']
    list_filter = ['method', 'is_successful']
    search_fields = ['receipt_number']


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ['table', 'customer_name', 'reserved_for', 'status']
    list_filter = ['status']
    search_fields = ['customer_name', 'table__number']


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'action', 'staff', 'message']
    list_filter = ['action']
    search_fields = ['message']
