"""Resto Module URL Configuration"""

from django.urls import path
from . import views

app_name = 'resto'

urlpatterns = [
    # Auth
    path('login/', views.login_view, name='login'),
    path('logout/', views.logout_view, name='logout'),

    # Tables
    path('', views.index, name='index'),
    path('tables/add/', views.table_add, name='table_add'),
    path('tables/<int:table_id>/status/', views.table_status, name='table_status'),

    # Menu & stock
    path('menu/', views.menu_list, name='menu'),
    path('menu/add/', views.menu_add, name='menu_add'),
    path('menu/<int:menu_id>/', views.menu_edit, name='menu_edit'),
    path('menu/<int:menu_id>/stock/', views.stock_update, name='stock_update'),
    path('menu/<int:menu_id>/recipe/', views.recipe_set, name='recipe_set'),
    path('menu/<int:menu_id>/recipe/<int:ingredient_id>/remove/', views.recipe_remove, name='recipe_remove'),

    # Ingredients
    path('ingredients/', views.ingredients_list, name='ingredients'),
    path('ingredients/add/', views.ingredient_add, name='ingredient_add'),
    path('ingredients/<int:ingredient_id>/', views.ingredient_update, name='ingredient_update'),

    # Orders
    path('orders/', views.orders_list, name='orders'),
    path('orders/create/', views.order_create, name='order_create'),
    path('orders/<int:order_id>/', views.order_detail, name='order_detail'),
    path('orders/<int:order_id>/add-item/', views.add_item, name='add_item'),
    path('orders/<int:order_id>/cancel/', views.cancel_order, name='cancel_order'),
    path('orders/<int:order_id>/update-status/', views.update_status, name='update_status'),
    path('items/<int:detail_id>/remove/', views.remove_item, name='remove_item'),

    # Payments
    path('payments/', views.payments_list, name='payments'),
    path('payments/create/', views.payment_create, name='payment_create'),
    path('payments/<int:payment_id>/', views.receipt, name='receipt'),
    path('payments/<int:payment_id>/failed/', views.payment_failed, name='payment_failed'),

    # Reservations
    path('reservations/', views.reservations_list, name='reservations'),
    path('reservations/create/', views.reservation_create, name='reservation_create'),
    path('reservations/<int:reservation_id>/status/', views.reservation_status, name='reservation_status'),

    # Activity
    path('activity/', views.activity, name='activity'),

    # Settings
    path('settings/', views.settings_view, name='settings'),

    # Realtime
    path('events/', views.events, name='events'),

    # API (JSON)
    path('api/orders/create/', views.api_create_order, name='api_create_order'),
    path('api/orders/stats/', views.api_order_stats, name='api_order_stats'),
    path('api/orders/<int:order_id>/', views.api_get_order, name='api_get_order'),
    path('api/orders/<int:order_id>/items/', views.api_add_item, name='api_add_item'),
    path('api/payments/', views.api_pay, name='api_pay'),
    path('api/menus/', views.api_menus, name='api_menus'),
    path('api/tables/', views.api_tables, name='api_tables'),
]
